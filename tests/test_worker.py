import json
from unittest.mock import Mock

from chunked_transcriber.config import RabbitMQConfig
from chunked_transcriber.domain import StopToken, TranscriptionResult
from chunked_transcriber.exceptions import (
    EventPublishError,
    PipelineInterruptedError,
    StorageDownloadError,
)
from chunked_transcriber.infrastructure.interfaces import Delivery, MessageBroker
from chunked_transcriber.worker import Worker

CONFIG = RabbitMQConfig(host="rabbitmq", user="guest", password="guest")


class FakeBroker(MessageBroker):
    def __init__(self, fail_publish=False):
        self.settled = []
        self.published = []
        self.fail_publish = fail_publish
        self.stopped = False
        self.callback = None

    def publish(self, routing_key, payload):
        if self.fail_publish:
            raise EventPublishError(routing_key, RuntimeError("channel closed"))
        self.published.append((routing_key, payload))

    def acknowledge(self, delivery_tag):
        self.settled.append(("ack", delivery_tag))

    def requeue(self, delivery_tag):
        self.settled.append(("requeue", delivery_tag))

    def dead_letter(self, delivery_tag):
        self.settled.append(("dead_letter", delivery_tag))

    def consume(self, callback):
        self.callback = callback

    def stop(self):
        self.stopped = True

    def setup(self):
        pass


def _delivery(tag=1, delivery_count=1, **fields):
    fields = fields or {"file_name": "s/audio/a.mp3", "bucket_name": "sessions"}
    return Delivery(
        body=json.dumps(fields).encode("utf-8"),
        delivery_tag=tag,
        delivery_count=delivery_count,
    )


def _result(**overrides):
    values = dict(
        transcription_object_name="s/transcription/a.txt",
        subtitle_object_name="s/transcription/a.srt",
        bucket_name="sessions",
        segment_count=4,
    )
    values.update(overrides)
    return TranscriptionResult(**values)


def test_completed_job_is_announced_then_acknowledged():
    broker = FakeBroker()
    handler = Mock()
    handler.process.return_value = _result(failed_chunks=1, resumed=True, warning="quota")

    Worker(broker, handler, CONFIG, StopToken())._on_delivery(_delivery(tag=7))

    assert handler.process.call_args.args[0].file_name == "s/audio/a.mp3"
    assert broker.settled == [("ack", 7)]
    assert broker.published == [
        (
            "audio.transcription.completed",
            {
                "file_name": "s/transcription/a.txt",
                "subtitle_file_name": "s/transcription/a.srt",
                "bucket_name": "sessions",
                "content_type": "text/plain",
                "segment_count": 4,
                "failed_chunks": 1,
                "resumed": True,
                "warning": "quota",
            },
        )
    ]


def test_unannounced_completion_is_requeued():
    broker = FakeBroker(fail_publish=True)
    handler = Mock()
    handler.process.return_value = _result()

    Worker(broker, handler, CONFIG, StopToken())._on_delivery(_delivery(tag=2))

    assert broker.settled == [("requeue", 2)]


def test_unreadable_message_is_dead_lettered():
    broker = FakeBroker()
    handler = Mock()
    worker = Worker(broker, handler, CONFIG, StopToken())

    worker._on_delivery(Delivery(body=b"not json", delivery_tag=1))
    worker._on_delivery(_delivery(tag=2, file_name="a.mp3"))

    assert broker.settled == [("dead_letter", 1), ("dead_letter", 2)]
    handler.process.assert_not_called()


def test_stopped_run_reports_progress_and_requeues():
    broker = FakeBroker()
    handler = Mock()
    handler.process.side_effect = PipelineInterruptedError(
        "s/audio/a.mp3", "STOPPED", processed_chunks=2, total_chunks=5
    )

    Worker(broker, handler, CONFIG, StopToken())._on_delivery(_delivery(tag=3))

    assert broker.settled == [("requeue", 3)]
    assert broker.published == [
        (
            "audio.transcription.interrupted",
            {
                "file_name": "s/audio/a.mp3",
                "bucket_name": "sessions",
                "processed_chunks": 2,
                "total_chunks": 5,
            },
        )
    ]


def test_stopped_run_is_requeued_even_if_announcement_fails():
    broker = FakeBroker(fail_publish=True)
    handler = Mock()
    handler.process.side_effect = PipelineInterruptedError("a.mp3", "STOPPED")

    Worker(broker, handler, CONFIG, StopToken())._on_delivery(_delivery(tag=4))

    assert broker.settled == [("requeue", 4)]


def test_failed_run_is_dead_lettered():
    broker = FakeBroker()
    handler = Mock()
    handler.process.side_effect = PipelineInterruptedError(
        "a.mp3", "ERROR", "unsupported audio"
    )

    Worker(broker, handler, CONFIG, StopToken())._on_delivery(_delivery(tag=5))

    assert broker.settled == [("dead_letter", 5)]
    assert broker.published == []


def test_infrastructure_failure_is_requeued():
    broker = FakeBroker()
    handler = Mock()
    handler.process.side_effect = StorageDownloadError("a.mp3", RuntimeError("timeout"))

    Worker(broker, handler, CONFIG, StopToken())._on_delivery(
        _delivery(tag=6, delivery_count=2)
    )

    assert broker.settled == [("requeue", 6)]


def test_start_and_stop():
    broker = FakeBroker()
    stop_token = StopToken()
    worker = Worker(broker, Mock(), CONFIG, stop_token)

    worker.start()
    worker.stop()

    assert broker.callback == worker._on_delivery
    assert broker.stopped
    assert stop_token.stop_requested
