"""Queue worker that turns extraction events into stored transcripts."""

import json

from pydantic import ValidationError

from chunked_transcriber.config import RabbitMQConfig
from chunked_transcriber.domain import (
    AudioMessage,
    PipelineStatus,
    StopToken,
    TranscriptionResult,
)
from chunked_transcriber.exceptions import EventPublishError, PipelineInterruptedError
from chunked_transcriber.handlers import AudioMessageHandler
from chunked_transcriber.infrastructure.interfaces import Delivery, MessageBroker
from chunked_transcriber.logging import setup_logging

logger = setup_logging()


class Worker:
    """
    Settles each job according to how its transcription run ended.

    - COMPLETED: the outcome is published, then the job is acknowledged.
    - STOPPED: progress is announced and the job requeued, so the next
      delivery resumes from the saved record.
    - ERROR or an unreadable message: dead-lettered, no retry can help.
    - Anything else (storage or broker trouble): requeued.
    """

    def __init__(
        self,
        broker: MessageBroker,
        handler: AudioMessageHandler,
        config: RabbitMQConfig,
        stop_token: StopToken,
    ):
        self._broker = broker
        self._handler = handler
        self._queue = config.queue_config
        self._stop_token = stop_token

    def start(self) -> None:
        logger.info("Worker started", extra={"queue": self._queue.name})
        self._broker.consume(self._on_delivery)

    def stop(self) -> None:
        """Pauses the run in flight at the next chunk boundary and stops consuming."""
        logger.info("Worker stop requested")
        self._stop_token.request_stop()
        self._broker.stop()

    def _on_delivery(self, delivery: Delivery) -> None:
        message = self._parse(delivery)
        if message is None:
            self._broker.dead_letter(delivery.delivery_tag)
            return

        if delivery.delivery_count > 1:
            logger.info(
                "Job redelivered, saved progress will be resumed",
                extra={
                    "file_name": message.file_name,
                    "attempt": delivery.delivery_count,
                    "max_attempts": self._queue.max_delivery_count,
                },
            )

        try:
            result = self._handler.process(message)
        except PipelineInterruptedError as e:
            self._settle_interrupted(delivery, message, e)
            return
        except Exception:
            logger.exception(
                "Job failed, returning it to the queue",
                extra={"file_name": message.file_name, "attempt": delivery.delivery_count},
            )
            self._broker.requeue(delivery.delivery_tag)
            return

        try:
            self._broker.publish(
                self._queue.success_routing_key, self._completed_payload(result)
            )
        except EventPublishError:
            self._broker.requeue(delivery.delivery_tag)
            return
        self._broker.acknowledge(delivery.delivery_tag)
        logger.info(
            "Job completed",
            extra={
                "file_name": message.file_name,
                "transcription_file": result.transcription_object_name,
                "failed_chunks": result.failed_chunks,
            },
        )

    def _parse(self, delivery: Delivery) -> AudioMessage | None:
        try:
            return AudioMessage.model_validate(json.loads(delivery.body))
        except (ValidationError, ValueError) as e:
            logger.exception(
                "Unreadable job message",
                extra={"delivery_tag": delivery.delivery_tag, "error": str(e)},
            )
            return None

    def _settle_interrupted(
        self, delivery: Delivery, message: AudioMessage, error: PipelineInterruptedError
    ) -> None:
        if error.status != PipelineStatus.STOPPED.value:
            logger.error(
                "Job cannot be transcribed",
                extra={
                    "file_name": message.file_name,
                    "status": error.status,
                    "reason": error.reason,
                },
            )
            self._broker.dead_letter(delivery.delivery_tag)
            return

        try:
            self._broker.publish(
                self._queue.interrupted_routing_key,
                {
                    "file_name": message.file_name,
                    "bucket_name": message.bucket_name,
                    "processed_chunks": error.processed_chunks,
                    "total_chunks": error.total_chunks,
                },
            )
        except EventPublishError:
            logger.warning("Pause not announced", extra={"file_name": message.file_name})
        self._broker.requeue(delivery.delivery_tag)
        logger.info(
            "Job paused and requeued",
            extra={
                "file_name": message.file_name,
                "processed_chunks": error.processed_chunks,
                "total_chunks": error.total_chunks,
            },
        )

    @staticmethod
    def _completed_payload(result: TranscriptionResult) -> dict:
        return {
            "file_name": result.transcription_object_name,
            "subtitle_file_name": result.subtitle_object_name,
            "bucket_name": result.bucket_name,
            "content_type": result.content_type,
            "segment_count": result.segment_count,
            "failed_chunks": result.failed_chunks,
            "resumed": result.resumed,
            "warning": result.warning,
        }
