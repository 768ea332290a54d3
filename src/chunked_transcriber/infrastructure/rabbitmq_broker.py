"""RabbitMQ job queue for transcription runs."""

import json
from collections.abc import Callable

import pika
from pika.channel import Channel

from chunked_transcriber.config import QueueConfig, RabbitMQConfig
from chunked_transcriber.exceptions import EventPublishError
from chunked_transcriber.logging import setup_logging

from .interfaces import Delivery, MessageBroker

logger = setup_logging()

DELIVERY_COUNT_HEADER = "x-delivery-count"


class RabbitMQBroker(MessageBroker):
    """
    Quorum-queue job source with outcome events on a topic exchange.

    Recordings are taken one at a time so the single progress record always
    belongs to the job in flight. The quorum queue counts failed deliveries in
    ``x-delivery-count`` and dead-letters a job once the limit is reached.
    """

    def __init__(self, channel: Channel, config: RabbitMQConfig):
        self._channel = channel
        self._config = config
        self._queue: QueueConfig = config.queue_config

    def setup(self) -> None:
        self._channel.exchange_declare(
            exchange=self._queue.dlq_exchange_name, exchange_type="direct", durable=True
        )
        self._channel.queue_declare(queue=self._queue.dlq_name, durable=True)
        self._channel.queue_bind(
            queue=self._queue.dlq_name,
            exchange=self._queue.dlq_exchange_name,
            routing_key=self._queue.dlq_routing_key,
        )

        self._channel.exchange_declare(
            exchange=self._config.exchange_name, exchange_type="topic", durable=True
        )
        self._channel.queue_declare(
            queue=self._queue.name,
            durable=True,
            arguments={
                "x-queue-type": self._queue.queue_type,
                "x-delivery-limit": self._queue.max_delivery_count,
                "x-dead-letter-exchange": self._queue.dlq_exchange_name,
                "x-dead-letter-routing-key": self._queue.dlq_routing_key,
            },
        )
        self._channel.queue_bind(
            queue=self._queue.name,
            exchange=self._config.exchange_name,
            routing_key=self._queue.expected_routing_key,
        )
        logger.info(
            "Job queue declared",
            extra={
                "queue": self._queue.name,
                "binding": self._queue.expected_routing_key,
                "delivery_limit": self._queue.max_delivery_count,
            },
        )

    def publish(self, routing_key: str, payload: dict) -> None:
        try:
            self._channel.basic_publish(
                exchange=self._config.exchange_name,
                routing_key=routing_key,
                body=json.dumps(payload, ensure_ascii=False).encode("utf-8"),
                properties=pika.BasicProperties(
                    content_type="application/json",
                    delivery_mode=pika.spec.PERSISTENT_DELIVERY_MODE,
                ),
            )
        except Exception as e:
            logger.exception("Outcome not published", extra={"routing_key": routing_key})
            raise EventPublishError(routing_key, cause=e) from e
        logger.info("Outcome published", extra={"routing_key": routing_key})

    def acknowledge(self, delivery_tag: int) -> None:
        self._channel.basic_ack(delivery_tag=delivery_tag)

    def requeue(self, delivery_tag: int) -> None:
        self._channel.basic_nack(delivery_tag=delivery_tag, requeue=True)

    def dead_letter(self, delivery_tag: int) -> None:
        self._channel.basic_reject(delivery_tag=delivery_tag, requeue=False)

    def consume(self, callback: Callable[[Delivery], None]) -> None:
        def on_message(channel, method, properties, body):
            headers = (properties.headers if properties else None) or {}
            callback(
                Delivery(
                    body=body,
                    delivery_tag=method.delivery_tag,
                    delivery_count=int(headers.get(DELIVERY_COUNT_HEADER, 0)) + 1,
                    redelivered=bool(method.redelivered),
                )
            )

        self._channel.basic_qos(prefetch_count=1)
        self._channel.basic_consume(
            queue=self._queue.name, on_message_callback=on_message
        )
        logger.info("Waiting for transcription jobs", extra={"queue": self._queue.name})
        self._channel.start_consuming()

    def stop(self) -> None:
        self._channel.stop_consuming()
        logger.info("Stopped taking jobs", extra={"queue": self._queue.name})
