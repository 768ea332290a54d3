"""Abstract interface for the transcription job queue."""

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass


@dataclass(frozen=True)
class Delivery:
    """One job taken off the queue."""

    body: bytes
    delivery_tag: int
    delivery_count: int = 1  # 1 on the first attempt
    redelivered: bool = False


class MessageBroker(ABC):
    """
    Job queue for transcription runs.

    Each delivery must be settled exactly once: acknowledged when the
    transcript is stored, requeued when a later attempt can resume it, or
    dead-lettered when no attempt can succeed.
    """

    @abstractmethod
    def publish(self, routing_key: str, payload: dict) -> None:
        """
        Announces a run outcome.

        Raises:
            EventPublishError: If publishing fails.
        """

    @abstractmethod
    def acknowledge(self, delivery_tag: int) -> None:
        """Removes a finished job from the queue."""

    @abstractmethod
    def requeue(self, delivery_tag: int) -> None:
        """Returns a job to the queue; it counts towards the delivery limit."""

    @abstractmethod
    def dead_letter(self, delivery_tag: int) -> None:
        """Moves a job straight to the dead-letter queue."""

    @abstractmethod
    def consume(self, callback: Callable[[Delivery], None]) -> None:
        """Blocks, handing each delivery to ``callback`` one at a time."""

    @abstractmethod
    def stop(self) -> None:
        """Stops consuming once the delivery in flight has been settled."""

    @abstractmethod
    def setup(self) -> None:
        """Declares the exchanges, queues and bindings the worker needs."""
