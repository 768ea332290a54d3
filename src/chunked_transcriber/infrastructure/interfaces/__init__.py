"""Infrastructure interface exports."""

from .key_value_store import KeyValueStore
from .message_broker import Delivery, MessageBroker
from .storage_client import StorageClient
from .transcription_service import TranscriptionService

__all__ = [
    "Delivery",
    "KeyValueStore",
    "MessageBroker",
    "StorageClient",
    "TranscriptionService",
]
