"""Infrastructure layer exports."""

from .file_store import FileKeyValueStore
from .gemini_transcriber import GeminiTranscriptionService, load_prompt
from .minio_storage import MinioStorageClient
from .rabbitmq_broker import RabbitMQBroker
from .redis_store import RedisKeyValueStore

__all__ = [
    "FileKeyValueStore",
    "GeminiTranscriptionService",
    "MinioStorageClient",
    "RabbitMQBroker",
    "RedisKeyValueStore",
    "load_prompt",
]
