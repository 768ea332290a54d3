"""Dependency wiring for the CLI and the queue worker."""

from collections.abc import Callable
from pathlib import Path

import pika
import redis
from google import genai
from minio import Minio

from chunked_transcriber.config import AppConfig
from chunked_transcriber.domain import (
    AudioSegmenter,
    ChunkTranscriber,
    PipelineOrchestrator,
    ProcessingStats,
    ProgressStore,
    StopToken,
    TranscriptBuilder,
)
from chunked_transcriber.handlers import AudioMessageHandler
from chunked_transcriber.infrastructure import (
    FileKeyValueStore,
    GeminiTranscriptionService,
    MinioStorageClient,
    RabbitMQBroker,
    RedisKeyValueStore,
    load_prompt,
)
from chunked_transcriber.infrastructure.interfaces import (
    KeyValueStore,
    TranscriptionService,
)
from chunked_transcriber.logging import setup_logging
from chunked_transcriber.worker import Worker

logger = setup_logging()

_PACKAGE_DIR = Path(__file__).parent


def get_transcription_service(config: AppConfig) -> TranscriptionService:
    """Returns the Gemini-backed transcription service."""
    template = (_PACKAGE_DIR / config.gemini.prompt_path).read_text(encoding="utf-8")
    client = genai.Client(api_key=config.gemini.api_key)
    return GeminiTranscriptionService(
        client, config.gemini.model_name, load_prompt(template, config.gemini.language)
    )


def get_key_value_store(config: AppConfig) -> KeyValueStore:
    """Returns the configured progress backend."""
    if config.progress.backend == "redis":
        client = redis.Redis(
            host=config.redis.host, port=config.redis.port, decode_responses=True
        )
        if not client.ping():
            logger.error("Redis connection failed", extra={"host": config.redis.host})
            raise ConnectionError("Redis connection failed")
        return RedisKeyValueStore(client, config.progress.max_age_seconds)
    return FileKeyValueStore(config.progress.directory)


def get_progress_store(config: AppConfig) -> ProgressStore:
    return ProgressStore(
        get_key_value_store(config),
        key=config.progress.key,
        max_age_seconds=config.progress.max_age_seconds,
    )


def get_orchestrator(
    config: AppConfig,
    on_progress: Callable[[ProcessingStats], None] | None = None,
) -> PipelineOrchestrator:
    """Returns a pipeline wired to Gemini and the configured progress store."""
    return PipelineOrchestrator(
        segmenter=AudioSegmenter(),
        transcriber=ChunkTranscriber(get_transcription_service(config), config.retry),
        progress_store=get_progress_store(config),
        chunk_duration_seconds=config.pipeline.chunk_duration_seconds,
        locale=config.pipeline.locale,
        on_progress=on_progress,
    )


def get_worker(config: AppConfig) -> Worker:
    """Returns a worker connected to MinIO and RabbitMQ."""
    minio_client = Minio(
        endpoint=config.minio.endpoint,
        access_key=config.minio.user,
        secret_key=config.minio.password,
        secure=False,
    )
    storage = MinioStorageClient(minio_client)
    storage.ensure_bucket_exists(config.minio.bucket_name)

    credentials = pika.PlainCredentials(config.rabbitmq.user, config.rabbitmq.password)
    parameters = pika.ConnectionParameters(
        host=config.rabbitmq.host,
        credentials=credentials,
        heartbeat=0,
    )
    connection = pika.BlockingConnection(parameters)
    broker = RabbitMQBroker(connection.channel(), config.rabbitmq)
    broker.setup()

    stop_token = StopToken()
    handler = AudioMessageHandler(
        storage, get_orchestrator(config), TranscriptBuilder(), stop_token
    )
    return Worker(broker, handler, config.rabbitmq, stop_token)
