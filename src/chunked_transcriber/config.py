"""Application configuration loaded from environment variables."""

import os
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field


class GeminiConfig(BaseModel, frozen=True):
    """Gemini transcription configuration."""

    api_key: str
    model_name: str = "gemini-3-flash-preview"
    language: str = "Traditional Chinese"
    prompt_path: Path = Path("prompts/transcription.txt")


class RetryConfig(BaseModel, frozen=True):
    """Per-chunk retry schedule."""

    max_retries: int = Field(default=3, ge=0)
    base_delay_seconds: float = Field(default=1.0, ge=0)


class PipelineConfig(BaseModel, frozen=True):
    """Chunking and presentation settings for a transcription run."""

    chunk_duration_seconds: float = Field(default=300, gt=0)
    locale: Literal["zh-TW", "en"] = "zh-TW"


class ProgressConfig(BaseModel, frozen=True):
    """Where and for how long resume state is kept."""

    backend: Literal["file", "redis"] = "file"
    directory: Path = Path(".transcriber")
    key: str = "transcription_progress"
    max_age_seconds: int = 86400  # 24 hours


class RedisConfig(BaseModel, frozen=True):
    """Redis connection configuration."""

    host: str
    port: int = 6379


class MinioConfig(BaseModel, frozen=True):
    """MinIO connection configuration."""

    endpoint: str
    user: str
    password: str
    bucket_name: str = "sessions"


class QueueConfig(BaseModel, frozen=True):
    """RabbitMQ queue configuration."""

    name: str = "audio_transcription_queue"
    queue_type: str = "quorum"
    max_delivery_count: int = 3
    expected_routing_key: str = "audio.extraction.completed"
    success_routing_key: str = "audio.transcription.completed"
    interrupted_routing_key: str = "audio.transcription.interrupted"
    dlq_name: str = "dlq_audio_transcriber"
    dlq_exchange_name: str = "dead_letter_exchange"
    dlq_routing_key: str = "audio.transcription.failed"


class RabbitMQConfig(BaseModel, frozen=True):
    """RabbitMQ connection configuration."""

    host: str
    user: str
    password: str
    exchange_name: str = "events"
    queue_config: QueueConfig = QueueConfig()


class AppConfig(BaseModel, frozen=True):
    """Root application configuration."""

    gemini: GeminiConfig
    retry: RetryConfig
    pipeline: PipelineConfig
    progress: ProgressConfig
    redis: RedisConfig
    minio: MinioConfig
    rabbitmq: RabbitMQConfig


def load_config() -> AppConfig:
    """Loads configuration from environment variables."""
    return AppConfig(
        gemini=GeminiConfig(
            api_key=os.getenv("GEMINI_API_KEY", ""),
            model_name=os.getenv("GEMINI_MODEL", "gemini-3-flash-preview"),
            language=os.getenv("TRANSCRIPTION_LANGUAGE", "Traditional Chinese"),
        ),
        retry=RetryConfig(
            max_retries=int(os.getenv("MAX_RETRIES", "3")),
            base_delay_seconds=float(os.getenv("RETRY_BASE_DELAY_SECONDS", "1.0")),
        ),
        pipeline=PipelineConfig(
            chunk_duration_seconds=float(os.getenv("CHUNK_DURATION_SECONDS", "300")),
            locale=os.getenv("TRANSCRIBER_LOCALE", "zh-TW"),
        ),
        progress=ProgressConfig(
            backend=os.getenv("PROGRESS_BACKEND", "file"),
            directory=Path(os.getenv("PROGRESS_DIR", ".transcriber")),
            max_age_seconds=int(os.getenv("PROGRESS_MAX_AGE_SECONDS", "86400")),
        ),
        redis=RedisConfig(
            host=os.getenv("REDIS_HOST", "redis"),
            port=int(os.getenv("REDIS_PORT", "6379")),
        ),
        minio=MinioConfig(
            endpoint=os.getenv("MINIO_ENDPOINT", "minio:9000"),
            user=os.getenv("MINIO_USER", ""),
            password=os.getenv("MINIO_PASSWORD", ""),
        ),
        rabbitmq=RabbitMQConfig(
            host=os.getenv("RABBITMQ_HOST", "rabbitmq"),
            user=os.getenv("RABBITMQ_USER", ""),
            password=os.getenv("RABBITMQ_PASSWORD", ""),
        ),
    )
