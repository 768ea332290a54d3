from pathlib import Path

import pytest
from pydantic import ValidationError

from chunked_transcriber.config import PipelineConfig, RetryConfig, load_config


def test_defaults(monkeypatch):
    for name in (
        "GEMINI_API_KEY",
        "GEMINI_MODEL",
        "MAX_RETRIES",
        "CHUNK_DURATION_SECONDS",
        "TRANSCRIBER_LOCALE",
        "PROGRESS_BACKEND",
        "PROGRESS_DIR",
    ):
        monkeypatch.delenv(name, raising=False)

    config = load_config()

    assert config.gemini.api_key == ""
    assert config.gemini.model_name == "gemini-3-flash-preview"
    assert config.retry.max_retries == 3
    assert config.retry.base_delay_seconds == 1.0
    assert config.pipeline.chunk_duration_seconds == 300
    assert config.pipeline.locale == "zh-TW"
    assert config.progress.backend == "file"
    assert config.progress.key == "transcription_progress"
    assert config.progress.max_age_seconds == 86400


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "secret")
    monkeypatch.setenv("MAX_RETRIES", "5")
    monkeypatch.setenv("CHUNK_DURATION_SECONDS", "120")
    monkeypatch.setenv("TRANSCRIBER_LOCALE", "en")
    monkeypatch.setenv("PROGRESS_BACKEND", "redis")
    monkeypatch.setenv("PROGRESS_DIR", "/tmp/progress")

    config = load_config()

    assert config.gemini.api_key == "secret"
    assert config.retry.max_retries == 5
    assert config.pipeline.chunk_duration_seconds == 120
    assert config.pipeline.locale == "en"
    assert config.progress.backend == "redis"
    assert config.progress.directory == Path("/tmp/progress")


def test_invalid_values_are_rejected():
    with pytest.raises(ValidationError):
        PipelineConfig(chunk_duration_seconds=0)
    with pytest.raises(ValidationError):
        PipelineConfig(locale="fr")
    with pytest.raises(ValidationError):
        RetryConfig(max_retries=-1)


def test_config_is_frozen():
    config = RetryConfig()

    with pytest.raises(ValidationError):
        config.max_retries = 10
