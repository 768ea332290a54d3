import json
from unittest.mock import Mock

import pytest
from pydantic import ValidationError

from chunked_transcriber.domain.models import Utterance
from chunked_transcriber.exceptions import TranscriptionServiceError
from chunked_transcriber.infrastructure.gemini_transcriber import (
    GeminiTranscriptionService,
    load_prompt,
)


class FakeModels:
    def __init__(self, text=None, error=None):
        self.text = text
        self.error = error
        self.requests = []

    def generate_content(self, **kwargs):
        self.requests.append(kwargs)
        if self.error is not None:
            raise self.error
        return Mock(text=self.text)


def _service(models):
    return GeminiTranscriptionService(Mock(models=models), "gemini-test", "PROMPT")


def test_transcribe_parses_structured_response():
    body = json.dumps(
        [
            {"speaker": "Speaker 1", "timestamp": "00:03", "text": "Good morning"},
            {"speaker": "Speaker 2", "timestamp": "00:07", "text": ""},
        ]
    )
    models = FakeModels(text=body)

    result = _service(models).transcribe(b"RIFF....")

    assert result == [
        Utterance(speaker="Speaker 1", timestamp="00:03", text="Good morning"),
        Utterance(speaker="Speaker 2", timestamp="00:07", text=""),
    ]
    request = models.requests[0]
    assert request["model"] == "gemini-test"
    audio_part, prompt = request["contents"]
    assert audio_part.inline_data.mime_type == "audio/wav"
    assert audio_part.inline_data.data == b"RIFF...."
    assert prompt == "PROMPT"
    assert request["config"]["response_mime_type"] == "application/json"
    assert request["config"]["response_schema"] == list[Utterance]


@pytest.mark.parametrize("text", [None, ""])
def test_empty_response_is_an_error(text):
    with pytest.raises(TranscriptionServiceError, match="empty response"):
        _service(FakeModels(text=text)).transcribe(b"wav")


def test_invalid_json_is_an_error():
    with pytest.raises(TranscriptionServiceError) as exc_info:
        _service(FakeModels(text='{"speaker": "x"}')).transcribe(b"wav")
    assert isinstance(exc_info.value.cause, ValidationError)


def test_api_failure_keeps_original_text():
    models = FakeModels(error=RuntimeError("400 API key not valid"))

    with pytest.raises(TranscriptionServiceError) as exc_info:
        _service(models).transcribe(b"wav")

    assert "API key not valid" in str(exc_info.value)
    assert isinstance(exc_info.value.__cause__, RuntimeError)


def test_load_prompt_fills_language():
    template = "Write in {language}.\nKeep {language} names.\n"
    assert load_prompt(template, "English") == "Write in English.\nKeep English names."
