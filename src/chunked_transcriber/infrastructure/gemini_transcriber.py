"""Gemini implementation of the TranscriptionService interface."""

from google import genai
from google.genai import types
from pydantic import TypeAdapter

from chunked_transcriber.domain.models import Utterance
from chunked_transcriber.exceptions import TranscriptionServiceError
from chunked_transcriber.logging import setup_logging

from .interfaces import TranscriptionService

logger = setup_logging()

_UTTERANCES = TypeAdapter(list[Utterance])


class GeminiTranscriptionService(TranscriptionService):
    """Transcribes WAV payloads with Google Gemini structured output."""

    def __init__(self, client: genai.Client, model_name: str, prompt: str):
        self._client = client
        self._model_name = model_name
        self._prompt = prompt

    def transcribe(self, audio_data: bytes) -> list[Utterance]:
        """
        Sends the audio inline with the transcription prompt and a strict
        array-of-utterances response schema, then validates the JSON reply.
        """
        try:
            response = self._client.models.generate_content(
                model=self._model_name,
                contents=[
                    types.Part.from_bytes(data=audio_data, mime_type="audio/wav"),
                    self._prompt,
                ],
                config={
                    "response_mime_type": "application/json",
                    "response_schema": list[Utterance],
                },
            )
            if not response.text:
                raise TranscriptionServiceError("Gemini returned empty response")

            utterances = _UTTERANCES.validate_json(response.text)

            logger.info(
                "Gemini transcription completed",
                extra={"utterance_count": len(utterances), "model": self._model_name},
            )
            return utterances

        except TranscriptionServiceError:
            logger.warning("Gemini returned no usable content")
            raise
        except Exception as e:
            logger.exception("Gemini API call failed")
            raise TranscriptionServiceError(
                f"Gemini transcription failed: {e}", cause=e
            ) from e


def load_prompt(template: str, language: str) -> str:
    """Fills the language placeholder of the transcription prompt template."""
    return template.replace("{language}", language).strip()
