"""Abstract interface for transcription service operations."""

from abc import ABC, abstractmethod

from chunked_transcriber.domain.models import Utterance


class TranscriptionService(ABC):
    """Abstract base class for audio transcription backends."""

    @abstractmethod
    def transcribe(self, audio_data: bytes) -> list[Utterance]:
        """
        Transcribes one WAV payload and returns speaker-labeled utterances.

        Timestamps are left exactly as the backend reported them, relative
        to the start of the payload.

        Args:
            audio_data: A complete WAV/PCM16 file.

        Returns:
            Utterances in spoken order.

        Raises:
            TranscriptionServiceError: If the call fails or the response is
                missing or malformed.
        """
        pass
