"""Per-chunk transcription with retry and timeline normalization."""

import time
from collections.abc import Callable

from chunked_transcriber.config import RetryConfig
from chunked_transcriber.domain.models import TranscriptSegment
from chunked_transcriber.domain.retry import call_with_retry
from chunked_transcriber.domain.timestamps import relative_timestamp_seconds
from chunked_transcriber.infrastructure.interfaces import TranscriptionService
from chunked_transcriber.logging import setup_logging

logger = setup_logging()


class ChunkTranscriber:
    """Transcribes one encoded chunk, retrying the whole call on failure."""

    def __init__(
        self,
        service: TranscriptionService,
        retry: RetryConfig = RetryConfig(),
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._service = service
        self._retry = retry
        self._sleep = sleep

    def transcribe_chunk(
        self, audio_blob: bytes, chunk_index: int, start_offset_seconds: float
    ) -> list[TranscriptSegment]:
        """
        Transcribes a chunk and places its utterances on the recording timeline.

        Args:
            audio_blob: The chunk encoded as WAV/PCM16.
            chunk_index: 0-based position of the chunk, for logging.
            start_offset_seconds: Absolute start of the chunk in the recording.

        Returns:
            Segments in the order the service returned them.

        Raises:
            Exception: The last failure once every retry has been used.
        """

        def attempt() -> list[TranscriptSegment]:
            utterances = self._service.transcribe(audio_blob)
            return [
                TranscriptSegment(
                    speaker=u.speaker,
                    timestamp=u.timestamp,
                    start_time_seconds=start_offset_seconds
                    + relative_timestamp_seconds(u.timestamp),
                    text=u.text,
                )
                for u in utterances
            ]

        def log_retry(attempt_index: int, delay: float, error: Exception) -> None:
            logger.warning(
                "Retrying chunk transcription",
                extra={
                    "chunk": chunk_index + 1,
                    "retry": attempt_index + 1,
                    "max_retries": self._retry.max_retries,
                    "delay_seconds": delay,
                    "error": str(error),
                },
            )

        segments = call_with_retry(
            attempt, self._retry, sleep=self._sleep, on_retry=log_retry
        )
        logger.info(
            "Chunk transcribed",
            extra={"chunk": chunk_index + 1, "segment_count": len(segments)},
        )
        return segments
