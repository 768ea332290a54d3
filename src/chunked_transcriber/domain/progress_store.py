"""Durable resume state for an in-progress transcription run."""

import time
from collections.abc import Callable, Sequence

from pydantic import ValidationError

from chunked_transcriber.domain.models import (
    FileIdentity,
    ProgressRecord,
    TranscriptSegment,
)
from chunked_transcriber.infrastructure.interfaces import KeyValueStore
from chunked_transcriber.logging import setup_logging

logger = setup_logging()

STORAGE_KEY = "transcription_progress"
MAX_AGE_SECONDS = 24 * 60 * 60


def _now_ms() -> int:
    return int(time.time() * 1000)


class ProgressStore:
    """
    Keeps a single progress record under one well-known key.

    Only one run is tracked at a time: every save overwrites the previous
    record whatever file it described. Persistence is a convenience, so
    store failures are logged and never reach the caller.
    """

    def __init__(
        self,
        store: KeyValueStore,
        key: str = STORAGE_KEY,
        max_age_seconds: int = MAX_AGE_SECONDS,
        clock: Callable[[], int] = _now_ms,
    ):
        self._store = store
        self._key = key
        self._max_age_ms = max_age_seconds * 1000
        self._clock = clock

    def save(
        self,
        identity: FileIdentity,
        segments: Sequence[TranscriptSegment],
        processed_chunks: int,
        total_chunks: int,
    ) -> None:
        try:
            record = ProgressRecord(
                file_name=identity.file_name,
                file_size=identity.file_size,
                transcripts=list(segments),
                processed_chunks=processed_chunks,
                total_chunks=total_chunks,
                timestamp=self._clock(),
            )
            self._store.set(self._key, record.model_dump_json(by_alias=True))
            logger.info(
                "Progress saved",
                extra={
                    "file_name": identity.file_name,
                    "processed_chunks": processed_chunks,
                    "total_chunks": total_chunks,
                },
            )
        except Exception:
            logger.exception(
                "Failed to save progress", extra={"file_name": identity.file_name}
            )

    def load(self, identity: FileIdentity) -> ProgressRecord | None:
        """
        Returns the saved record for ``identity`` if it is still fresh.

        A record for a different name or size is reported as absent and left
        in place. A matching record older than the max age is cleared.
        """
        try:
            raw = self._store.get(self._key)
        except Exception:
            logger.exception("Failed to load progress")
            return None
        if not raw:
            return None

        try:
            record = ProgressRecord.model_validate_json(raw)
        except ValidationError:
            logger.exception("Saved progress is unreadable")
            return None

        if record.file_name != identity.file_name or record.file_size != identity.file_size:
            return None

        if self._clock() - record.timestamp > self._max_age_ms:
            logger.info(
                "Saved progress expired", extra={"file_name": identity.file_name}
            )
            self.clear()
            return None

        return record

    def clear(self) -> None:
        try:
            self._store.delete(self._key)
        except Exception:
            logger.exception("Failed to clear progress")
