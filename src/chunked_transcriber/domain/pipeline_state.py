"""Explicit state of a single pipeline run."""

import threading
from dataclasses import dataclass, field
from enum import Enum

from chunked_transcriber.domain.models import (
    ProcessingStats,
    SourceAudio,
    TranscriptSegment,
)
from chunked_transcriber.exceptions import InvalidStateTransitionError


class PipelineStatus(str, Enum):
    IDLE = "IDLE"
    PREPARING = "PREPARING"  # decoding and slicing
    PROCESSING = "PROCESSING"  # transcribing chunk by chunk
    COMPLETED = "COMPLETED"
    STOPPED = "STOPPED"
    ERROR = "ERROR"


TERMINAL_STATUSES = frozenset(
    {PipelineStatus.COMPLETED, PipelineStatus.STOPPED, PipelineStatus.ERROR}
)

_TRANSITIONS: dict[PipelineStatus, frozenset[PipelineStatus]] = {
    PipelineStatus.IDLE: frozenset({PipelineStatus.PREPARING}),
    PipelineStatus.PREPARING: frozenset(
        {PipelineStatus.PROCESSING, PipelineStatus.STOPPED, PipelineStatus.ERROR}
    ),
    PipelineStatus.PROCESSING: frozenset(
        {PipelineStatus.COMPLETED, PipelineStatus.STOPPED}
    ),
    PipelineStatus.COMPLETED: frozenset(),
    PipelineStatus.STOPPED: frozenset(),
    PipelineStatus.ERROR: frozenset(),
}


def can_transition(current: PipelineStatus, requested: PipelineStatus) -> bool:
    return requested in _TRANSITIONS[current]


class StopToken:
    """
    Cooperative stop signal shared between the caller and a running pipeline.

    Setting it never interrupts a remote call already in flight; the pipeline
    only looks at it between chunks.
    """

    def __init__(self):
        self._event = threading.Event()

    def request_stop(self) -> None:
        self._event.set()

    @property
    def stop_requested(self) -> bool:
        return self._event.is_set()


@dataclass
class PipelineRun:
    """In-memory state of one execution, from Idle to a terminal status."""

    source: SourceAudio
    status: PipelineStatus = PipelineStatus.IDLE
    segments: list[TranscriptSegment] = field(default_factory=list)
    start_chunk: int = 0
    processed_chunks: int = 0
    total_chunks: int = 0
    resumed: bool = False
    error_message: str | None = None
    current_action: str = ""

    def transition_to(self, status: PipelineStatus) -> None:
        if not can_transition(self.status, status):
            raise InvalidStateTransitionError(self.status.value, status.value)
        self.status = status

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def stats(self) -> ProcessingStats:
        return ProcessingStats(
            total_chunks=self.total_chunks,
            processed_chunks=self.processed_chunks,
            current_action=self.current_action,
        )
