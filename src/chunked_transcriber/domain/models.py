"""Domain models for the chunked transcription pipeline."""

from dataclasses import dataclass
from pathlib import Path

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


@dataclass(frozen=True)
class AudioSample:
    """
    A decoded audio signal.

    ``channels`` has shape ``(channel_count, frame_count)`` and holds float32
    amplitudes normalized to [-1, 1], so every channel shares one length and
    one sample rate.
    """

    sample_rate: int
    channels: np.ndarray

    @property
    def channel_count(self) -> int:
        return self.channels.shape[0]

    @property
    def frame_count(self) -> int:
        return self.channels.shape[1]

    @property
    def duration_seconds(self) -> float:
        return self.frame_count / self.sample_rate


@dataclass(frozen=True)
class AudioChunk:
    """A contiguous, non-overlapping window of an AudioSample."""

    index: int
    start_offset_seconds: float
    sample_rate: int
    channels: np.ndarray

    @property
    def channel_count(self) -> int:
        return self.channels.shape[0]

    @property
    def frame_count(self) -> int:
        return self.channels.shape[1]

    @property
    def duration_seconds(self) -> float:
        return self.frame_count / self.sample_rate


class Utterance(BaseModel, frozen=True):
    """A single speaker utterance as returned by the transcription service."""

    speaker: str
    timestamp: str
    text: str


class TranscriptSegment(BaseModel):
    """One speaker utterance placed on the absolute recording timeline."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    speaker: str
    timestamp: str
    start_time_seconds: float = Field(ge=0)
    text: str = ""


class ProgressRecord(BaseModel):
    """Persisted resume state for one in-progress run."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    file_name: str
    file_size: int
    transcripts: list[TranscriptSegment]
    processed_chunks: int = Field(ge=0)
    total_chunks: int = Field(ge=0)
    timestamp: int

    @model_validator(mode="after")
    def _processed_within_total(self) -> "ProgressRecord":
        if self.processed_chunks > self.total_chunks:
            raise ValueError("processed_chunks cannot exceed total_chunks")
        return self


class FileIdentity(BaseModel, frozen=True):
    """Name and size pair used to recognise a previously seen source file."""

    file_name: str
    file_size: int


class SourceAudio(BaseModel, frozen=True):
    """The recording handed to the pipeline by the presentation layer."""

    file_name: str
    file_size: int
    data: bytes

    @property
    def identity(self) -> FileIdentity:
        return FileIdentity(file_name=self.file_name, file_size=self.file_size)

    @classmethod
    def from_path(cls, path: Path) -> "SourceAudio":
        data = path.read_bytes()
        return cls(file_name=path.name, file_size=len(data), data=data)


class ProcessingStats(BaseModel, frozen=True):
    """Progress snapshot pushed to the presentation layer."""

    total_chunks: int = 0
    processed_chunks: int = 0
    current_action: str = ""


class AudioMessage(BaseModel, frozen=True):
    """Represents an incoming audio extraction completed event."""

    file_name: str
    bucket_name: str


class TranscriptionResult(BaseModel, frozen=True):
    """Result of a transcription operation."""

    transcription_object_name: str
    subtitle_object_name: str
    bucket_name: str
    segment_count: int
    content_type: str = "text/plain"
    resumed: bool = False
    failed_chunks: int = 0
    warning: str | None = None
