"""Domain layer exports."""

from .models import (
    AudioChunk,
    AudioMessage,
    AudioSample,
    FileIdentity,
    ProcessingStats,
    ProgressRecord,
    SourceAudio,
    TranscriptionResult,
    TranscriptSegment,
    Utterance,
)
from .audio_segmenter import AudioDecoder, AudioSegmenter
from .chunk_transcriber import ChunkTranscriber
from .pipeline import PipelineOrchestrator
from .pipeline_state import PipelineRun, PipelineStatus, StopToken
from .progress_store import ProgressStore
from .transcript_builder import TranscriptBuilder

__all__ = [
    "AudioChunk",
    "AudioDecoder",
    "AudioMessage",
    "AudioSample",
    "AudioSegmenter",
    "ChunkTranscriber",
    "FileIdentity",
    "PipelineOrchestrator",
    "PipelineRun",
    "PipelineStatus",
    "ProcessingStats",
    "ProgressRecord",
    "ProgressStore",
    "SourceAudio",
    "StopToken",
    "TranscriptBuilder",
    "TranscriptionResult",
    "TranscriptSegment",
    "Utterance",
]
