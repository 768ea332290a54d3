"""Chunk-by-chunk transcription loop with resume and partial-failure handling."""

from collections.abc import Callable

from chunked_transcriber.domain.audio_segmenter import AudioSegmenter
from chunked_transcriber.domain.chunk_transcriber import ChunkTranscriber
from chunked_transcriber.domain.error_classification import (
    classify_decode_error,
    classify_error,
)
from chunked_transcriber.domain.messages import DEFAULT_LOCALE, message
from chunked_transcriber.domain.models import (
    ProcessingStats,
    ProgressRecord,
    SourceAudio,
    TranscriptSegment,
)
from chunked_transcriber.domain.pipeline_state import (
    PipelineRun,
    PipelineStatus,
    StopToken,
)
from chunked_transcriber.domain.progress_store import ProgressStore
from chunked_transcriber.exceptions import AudioDecodeError
from chunked_transcriber.logging import setup_logging

logger = setup_logging()

SYSTEM_SPEAKER = "System"
ERROR_TIMESTAMP = "Error"
DEFAULT_CHUNK_DURATION_SECONDS = 300


def always_resume(record: ProgressRecord) -> bool:
    return True


def is_error_placeholder(segment: TranscriptSegment) -> bool:
    """True for the segment that stands in for a chunk that failed to transcribe."""
    return segment.speaker == SYSTEM_SPEAKER and segment.timestamp == ERROR_TIMESTAMP


class PipelineOrchestrator:
    """Drives a recording through decode, segmentation and per-chunk transcription."""

    def __init__(
        self,
        segmenter: AudioSegmenter,
        transcriber: ChunkTranscriber,
        progress_store: ProgressStore,
        chunk_duration_seconds: float = DEFAULT_CHUNK_DURATION_SECONDS,
        locale: str = DEFAULT_LOCALE,
        on_progress: Callable[[ProcessingStats], None] | None = None,
    ):
        if chunk_duration_seconds <= 0:
            raise ValueError(
                f"Chunk duration must be positive, got {chunk_duration_seconds}"
            )
        self._segmenter = segmenter
        self._transcriber = transcriber
        self._progress = progress_store
        self._chunk_duration = chunk_duration_seconds
        self._locale = locale
        self._on_progress = on_progress

    def run(
        self,
        source: SourceAudio,
        stop_token: StopToken | None = None,
        confirm_resume: Callable[[ProgressRecord], bool] = always_resume,
    ) -> PipelineRun:
        """
        Transcribes ``source`` and returns the run in a terminal state.

        Args:
            source: The recording to transcribe.
            stop_token: Checked before each chunk; once set, progress is
                saved and the run ends as STOPPED.
            confirm_resume: Asked whether to continue from a saved record
                for the same file. Declining discards the record.

        Returns:
            The finished PipelineRun: COMPLETED, STOPPED or ERROR.
        """
        stop_token = stop_token or StopToken()
        run = PipelineRun(source=source)
        run.transition_to(PipelineStatus.PREPARING)

        self._decide_start(run, confirm_resume)

        self._notify(run, message("decoding", self._locale))
        try:
            sample = self._segmenter.decode(source.data, source.file_name)
        except AudioDecodeError as e:
            app_error = classify_decode_error(e, self._locale)
            logger.error(
                "Run aborted during decoding",
                extra={"file_name": source.file_name, "error": str(app_error)},
            )
            run.error_message = app_error.user_message
            run.transition_to(PipelineStatus.ERROR)
            self._notify(run, app_error.user_message)
            return run

        if stop_token.stop_requested:
            run.transition_to(PipelineStatus.STOPPED)
            self._notify(run, message("stopped", self._locale))
            return run

        self._notify(run, message("splitting", self._locale))
        try:
            chunks = self._segmenter.segment(sample, self._chunk_duration)
        except ValueError:
            logger.exception(
                "Run aborted during splitting",
                extra={
                    "file_name": source.file_name,
                    "sample_rate": sample.sample_rate,
                    "chunk_duration_seconds": self._chunk_duration,
                },
            )
            run.error_message = message(
                "invalid_chunk_duration", self._locale, seconds=self._chunk_duration
            )
            run.transition_to(PipelineStatus.ERROR)
            self._notify(run, run.error_message)
            return run

        run.total_chunks = len(chunks)
        run.start_chunk = min(run.start_chunk, run.total_chunks)
        run.processed_chunks = run.start_chunk

        run.transition_to(PipelineStatus.PROCESSING)
        self._notify(run, message("ready", self._locale))

        for index in range(run.start_chunk, run.total_chunks):
            if stop_token.stop_requested:
                self._progress.save(
                    source.identity, run.segments, index, run.total_chunks
                )
                run.transition_to(PipelineStatus.STOPPED)
                self._notify(run, message("stopped", self._locale))
                logger.info(
                    "Run stopped",
                    extra={"file_name": source.file_name, "next_chunk": index + 1},
                )
                break

            self._notify(
                run,
                message(
                    "transcribing",
                    self._locale,
                    chunk_number=index + 1,
                    total_chunks=run.total_chunks,
                ),
            )
            self._process_chunk(run, index, self._segmenter.encode_to_wav(chunks[index]))

        if run.status == PipelineStatus.PROCESSING:
            run.transition_to(PipelineStatus.COMPLETED)
            self._progress.clear()
            self._notify(run, message("completed", self._locale))
            logger.info(
                "Run completed",
                extra={
                    "file_name": source.file_name,
                    "segment_count": len(run.segments),
                    "total_chunks": run.total_chunks,
                },
            )

        return run

    def _decide_start(
        self, run: PipelineRun, confirm_resume: Callable[[ProgressRecord], bool]
    ) -> None:
        saved = self._progress.load(run.source.identity)
        if saved and saved.transcripts and confirm_resume(saved):
            run.segments = list(saved.transcripts)
            run.start_chunk = saved.processed_chunks
            run.resumed = True
            run.total_chunks = saved.total_chunks
            run.processed_chunks = saved.processed_chunks
            logger.info(
                "Resuming saved progress",
                extra={
                    "file_name": run.source.file_name,
                    "processed_chunks": saved.processed_chunks,
                    "total_chunks": saved.total_chunks,
                },
            )
            self._notify(run, message("resuming", self._locale))
            return

        self._progress.clear()

    def _process_chunk(self, run: PipelineRun, index: int, audio_blob: bytes) -> None:
        offset = index * self._chunk_duration
        try:
            segments = self._transcriber.transcribe_chunk(audio_blob, index, offset)
        except Exception as e:
            app_error = classify_error(e, self._locale)
            logger.exception(
                "Chunk failed after retries",
                extra={
                    "file_name": run.source.file_name,
                    "chunk": index + 1,
                    "error_type": app_error.type.value,
                },
            )
            if not app_error.retryable:
                run.error_message = app_error.user_message
            run.segments.append(
                TranscriptSegment(
                    speaker=SYSTEM_SPEAKER,
                    timestamp=ERROR_TIMESTAMP,
                    start_time_seconds=offset,
                    text=message(
                        "chunk_failed",
                        self._locale,
                        chunk_number=index + 1,
                        message=app_error.user_message,
                    ),
                )
            )
            run.processed_chunks = index + 1
            return

        run.segments.extend(segments)
        run.processed_chunks = index + 1
        self._progress.save(
            run.source.identity, run.segments, run.processed_chunks, run.total_chunks
        )

    def _notify(self, run: PipelineRun, action: str) -> None:
        run.current_action = action
        if self._on_progress is not None:
            self._on_progress(run.stats)
