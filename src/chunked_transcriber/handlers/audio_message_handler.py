"""Handler for transcribing audio files announced on the queue."""

import io

from chunked_transcriber.domain import (
    AudioMessage,
    PipelineOrchestrator,
    PipelineStatus,
    SourceAudio,
    StopToken,
    TranscriptBuilder,
    TranscriptionResult,
)
from chunked_transcriber.domain.pipeline import is_error_placeholder
from chunked_transcriber.exceptions import PipelineInterruptedError
from chunked_transcriber.infrastructure.interfaces import StorageClient
from chunked_transcriber.logging import setup_logging

logger = setup_logging()

SRT_CONTENT_TYPE = "application/x-subrip"


class AudioMessageHandler:
    """Orchestrates audio-to-transcript operations for one queue message."""

    def __init__(
        self,
        storage: StorageClient,
        orchestrator: PipelineOrchestrator,
        transcript_builder: TranscriptBuilder,
        stop_token: StopToken,
    ):
        self._storage = storage
        self._orchestrator = orchestrator
        self._transcript_builder = transcript_builder
        self._stop_token = stop_token

    def process(self, message: AudioMessage) -> TranscriptionResult:
        """
        Transcribes an audio object and stores the transcript next to it.

        A redelivered message picks up from the progress saved by the earlier
        attempt, so only the remaining chunks are sent to the service.

        Args:
            message: The audio message containing file location.

        Returns:
            TranscriptionResult with the uploaded object names.

        Raises:
            StorageDownloadError: If audio download fails.
            PipelineInterruptedError: If the run was stopped or the audio
                could not be decoded.
            StorageUploadError: If a transcript upload fails.
        """
        logger.info(
            "Processing audio",
            extra={"file_name": message.file_name, "bucket_name": message.bucket_name},
        )

        audio_data = self._storage.download(message.bucket_name, message.file_name)
        source = SourceAudio(
            file_name=message.file_name, file_size=len(audio_data), data=audio_data
        )

        run = self._orchestrator.run(source, stop_token=self._stop_token)
        if run.status != PipelineStatus.COMPLETED:
            raise PipelineInterruptedError(
                message.file_name,
                run.status.value,
                run.error_message,
                processed_chunks=run.processed_chunks,
                total_chunks=run.total_chunks,
            )

        text_name, subtitle_name = self._transcript_builder.derive_paths(
            message.file_name
        )
        self._upload_text(
            message.bucket_name,
            text_name,
            self._transcript_builder.build_text(run.segments),
            "text/plain",
        )
        self._upload_text(
            message.bucket_name,
            subtitle_name,
            self._transcript_builder.build_srt(run.segments),
            SRT_CONTENT_TYPE,
        )

        result = TranscriptionResult(
            transcription_object_name=text_name,
            subtitle_object_name=subtitle_name,
            bucket_name=message.bucket_name,
            segment_count=len(run.segments),
            resumed=run.resumed,
            failed_chunks=sum(1 for s in run.segments if is_error_placeholder(s)),
            warning=run.error_message,
        )
        logger.info(
            "Audio processed",
            extra={
                "audio_file": message.file_name,
                "transcription_file": text_name,
                "segment_count": result.segment_count,
                "failed_chunks": result.failed_chunks,
                "resumed": result.resumed,
            },
        )
        return result

    def _upload_text(
        self, bucket_name: str, object_name: str, content: str, content_type: str
    ) -> None:
        payload = content.encode("utf-8")
        self._storage.upload(
            bucket_name=bucket_name,
            object_name=object_name,
            data=io.BytesIO(payload),
            size=len(payload),
            content_type=content_type,
        )
