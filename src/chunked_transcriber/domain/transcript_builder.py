"""Plain-text and subtitle rendering of finished transcripts."""

import os
from collections.abc import Sequence

from chunked_transcriber.domain.models import TranscriptSegment
from chunked_transcriber.domain.timestamps import format_srt_time, format_time

# Cue length for the final subtitle, which has no following segment.
LAST_CUE_SECONDS = 5


class TranscriptBuilder:
    """Builds text and SRT transcripts from ordered segments."""

    def build_text(
        self, segments: Sequence[TranscriptSegment], include_timestamps: bool = True
    ) -> str:
        """Formats segments as ``[MM:SS] Speaker: text`` lines."""
        lines = []
        for segment in segments:
            prefix = (
                f"[{format_time(segment.start_time_seconds)}] "
                if include_timestamps
                else ""
            )
            lines.append(f"{prefix}{segment.speaker}: {segment.text}")
        return "\n".join(lines)

    def build_srt(self, segments: Sequence[TranscriptSegment]) -> str:
        """
        Formats segments as SRT cues.

        Each cue ends where the next segment starts; the last one runs for
        LAST_CUE_SECONDS.
        """
        cues = []
        for index, segment in enumerate(segments):
            if index + 1 < len(segments):
                end = segments[index + 1].start_time_seconds
            else:
                end = segment.start_time_seconds + LAST_CUE_SECONDS
            cues.append(
                f"{index + 1}\n"
                f"{format_srt_time(segment.start_time_seconds)} --> {format_srt_time(end)}\n"
                f"{segment.speaker}: {segment.text}"
            )
        return "\n\n".join(cues)

    def derive_paths(self, audio_file_name: str) -> tuple[str, str]:
        """Converts an audio object path to its transcript and subtitle paths."""
        name = audio_file_name.replace("/audio/", "/transcription/")
        base = os.path.splitext(name)[0]
        return base + ".txt", base + ".srt"
