from chunked_transcriber.domain.models import TranscriptSegment
from chunked_transcriber.domain.transcript_builder import TranscriptBuilder


def _segment(start, text, speaker="Speaker 1"):
    return TranscriptSegment(
        speaker=speaker, timestamp="00:00", start_time_seconds=start, text=text
    )


SEGMENTS = [
    _segment(10, "Hello"),
    _segment(75.5, "Hi there", speaker="Speaker 2"),
    _segment(3725, "Bye"),
]


def test_text_with_timestamps():
    text = TranscriptBuilder().build_text(SEGMENTS)

    assert text.splitlines() == [
        "[00:10] Speaker 1: Hello",
        "[01:15] Speaker 2: Hi there",
        "[1:02:05] Speaker 1: Bye",
    ]


def test_text_without_timestamps():
    text = TranscriptBuilder().build_text(SEGMENTS, include_timestamps=False)

    assert text.splitlines()[1] == "Speaker 2: Hi there"


def test_srt_cues_end_at_next_segment():
    srt = TranscriptBuilder().build_srt(SEGMENTS)

    cues = srt.split("\n\n")
    assert len(cues) == 3
    assert cues[0] == "1\n00:00:10,000 --> 00:01:15,500\nSpeaker 1: Hello"
    assert cues[1].splitlines()[1] == "00:01:15,500 --> 01:02:05,000"
    assert cues[2].splitlines()[1] == "01:02:05,000 --> 01:02:10,000"


def test_empty_transcript_renders_empty():
    builder = TranscriptBuilder()

    assert builder.build_text([]) == ""
    assert builder.build_srt([]) == ""


def test_derive_paths():
    text_name, subtitle_name = TranscriptBuilder().derive_paths(
        "sessions/42/audio/recording.v2.mp3"
    )

    assert text_name == "sessions/42/transcription/recording.v2.txt"
    assert subtitle_name == "sessions/42/transcription/recording.v2.srt"
