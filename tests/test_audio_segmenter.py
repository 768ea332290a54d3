import io
import math
import struct

import numpy as np
import pytest
import soundfile as sf

from chunked_transcriber.domain.audio_segmenter import AudioDecoder, AudioSegmenter
from chunked_transcriber.domain.models import AudioChunk, AudioSample
from chunked_transcriber.exceptions import AudioDecodeError
from tests.conftest import FakeDecoder, make_sample


def _chunk(values, sample_rate=8000):
    channels = np.asarray(values, dtype=np.float32)
    if channels.ndim == 1:
        channels = channels[np.newaxis, :]
    return AudioChunk(
        index=0, start_offset_seconds=0.0, sample_rate=sample_rate, channels=channels
    )


def test_700_seconds_split_into_300_second_chunks():
    segmenter = AudioSegmenter(decoder=FakeDecoder())
    chunks = segmenter.segment(make_sample(700), 300)

    assert [c.duration_seconds for c in chunks] == [300, 300, 100]
    assert [c.start_offset_seconds for c in chunks] == [0, 300, 600]
    assert [c.index for c in chunks] == [0, 1, 2]


@pytest.mark.parametrize("duration", [0.1, 1, 299.9, 300, 300.1, 1000])
@pytest.mark.parametrize("chunk_duration", [1, 2.5, 300])
def test_chunks_partition_the_source(duration, chunk_duration):
    sample = make_sample(duration)
    chunks = AudioSegmenter(decoder=FakeDecoder()).segment(sample, chunk_duration)

    assert len(chunks) == math.ceil(sample.frame_count / (chunk_duration * 10))
    assert sum(c.frame_count for c in chunks) == sample.frame_count
    assert all(c.duration_seconds <= chunk_duration for c in chunks)
    assert all(c.duration_seconds == chunk_duration for c in chunks[:-1])
    rebuilt = np.concatenate([c.channels for c in chunks], axis=1)
    np.testing.assert_array_equal(rebuilt, sample.channels)


def test_zero_length_sample_has_no_chunks():
    sample = AudioSample(sample_rate=10, channels=np.zeros((2, 0), dtype=np.float32))
    assert AudioSegmenter(decoder=FakeDecoder()).segment(sample, 300) == []


def test_chunks_own_their_samples():
    sample = make_sample(20, channel_count=2)
    chunks = AudioSegmenter(decoder=FakeDecoder()).segment(sample, 5)

    assert not any(np.shares_memory(c.channels, sample.channels) for c in chunks)
    before = sample.channels[:, :50].copy()
    chunks[0].channels[:] = 0
    np.testing.assert_array_equal(sample.channels[:, :50], before)


@pytest.mark.parametrize(
    "sample_rate, chunk_duration, frame_count, expected_chunks",
    [
        (100, 0.29, 58, 2),
        (100, 0.29, 59, 3),
        (100, 0.295, 100, 4),
        (44100, 0.1, 44100, 10),
        (8000, 0.7, 56000, 10),
        (48000, 1 / 3, 48000, 3),
    ],
)
def test_fractional_frame_products_keep_windows_aligned(
    sample_rate, chunk_duration, frame_count, expected_chunks
):
    sample = AudioSample(
        sample_rate=sample_rate, channels=np.zeros((1, frame_count), dtype=np.float32)
    )

    chunks = AudioSegmenter(decoder=FakeDecoder()).segment(sample, chunk_duration)

    assert len(chunks) == expected_chunks
    assert sum(c.frame_count for c in chunks) == frame_count
    half_frame = 0.5 / sample_rate + 1e-9
    for chunk in chunks:
        assert abs(chunk.start_offset_seconds - chunk.index * chunk_duration) <= half_frame


def test_segment_rejects_sub_frame_duration():
    with pytest.raises(ValueError):
        AudioSegmenter(decoder=FakeDecoder()).segment(make_sample(10), 0.01)


def test_wav_header_layout():
    chunk = _chunk(np.zeros((2, 100)), sample_rate=16000)
    blob = AudioSegmenter(decoder=FakeDecoder()).encode_to_wav(chunk)

    fields = struct.unpack("<4sI4s4sIHHIIHH4sI", blob[:44])
    assert fields == (
        b"RIFF",
        len(blob) - 8,
        b"WAVE",
        b"fmt ",
        16,
        1,
        2,
        16000,
        16000 * 2 * 2,
        4,
        16,
        b"data",
        100 * 2 * 2,
    )
    assert len(blob) == 44 + 400


def test_wav_sample_scaling_and_clamping():
    values = [-1.0, -0.5, -0.00001, 0.0, 0.5, 1.0, 2.0, -2.0]
    blob = AudioSegmenter(decoder=FakeDecoder()).encode_to_wav(_chunk(values))

    pcm = np.frombuffer(blob[44:], dtype="<i2").tolist()
    assert pcm == [-32768, -16384, 0, 0, 16383, 32767, 32767, -32768]


def test_wav_interleaves_channels_per_frame():
    chunk = _chunk([[0.5, 0.25], [-0.5, -0.25]])
    blob = AudioSegmenter(decoder=FakeDecoder()).encode_to_wav(chunk)

    pcm = np.frombuffer(blob[44:], dtype="<i2").tolist()
    assert pcm == [16383, -16384, 8191, -8192]


def test_wav_round_trips_through_a_standard_decoder():
    sample = make_sample(1.5, sample_rate=8000, channel_count=2)
    chunk = AudioSegmenter(decoder=FakeDecoder()).segment(sample, 300)[0]
    blob = AudioSegmenter(decoder=FakeDecoder()).encode_to_wav(chunk)

    frames, sample_rate = sf.read(io.BytesIO(blob), dtype="float32", always_2d=True)

    assert sample_rate == 8000
    assert frames.shape == (chunk.frame_count, 2)
    assert np.max(np.abs(frames.T - chunk.channels)) < 1e-4


def test_decoder_reads_wav_bytes():
    rng = np.random.default_rng(1)
    data = rng.uniform(-0.9, 0.9, size=(4000, 2)).astype(np.float32)
    buffer = io.BytesIO()
    sf.write(buffer, data, 8000, format="WAV", subtype="PCM_16")

    sample = AudioDecoder().decode(buffer.getvalue(), "meeting.wav")

    assert sample.sample_rate == 8000
    assert sample.channel_count == 2
    assert sample.frame_count == 4000
    assert sample.channels.dtype == np.float32
    assert np.max(np.abs(sample.channels)) <= 1.0


def test_decoder_rejects_garbage():
    with pytest.raises(AudioDecodeError) as exc_info:
        AudioDecoder().decode(b"definitely not audio", "broken.wav")
    assert exc_info.value.file_name == "broken.wav"
    assert exc_info.value.cause is not None


def test_decoder_routes_compressed_containers_through_ffmpeg(monkeypatch):
    frames = np.zeros((80, 1), dtype=np.float32)
    calls = []

    def fake_ffmpeg(self, data, extension):
        calls.append(extension)
        return frames, 8000

    monkeypatch.setattr(AudioDecoder, "_decode_with_ffmpeg", fake_ffmpeg)
    sample = AudioDecoder().decode(b"...", "Interview.M4A")

    assert calls == [".m4a"]
    assert sample.frame_count == 80


def test_segmenter_creates_decoder_once(monkeypatch):
    created = []

    class CountingDecoder(FakeDecoder):
        def __init__(self):
            super().__init__(sample=make_sample(1))
            created.append(self)

    monkeypatch.setattr(
        "chunked_transcriber.domain.audio_segmenter.AudioDecoder", CountingDecoder
    )
    segmenter = AudioSegmenter()
    segmenter.decode(b"a", "a.wav")
    segmenter.decode(b"b", "b.wav")

    assert len(created) == 1
    assert created[0].calls == 2
