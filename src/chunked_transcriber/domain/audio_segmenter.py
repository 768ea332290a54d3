"""Decoding, chunking and WAV encoding of source recordings."""

import io
import os
import struct
import tempfile

import moviepy
import numpy as np
import soundfile as sf

from chunked_transcriber.domain.models import AudioChunk, AudioSample
from chunked_transcriber.exceptions import AudioDecodeError
from chunked_transcriber.logging import setup_logging

logger = setup_logging()

# Containers libsndfile cannot open; these go through ffmpeg first.
FFMPEG_EXTENSIONS = {".m4a", ".mp4", ".aac", ".webm", ".mov", ".mkv", ".wma"}

WAV_HEADER = struct.Struct("<4sI4s4sIHHIIHH4sI")
PCM_FORMAT = 1
BITS_PER_SAMPLE = 16


class AudioDecoder:
    """
    Reusable decoding context.

    Holds the set of formats the linked libsndfile understands so the
    lookup happens once per process rather than once per file.
    """

    def __init__(self):
        self._formats = sf.available_formats()
        logger.info(
            "Audio decoder initialized", extra={"format_count": len(self._formats)}
        )

    def decode(self, data: bytes, file_name: str) -> AudioSample:
        """
        Decodes an encoded audio container into normalized float samples.

        Args:
            data: Raw bytes of the audio file.
            file_name: Original file name, used to pick the decoding route.

        Returns:
            AudioSample with float32 channels in [-1, 1].

        Raises:
            AudioDecodeError: If the bytes are not a readable audio container.
        """
        extension = os.path.splitext(file_name)[1].lower()
        try:
            if extension in FFMPEG_EXTENSIONS:
                frames, sample_rate = self._decode_with_ffmpeg(data, extension)
            else:
                frames, sample_rate = sf.read(
                    io.BytesIO(data), dtype="float32", always_2d=True
                )
        except Exception as e:
            logger.exception("Audio decoding failed", extra={"file_name": file_name})
            raise AudioDecodeError(file_name, e) from e

        if sample_rate <= 0 or frames.shape[1] == 0:
            raise AudioDecodeError(
                file_name, ValueError("decoded stream has no audio channels")
            )

        sample = AudioSample(
            sample_rate=int(sample_rate),
            channels=np.ascontiguousarray(frames.T),
        )
        logger.info(
            "Audio decoded",
            extra={
                "file_name": file_name,
                "sample_rate": sample.sample_rate,
                "channels": sample.channel_count,
                "duration_seconds": round(sample.duration_seconds, 3),
            },
        )
        return sample

    def _decode_with_ffmpeg(
        self, data: bytes, extension: str
    ) -> tuple[np.ndarray, int]:
        """Extracts the audio track to PCM WAV with moviepy, then reads it."""
        with tempfile.TemporaryDirectory() as temp_dir:
            source_path = os.path.join(temp_dir, f"source{extension}")
            wav_path = os.path.join(temp_dir, "decoded.wav")

            with open(source_path, "wb") as f:
                f.write(data)

            clip = moviepy.AudioFileClip(source_path)
            try:
                clip.write_audiofile(
                    wav_path, fps=clip.fps, nbytes=2, codec="pcm_s16le", logger=None
                )
            finally:
                clip.close()

            return sf.read(wav_path, dtype="float32", always_2d=True)


class AudioSegmenter:
    """Turns a recording into independently encoded, fixed-duration chunks."""

    def __init__(self, decoder: AudioDecoder | None = None):
        self._decoder = decoder

    @property
    def decoder(self) -> AudioDecoder:
        if self._decoder is None:
            self._decoder = AudioDecoder()
        return self._decoder

    def decode(self, data: bytes, file_name: str) -> AudioSample:
        return self.decoder.decode(data, file_name)

    def segment(
        self, sample: AudioSample, chunk_duration_seconds: float
    ) -> list[AudioChunk]:
        """
        Partitions a sample into consecutive windows.

        Every window spans ``chunk_duration_seconds`` except possibly the last,
        which holds whatever remains. Window ``i`` starts at the frame nearest
        to ``i * chunk_duration_seconds``, so boundaries never drift from the
        chunk offsets even when the duration is not a whole number of frames.
        A zero-length sample yields no chunks.

        Raises:
            ValueError: If the duration is shorter than one frame.
        """
        # float noise such as 0.29 * 100 == 28.999... must not lose a frame
        frames_per_chunk = round(chunk_duration_seconds * sample.sample_rate, 6)
        if frames_per_chunk < 1:
            raise ValueError(
                f"Chunk duration {chunk_duration_seconds}s is shorter than one frame"
            )

        chunks = []
        start = 0
        while start < sample.frame_count:
            index = len(chunks)
            end = min(round((index + 1) * frames_per_chunk), sample.frame_count)
            chunks.append(
                AudioChunk(
                    index=index,
                    start_offset_seconds=start / sample.sample_rate,
                    sample_rate=sample.sample_rate,
                    channels=sample.channels[:, start:end].copy(),
                )
            )
            start = end

        logger.info(
            "Audio segmented",
            extra={
                "chunk_count": len(chunks),
                "chunk_duration_seconds": chunk_duration_seconds,
            },
        )
        return chunks

    def encode_to_wav(self, chunk: AudioChunk) -> bytes:
        """
        Encodes a chunk as a 16-bit PCM RIFF/WAVE file.

        The remote service only accepts this exact layout: a 44-byte
        little-endian header followed by frame-interleaved int16 samples.
        Samples are clamped to [-1, 1], negatives scaled by 32768 and the rest
        by 32767, then truncated toward zero.
        """
        channel_count = chunk.channel_count
        data_length = chunk.frame_count * channel_count * 2
        header = WAV_HEADER.pack(
            b"RIFF",
            36 + data_length,
            b"WAVE",
            b"fmt ",
            16,
            PCM_FORMAT,
            channel_count,
            chunk.sample_rate,
            chunk.sample_rate * 2 * channel_count,
            channel_count * 2,
            BITS_PER_SAMPLE,
            b"data",
            data_length,
        )

        samples = np.clip(
            np.nan_to_num(chunk.channels.astype(np.float64)), -1.0, 1.0
        )
        scaled = np.where(samples < 0, samples * 32768.0, samples * 32767.0)
        pcm = np.trunc(scaled).astype("<i2")
        return header + pcm.T.tobytes()
