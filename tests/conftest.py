import numpy as np
import pytest

from chunked_transcriber.domain.models import AudioSample, Utterance
from chunked_transcriber.exceptions import KeyValueStoreError
from chunked_transcriber.infrastructure.interfaces import (
    KeyValueStore,
    TranscriptionService,
)


class InMemoryKeyValueStore(KeyValueStore):
    def __init__(self):
        self.data = {}

    def get(self, key):
        return self.data.get(key)

    def set(self, key, value):
        self.data[key] = value

    def delete(self, key):
        self.data.pop(key, None)


class BrokenKeyValueStore(KeyValueStore):
    def get(self, key):
        raise KeyValueStoreError(key, "get", OSError("disk gone"))

    def set(self, key, value):
        raise KeyValueStoreError(key, "set", OSError("quota exceeded"))

    def delete(self, key):
        raise KeyValueStoreError(key, "delete", OSError("disk gone"))


class ScriptedTranscriptionService(TranscriptionService):
    """Plays back a list of responses; Exception entries are raised."""

    def __init__(self, script, after_call=None):
        self.script = list(script)
        self.payloads = []
        self.after_call = after_call

    def transcribe(self, audio_data):
        self.payloads.append(audio_data)
        item = self.script.pop(0)
        if self.after_call is not None:
            self.after_call(len(self.payloads))
        if isinstance(item, Exception):
            raise item
        return item


class FakeDecoder:
    def __init__(self, sample=None, error=None):
        self.sample = sample
        self.error = error
        self.calls = 0

    def decode(self, data, file_name):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.sample


class SleepRecorder:
    def __init__(self):
        self.delays = []

    def __call__(self, seconds):
        self.delays.append(seconds)


def make_sample(duration_seconds, sample_rate=10, channel_count=1, seed=0):
    rng = np.random.default_rng(seed)
    frames = int(duration_seconds * sample_rate)
    channels = rng.uniform(-1, 1, size=(channel_count, frames)).astype(np.float32)
    return AudioSample(sample_rate=sample_rate, channels=channels)


def utterances(*texts, speaker="Speaker 1", timestamp="00:10"):
    return [Utterance(speaker=speaker, timestamp=timestamp, text=t) for t in texts]


@pytest.fixture
def kv_store():
    return InMemoryKeyValueStore()


@pytest.fixture
def sleep_recorder():
    return SleepRecorder()
