"""Shared fixtures: a scripted recognition engine and simple audio sources."""

import pytest

from hotwordkit.core.audio import AudioFormat

# 16kHz mono 16-bit: 32000 bytes per second
DEFAULT_FORMAT = AudioFormat(sample_rate=16000, channels=1, bits_per_sample=16)
HALF_SECOND = 16000


class ScriptedEngine:
    """Recognition engine that replays a fixed list of result codes."""

    def __init__(self, settings, codes, audio_format):
        self.settings = settings
        self.codes = codes
        self.audio_format = audio_format
        self.calls = []
        self.format_queries = 0
        self.deleted = False

    def run_detection(self, data):
        self.calls.append(data)
        return self.codes.pop(0) if self.codes else 0

    def sample_rate(self):
        self.format_queries += 1
        return self.audio_format.sample_rate

    def num_channels(self):
        return self.audio_format.channels

    def bits_per_sample(self):
        return self.audio_format.bits_per_sample

    def delete(self):
        self.deleted = True


class ScriptedEngineFactory:
    """Engine factory that records every engine it builds."""

    def __init__(self, codes=(), audio_format=DEFAULT_FORMAT):
        self.codes = list(codes)
        self.audio_format = audio_format
        self.engines = []

    def __call__(self, settings):
        engine = ScriptedEngine(settings, self.codes, self.audio_format)
        self.engines.append(engine)
        return engine

    @property
    def engine(self):
        return self.engines[-1]


class ScriptedSource:
    """Audio source returning a fixed sequence of read results."""

    def __init__(self, reads):
        self.reads = list(reads)
        self.read_sizes = []

    def read(self, size):
        self.read_sizes.append(size)
        result = self.reads.pop(0) if self.reads else b""
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture
def engine_factory():
    """Build a scripted engine factory: ``engine_factory(codes=[...])``."""
    return ScriptedEngineFactory


@pytest.fixture
def scripted_source():
    return ScriptedSource
