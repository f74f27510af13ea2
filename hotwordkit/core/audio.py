"""
Audio helpers and sources for hotword detection.

Chunks are raw little-endian 16-bit PCM. Sources expose ``read(n)``:
bytes when data is available, ``None`` when a non-blocking source has
nothing yet, and ``b""`` at end of stream. Plain binary file objects
already behave this way.
"""

import io
import logging
from typing import Any, Dict, List, NamedTuple, Optional, Protocol

import numpy as np
import librosa

logger = logging.getLogger(__name__)

PCM_DTYPE = np.dtype('<i2')
SAMPLE_WIDTH = PCM_DTYPE.itemsize


class AudioFormat(NamedTuple):
    """Audio format the recognition engine expects."""

    sample_rate: int
    channels: int
    bits_per_sample: int

    @property
    def bytes_per_second(self) -> int:
        return self.channels * (self.bits_per_sample // 8) * self.sample_rate


class AudioSource(Protocol):
    """Byte-producing audio source."""

    def read(self, size: int) -> Optional[bytes]:
        ...


def pcm_samples(chunk: bytes) -> np.ndarray:
    """
    Interpret a chunk as 16-bit little-endian PCM samples.

    A trailing odd byte is an incomplete sample and is dropped.

    Args:
        chunk: Raw audio bytes

    Returns:
        int16 sample array (a view over ``chunk`` where possible)
    """
    usable = len(chunk) - len(chunk) % SAMPLE_WIDTH
    if usable != len(chunk):
        logger.debug(f"Dropping trailing odd byte from {len(chunk)}-byte chunk")
    return np.frombuffer(chunk, dtype=PCM_DTYPE, count=usable // SAMPLE_WIDTH)


def chunk_duration(nbytes: int, audio_format: AudioFormat) -> float:
    """
    Duration in seconds of ``nbytes`` of audio in the given format.

    Raises:
        ValueError: If the format describes zero bytes per second
    """
    rate = audio_format.bytes_per_second
    if rate <= 0:
        raise ValueError(f"Invalid audio format: {audio_format}")
    return nbytes / rate


def float_to_pcm(audio: np.ndarray) -> bytes:
    """Convert float audio in [-1, 1] (mono or channels-first) to interleaved 16-bit PCM."""
    if audio.ndim > 1:
        audio = audio.T.reshape(-1)
    audio = np.clip(audio, -1.0, 1.0)
    return (audio * 32767).astype(PCM_DTYPE).tobytes()


class MicrophoneSource:
    """
    Live microphone capture as an audio source.

    Wraps a sounddevice ``RawInputStream`` in 16-bit mode. ``read`` blocks
    until the requested number of frames is captured. After ``close`` the
    source reports end of stream, which ends a running detection loop.
    """

    def __init__(
        self,
        sample_rate: int = 16000,
        channels: int = 1,
        device_id: Optional[int] = None
    ):
        self.sample_rate = sample_rate
        self.channels = channels
        self.device_id = device_id
        self.frame_bytes = channels * SAMPLE_WIDTH
        self.stream = None
        self.closed = False

    @classmethod
    def for_format(cls, audio_format: AudioFormat, device_id: Optional[int] = None) -> 'MicrophoneSource':
        if audio_format.bits_per_sample != 16:
            raise ValueError(f"Only 16-bit capture is supported, got {audio_format.bits_per_sample}")
        return cls(audio_format.sample_rate, audio_format.channels, device_id)

    def open(self):
        if self.stream is not None:
            return
        import sounddevice as sd

        self.stream = sd.RawInputStream(
            samplerate=self.sample_rate,
            channels=self.channels,
            dtype='int16',
            device=self.device_id
        )
        self.stream.start()
        logger.info(f"Microphone capture started: {self.sample_rate}Hz, "
                    f"{self.channels} channel(s), device={self.device_id}")

    def read(self, size: int) -> Optional[bytes]:
        if self.closed:
            return b""
        if self.stream is None:
            self.open()

        frames = max(size // self.frame_bytes, 1)
        data, overflowed = self.stream.read(frames)
        if overflowed:
            logger.warning("Microphone input overflow, audio was dropped")
        return bytes(data)

    def close(self):
        if self.closed:
            return
        self.closed = True
        if self.stream is not None:
            self.stream.stop()
            self.stream.close()
            self.stream = None
        logger.info("Microphone capture stopped")

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


class AudioFileSource:
    """
    Audio file decoded to 16-bit PCM in the engine's format.

    Any format librosa can load is accepted; audio is resampled to
    ``sample_rate`` on load.
    """

    def __init__(self, file_path: str, sample_rate: int = 16000, channels: int = 1):
        self.file_path = str(file_path)
        self.sample_rate = sample_rate
        self.channels = channels

        audio, _ = librosa.load(self.file_path, sr=sample_rate, mono=(channels == 1))
        if channels > 1 and audio.ndim == 1:
            audio = np.tile(audio, (channels, 1))

        pcm = float_to_pcm(audio)
        self.duration = len(pcm) / (channels * SAMPLE_WIDTH * sample_rate)
        self._buffer = io.BytesIO(pcm)

        logger.info(f"Loaded {self.file_path}: {self.duration:.2f}s at {sample_rate}Hz")

    @classmethod
    def for_format(cls, file_path: str, audio_format: AudioFormat) -> 'AudioFileSource':
        return cls(file_path, audio_format.sample_rate, audio_format.channels)

    def read(self, size: int) -> bytes:
        return self._buffer.read(size)

    def close(self):
        self._buffer.close()


def list_audio_devices() -> List[Dict[str, Any]]:
    """
    List available audio input devices.

    Returns:
        List of device information dictionaries
    """
    import sounddevice as sd

    devices = sd.query_devices()
    input_devices = []

    for i, device in enumerate(devices):
        if device['max_input_channels'] > 0:
            input_devices.append({
                'id': i,
                'name': device['name'],
                'channels': device['max_input_channels'],
                'sample_rate': device['default_samplerate'],
                'hostapi': sd.query_hostapis(device['hostapi'])['name']
            })

    return input_devices
