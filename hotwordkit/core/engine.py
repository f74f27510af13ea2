"""
Recognition engine adapter.

Owns the native Snowboy detector, initializes it lazily on first use and
decodes its integer result codes into ``DetectionOutcome`` values so the
rest of the package never deals with magic numbers.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Protocol

from .audio import AudioFormat, pcm_samples
from .errors import LifecycleError

logger = logging.getLogger(__name__)

RESULT_SILENCE = -2
RESULT_ERROR = -1
RESULT_NO_DETECTION = 0


class OutcomeKind(Enum):
    NO_DETECTION = "no_detection"
    ENGINE_ERROR = "engine_error"
    SILENCE = "silence"
    KEYWORD = "keyword"


@dataclass(frozen=True)
class DetectionOutcome:
    """
    Decoded result of one detection call.

    Attributes:
        kind: What the engine reported
        index: 1-based hotword index for KEYWORD outcomes, 0 otherwise
        code: Raw engine result code
    """

    kind: OutcomeKind
    index: int = 0
    code: int = RESULT_NO_DETECTION

    @classmethod
    def decode(cls, code: int) -> 'DetectionOutcome':
        code = int(code)
        if code > 0:
            return cls(OutcomeKind.KEYWORD, index=code, code=code)
        if code == RESULT_NO_DETECTION:
            return NO_DETECTION
        if code == RESULT_SILENCE:
            return SILENCE
        return cls(OutcomeKind.ENGINE_ERROR, code=code)

    @property
    def is_keyword(self) -> bool:
        return self.kind is OutcomeKind.KEYWORD


NO_DETECTION = DetectionOutcome(OutcomeKind.NO_DETECTION, code=RESULT_NO_DETECTION)
SILENCE = DetectionOutcome(OutcomeKind.SILENCE, code=RESULT_SILENCE)
ENGINE_ERROR = DetectionOutcome(OutcomeKind.ENGINE_ERROR, code=RESULT_ERROR)


@dataclass(frozen=True)
class EngineSettings:
    """
    Everything needed to construct a recognition engine.

    Attributes:
        resource: Path to the engine's common resource bundle
        models: Comma-joined model file list
        sensitivities: Comma-joined sensitivity list, one per model
        audio_gain: Input gain multiplier
        apply_frontend: Enable the engine's audio frontend processing
    """

    resource: str
    models: str
    sensitivities: str
    audio_gain: float = 1.0
    apply_frontend: bool = False


class RecognitionEngine(Protocol):
    """Interface of a native recognition engine."""

    def run_detection(self, data: bytes) -> int:
        ...

    def sample_rate(self) -> int:
        ...

    def num_channels(self) -> int:
        ...

    def bits_per_sample(self) -> int:
        ...

    def delete(self) -> None:
        ...


EngineFactory = Callable[[EngineSettings], RecognitionEngine]


class SnowboyEngine:
    """Recognition engine backed by the ``snowboydetect`` SWIG binding."""

    def __init__(self, settings: EngineSettings):
        """
        Create the native detector.

        Raises:
            RuntimeError: If the snowboydetect binding is not installed
        """
        try:
            import snowboydetect
        except ImportError:
            raise RuntimeError(
                "snowboydetect is required for hotword detection. Build it from "
                "https://github.com/Kitt-AI/snowboy (swig/Python3) and make the "
                "module importable."
            )

        self._raw = snowboydetect.SnowboyDetect(
            resource_filename=settings.resource.encode(),
            model_str=settings.models.encode()
        )
        self._raw.SetSensitivity(settings.sensitivities.encode())
        self._raw.SetAudioGain(settings.audio_gain)
        self._raw.ApplyFrontend(settings.apply_frontend)

    def run_detection(self, data: bytes) -> int:
        return self._raw.RunDetection(data)

    def sample_rate(self) -> int:
        return self._raw.SampleRate()

    def num_channels(self) -> int:
        return self._raw.NumChannels()

    def bits_per_sample(self) -> int:
        return self._raw.BitsPerSample()

    def delete(self) -> None:
        del self._raw


class EngineAdapter:
    """
    Lazily-initialized owner of one recognition engine.

    The engine is created on the first detection or format query and must
    be released exactly once with ``release``. Nothing may be done with
    the adapter after release.
    """

    def __init__(self, settings: EngineSettings, engine_factory: Optional[EngineFactory] = None):
        self.settings = settings
        self.engine_factory = engine_factory or SnowboyEngine
        self._engine: Optional[RecognitionEngine] = None
        self._format: Optional[AudioFormat] = None
        self._released = False

    @property
    def initialized(self) -> bool:
        return self._engine is not None

    @property
    def released(self) -> bool:
        return self._released

    def _check_not_released(self):
        if self._released:
            raise LifecycleError("recognition engine has already been released")

    def initialize(self):
        """Construct the engine if it does not exist yet."""
        self._check_not_released()
        if self._engine is not None:
            return

        self._engine = self.engine_factory(self.settings)
        logger.info(f"Recognition engine initialized: models={self.settings.models}, "
                    f"sensitivities={self.settings.sensitivities}, "
                    f"gain={self.settings.audio_gain}")

    def run_detection(self, chunk: bytes) -> DetectionOutcome:
        """
        Run detection on one chunk of 16-bit PCM.

        Args:
            chunk: Raw audio bytes; a trailing odd byte is ignored

        Returns:
            Decoded outcome; NO_DETECTION for an empty chunk without
            consulting the engine
        """
        self._check_not_released()
        samples = pcm_samples(chunk)
        if samples.size == 0:
            return NO_DETECTION

        self.initialize()
        code = self._engine.run_detection(samples.tobytes())
        return DetectionOutcome.decode(code)

    def audio_format(self) -> AudioFormat:
        """Sample rate, channel count and bit depth the engine expects."""
        self._check_not_released()
        if self._format is None:
            self.initialize()
            self._format = AudioFormat(
                sample_rate=self._engine.sample_rate(),
                channels=self._engine.num_channels(),
                bits_per_sample=self._engine.bits_per_sample()
            )
        return self._format

    def release(self):
        """
        Release the native engine.

        Raises:
            LifecycleError: If the engine was never initialized or was
                already released
        """
        self._check_not_released()
        if self._engine is None:
            raise LifecycleError("recognition engine was never initialized")

        self._engine.delete()
        self._engine = None
        self._released = True
        logger.info("Recognition engine released")
