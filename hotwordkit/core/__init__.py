"""Core hotword detection functionality."""

from .audio import AudioFileSource, AudioFormat, MicrophoneSource
from .detector import Detector, DetectorBuilder, DetectorConfig
from .engine import DetectionOutcome, EngineAdapter, OutcomeKind, SnowboyEngine
from .errors import EngineFailure, HotwordKitError, LifecycleError, UnboundResult
from .handlers import FunctionHandler, Handler
from .hotword import Hotword, HotwordRegistry

__all__ = [
    "AudioFileSource",
    "AudioFormat",
    "DetectionOutcome",
    "Detector",
    "DetectorBuilder",
    "DetectorConfig",
    "EngineAdapter",
    "EngineFailure",
    "FunctionHandler",
    "Handler",
    "Hotword",
    "HotwordKitError",
    "HotwordRegistry",
    "LifecycleError",
    "MicrophoneSource",
    "OutcomeKind",
    "SnowboyEngine",
    "UnboundResult",
]
