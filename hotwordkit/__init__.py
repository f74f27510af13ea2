"""
hotwordkit - Hotword detection and dispatch on top of Snowboy

Streams raw audio through the Snowboy recognition engine and calls your
handlers when a registered hotword is spoken or when the audio has been
silent for long enough.

Key Features:
- Multiple hotwords per stream, each with its own sensitivity
- Silence detection with a configurable duration threshold
- Explicit builder -> session lifecycle for the native engine
- Microphone and audio file sources
- YAML/JSON configuration and a terminal-style CLI

Quick Start:
    >>> from hotwordkit import DetectorBuilder, Hotword
    >>> builder = DetectorBuilder("resources/common.res")
    >>> builder.handle_func(Hotword.from_model("resources/snowboy.umdl"), print)
    >>> with builder.start() as detector:
    ...     detector.read_and_detect(open("speech.raw", "rb"))

CLI Usage:
    $ hotwordkit detect --resource resources/common.res --model resources/snowboy.umdl
    $ hotwordkit detect --config hotwords.yaml --input recording.wav
"""

__version__ = "0.1.0"
__author__ = "hotwordkit contributors"
__license__ = "MIT"
__description__ = "Hotword detection and dispatch on top of the Snowboy engine"

import logging

from .core import (
    AudioFileSource,
    AudioFormat,
    DetectionOutcome,
    Detector,
    DetectorBuilder,
    DetectorConfig,
    EngineFailure,
    FunctionHandler,
    Handler,
    Hotword,
    HotwordKitError,
    LifecycleError,
    MicrophoneSource,
    OutcomeKind,
    SnowboyEngine,
    UnboundResult,
)

__all__ = [
    # Detection
    "Detector",
    "DetectorBuilder",
    "DetectorConfig",
    "DetectionOutcome",
    "OutcomeKind",
    "SnowboyEngine",

    # Hotwords and handlers
    "Hotword",
    "Handler",
    "FunctionHandler",

    # Audio
    "AudioFormat",
    "AudioFileSource",
    "MicrophoneSource",

    # Errors
    "HotwordKitError",
    "EngineFailure",
    "UnboundResult",
    "LifecycleError",

    # Package metadata
    "__version__",
    "__author__",
    "__license__",
    "__description__",
]

logging.getLogger(__name__).addHandler(logging.NullHandler())

# Runtime configuration
_config = {
    "default_sensitivity": 0.5,
    "verbose": False
}


def get_config(key=None):
    """Get package configuration."""
    if key is None:
        return _config.copy()
    return _config.get(key)


def set_config(key, value):
    """Set package configuration."""
    if key in _config:
        _config[key] = value
    else:
        raise KeyError(f"Unknown configuration key: {key}")


def get_version():
    """Get package version."""
    return __version__
