"""
Hotword detector.

Detection has two phases. A ``DetectorBuilder`` collects hotwords and
handlers and produces an immutable ``DetectorConfig``. ``start()`` turns
the config into a ``Detector`` session which streams audio through the
recognition engine and dispatches handlers. Sessions cannot register new
hotwords, so the engine configuration is fixed once detection begins.

Quick Start:
    >>> builder = DetectorBuilder("resources/common.res")
    >>> builder.handle_func(Hotword.from_model("resources/snowboy.umdl"), print)
    >>> builder.handle_silence_func(2.0, print)
    >>> with builder.start() as detector:
    ...     with open("speech.raw", "rb") as audio:
    ...         detector.read_and_detect(audio)
"""

import logging
import time
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from .audio import AudioFormat, AudioSource
from .engine import DetectionOutcome, EngineAdapter, EngineFactory, EngineSettings
from .handlers import SILENCE_KEYWORD, FunctionHandler, Handler, HandlerBinding
from .hotword import Hotword, HotwordRegistry
from .router import DetectionRouter

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 2048
DEFAULT_POLL_INTERVAL = 0.3

Duration = Union[float, int, timedelta]


def _to_seconds(value: Duration) -> float:
    seconds = value.total_seconds() if isinstance(value, timedelta) else float(value)
    if seconds < 0:
        raise ValueError(f"Silence threshold must not be negative, got {seconds}")
    return seconds


def _check_handler(handler: Handler):
    if not callable(getattr(handler, 'detected', None)):
        raise TypeError(
            f"Handler must provide a detected(keyword) method, got {type(handler).__name__}; "
            "use handle_func() for plain functions"
        )


@dataclass(frozen=True)
class DetectorConfig:
    """
    Immutable detector configuration produced by ``DetectorBuilder.build``.

    ``hotwords`` and ``handlers`` are parallel: ``handlers[i]`` serves
    ``hotwords[i]``, which the engine reports as result code ``i + 1``.
    """

    resource: str
    hotwords: Tuple[Hotword, ...] = ()
    handlers: Tuple[Handler, ...] = ()
    silence_handler: Optional[Handler] = None
    silence_threshold: float = 0.0
    audio_gain: float = 1.0
    apply_frontend: bool = False
    chunk_size: int = DEFAULT_CHUNK_SIZE
    poll_interval: float = DEFAULT_POLL_INTERVAL

    def engine_settings(self) -> EngineSettings:
        """Encode the hotwords into engine settings."""
        models, sensitivities = HotwordRegistry(list(self.hotwords)).encode()
        return EngineSettings(
            resource=self.resource,
            models=models,
            sensitivities=sensitivities,
            audio_gain=self.audio_gain,
            apply_frontend=self.apply_frontend
        )

    def bindings(self) -> Dict[int, HandlerBinding]:
        return {
            code: HandlerBinding(handler, hotword.name)
            for code, (hotword, handler) in enumerate(zip(self.hotwords, self.handlers), start=1)
        }

    def silence_binding(self) -> Optional[HandlerBinding]:
        if self.silence_handler is None:
            return None
        return HandlerBinding(self.silence_handler, SILENCE_KEYWORD)

    def start(self, engine_factory: Optional[EngineFactory] = None) -> 'Detector':
        return Detector(self, engine_factory=engine_factory)


class DetectorBuilder:
    """
    Collects hotwords and handlers for a detector.

    Args:
        resource: Path to the engine's common resource bundle
        audio_gain: Input gain multiplier (default 1.0)
        apply_frontend: Enable the engine's audio frontend processing
        chunk_size: Bytes read from the audio source per detection call
        poll_interval: Seconds to wait when a source has no data yet
    """

    def __init__(
        self,
        resource: str,
        audio_gain: float = 1.0,
        apply_frontend: bool = False,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        poll_interval: float = DEFAULT_POLL_INTERVAL
    ):
        if chunk_size <= 0:
            raise ValueError(f"Chunk size must be positive, got {chunk_size}")
        self.resource = resource
        self.audio_gain = audio_gain
        self.apply_frontend = apply_frontend
        self.chunk_size = chunk_size
        self.poll_interval = poll_interval

        self.registry = HotwordRegistry()
        self.handlers: List[Handler] = []
        self.silence_handler: Optional[Handler] = None
        self.silence_threshold = 0.0

    def handle(self, hotword: Hotword, handler: Handler) -> int:
        """
        Install a handler for a hotword.

        Returns:
            Result code the engine will report for this hotword
        """
        _check_handler(handler)
        self.handlers.append(handler)
        return self.registry.register(hotword)

    def handle_func(self, hotword: Hotword, func: Callable[[str], None]) -> int:
        """Install a plain function as the handler for a hotword."""
        return self.handle(hotword, FunctionHandler(func))

    def handle_silence(self, threshold: Duration, handler: Handler):
        """
        Install the silence handler, replacing any previous one.

        Args:
            threshold: Consecutive silence (seconds or timedelta) required
                before the handler fires; 0 fires on every silence result
            handler: Handler invoked with ``"silence"``
        """
        _check_handler(handler)
        self.silence_threshold = _to_seconds(threshold)
        self.silence_handler = handler

    def handle_silence_func(self, threshold: Duration, func: Callable[[str], None]):
        self.handle_silence(threshold, FunctionHandler(func))

    def build(self) -> DetectorConfig:
        return DetectorConfig(
            resource=self.resource,
            hotwords=tuple(self.registry),
            handlers=tuple(self.handlers),
            silence_handler=self.silence_handler,
            silence_threshold=self.silence_threshold,
            audio_gain=self.audio_gain,
            apply_frontend=self.apply_frontend,
            chunk_size=self.chunk_size,
            poll_interval=self.poll_interval
        )

    def start(self, engine_factory: Optional[EngineFactory] = None) -> 'Detector':
        return self.build().start(engine_factory)


class Detector:
    """
    Active detection session for one audio stream.

    Owns one recognition engine, created lazily on the first detection.
    Call ``close`` (or use the detector as a context manager) once the
    session is finished to release the engine.
    """

    def __init__(self, config: DetectorConfig, engine_factory: Optional[EngineFactory] = None):
        self.config = config
        self.engine = EngineAdapter(config.engine_settings(), engine_factory)
        self.router = DetectionRouter(
            bindings=config.bindings(),
            silence_binding=config.silence_binding(),
            silence_threshold=config.silence_threshold,
            format_provider=self.engine.audio_format
        )

        logger.info(f"Detector started: {len(config.hotwords)} hotword(s), "
                    f"silence threshold={config.silence_threshold}s, "
                    f"chunk size={config.chunk_size}")

    @property
    def initialized(self) -> bool:
        return self.engine.initialized

    @property
    def closed(self) -> bool:
        return self.engine.released

    @property
    def silence_elapsed(self) -> float:
        return self.router.silence_elapsed

    def audio_format(self) -> AudioFormat:
        return self.engine.audio_format()

    def detect(self, chunk: bytes) -> DetectionOutcome:
        """
        Run detection on one chunk and dispatch the result.

        Returns:
            The decoded outcome

        Raises:
            EngineFailure: The engine reported an error
            UnboundResult: No handler is installed for the result
            LifecycleError: The detector is closed
        """
        outcome = self.engine.run_detection(chunk)
        self.router.route(outcome, len(chunk))
        return outcome

    def read_and_detect(self, source: AudioSource) -> int:
        """
        Stream a source through detection until it ends.

        Reads ``chunk_size`` bytes at a time. A read returning ``None``
        means no data is available yet and is retried after
        ``poll_interval``; ``b""`` means end of stream. Errors raised by
        the source, the engine or a handler abort the loop.

        Returns:
            Number of chunks processed
        """
        self.engine.initialize()
        chunk_size = self.config.chunk_size
        chunks = 0

        while True:
            data = source.read(chunk_size)
            if data is None:
                time.sleep(self.config.poll_interval)
                continue
            if not data:
                # End of stream: one final pass over what is left
                self.detect(data)
                logger.debug(f"Audio source exhausted after {chunks} chunk(s)")
                return chunks

            self.detect(data)
            chunks += 1

    def close(self):
        """
        Release the recognition engine.

        Raises:
            LifecycleError: If no detection ever ran or the detector is
                already closed
        """
        self.engine.release()
        logger.info("Detector closed")

    def get_stats(self) -> Dict[str, Any]:
        stats = self.router.get_stats()
        stats.update({
            'hotwords': [h.name for h in self.config.hotwords],
            'silence_threshold': self.config.silence_threshold,
            'initialized': self.initialized,
            'closed': self.closed
        })
        return stats

    def reset_stats(self):
        self.router.reset_stats()
        logger.info("Detection statistics reset")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        if self.initialized and not self.closed:
            self.close()
