"""
Routing and silence accumulation.

Turns decoded detection outcomes into handler calls. Silence outcomes are
accumulated by audio duration and only reach the silence handler once the
configured threshold of consecutive silence has elapsed.
"""

import logging
import time
from typing import Any, Callable, Dict, Mapping, Optional

from .audio import AudioFormat, chunk_duration
from .engine import DetectionOutcome, OutcomeKind, RESULT_SILENCE
from .errors import EngineFailure, UnboundResult
from .handlers import HandlerBinding

logger = logging.getLogger(__name__)


class DetectionRouter:
    """
    Dispatches outcomes to handler bindings.

    Args:
        bindings: Handler bindings keyed by 1-based hotword index
        silence_binding: Handler binding for silence, if any
        silence_threshold: Seconds of consecutive silence before the
            silence handler fires
        format_provider: Returns the engine's audio format, used to turn
            chunk sizes into durations
    """

    def __init__(
        self,
        bindings: Mapping[int, HandlerBinding],
        silence_binding: Optional[HandlerBinding],
        silence_threshold: float,
        format_provider: Callable[[], AudioFormat]
    ):
        self.bindings = dict(bindings)
        self.silence_binding = silence_binding
        self.silence_threshold = silence_threshold
        self.format_provider = format_provider
        self.silence_elapsed = 0.0
        self.reset_stats()

    def reset_stats(self):
        self.stats = {
            'chunks_routed': 0,
            'detections': {},
            'silence_events': 0,
            'silence_suppressed': 0,
            'session_start': time.time()
        }

    def route(self, outcome: DetectionOutcome, nbytes: int):
        """
        Route one outcome.

        Args:
            outcome: Decoded detection outcome
            nbytes: Size of the chunk that produced the outcome

        Raises:
            EngineFailure: The engine reported an error
            UnboundResult: No handler is installed for the outcome
        """
        if nbytes:
            self.stats['chunks_routed'] += 1

        if outcome.kind is OutcomeKind.ENGINE_ERROR:
            raise EngineFailure()

        if outcome.kind is OutcomeKind.NO_DETECTION:
            self.silence_elapsed = 0.0
            return

        if outcome.kind is OutcomeKind.SILENCE:
            self._route_silence(nbytes)
            return

        self.silence_elapsed = 0.0
        binding = self.bindings.get(outcome.index)
        if binding is None:
            logger.warning(f"Engine reported hotword index {outcome.index} but only "
                           f"{len(self.bindings)} hotword(s) are registered")
            raise UnboundResult(outcome.code)

        logger.info(f"Hotword detected: {binding.keyword}")
        detections = self.stats['detections']
        detections[binding.keyword] = detections.get(binding.keyword, 0) + 1
        binding.call()

    def _route_silence(self, nbytes: int):
        self.silence_elapsed += chunk_duration(nbytes, self.format_provider())
        if self.silence_elapsed < self.silence_threshold:
            self.stats['silence_suppressed'] += 1
            logger.debug(f"Silence {self.silence_elapsed:.3f}s below threshold "
                         f"{self.silence_threshold:.3f}s")
            return

        elapsed = self.silence_elapsed
        self.silence_elapsed = 0.0
        if self.silence_binding is None:
            raise UnboundResult(RESULT_SILENCE)

        logger.info(f"Silence detected after {elapsed:.2f}s")
        self.stats['silence_events'] += 1
        self.silence_binding.call()

    def get_stats(self) -> Dict[str, Any]:
        stats = dict(self.stats)
        stats['detections'] = dict(self.stats['detections'])
        stats['total_detections'] = sum(stats['detections'].values())
        stats['runtime_seconds'] = time.time() - self.stats['session_start']
        stats['silence_elapsed'] = self.silence_elapsed
        return stats
