"""Exceptions raised by the detection core."""


class HotwordKitError(Exception):
    """Base class for all hotwordkit errors."""


class EngineFailure(HotwordKitError, RuntimeError):
    """The recognition engine reported an unrecoverable error for a chunk."""

    def __init__(self, message: str = "recognition engine failure"):
        super().__init__(message)


class UnboundResult(HotwordKitError, LookupError):
    """A detection result arrived with no handler installed for it."""

    def __init__(self, code: int, message: str = "no handler installed"):
        super().__init__(f"{message} (result code {code})")
        self.code = code


class LifecycleError(HotwordKitError, RuntimeError):
    """Operation not allowed in the detector's current lifecycle state."""
