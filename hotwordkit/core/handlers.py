"""Detection handler capability and its function adapter."""

from dataclasses import dataclass
from typing import Callable, Protocol

SILENCE_KEYWORD = "silence"


class Handler(Protocol):
    """Anything that wants to hear about detections."""

    def detected(self, keyword: str) -> None:
        ...


class FunctionHandler:
    """Adapts a plain ``func(keyword)`` callable to the Handler capability."""

    def __init__(self, func: Callable[[str], None]):
        if not callable(func):
            raise TypeError(f"Handler function must be callable, got {type(func).__name__}")
        self.func = func

    def detected(self, keyword: str) -> None:
        self.func(keyword)

    def __repr__(self):
        return f"FunctionHandler({getattr(self.func, '__name__', self.func)!r})"


@dataclass(frozen=True)
class HandlerBinding:
    """A handler together with the keyword it is invoked with."""

    handler: Handler
    keyword: str

    def call(self) -> None:
        self.handler.detected(self.keyword)
