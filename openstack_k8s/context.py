"""Utilities for tracing nested operations such as store calls."""

import contextvars
from contextlib import contextmanager
from dataclasses import dataclass, field
import logging
from time import perf_counter
from typing import Generator


_LOGGER = logging.getLogger(__name__)

# No public API
__all__: list[str] = []


@dataclass
class Span:
    """A named, timed operation nested under its parent spans."""

    path: list[str]
    start: float = field(default_factory=perf_counter)
    end: float | None = None

    @property
    def label(self) -> str:
        return " > ".join(self.path)

    @property
    def elapsed(self) -> float:
        """Seconds since the span started, or its duration once closed."""
        return (self.end or perf_counter()) - self.start


_spans: contextvars.ContextVar[tuple[Span, ...]] = contextvars.ContextVar(
    "spans", default=()
)


@contextmanager
def trace_context(name: str) -> Generator[Span, None, None]:
    """Open a span for the duration of the block and log its timing."""
    parents = _spans.get()
    span = Span(path=(parents[-1].path if parents else []) + [name])
    token = _spans.set(parents + (span,))
    _LOGGER.debug("[Trace] > %s", span.label)
    try:
        yield span
    finally:
        span.end = perf_counter()
        _spans.reset(token)
        _LOGGER.debug("[Trace] < %s (%0.2fs)", span.label, span.elapsed)


def current_trace() -> list[str]:
    """Return the names of the spans currently open in this context."""
    spans = _spans.get()
    return list(spans[-1].path) if spans else []
