"""Span timing for service operations, enabled by ``-v``.

A :func:`traced` service method opens a root span; :func:`trace_span` nests
stage spans under it and the finished tree lands in
``ServiceResult.meta["telemetry"]``. Spans nest through a ContextVar, which
the catalog's fetch pool threads do not inherit: per-category fetches are
timed in the worker with :func:`timed` and attached to the ``fetch`` span
with :meth:`Span.add_timing` once the pool has joined.
"""

from __future__ import annotations

import functools
import time
from collections.abc import Callable, Generator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any, TypeVar

import structlog

from ammonomicon.services.result import ServiceResult

log = structlog.get_logger(__name__)

_enabled: ContextVar[bool] = ContextVar("ammonomicon_telemetry", default=False)
_active: ContextVar[Span | None] = ContextVar("ammonomicon_span", default=None)

_T = TypeVar("_T")


@dataclass
class Span:
    name: str
    started: float = field(default_factory=time.perf_counter)
    elapsed_ms: float | None = None
    annotations: dict[str, Any] = field(default_factory=dict)
    children: list[Span] = field(default_factory=list)

    def finish(self) -> None:
        if self.elapsed_ms is None:
            self.elapsed_ms = (time.perf_counter() - self.started) * 1000

    def annotate(self, **values: Any) -> None:
        self.annotations.update(values)

    def add_timing(self, name: str, elapsed_ms: float, **annotations: Any) -> Span:
        """Attach an already-measured child span."""
        child = Span(name=name, elapsed_ms=elapsed_ms, annotations=dict(annotations))
        self.children.append(child)
        return child

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name, "duration_ms": round(self.elapsed_ms or 0.0, 2)}
        if self.annotations:
            data["annotations"] = dict(self.annotations)
        if self.children:
            data["children"] = [child.to_dict() for child in self.children]
        return data


def timed(func: Callable[..., _T], *args: Any) -> tuple[_T, float]:
    """Call ``func(*args)`` and return its result with the elapsed milliseconds."""
    started = time.perf_counter()
    result = func(*args)
    return result, (time.perf_counter() - started) * 1000


@contextmanager
def trace_span(name: str, **annotations: Any) -> Generator[Span | None]:
    """Nest a stage span under the active one; yields None when not tracing."""
    parent = _active.get() if _enabled.get() else None
    if parent is None:
        yield None
        return

    span = Span(name=name, annotations=dict(annotations))
    parent.children.append(span)
    token = _active.set(span)
    try:
        yield span
    finally:
        span.finish()
        _active.reset(token)


def _summarize(span: Span, result: ServiceResult) -> ServiceResult:
    span.annotate(op=result.op, ok=result.ok)
    if result.error is not None:
        span.annotate(error=result.error.code)
    if result.warnings:
        span.annotate(warnings=len(result.warnings))
    meta = {**(result.meta or {}), "telemetry": span.to_dict()}
    return result.model_copy(update={"meta": meta})


def traced(func: Callable[..., _T]) -> Callable[..., _T]:
    """Time a service method as a root span and attach the tree to its result.

    Nested traced calls (an entry mutation's rebuild, say) get their own tree
    on their own result; the caller's span only records that they ran.
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> _T:
        if not _enabled.get():
            return func(*args, **kwargs)

        outer = _active.get()
        span = Span(name=func.__qualname__)
        token = _active.set(span)
        try:
            result = func(*args, **kwargs)
        finally:
            span.finish()
            _active.reset(token)

        if outer is not None:
            outer.add_timing(span.name, span.elapsed_ms or 0.0)
        if isinstance(result, ServiceResult):
            result = _summarize(span, result)  # type: ignore[assignment]
            log.debug(
                "span.complete",
                span_name=span.name,
                op=result.op,  # type: ignore[attr-defined]
                ok=result.ok,  # type: ignore[attr-defined]
                duration_ms=round(span.elapsed_ms or 0.0, 2),
            )
        return result

    return wrapper


def enable_telemetry() -> None:
    _enabled.set(True)


def disable_telemetry() -> None:
    _enabled.set(False)
