"""Tests for service span timing."""

from __future__ import annotations

from collections.abc import Generator

import pytest

from ammonomicon.services.catalog import CatalogService
from ammonomicon.services.result import ServiceResult, error_result
from ammonomicon.services.telemetry import (
    Span,
    _active,
    disable_telemetry,
    enable_telemetry,
    timed,
    trace_span,
    traced,
)
from tests.conftest import MemoryStore


@pytest.fixture(autouse=True)
def _reset_telemetry_state() -> Generator[None]:
    yield
    disable_telemetry()
    _active.set(None)


class TestSpan:
    def test_unfinished_reports_zero(self) -> None:
        assert Span(name="fetch").to_dict() == {"name": "fetch", "duration_ms": 0.0}

    def test_finish_is_idempotent(self) -> None:
        span = Span(name="fetch")
        span.finish()
        first = span.elapsed_ms
        span.finish()
        assert first is not None
        assert span.elapsed_ms == first

    def test_add_timing_and_annotations(self) -> None:
        span = Span(name="fetch")
        span.add_timing("guns", 1.234, rows=3)
        span.annotate(failed=0)
        span.finish()
        data = span.to_dict()
        assert data["annotations"] == {"failed": 0}
        assert data["children"] == [
            {"name": "guns", "duration_ms": 1.23, "annotations": {"rows": 3}}
        ]


class TestTimed:
    def test_returns_result_and_elapsed(self) -> None:
        result, elapsed_ms = timed(sorted, [3, 1, 2])
        assert result == [1, 2, 3]
        assert elapsed_ms >= 0

    def test_exception_propagates(self) -> None:
        with pytest.raises(ZeroDivisionError):
            timed(divmod, 1, 0)


class TestTraceSpan:
    def test_disabled_yields_none(self) -> None:
        with trace_span("render") as span:
            assert span is None

    def test_no_root_yields_none(self) -> None:
        enable_telemetry()
        with trace_span("render") as span:
            assert span is None

    def test_nests_and_restores(self) -> None:
        enable_telemetry()
        root = Span(name="root")
        token = _active.set(root)
        try:
            with pytest.raises(RuntimeError):
                with trace_span("fetch", categories=2):
                    with trace_span("guns") as inner:
                        assert _active.get() is inner
                    raise RuntimeError("boom")
            assert _active.get() is root
        finally:
            _active.reset(token)
        (fetch,) = root.children
        assert fetch.annotations == {"categories": 2}
        assert fetch.children[0].name == "guns"
        assert fetch.elapsed_ms is not None


class TestTraced:
    def test_noop_when_disabled(self) -> None:
        @traced
        def op() -> ServiceResult:
            return ServiceResult(ok=True, op="render")

        assert op().meta is None

    def test_summarizes_result(self) -> None:
        @traced
        def op() -> ServiceResult:
            return ServiceResult(ok=True, op="render", warnings=["w"], meta={"keep": 1})

        enable_telemetry()
        result = op()
        assert result.meta is not None
        assert result.meta["keep"] == 1
        tree = result.meta["telemetry"]
        assert tree["name"].endswith("op")
        assert tree["annotations"] == {"op": "render", "ok": True, "warnings": 1}

    def test_error_code_annotated(self) -> None:
        @traced
        def op() -> ServiceResult:
            return error_result("show", "NOT_FOUND", "missing")

        enable_telemetry()
        annotations = op().meta["telemetry"]["annotations"]
        assert annotations == {"op": "show", "ok": False, "error": "NOT_FOUND"}

    def test_nested_call_recorded_on_caller(self) -> None:
        @traced
        def inner() -> ServiceResult:
            return ServiceResult(ok=True, op="refetch")

        @traced
        def outer() -> ServiceResult:
            assert inner().meta is not None
            return ServiceResult(ok=True, op="create")

        enable_telemetry()
        tree = outer().meta["telemetry"]
        assert [c["name"] for c in tree["children"]] == [inner.__qualname__]

    def test_exception_propagates_and_clears_span(self) -> None:
        @traced
        def op() -> ServiceResult:
            raise ValueError("bad")

        enable_telemetry()
        with pytest.raises(ValueError, match="bad"):
            op()
        assert _active.get() is None


class TestRefetchTelemetry:
    def test_per_category_fetch_timings(self) -> None:
        enable_telemetry()
        store = MemoryStore({"guns": [{"id": "g1", "name": "Shotgun"}]})
        result = CatalogService(store).refetch()
        tree = result.meta["telemetry"]
        assert tree["name"] == "CatalogService.refetch"
        fetch, build = tree["children"]
        assert fetch["name"] == "fetch"
        assert fetch["annotations"]["failed"] == 0
        guns = next(c for c in fetch["children"] if c["name"] == "guns")
        assert guns["annotations"] == {"rows": 1}
        assert build["name"] == "build_index"
        assert build["annotations"] == {"entries": 1, "collisions": 0}

    def test_failed_category_has_no_timing(self) -> None:
        enable_telemetry()
        store = MemoryStore({"npcs": RuntimeError("locked")})
        fetch = CatalogService(store).refetch().meta["telemetry"]["children"][0]
        assert fetch["annotations"]["failed"] == 1
        assert "npcs" not in [c["name"] for c in fetch["children"]]
