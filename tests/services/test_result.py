"""Tests for ServiceResult and ServiceError."""

import json

import pytest
from pydantic import ValidationError

from ammonomicon.services.result import ServiceError, ServiceResult, error_result


class TestServiceResult:
    def test_success_construction(self) -> None:
        result = ServiceResult(ok=True, op="resolve", data={"found": True})
        assert result.ok is True
        assert result.op == "resolve"
        assert result.data == {"found": True}
        assert result.warnings == []
        assert result.error is None
        assert result.meta is None

    def test_error_construction(self) -> None:
        error = ServiceError(code="NOT_FOUND", message="No catalog entry named 'x'")
        result = ServiceResult(ok=False, op="show", error=error)
        assert result.error is not None
        assert result.error.code == "NOT_FOUND"
        assert result.error.detail == {}

    def test_json_serialization(self) -> None:
        result = ServiceResult(
            ok=True,
            op="refetch",
            data={"entries": 3},
            warnings=["Category 'npcs' failed to load: boom"],
        )
        parsed = json.loads(result.model_dump_json())
        assert parsed["ok"] is True
        assert parsed["data"]["entries"] == 3
        assert parsed["warnings"] == ["Category 'npcs' failed to load: boom"]
        assert parsed["error"] is None

    def test_frozen(self) -> None:
        result = ServiceResult(ok=True, op="render")
        with pytest.raises(ValidationError):
            result.ok = False  # type: ignore[misc]


class TestErrorResult:
    def test_builds_failed_result_with_detail(self) -> None:
        result = error_result("list_category", "UNKNOWN_CATEGORY", "Unknown", known=["guns"])
        assert result.ok is False
        assert result.op == "list_category"
        assert result.error == ServiceError(
            code="UNKNOWN_CATEGORY", message="Unknown", detail={"known": ["guns"]}
        )
