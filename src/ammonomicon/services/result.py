"""ServiceResult and ServiceError: the universal service contract.

INVARIANT: All service-layer operations return ServiceResult.
The CLI and any library caller consume this type; expected failures
(unknown category, missing entry) travel as ``error``, never as exceptions.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ServiceError(BaseModel):
    """Structured error payload within a ServiceResult."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class ServiceResult(BaseModel):
    """Universal return type for all service operations.

    Attributes:
        ok: Whether the operation succeeded.
        op: Name of the operation (e.g. ``"refetch"``, ``"render"``).
        data: Operation-specific payload on success.
        warnings: Non-fatal issues (failed category fetches, name collisions).
        error: Structured error if ``ok`` is False.
        meta: Optional metadata (telemetry spans, counts).
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None


def error_result(op: str, code: str, message: str, **detail: Any) -> ServiceResult:
    """Build a failed ServiceResult for *op*."""
    return ServiceResult(
        ok=False,
        op=op,
        error=ServiceError(code=code, message=message, detail=detail),
    )
