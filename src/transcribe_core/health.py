"""Health check response shapes and the liveness check.

Liveness never checks dependencies; readiness is decided by the service.
"""

from __future__ import annotations

from typing import Literal

from typing_extensions import TypedDict


class HealthResponse(TypedDict):
    """Response for liveness checks (/health, /healthz)."""

    status: Literal["ok"]


class ReadyResponse(TypedDict):
    """Response for readiness check (/readyz).

    When ready: {"status": "ready", "reason": None}
    When degraded: {"status": "degraded", "reason": "description of issue"}
    """

    status: Literal["ready", "degraded"]
    reason: str | None


def healthz() -> HealthResponse:
    return {"status": "ok"}


def readyz(problem: str | None) -> ReadyResponse:
    if problem is None:
        return {"status": "ready", "reason": None}
    return {"status": "degraded", "reason": problem}


__all__ = [
    "HealthResponse",
    "ReadyResponse",
    "healthz",
    "readyz",
]
