from __future__ import annotations

from collections.abc import Callable

from fastapi import APIRouter, status
from starlette.responses import Response
from transcribe_core.health import HealthResponse, ReadyResponse, healthz, readyz


def build_router(problem: Callable[[], str | None]) -> APIRouter:
    """Build health router with /health, /healthz and /readyz endpoints.

    ``problem`` returns a description of why the service is not ready, or
    None when it is.
    """
    router = APIRouter()

    def _healthz_handler() -> HealthResponse:
        return healthz()

    def _readyz_handler(resp: Response) -> ReadyResponse:
        result = readyz(problem())
        if result["status"] == "degraded":
            resp.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return result

    router.add_api_route("/health", _healthz_handler, methods=["GET"])
    router.add_api_route("/healthz", _healthz_handler, methods=["GET"])
    router.add_api_route("/readyz", _readyz_handler, methods=["GET"])
    return router


__all__ = ["build_router"]
