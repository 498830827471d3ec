from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from transcribe_core.fastapi import install_exception_handlers_fastapi
from transcribe_core.logging import get_logger
from transcribe_core.request_context import install_request_id_middleware
from transcribe_core.task_runner import TaskRunner
from typing_extensions import TypedDict

from .routes import health as routes_health
from .routes import transcribe as routes_transcribe
from .service import Clients, Config, Stores, TranscribeService, build_stores
from .sweeper import CacheSweeper

SERVICE_NAME = "tiktok-transcribe-api"


class _AppDepsRequired(TypedDict):
    config: Config
    clients: Clients


class AppDeps(_AppDepsRequired, total=False):
    stores: Stores


def create_app(deps: AppDeps) -> FastAPI:
    cfg = deps["config"]
    clients = deps["clients"]
    stores = deps.get("stores") or build_stores(cfg)
    logger = get_logger(__name__)

    def _on_sweeper_error(exc: BaseException) -> None:
        logger.error("cache sweeper crashed", exc_info=exc)

    sweeper = TaskRunner(
        runnable=CacheSweeper(stores["cache"], cfg["TRANSCRIBE_CACHE_SWEEP_SECONDS"]),
        name="cache-sweeper",
        on_error=_on_sweeper_error,
    )

    service = TranscribeService(cfg, clients, stores)

    @asynccontextmanager
    async def _lifespan(_app: FastAPI) -> AsyncIterator[None]:
        sweeper.start()
        logger.info("service started")
        try:
            yield
        finally:
            await sweeper.stop()
            await service.aclose()
            await clients["stt"].aclose()
            logger.info("service stopped")

    def _readiness_problem() -> str | None:
        if not sweeper.running:
            return "cache sweeper not running"
        return None

    app = FastAPI(title=SERVICE_NAME, version="0.1.0", lifespan=_lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg["TRANSCRIBE_CORS_ORIGINS"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    install_request_id_middleware(app)
    install_exception_handlers_fastapi(app, logger_name=SERVICE_NAME)

    app.include_router(routes_health.build_router(_readiness_problem))
    app.include_router(routes_transcribe.build_router(service))
    return app


__all__ = ["SERVICE_NAME", "AppDeps", "create_app"]
