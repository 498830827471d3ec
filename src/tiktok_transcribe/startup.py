from __future__ import annotations

from fastapi import FastAPI
from transcribe_core.config import _parse_log_format, _parse_log_level
from transcribe_core.logging import setup_logging

from .app import SERVICE_NAME, AppDeps, create_app
from .settings import build_clients_from_env, build_config_from_env


def make_app_from_env() -> FastAPI:
    # Initialize centralized logging
    setup_logging(
        level=_parse_log_level("LOG_LEVEL", "INFO"),
        format_mode=_parse_log_format("LOG_FORMAT", "json"),
        service_name=SERVICE_NAME,
        instance_id=None,
        extra_fields=None,
    )

    cfg = build_config_from_env()
    clients = build_clients_from_env()
    deps = AppDeps(config=cfg, clients=clients)
    return create_app(deps)


__all__ = ["make_app_from_env"]
