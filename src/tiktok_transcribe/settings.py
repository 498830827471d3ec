from __future__ import annotations

from transcribe_core.config import (
    _EnvError,
    _parse_csv,
    _parse_float,
    _parse_int,
    _parse_str,
    _require_env_str,
)
from transcribe_core.errors import AppError, ErrorCode

from .adapters.assemblyai_client import DEFAULT_BASE_URL, AssemblyAIClient
from .adapters.yt_dlp_client import YtDlpResolver
from .service import Clients, Config


def build_config_from_env() -> Config:
    return Config(
        TRANSCRIBE_CACHE_TTL_SECONDS=_parse_float("TRANSCRIBE_CACHE_TTL_SECONDS", 86400.0),
        TRANSCRIBE_CACHE_MAX_ENTRIES=_parse_int("TRANSCRIBE_CACHE_MAX_ENTRIES", 100_000),
        TRANSCRIBE_CACHE_SWEEP_SECONDS=_parse_float("TRANSCRIBE_CACHE_SWEEP_SECONDS", 3600.0),
        TRANSCRIBE_RATE_LIMIT=_parse_int("TRANSCRIBE_RATE_LIMIT", 30),
        TRANSCRIBE_RATE_WINDOW_SECONDS=_parse_float("TRANSCRIBE_RATE_WINDOW_SECONDS", 60.0),
        TRANSCRIBE_POLL_MAX_ATTEMPTS=_parse_int("TRANSCRIBE_POLL_MAX_ATTEMPTS", 15),
        TRANSCRIBE_POLL_INITIAL_MS=_parse_int("TRANSCRIBE_POLL_INITIAL_MS", 1000),
        TRANSCRIBE_POLL_MULTIPLIER=_parse_float("TRANSCRIBE_POLL_MULTIPLIER", 1.5),
        TRANSCRIBE_POLL_MAX_MS=_parse_int("TRANSCRIBE_POLL_MAX_MS", 5000),
        TRANSCRIBE_DEADLINE_SECONDS=_parse_float("TRANSCRIBE_DEADLINE_SECONDS", 55.0),
        TRANSCRIBE_CORS_ORIGINS=_parse_csv("TRANSCRIBE_CORS_ORIGINS", ["*"]),
    )


def build_clients_from_env() -> Clients:
    try:
        api_key = _require_env_str("ASSEMBLYAI_API_KEY")
    except _EnvError as exc:
        raise AppError(ErrorCode.CONFIG_ERROR, str(exc)) from exc
    return Clients(
        resolver=YtDlpResolver(),
        stt=AssemblyAIClient(
            api_key=api_key,
            base_url=_parse_str("ASSEMBLYAI_BASE_URL", DEFAULT_BASE_URL),
            timeout_seconds=_parse_float("TRANSCRIBE_HTTP_TIMEOUT_SECONDS", 30.0),
        ),
    )


__all__ = [
    "build_clients_from_env",
    "build_config_from_env",
]
