from __future__ import annotations

import pytest
from transcribe_core.config import _EnvError
from transcribe_core.config import _test_hooks as config_hooks
from transcribe_core.errors import AppError, ErrorCode

from tests.support.fakes import make_fake_env
from tiktok_transcribe.adapters.assemblyai_client import AssemblyAIClient
from tiktok_transcribe.adapters.yt_dlp_client import YtDlpResolver
from tiktok_transcribe.service import default_config
from tiktok_transcribe.settings import build_clients_from_env, build_config_from_env


def test_config_defaults_match_default_config() -> None:
    assert build_config_from_env() == default_config()


def test_config_reads_overrides() -> None:
    config_hooks.get_env = make_fake_env(
        {
            "TRANSCRIBE_CACHE_TTL_SECONDS": "60",
            "TRANSCRIBE_RATE_LIMIT": "5",
            "TRANSCRIBE_RATE_WINDOW_SECONDS": "10",
            "TRANSCRIBE_POLL_MAX_ATTEMPTS": "3",
            "TRANSCRIBE_POLL_MULTIPLIER": "2",
            "TRANSCRIBE_DEADLINE_SECONDS": "20",
            "TRANSCRIBE_CORS_ORIGINS": "https://a.example, https://b.example",
        }
    )
    cfg = build_config_from_env()
    assert cfg["TRANSCRIBE_CACHE_TTL_SECONDS"] == 60.0
    assert cfg["TRANSCRIBE_RATE_LIMIT"] == 5
    assert cfg["TRANSCRIBE_RATE_WINDOW_SECONDS"] == 10.0
    assert cfg["TRANSCRIBE_POLL_MAX_ATTEMPTS"] == 3
    assert cfg["TRANSCRIBE_POLL_MULTIPLIER"] == 2.0
    assert cfg["TRANSCRIBE_DEADLINE_SECONDS"] == 20.0
    assert cfg["TRANSCRIBE_CORS_ORIGINS"] == ["https://a.example", "https://b.example"]


def test_config_rejects_bad_number() -> None:
    config_hooks.get_env = make_fake_env({"TRANSCRIBE_RATE_LIMIT": "lots"})
    with pytest.raises(ValueError):
        build_config_from_env()


def test_clients_require_api_key() -> None:
    config_hooks.get_env = make_fake_env({})
    with pytest.raises(AppError) as exc_info:
        build_clients_from_env()
    assert exc_info.value.code == ErrorCode.CONFIG_ERROR
    assert exc_info.value.http_status == 500
    assert exc_info.value.message == "Missing required env var: ASSEMBLYAI_API_KEY"
    assert isinstance(exc_info.value.__cause__, _EnvError)


def test_clients_reject_blank_api_key() -> None:
    config_hooks.get_env = make_fake_env({"ASSEMBLYAI_API_KEY": "   "})
    with pytest.raises(AppError) as exc_info:
        build_clients_from_env()
    assert exc_info.value.code == ErrorCode.CONFIG_ERROR


def test_clients_built_from_env() -> None:
    clients = build_clients_from_env()
    assert isinstance(clients["resolver"], YtDlpResolver)
    assert isinstance(clients["stt"], AssemblyAIClient)
