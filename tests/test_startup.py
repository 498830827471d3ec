from __future__ import annotations

import importlib
import logging
import sys
from collections.abc import Generator

import pytest
from fastapi import FastAPI
from transcribe_core.config import _test_hooks as config_hooks
from transcribe_core.logging import JsonFormatter, TextFormatter

from tests.support.fakes import make_fake_env
from tiktok_transcribe import __main__ as main_mod
from tiktok_transcribe.startup import make_app_from_env


@pytest.fixture(autouse=True)
def _restore_root_logging() -> Generator[None, None, None]:
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def test_make_app_from_env_uses_json_logging_by_default() -> None:
    app = make_app_from_env()
    assert isinstance(app, FastAPI)
    root = logging.getLogger()
    assert isinstance(root.handlers[0].formatter, JsonFormatter)
    assert root.level == logging.INFO


def test_make_app_from_env_text_logging() -> None:
    config_hooks.get_env = make_fake_env(
        {"ASSEMBLYAI_API_KEY": "k", "LOG_FORMAT": "text", "LOG_LEVEL": "debug"}
    )
    make_app_from_env()
    root = logging.getLogger()
    assert isinstance(root.handlers[0].formatter, TextFormatter)
    assert root.level == logging.DEBUG


def test_asgi_exposes_app() -> None:
    sys.modules.pop("tiktok_transcribe.asgi", None)
    mod = importlib.import_module("tiktok_transcribe.asgi")
    assert isinstance(mod.app, FastAPI)


def test_main_runs_uvicorn(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[tuple[str, str, int]] = []

    def _fake_run(target: str, *, host: str, port: int, log_config: None, workers: int) -> None:
        calls.append((target, host, port))

    monkeypatch.setattr(main_mod.uvicorn, "run", _fake_run)
    config_hooks.get_env = make_fake_env({"PORT": "8080"})
    main_mod.main()
    assert calls == [("tiktok_transcribe.asgi:app", "0.0.0.0", 8080)]
