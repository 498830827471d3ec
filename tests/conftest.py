"""Pytest configuration and fixtures for tiktok-transcribe tests."""

from __future__ import annotations

from collections.abc import Generator

import pytest
from transcribe_core.config import _test_hooks as config_hooks
from transcribe_core.request_context import request_id_var

from tests.support.fakes import FakeClock, make_fake_env
from tiktok_transcribe import _test_hooks


@pytest.fixture(autouse=True)
def _restore_hooks() -> Generator[None, None, None]:
    """Restore all hooks after each test."""
    original_get_env = config_hooks.get_env
    original_yt_dlp_factory = _test_hooks.yt_dlp_factory
    original_monotonic = _test_hooks.monotonic
    original_sleep = _test_hooks.sleep
    original_http_client_factory = _test_hooks.http_client_factory

    yield

    config_hooks.get_env = original_get_env
    _test_hooks.yt_dlp_factory = original_yt_dlp_factory
    _test_hooks.monotonic = original_monotonic
    _test_hooks.sleep = original_sleep
    _test_hooks.http_client_factory = original_http_client_factory


@pytest.fixture(autouse=True)
def _default_test_env() -> None:
    """Provide a default test environment with a fake provider key."""
    config_hooks.get_env = make_fake_env({"ASSEMBLYAI_API_KEY": "test-key"})


@pytest.fixture(autouse=True)
def _clear_request_id() -> Generator[None, None, None]:
    token = request_id_var.set("")
    yield
    request_id_var.reset(token)


@pytest.fixture
def clock() -> FakeClock:
    fake = FakeClock()
    _test_hooks.monotonic = fake
    return fake
