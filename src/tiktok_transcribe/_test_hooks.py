"""Test hooks for tiktok-transcribe - allows injecting test dependencies."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from typing import Protocol

from transcribe_core.http_client import HttpxAsyncClient, build_async_client
from transcribe_core.json_utils import JSONValue

from .types import YtDlpProto


class YtDlpFactoryProto(Protocol):
    """Protocol for yt-dlp factory function."""

    def __call__(self, opts: dict[str, JSONValue]) -> YtDlpProto: ...


class SleepProto(Protocol):
    def __call__(self, delay: float) -> Awaitable[None]: ...


# =========================================================================
# Default implementations
# =========================================================================


def _default_yt_dlp_factory(opts: dict[str, JSONValue]) -> YtDlpProto:
    """Production implementation - creates real yt-dlp client."""
    mod = __import__("yt_dlp")
    client: YtDlpProto = mod.YoutubeDL(opts)
    return client


def _default_monotonic() -> float:
    """Production implementation - calls time.monotonic."""
    return time.monotonic()


def _default_sleep(delay: float) -> Awaitable[None]:
    """Production implementation - calls asyncio.sleep."""
    return asyncio.sleep(delay)


def _default_http_client_factory(timeout_seconds: float) -> HttpxAsyncClient:
    """Production implementation - creates a real httpx.AsyncClient."""
    return build_async_client(timeout_seconds)


# =========================================================================
# Module-level hooks
# =========================================================================

# Hook for yt-dlp factory
yt_dlp_factory: YtDlpFactoryProto = _default_yt_dlp_factory

# Hook for the monotonic clock used by the cache and the rate limiter
monotonic: Callable[[], float] = _default_monotonic

# Hook for backoff sleeps in the poll loop and the cache sweeper
sleep: SleepProto = _default_sleep

# Hook for the provider HTTP client factory
http_client_factory: Callable[[float], HttpxAsyncClient] = _default_http_client_factory


__all__ = [
    "SleepProto",
    "YtDlpFactoryProto",
    "_default_http_client_factory",
    "_default_monotonic",
    "_default_sleep",
    "_default_yt_dlp_factory",
    "http_client_factory",
    "monotonic",
    "sleep",
    "yt_dlp_factory",
]
