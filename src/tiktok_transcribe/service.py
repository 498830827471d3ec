from __future__ import annotations

import asyncio

from transcribe_core.errors import AppError, ErrorCode, TranscribeErrorCode
from transcribe_core.logging import get_logger
from typing_extensions import TypedDict

from .cache import TranscriptCache
from .poller import PollingOrchestrator
from .rate_limit import RateLimiter
from .resolver import AssetResolver, resolve_asset_url
from .stt_client import TranscriptionJobClient
from .types import PollPolicy, TranscribeResult

MISSING_URL_MESSAGE = "Missing TikTok URL in request body"
RATE_LIMITED_MESSAGE = "Too many requests. Please try again later."
DEADLINE_MESSAGE = "Transcription took too long"


class Config(TypedDict):
    TRANSCRIBE_CACHE_TTL_SECONDS: float
    TRANSCRIBE_CACHE_MAX_ENTRIES: int
    TRANSCRIBE_CACHE_SWEEP_SECONDS: float
    TRANSCRIBE_RATE_LIMIT: int
    TRANSCRIBE_RATE_WINDOW_SECONDS: float
    TRANSCRIBE_POLL_MAX_ATTEMPTS: int
    TRANSCRIBE_POLL_INITIAL_MS: int
    TRANSCRIBE_POLL_MULTIPLIER: float
    TRANSCRIBE_POLL_MAX_MS: int
    TRANSCRIBE_DEADLINE_SECONDS: float
    TRANSCRIBE_CORS_ORIGINS: list[str]


class Clients(TypedDict):
    resolver: AssetResolver
    stt: TranscriptionJobClient


class Stores(TypedDict):
    cache: TranscriptCache
    limiter: RateLimiter


def default_config() -> Config:
    return Config(
        TRANSCRIBE_CACHE_TTL_SECONDS=86400.0,
        TRANSCRIBE_CACHE_MAX_ENTRIES=100_000,
        TRANSCRIBE_CACHE_SWEEP_SECONDS=3600.0,
        TRANSCRIBE_RATE_LIMIT=30,
        TRANSCRIBE_RATE_WINDOW_SECONDS=60.0,
        TRANSCRIBE_POLL_MAX_ATTEMPTS=15,
        TRANSCRIBE_POLL_INITIAL_MS=1000,
        TRANSCRIBE_POLL_MULTIPLIER=1.5,
        TRANSCRIBE_POLL_MAX_MS=5000,
        TRANSCRIBE_DEADLINE_SECONDS=55.0,
        TRANSCRIBE_CORS_ORIGINS=["*"],
    )


def build_stores(cfg: Config) -> Stores:
    return Stores(
        cache=TranscriptCache(
            retention_seconds=cfg["TRANSCRIBE_CACHE_TTL_SECONDS"],
            max_entries=cfg["TRANSCRIBE_CACHE_MAX_ENTRIES"],
        ),
        limiter=RateLimiter(
            cfg["TRANSCRIBE_RATE_LIMIT"],
            cfg["TRANSCRIBE_RATE_WINDOW_SECONDS"],
        ),
    )


def poll_policy_from_config(cfg: Config) -> PollPolicy:
    return PollPolicy(
        max_attempts=cfg["TRANSCRIBE_POLL_MAX_ATTEMPTS"],
        initial_interval_ms=cfg["TRANSCRIBE_POLL_INITIAL_MS"],
        multiplier=cfg["TRANSCRIBE_POLL_MULTIPLIER"],
        max_interval_ms=cfg["TRANSCRIBE_POLL_MAX_MS"],
    )


class RateLimitedError(AppError[ErrorCode]):
    def __init__(self) -> None:
        super().__init__(ErrorCode.RATE_LIMIT_EXCEEDED, RATE_LIMITED_MESSAGE, 429)


class ClientInputError(AppError[TranscribeErrorCode]):
    def __init__(self) -> None:
        super().__init__(TranscribeErrorCode.TIKTOK_URL_REQUIRED, MISSING_URL_MESSAGE, 400)


class DeadlineExceededError(AppError[TranscribeErrorCode]):
    def __init__(self) -> None:
        super().__init__(TranscribeErrorCode.DEADLINE_EXCEEDED, DEADLINE_MESSAGE, 504)


def _validate_url(url: object) -> str | None:
    if not isinstance(url, str) or url.strip() == "":
        return None
    return url


class TranscribeService:
    """Per-request coordinator: admit, validate, cache, resolve, transcribe.

    Concurrent misses for the same URL share one in-flight task, so the
    provider is asked at most once per URL at a time and every waiter sees
    the same transcript or the same error. The deadline lives on that shared
    task.
    """

    def __init__(self, cfg: Config, clients: Clients, stores: Stores) -> None:
        self._cfg = cfg
        self._clients = clients
        self._cache = stores["cache"]
        self._limiter = stores["limiter"]
        self._poller = PollingOrchestrator(clients["stt"], poll_policy_from_config(cfg))
        self._deadline = float(cfg["TRANSCRIBE_DEADLINE_SECONDS"])
        self._inflight: dict[str, asyncio.Task[str]] = {}
        self._logger = get_logger(__name__)

    @property
    def inflight(self) -> int:
        return len(self._inflight)

    async def transcribe(self, client_id: str, url: object) -> TranscribeResult:
        if not self._limiter.admit(client_id):
            retry_ms = int(self._limiter.retry_after(client_id) * 1000)
            self._logger.info(
                "rate limit exceeded",
                extra={"client_id": client_id, "wait_ms": retry_ms},
            )
            raise RateLimitedError()

        key = _validate_url(url)
        if key is None:
            raise ClientInputError()

        cached = self._cache.get(key)
        if cached is not None:
            self._logger.info("cache hit", extra={"url": key, "cached": True})
            return {"transcription": cached, "cached": True}

        task = self._inflight.get(key)
        if task is None:
            task = asyncio.create_task(self._produce(key), name=f"transcribe:{key}")
            self._inflight[key] = task
            task.add_done_callback(lambda t: self._release(key, t))
        else:
            self._logger.debug("joining in-flight transcription", extra={"url": key})

        # A cancelled waiter must not cancel the shared work
        text = await asyncio.shield(task)
        return {"transcription": text, "cached": False}

    async def _produce(self, key: str) -> str:
        scope = asyncio.timeout(self._deadline)
        try:
            async with scope:
                asset_url = await resolve_asset_url(self._clients["resolver"], key)
                outcome = await self._poller.run(asset_url)
        except TimeoutError:
            if scope.expired():
                self._logger.warning("deadline exceeded", extra={"url": key})
                raise DeadlineExceededError() from None
            raise
        text = outcome["text"]
        self._cache.put(key, text)
        self._logger.info(
            "transcription complete",
            extra={"url": key, "job_id": outcome["job_id"], "attempt": outcome["attempts"]},
        )
        return text

    async def aclose(self) -> None:
        """Cancel every in-flight transcription and wait for it to unwind."""
        tasks = list(self._inflight.values())
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
            self._logger.info(
                "cancelled in-flight transcriptions", extra={"removed": len(tasks)}
            )

    def _release(self, key: str, task: asyncio.Task[str]) -> None:
        if self._inflight.get(key) is task:
            del self._inflight[key]
        if not task.cancelled():
            # Waiters re-raise it; retrieving here keeps asyncio from reporting it unhandled
            task.exception()


__all__ = [
    "DEADLINE_MESSAGE",
    "MISSING_URL_MESSAGE",
    "RATE_LIMITED_MESSAGE",
    "ClientInputError",
    "Clients",
    "Config",
    "DeadlineExceededError",
    "RateLimitedError",
    "Stores",
    "TranscribeService",
    "build_stores",
    "default_config",
    "poll_policy_from_config",
]
