"""In-memory transcript cache with time-based expiry.

Keys are source URLs compared by exact string equality. Entries are written
once per successful transcription and never mutated; a rewrite replaces the
entry and restarts its retention window. Stale entries read as absent and are
dropped either on the next miss or by the periodic ``sweep``.
"""

from __future__ import annotations

from collections.abc import Callable

from cachetools import TTLCache
from typing_extensions import TypedDict

from . import _test_hooks

DEFAULT_RETENTION_SECONDS = 24 * 60 * 60
DEFAULT_MAX_ENTRIES = 100_000


class CacheEntry(TypedDict):
    transcript: str
    created_at: float


def _hook_clock() -> float:
    return _test_hooks.monotonic()


class TranscriptCache:
    def __init__(
        self,
        *,
        retention_seconds: float = DEFAULT_RETENTION_SECONDS,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self._clock: Callable[[], float] = clock if clock is not None else _hook_clock
        self._retention = float(retention_seconds)
        self._entries: TTLCache[str, CacheEntry] = TTLCache(
            maxsize=max_entries, ttl=self._retention, timer=self._clock
        )

    @property
    def retention_seconds(self) -> float:
        return self._retention

    def get(self, key: str) -> str | None:
        entry = self._entries.get(key)
        if entry is None:
            # Drop whatever has gone stale, including this key if it was present
            self._entries.expire()
            return None
        return entry["transcript"]

    def put(self, key: str, transcript: str) -> None:
        self._entries[key] = {"transcript": transcript, "created_at": self._clock()}

    def sweep(self) -> int:
        """Remove every expired entry; returns how many were removed."""
        return len(self._entries.expire())

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)


__all__ = [
    "DEFAULT_MAX_ENTRIES",
    "DEFAULT_RETENTION_SECONDS",
    "CacheEntry",
    "TranscriptCache",
]
