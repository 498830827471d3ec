from __future__ import annotations

from transcribe_core.logging import get_logger

from . import _test_hooks
from .cache import TranscriptCache

_logger = get_logger(__name__)


class CacheSweeper:
    """Periodically purges expired transcripts from the cache."""

    def __init__(self, cache: TranscriptCache, interval_seconds: float) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be > 0")
        self._cache = cache
        self._interval = float(interval_seconds)

    async def run(self, *, limit: int | None = None) -> None:
        """Sleep then sweep, forever or ``limit`` times."""
        done = 0
        while limit is None or done < limit:
            await _test_hooks.sleep(self._interval)
            removed = self._cache.sweep()
            if removed:
                _logger.info("cache sweep", extra={"removed": removed})
            done += 1


__all__ = ["CacheSweeper"]
