from __future__ import annotations

from collections.abc import Callable

from . import _test_hooks

DEFAULT_CEILING = 30
DEFAULT_WINDOW_SECONDS = 60.0


def _hook_clock() -> float:
    return _test_hooks.monotonic()


class RateLimiter:
    """Per-client rolling-log rate limiter.

    - Keeps one timestamp per admitted request inside a trailing window
    - Admits while fewer than ``ceiling`` timestamps remain in the window
    - Prune, check and append happen in one synchronous step per client
    """

    def __init__(
        self,
        ceiling: int = DEFAULT_CEILING,
        window_seconds: float = DEFAULT_WINDOW_SECONDS,
        *,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self.ceiling = ceiling
        self.window_seconds = float(window_seconds)
        self._clock: Callable[[], float] = clock if clock is not None else _hook_clock
        self._events: dict[str, list[float]] = {}

    def admit(self, client_id: str) -> bool:
        now = self._clock()
        arr = self._prune(client_id, now)
        if len(arr) >= self.ceiling:
            return False
        arr.append(now)
        self._events[client_id] = arr
        return True

    def retry_after(self, client_id: str) -> float:
        """Seconds until ``client_id`` would be admitted again (0.0 if it would be now)."""
        now = self._clock()
        arr = self._prune(client_id, now)
        if len(arr) < self.ceiling:
            return 0.0
        return max(0.0, self.window_seconds - (now - arr[0]))

    def in_window(self, client_id: str) -> int:
        return len(self._prune(client_id, self._clock()))

    def _prune(self, client_id: str, now: float) -> list[float]:
        arr = self._events.get(client_id)
        if arr is None:
            return []
        cutoff = now - self.window_seconds
        kept = [t for t in arr if t > cutoff]
        if kept:
            self._events[client_id] = kept
        else:
            del self._events[client_id]
        return kept


__all__ = ["DEFAULT_CEILING", "DEFAULT_WINDOW_SECONDS", "RateLimiter"]
