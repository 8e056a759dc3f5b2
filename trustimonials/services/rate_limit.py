from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable, Hashable


@dataclass
class _Window:
    started_at: float
    count: int = 0


class FixedWindowRateLimiter:
    """In-process fixed-window counter keyed by an arbitrary hashable (e.g. client IP and space id).

    Only ``record`` creates windows; expired ones are dropped whenever a new one is recorded.
    """

    def __init__(self, *, limit: int, window_seconds: int, clock: Callable[[], float] = time.monotonic) -> None:
        self.limit = limit
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: dict[Hashable, _Window] = {}
        self._lock = threading.Lock()

    def _expired(self, window: _Window, now: float) -> bool:
        return now - window.started_at >= self.window_seconds

    def _prune(self, now: float) -> None:
        for key in [key for key, window in self._windows.items() if self._expired(window, now)]:
            del self._windows[key]

    def retry_after(self, key: Hashable) -> int:
        """Seconds until ``key`` may submit again, or 0 when it is under the limit."""
        now = self._clock()
        with self._lock:
            window = self._windows.get(key)
            if window is None or self._expired(window, now) or window.count < self.limit:
                return 0
            return max(1, int(round(window.started_at + self.window_seconds - now)))

    def record(self, key: Hashable) -> None:
        now = self._clock()
        with self._lock:
            self._prune(now)
            window = self._windows.get(key)
            if window is None:
                window = _Window(started_at=now)
                self._windows[key] = window
            window.count += 1

    def tracked_keys(self) -> int:
        with self._lock:
            return len(self._windows)

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()
