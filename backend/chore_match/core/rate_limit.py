"""Rate Limiter — fixed-window admission control keyed by client.

Invariants:
    - At most max_requests admitted per client per window
    - A client's window restarts on its first request after the window elapsed
    - Stale windows swept passively from check(), at most once per cleanup interval

Design Decisions:
    - Passive sweep over a background thread: no scheduler to start or stop
    - Monotonic clock injected as a callable: windows testable without sleeping
"""

import threading
import time
from dataclasses import dataclass
from typing import Callable


@dataclass
class _Window:
    started_at: float
    count: int


class RateLimiter:
    """In-memory fixed-window request counter."""

    def __init__(
        self,
        window_seconds: float,
        max_requests: int,
        cleanup_interval_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        if window_seconds <= 0 or max_requests <= 0:
            raise ValueError("window_seconds and max_requests must be positive")
        self.window_seconds = window_seconds
        self.max_requests = max_requests
        self._cleanup_interval = cleanup_interval_seconds
        self._clock = clock
        self._windows: dict[str, _Window] = {}
        self._lock = threading.Lock()
        self._last_cleanup = clock()

    def check(self, client_key: str) -> bool:
        """True if the request is admitted, False if the client is over its limit."""
        now = self._clock()
        with self._lock:
            if now - self._last_cleanup >= self._cleanup_interval:
                self._sweep(now)

            window = self._windows.get(client_key)
            if window is None or now - window.started_at > self.window_seconds:
                self._windows[client_key] = _Window(started_at=now, count=1)
                return True
            if window.count >= self.max_requests:
                return False
            window.count += 1
            return True

    def retry_after_seconds(self, client_key: str) -> float:
        now = self._clock()
        with self._lock:
            window = self._windows.get(client_key)
            if window is None:
                return 0.0
            return max(0.0, self.window_seconds - (now - window.started_at))

    def cleanup(self) -> int:
        with self._lock:
            return self._sweep(self._clock())

    @property
    def tracked_clients(self) -> int:
        with self._lock:
            return len(self._windows)

    def _sweep(self, now: float) -> int:
        stale = [
            key for key, window in self._windows.items()
            if now - window.started_at > self.window_seconds
        ]
        for key in stale:
            del self._windows[key]
        self._last_cleanup = now
        return len(stale)
