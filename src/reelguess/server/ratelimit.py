"""In-memory fixed-window rate limiter.

Tracks request counts per client identifier. Expired windows are purged
lazily, at most once per ``cleanup_interval``. State is per process; several
server instances do not share limits.

Thread Safety:
    Uses threading.Lock so sync and async handlers can share one limiter.
"""

import threading
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class RateLimitResult:
    """Outcome of one :meth:`RateLimiter.check` call."""

    success: bool
    limit: int
    remaining: int
    reset_at: float
    """Wall-clock timestamp (seconds) when the window resets."""


@dataclass(slots=True)
class _Window:
    count: int
    reset_at: float


@dataclass
class RateLimiter:
    """Allows ``max_requests`` per identifier in each ``interval`` seconds."""

    interval: float = 60.0
    max_requests: int = 30
    cleanup_interval: float = 60.0
    clock: Callable[[], float] = time.time

    _windows: dict[str, _Window] = field(default_factory=dict, init=False)
    _last_cleanup: float = field(default=0.0, init=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False)

    def check(self, identifier: str) -> RateLimitResult:
        """Count one request from ``identifier`` and decide whether to allow it."""
        now = self.clock()
        with self._lock:
            self._purge_expired(now)
            window = self._windows.get(identifier)

            if window is None or now > window.reset_at:
                window = _Window(count=1, reset_at=now + self.interval)
                self._windows[identifier] = window
                return RateLimitResult(True, self.max_requests, self.max_requests - 1, window.reset_at)

            if window.count >= self.max_requests:
                return RateLimitResult(False, self.max_requests, 0, window.reset_at)

            window.count += 1
            return RateLimitResult(
                True, self.max_requests, self.max_requests - window.count, window.reset_at
            )

    def __len__(self) -> int:
        return len(self._windows)

    def _purge_expired(self, now: float) -> None:
        if now - self._last_cleanup < self.cleanup_interval:
            return
        self._last_cleanup = now
        expired = [key for key, window in self._windows.items() if now > window.reset_at]
        for key in expired:
            del self._windows[key]


def client_identifier(headers: Mapping[str, str], fallback: str | None = None) -> str:
    """Identify the caller: leftmost X-Forwarded-For, then X-Real-IP."""
    if forwarded := headers.get("x-forwarded-for"):
        return forwarded.split(",")[0].strip()
    if real_ip := headers.get("x-real-ip"):
        return real_ip
    return fallback or "unknown"
