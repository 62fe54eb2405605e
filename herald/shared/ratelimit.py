"""
Fixed-window request limiter keyed by caller identity.

Counters live in a TTLCache so idle identities fall out on their own; the
window string uses the short form accepted by the HTTP layer ("15m", "1h").
"""
import re
from dataclasses import dataclass
from threading import Lock
from time import time
from typing import Callable

from herald.shared.cache import TTLCache


_WINDOW_RE = re.compile(r"^(\d+)([smhd])$")
_UNIT_SECONDS = {"s": 1, "m": 60, "h": 3600, "d": 86400}


@dataclass
class RateLimitResult:
    success: bool
    remaining: int
    reset_at: float


def parse_window(window: str) -> int:
    m = _WINDOW_RE.match(window or "")
    if not m:
        raise ValueError(f"Invalid window format: {window}")
    return int(m.group(1)) * _UNIT_SECONDS[m.group(2)]


class RateLimiter:
    def __init__(self, clock: Callable[[], float] = time):
        self.clock = clock
        self._counters = TTLCache(ttl_seconds=86400, clock=clock)
        self._lock = Lock()

    @staticmethod
    def _key(identifier: str, requests: int, window: str) -> str:
        return f"{identifier}:{requests}:{window}"

    def limit(self, identifier: str, requests: int = 100, window: str = "15m") -> RateLimitResult:
        window_s = parse_window(window)
        now = self.clock()
        key = self._key(identifier, requests, window)
        with self._lock:
            current = self._counters.get(key)
            if current is None or now > current["reset_at"]:
                reset_at = now + window_s
                self._counters.set(key, {"count": 1, "reset_at": reset_at}, window_s)
                return RateLimitResult(True, requests - 1, reset_at)
            if current["count"] >= requests:
                return RateLimitResult(False, 0, current["reset_at"])
            current["count"] += 1
            self._counters.set(key, current, current["reset_at"] - now)
            return RateLimitResult(True, requests - current["count"], current["reset_at"])

    def status(self, identifier: str, requests: int = 100, window: str = "15m") -> RateLimitResult:
        now = self.clock()
        current = self._counters.get(self._key(identifier, requests, window))
        if current is None or now > current["reset_at"]:
            return RateLimitResult(True, requests, now + parse_window(window))
        remaining = max(0, requests - current["count"])
        return RateLimitResult(remaining > 0, remaining, current["reset_at"])

    def clear(self, identifier: str) -> None:
        with self._lock:
            self._counters.delete_prefix(identifier + ":")
