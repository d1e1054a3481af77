from __future__ import annotations

import threading
import time
from typing import Dict, List


class SlidingWindowLimiter:
    """In-process sliding window counter keyed by caller.

    Used to slow down join-code guessing; it is per worker process and
    resets on restart. Keys whose hits have all aged out are dropped.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._hits: Dict[str, List[float]] = {}
        self._last_sweep = time.monotonic()

    def allow(self, key: str, max_requests: int, window_seconds: int) -> bool:
        now = time.monotonic()
        cutoff = now - window_seconds
        with self._lock:
            if now - self._last_sweep >= window_seconds:
                self._sweep(cutoff)
                self._last_sweep = now
            recent = [ts for ts in self._hits.get(key, ()) if ts >= cutoff]
            allowed = len(recent) < max_requests
            if allowed:
                recent.append(now)
            if recent:
                self._hits[key] = recent
            else:
                self._hits.pop(key, None)
            return allowed

    def _sweep(self, cutoff: float) -> None:
        stale = [key for key, hits in self._hits.items() if not hits or hits[-1] < cutoff]
        for key in stale:
            del self._hits[key]

    def tracked_keys(self) -> int:
        with self._lock:
            return len(self._hits)

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()
            self._last_sweep = time.monotonic()


join_limiter = SlidingWindowLimiter()
