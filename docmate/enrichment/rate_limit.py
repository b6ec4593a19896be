from __future__ import annotations

import time
from collections import deque
from typing import Callable, Deque, Dict, Optional


def monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class SlidingWindowRateLimiter:
    """
    Per-key sliding-window admission gate. It never waits: a call is either
    admitted (and recorded) or denied. Each key keeps the timestamps of its
    admitted requests that are still inside the trailing window.
    """

    def __init__(self, clock: Callable[[], float] = monotonic_ms):
        self.clock = clock
        self._windows: Dict[str, Deque[float]] = {}

    def try_admit(self, key: str, max_requests: int, window_ms: float) -> bool:
        now = self.clock()
        window = self._windows.setdefault(key, deque())
        while window and now - window[0] >= window_ms:
            window.popleft()
        if len(window) >= max_requests:
            return False
        window.append(now)
        return True

    def in_window(self, key: str) -> int:
        return len(self._windows.get(key, ()))

    def reset(self, key: Optional[str] = None) -> None:
        if key is None:
            self._windows.clear()
        else:
            self._windows.pop(key, None)
