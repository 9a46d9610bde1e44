"""
Sampling throttle for continuous pointer and touch movement.
"""

import time
from typing import Any, Callable, Optional, Tuple


class Throttle:
    """
    Lets a call through at most once per interval.

    Calls arriving too early are remembered, and flush() replays the latest
    one so the final pointer position is always applied.
    """

    def __init__(self, interval_ms: float = 50, clock: Callable[[], float] = time.monotonic):
        self.interval = interval_ms / 1000.0
        self.clock = clock
        self._last: Optional[float] = None
        self._pending: Optional[Tuple[Callable, tuple, dict]] = None

    def reset(self):
        self._last = None
        self._pending = None

    def ready(self) -> bool:
        now = self.clock()
        return self._last is None or now - self._last >= self.interval

    def call(self, fn: Callable, *args, **kwargs) -> Tuple[bool, Any]:
        """Run fn now if allowed; returns (ran, result)"""
        if not self.ready():
            self._pending = (fn, args, kwargs)
            return False, None
        self._last = self.clock()
        self._pending = None
        return True, fn(*args, **kwargs)

    def flush(self) -> Tuple[bool, Any]:
        """Run the last skipped call, if any"""
        if self._pending is None:
            return False, None
        fn, args, kwargs = self._pending
        self._pending = None
        self._last = self.clock()
        return True, fn(*args, **kwargs)
