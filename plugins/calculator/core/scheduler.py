"""Delayed callbacks used for the timed error reset."""

from __future__ import annotations

import threading
from typing import Callable


class TimerHandle:
    """Cancellable handle around a :class:`threading.Timer`."""

    def __init__(self, timer: threading.Timer) -> None:
        self._timer = timer

    def cancel(self) -> None:
        self._timer.cancel()


class ThreadingScheduler:
    """Run callbacks on daemon timer threads."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        timer = threading.Timer(delay, callback)
        timer.daemon = True
        timer.start()
        return TimerHandle(timer)


__all__ = ["ThreadingScheduler", "TimerHandle"]
