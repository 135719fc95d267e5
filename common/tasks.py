"""Background task utilities."""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor
from functools import lru_cache
from typing import TypeVar


T = TypeVar("T")


@lru_cache(maxsize=None)
def background_executor(max_workers: int = 2) -> ThreadPoolExecutor:
    """Return a process-wide executor for out-of-band work such as API calls."""

    return ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="calculator-bg")


def completed(value: T) -> Future:
    """Return a future that is already resolved with ``value``."""

    future: Future = Future()
    future.set_result(value)
    return future


__all__ = ["background_executor", "completed"]
