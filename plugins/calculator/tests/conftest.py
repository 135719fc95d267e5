from __future__ import annotations

import itertools
from concurrent.futures import Future

import pytest

from plugins.calculator.core import CalculatorSettings, CalculatorStore, InputBuffer


class ManualHandle:
    def __init__(self, due: float, callback):
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Scheduler whose callbacks only fire when the test advances time."""

    def __init__(self) -> None:
        self.now = 0.0
        self._handles: list[ManualHandle] = []

    def call_later(self, delay: float, callback) -> ManualHandle:
        handle = ManualHandle(self.now + delay, callback)
        self._handles.append(handle)
        return handle

    @property
    def pending(self) -> int:
        return sum(1 for handle in self._handles if not handle.cancelled)

    def advance(self, seconds: float) -> None:
        self.now += seconds
        due = [h for h in self._handles if not h.cancelled and h.due <= self.now]
        self._handles = [h for h in self._handles if not h.cancelled and h.due > self.now]
        for handle in due:
            handle.callback()


class StubAssistant:
    """Assistant whose futures are resolved by the test."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, ...]] = []
        self.futures: list[Future] = []

    def _future(self) -> Future:
        future: Future = Future()
        self.futures.append(future)
        return future

    def explain(self, value: str, context: str) -> Future:
        self.calls.append(("explain", value, context))
        return self._future()

    def solve(self, query: str) -> Future:
        self.calls.append(("solve", query))
        return self._future()


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def assistant() -> StubAssistant:
    return StubAssistant()


@pytest.fixture
def buffer(scheduler: ManualScheduler) -> InputBuffer:
    return InputBuffer(scheduler=scheduler)


@pytest.fixture
def store(scheduler: ManualScheduler, assistant: StubAssistant) -> CalculatorStore:
    seconds = itertools.count(1_700_000_000)
    ids = itertools.count(1)
    return CalculatorStore(
        CalculatorSettings(),
        assistant=assistant,
        scheduler=scheduler,
        clock=lambda: float(next(seconds)),
        id_factory=lambda: f"calc-{next(ids)}",
    )
