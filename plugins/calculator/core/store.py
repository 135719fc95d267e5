"""Single owner of calculator state.

:class:`CalculatorStore` wires the input buffer, evaluator, history log,
graph series and assistant together. Presentation code calls the operations
and reads immutable :class:`CalculatorSnapshot` objects, either by calling
:meth:`CalculatorStore.snapshot` or by subscribing to change notifications.
"""

from __future__ import annotations

import threading
import time
import uuid
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Any, Callable

from common.logging import get_logger

from .assistant import GeminiAssistant, Paragraph, format_response
from .buffer import DEFAULT_TEXT, BufferStatus, InputBuffer
from .errors import EvaluationError, UnknownCalculationError
from .evaluator import evaluate_expression
from .history import Calculation, GraphPoint, GraphSeries, HistoryLog
from .settings import CalculatorSettings
from .tokenizer import ERROR_SENTINEL

logger = get_logger(__name__)

EXPLAIN_CONTEXT = "Current Output"
EXPLAIN_EMPTY = "Explanation failed."
ASK_EMPTY = "The AI could not process this request."

Listener = Callable[["CalculatorSnapshot"], None]


@dataclass(frozen=True, slots=True)
class AssistantState:
    pending: bool
    response: str | None
    paragraphs: tuple[Paragraph, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "pending": self.pending,
            "response": self.response,
            "paragraphs": [paragraph.to_dict() for paragraph in self.paragraphs],
        }


@dataclass(frozen=True, slots=True)
class CalculatorSnapshot:
    """Read-only view of the whole calculator at one instant."""

    display: str
    status: BufferStatus
    echo: str
    error_kind: str | None
    history: tuple[Calculation, ...]
    graph: tuple[GraphPoint, ...]
    assistant: AssistantState

    def to_dict(self) -> dict[str, Any]:
        return {
            "display": self.display,
            "status": self.status,
            "echo": self.echo,
            "error_kind": self.error_kind,
            "history": [entry.to_dict() for entry in self.history],
            "graph": [point.to_dict() for point in self.graph],
            "assistant": self.assistant.to_dict(),
        }


class CalculatorStore:
    def __init__(
        self,
        settings: CalculatorSettings | None = None,
        *,
        assistant=None,
        scheduler=None,
        clock: Callable[[], float] = time.time,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self._settings = settings or CalculatorSettings()
        self._lock = threading.RLock()
        self._clock = clock
        self._id_factory = id_factory or (lambda: uuid.uuid4().hex)
        self._buffer = InputBuffer(
            scheduler=scheduler,
            max_length=self._settings.max_length,
            reset_delay=self._settings.error_reset_seconds,
            lock=self._lock,
            on_reset=self._publish,
        )
        self._history = HistoryLog(self._settings.history_limit)
        self._graph = GraphSeries(self._settings.graph_limit)
        self._assistant = assistant or GeminiAssistant(self._settings.assistant)
        self._last_error: EvaluationError | None = None
        self._listeners: list[Listener] = []
        self._ai_pending = False
        self._ai_response: str | None = None
        self._ai_request = 0

    @property
    def settings(self) -> CalculatorSettings:
        return self._settings

    # -- observation -------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` for snapshots; returns an unsubscribe callable."""

        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def snapshot(self) -> CalculatorSnapshot:
        with self._lock:
            status = self._buffer.status
            echo = self._buffer.echo
            if not echo:
                recent = self._history.peek_most_recent()
                echo = recent.expression if recent else ""
            error_kind = None
            if status == "error" and self._last_error is not None:
                error_kind = self._last_error.kind
            return CalculatorSnapshot(
                display=self._buffer.text,
                status=status,
                echo=echo,
                error_kind=error_kind,
                history=tuple(self._history),
                graph=tuple(self._graph),
                assistant=AssistantState(
                    pending=self._ai_pending,
                    response=self._ai_response,
                    paragraphs=format_response(self._ai_response) if self._ai_response else (),
                ),
            )

    def clipboard_text(self) -> str:
        return self._buffer.text

    def _publish(self) -> None:
        with self._lock:
            listeners = list(self._listeners)
            if not listeners:
                return
            snapshot = self.snapshot()
        for listener in listeners:
            listener(snapshot)

    # -- editing -----------------------------------------------------------

    def append(self, symbol: str) -> None:
        self._buffer.append(symbol)
        self._publish()

    def append_answer(self) -> None:
        """Insert the most recent result, or ``"0"`` when history is empty."""

        with self._lock:
            recent = self._history.peek_most_recent()
            self._buffer.insert(recent.result if recent else DEFAULT_TEXT)
        self._publish()

    def backspace(self) -> None:
        self._buffer.backspace()
        self._publish()

    def clear(self) -> None:
        self._buffer.clear()
        self._publish()

    def evaluate(self) -> Calculation | None:
        """Evaluate the buffer; returns the recorded calculation on success."""

        with self._lock:
            if self._buffer.status == "error":
                return None
            expression = self._buffer.text
            try:
                result = evaluate_expression(expression)
            except EvaluationError as exc:
                logger.info("evaluation of %r failed (%s): %s", expression, exc.kind, exc)
                self._last_error = exc
                self._buffer.show_error()
                calculation = None
            else:
                timestamp = int(self._clock() * 1000)
                calculation = Calculation(
                    id=self._id_factory(),
                    expression=expression,
                    result=result.formatted,
                    timestamp=timestamp,
                )
                self._history.record(calculation)
                self._graph.record(GraphPoint(x=timestamp, y=result.value))
                self._buffer.show_result(expression, result.formatted)
        self._publish()
        return calculation

    # -- history -----------------------------------------------------------

    def recall(self, calculation_id: str) -> Calculation:
        """Load a history entry back into the display."""

        with self._lock:
            calculation = self._history.find(calculation_id)
            if calculation is None:
                raise UnknownCalculationError(f"No calculation with id '{calculation_id}'")
            self._buffer.show_result(calculation.expression, calculation.result)
        self._publish()
        return calculation

    def purge_history(self) -> None:
        # The graph series is independent of the history log.
        with self._lock:
            self._history.purge_all()
        self._publish()

    # -- assistant ---------------------------------------------------------

    def explain_current(self) -> Future | None:
        """Ask the assistant to explain the displayed value."""

        with self._lock:
            display = self._buffer.text
            if display in (DEFAULT_TEXT, ERROR_SENTINEL):
                return None
            request_id = self._begin_request()
        return self._dispatch(
            request_id, lambda: self._assistant.explain(display, EXPLAIN_CONTEXT), EXPLAIN_EMPTY
        )

    def ask(self, query: str) -> Future | None:
        """Send a free-form question to the assistant."""

        query = (query or "").strip()
        if not query:
            return None
        with self._lock:
            request_id = self._begin_request()
        return self._dispatch(request_id, lambda: self._assistant.solve(query), ASK_EMPTY)

    def _begin_request(self) -> int:
        self._ai_request += 1
        self._ai_pending = True
        return self._ai_request

    def _dispatch(self, request_id: int, call: Callable[[], Future], empty_message: str) -> Future:
        # Called without the store lock held.
        self._publish()
        try:
            future = call()
        except Exception as exc:
            logger.warning("assistant request %s could not start: %s", request_id, exc)
            future = Future()
            future.set_exception(exc)
        future.add_done_callback(lambda done: self._finish_request(request_id, done, empty_message))
        return future

    def _finish_request(self, request_id: int, future: Future, empty_message: str) -> None:
        try:
            text = future.result()
        except Exception as exc:
            logger.warning("assistant request %s failed: %s", request_id, exc)
            text = ""
        with self._lock:
            if request_id != self._ai_request:
                # Superseded by a newer request; only the latest answer is shown.
                return
            self._ai_pending = False
            self._ai_response = text or empty_message
        self._publish()


__all__ = [
    "AssistantState",
    "CalculatorSnapshot",
    "CalculatorStore",
    "ASK_EMPTY",
    "EXPLAIN_EMPTY",
]
