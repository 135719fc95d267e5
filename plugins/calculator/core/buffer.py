"""Input buffer automaton for keypad-driven expression editing."""

from __future__ import annotations

import threading
from typing import Callable, Literal

from .errors import UnknownSymbolError
from .scheduler import ThreadingScheduler
from .tokenizer import ERROR_SENTINEL

DEFAULT_TEXT = "0"
MAX_LENGTH = 25
ERROR_RESET_SECONDS = 1.5

OPERATOR_SYMBOLS = frozenset({"+", "-", "×", "÷", "^", ".", "%"})
FUNCTION_PREFIXES: tuple[str, ...] = ("sqrt(", "sin(", "cos(", "tan(", "log(")
KEYPAD_SYMBOLS = frozenset(
    [*"0123456789", *OPERATOR_SYMBOLS, "(", ")", "π", "e", *FUNCTION_PREFIXES]
)

BufferStatus = Literal["editing", "error"]


class InputBuffer:
    """Owns the live expression text, its status and the evaluation echo.

    While the status is ``"error"`` the display shows the sentinel and a
    reset back to ``"0"`` is pending on the scheduler. Any edit cancels that
    reset and dismisses the error immediately.
    """

    def __init__(
        self,
        *,
        scheduler=None,
        max_length: int = MAX_LENGTH,
        reset_delay: float = ERROR_RESET_SECONDS,
        lock: threading.RLock | None = None,
        on_reset: Callable[[], None] | None = None,
    ) -> None:
        self._scheduler = scheduler or ThreadingScheduler()
        self._max_length = max_length
        self._reset_delay = reset_delay
        self._lock = lock or threading.RLock()
        self._on_reset = on_reset
        self._text = DEFAULT_TEXT
        self._status: BufferStatus = "editing"
        self._echo = ""
        self._pending_reset = None
        self._reset_token: object | None = None

    @property
    def text(self) -> str:
        """The string shown on the display."""

        with self._lock:
            return ERROR_SENTINEL if self._status == "error" else self._text

    @property
    def status(self) -> BufferStatus:
        return self._status

    @property
    def echo(self) -> str:
        return self._echo

    @property
    def max_length(self) -> int:
        return self._max_length

    @property
    def reset_pending(self) -> bool:
        return self._pending_reset is not None

    def append(self, symbol: str) -> None:
        """Apply a keypad symbol to the buffer."""

        if symbol not in KEYPAD_SYMBOLS:
            raise UnknownSymbolError(f"Unknown keypad symbol '{symbol}'")
        self.insert(symbol)

    def insert(self, text: str) -> None:
        """Insert arbitrary text (e.g. a recalled answer) using keypad rules."""

        with self._lock:
            self._dismiss_error()
            self._echo = ""
            current = self._text
            if current == DEFAULT_TEXT and text not in OPERATOR_SYMBOLS:
                self._text = text
            elif current[-1:] in OPERATOR_SYMBOLS and text in OPERATOR_SYMBOLS:
                self._text = current[:-1] + text
            elif len(current) + len(text) <= self._max_length:
                self._text = current + text

    def backspace(self) -> None:
        with self._lock:
            was_error = self._status == "error"
            self._dismiss_error()
            current = self._text
            if was_error or len(current) <= 1:
                self._text = DEFAULT_TEXT
                return
            for prefix in FUNCTION_PREFIXES:
                if current.endswith(prefix):
                    current = current[: -len(prefix)]
                    break
            else:
                current = current[:-1]
            self._text = current or DEFAULT_TEXT

    def clear(self) -> None:
        with self._lock:
            self._dismiss_error()
            self._text = DEFAULT_TEXT
            self._echo = ""

    def show_result(self, expression: str, result: str) -> None:
        """Display ``result`` with ``expression`` echoed above it."""

        with self._lock:
            self._dismiss_error()
            self._echo = f"{expression} ="
            self._text = result

    def show_error(self) -> None:
        """Enter the error state and schedule the automatic reset."""

        with self._lock:
            self._cancel_reset()
            self._status = "error"
            token = object()
            self._reset_token = token
            self._pending_reset = self._scheduler.call_later(
                self._reset_delay, lambda: self._expire(token)
            )

    def _expire(self, token: object) -> None:
        with self._lock:
            # A cancelled timer may still fire if it was already running.
            if self._reset_token is not token:
                return
            self._pending_reset = None
            self._reset_token = None
            self._status = "editing"
            self._text = DEFAULT_TEXT
        if self._on_reset is not None:
            self._on_reset()

    def _cancel_reset(self) -> None:
        if self._pending_reset is not None:
            self._pending_reset.cancel()
        self._pending_reset = None
        self._reset_token = None

    def _dismiss_error(self) -> None:
        self._cancel_reset()
        if self._status == "error":
            self._status = "editing"
            self._text = DEFAULT_TEXT


__all__ = [
    "BufferStatus",
    "DEFAULT_TEXT",
    "ERROR_RESET_SECONDS",
    "FUNCTION_PREFIXES",
    "InputBuffer",
    "KEYPAD_SYMBOLS",
    "MAX_LENGTH",
    "OPERATOR_SYMBOLS",
]
