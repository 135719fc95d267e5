"""Exports for the calculator core."""

from .assistant import EXPLAIN_FALLBACK, SOLVE_FALLBACK, GeminiAssistant, Paragraph, format_response
from .buffer import DEFAULT_TEXT, KEYPAD_SYMBOLS, MAX_LENGTH, OPERATOR_SYMBOLS, InputBuffer
from .errors import (
    EvaluationError,
    ExpressionSyntaxError,
    MathError,
    TokenizeError,
    UnknownCalculationError,
    UnknownSymbolError,
)
from .evaluator import EvaluationResult, evaluate_expression, format_result, parse
from .history import Calculation, GraphPoint, GraphSeries, HistoryLog
from .scheduler import ThreadingScheduler
from .settings import AssistantSettings, CalculatorSettings, load_settings
from .store import CalculatorSnapshot, CalculatorStore
from .tokenizer import ERROR_SENTINEL, Token, sanitize, tokenize

__all__ = [
    "AssistantSettings",
    "Calculation",
    "CalculatorSettings",
    "CalculatorSnapshot",
    "CalculatorStore",
    "DEFAULT_TEXT",
    "ERROR_SENTINEL",
    "EXPLAIN_FALLBACK",
    "EvaluationError",
    "EvaluationResult",
    "ExpressionSyntaxError",
    "GeminiAssistant",
    "GraphPoint",
    "GraphSeries",
    "HistoryLog",
    "InputBuffer",
    "KEYPAD_SYMBOLS",
    "MAX_LENGTH",
    "MathError",
    "OPERATOR_SYMBOLS",
    "Paragraph",
    "SOLVE_FALLBACK",
    "ThreadingScheduler",
    "Token",
    "TokenizeError",
    "UnknownCalculationError",
    "UnknownSymbolError",
    "evaluate_expression",
    "format_response",
    "format_result",
    "load_settings",
    "parse",
    "sanitize",
    "tokenize",
]
