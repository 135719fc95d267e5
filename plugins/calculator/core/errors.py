"""Exception types raised by the calculator core."""

from __future__ import annotations


class EvaluationError(ValueError):
    """Raised when a buffer cannot be turned into a finite number."""

    kind = "evaluation"


class TokenizeError(EvaluationError):
    """Raised when the buffer contains characters outside the language."""

    kind = "tokenize"


class ExpressionSyntaxError(EvaluationError):
    """Raised when the token stream does not form a valid expression."""

    kind = "syntax"


class MathError(EvaluationError):
    """Raised for division by zero, domain errors and non-finite results."""

    kind = "math"


class UnknownSymbolError(ValueError):
    """Raised when a key press does not map to a keypad symbol."""


class UnknownCalculationError(LookupError):
    """Raised when a history entry cannot be found."""


__all__ = [
    "EvaluationError",
    "TokenizeError",
    "ExpressionSyntaxError",
    "MathError",
    "UnknownCalculationError",
    "UnknownSymbolError",
]
