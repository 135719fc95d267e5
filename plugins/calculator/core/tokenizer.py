"""Sanitizer and tokenizer for calculator buffers.

The keypad produces display symbols (``×``, ``÷``, ``π``, ``log(`` ...).
:func:`sanitize` rewrites them into a canonical arithmetic string and
:func:`tokenize` scans that string into a flat token stream for the parser.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal

from .errors import TokenizeError

ERROR_SENTINEL = "Error"

# Symbol substitution must run before percent rewriting so that the percent
# pass only ever sees numeric literals.
_SYMBOL_REPLACEMENTS: tuple[tuple[str, str], ...] = (
    ("×", "*"),
    ("÷", "/"),
    ("^", "**"),
    ("log(", "log10("),
    ("π", "pi"),
)

_PERCENT_LITERAL = re.compile(r"(?<![\d.])(\d*\.?\d+(?:e[-+]\d+)?)%")

# Numbers may carry the exponent suffix used when large results are displayed.
_TOKEN_PATTERN = re.compile(
    r"""
    (?P<space>\s+)
    | (?P<number>(?:\d+\.?\d*|\.\d+)(?:e[-+]\d+)?)
    | (?P<function>sqrt|sin|cos|tan|log10)(?=\()
    | (?P<constant>pi|e)
    | (?P<operator>\*\*|[-+*/%])
    | (?P<lparen>\()
    | (?P<rparen>\))
    """,
    re.VERBOSE,
)


TokenKind = Literal["number", "operator", "function", "constant", "lparen", "rparen"]


@dataclass(frozen=True, slots=True)
class Token:
    """A lexical unit of the canonical expression."""

    kind: TokenKind
    text: str
    position: int


def sanitize(buffer: str) -> str:
    """Return the canonical arithmetic form of ``buffer``.

    ``N%`` becomes ``(N/100)`` for every numeric literal ``N`` directly
    followed by a percent sign.
    """

    text = buffer
    for symbol, replacement in _SYMBOL_REPLACEMENTS:
        text = text.replace(symbol, replacement)
    return _PERCENT_LITERAL.sub(r"(\1/100)", text)


def tokenize(buffer: str) -> list[Token]:
    """Sanitize ``buffer`` and split it into tokens.

    Raises:
        TokenizeError: the buffer is empty, holds the error sentinel, or
            contains characters outside the expression language.
    """

    if not isinstance(buffer, str) or not buffer.strip():
        raise TokenizeError("Expression is empty")
    if buffer.strip() == ERROR_SENTINEL:
        raise TokenizeError("Buffer holds the error sentinel")

    canonical = sanitize(buffer)
    tokens: list[Token] = []
    position = 0
    while position < len(canonical):
        match = _TOKEN_PATTERN.match(canonical, position)
        if match is None:
            snippet = canonical[position : position + 8]
            raise TokenizeError(f"Unrecognised input near '{snippet}'")
        kind = match.lastgroup
        if kind != "space":
            tokens.append(Token(kind, match.group(), position))
        position = match.end()
    return tokens


__all__ = ["ERROR_SENTINEL", "Token", "TokenKind", "sanitize", "tokenize"]
