"""Recursive-descent parser and tree-walking evaluator for calculator buffers."""

from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, Mapping, Sequence, Union

from .errors import EvaluationError, ExpressionSyntaxError, MathError
from .tokenizer import Token, tokenize

DISPLAY_DECIMALS = 8
_EXPONENT_THRESHOLD = 1e21

FUNCTIONS: Mapping[str, Callable[[float], float]] = {
    "sin": math.sin,
    "cos": math.cos,
    "tan": math.tan,
    "sqrt": math.sqrt,
    "log10": math.log10,
}

CONSTANTS: Mapping[str, float] = {
    "pi": math.pi,
    "e": math.e,
}


@dataclass(frozen=True, slots=True)
class Number:
    value: float


@dataclass(frozen=True, slots=True)
class Constant:
    name: str


@dataclass(frozen=True, slots=True)
class BinaryOp:
    op: str
    left: "Node"
    right: "Node"


@dataclass(frozen=True, slots=True)
class Negate:
    operand: "Node"


@dataclass(frozen=True, slots=True)
class UnaryFunction:
    name: str
    operand: "Node"


@dataclass(frozen=True, slots=True)
class Percent:
    operand: "Node"


Node = Union[Number, Constant, BinaryOp, Negate, UnaryFunction, Percent]


class _Parser:
    """Precedence levels, lowest first::

        expression := term (('+' | '-') term)*
        term       := unary (('*' | '/') unary)*
        unary      := ('+' | '-') unary | power
        power      := postfix ('**' unary)?
        postfix    := atom '%'*
        atom       := NUMBER | CONSTANT | FUNCTION '(' expression ')'
                    | '(' expression ')'
    """

    def __init__(self, tokens: Sequence[Token]):
        self._tokens = tokens
        self._index = 0

    def parse(self) -> Node:
        if not self._tokens:
            raise ExpressionSyntaxError("Expression is empty")
        node = self._expression()
        token = self._peek()
        if token is not None:
            if token.kind == "rparen":
                raise ExpressionSyntaxError(f"Unmatched ')' at position {token.position}")
            raise ExpressionSyntaxError(f"Unexpected '{token.text}' at position {token.position}")
        return node

    def _peek(self) -> Token | None:
        if self._index < len(self._tokens):
            return self._tokens[self._index]
        return None

    def _advance(self) -> Token:
        token = self._peek()
        if token is None:
            raise ExpressionSyntaxError("Expression ends unexpectedly")
        self._index += 1
        return token

    def _accept_operator(self, *symbols: str) -> str | None:
        token = self._peek()
        if token is not None and token.kind == "operator" and token.text in symbols:
            self._index += 1
            return token.text
        return None

    def _expect_rparen(self, opened: Token) -> None:
        token = self._peek()
        if token is None or token.kind != "rparen":
            raise ExpressionSyntaxError(f"Unmatched '(' at position {opened.position}")
        self._index += 1

    def _expression(self) -> Node:
        node = self._term()
        while True:
            op = self._accept_operator("+", "-")
            if op is None:
                return node
            node = BinaryOp(op, node, self._term())

    def _term(self) -> Node:
        node = self._unary()
        while True:
            op = self._accept_operator("*", "/")
            if op is None:
                return node
            node = BinaryOp(op, node, self._unary())

    def _unary(self) -> Node:
        op = self._accept_operator("+", "-")
        if op == "-":
            return Negate(self._unary())
        if op == "+":
            return self._unary()
        return self._power()

    def _power(self) -> Node:
        base = self._postfix()
        if self._accept_operator("**") is not None:
            # Right operand goes through unary so that 2^3^2 == 2^(3^2).
            return BinaryOp("**", base, self._unary())
        return base

    def _postfix(self) -> Node:
        node = self._atom()
        while self._accept_operator("%") is not None:
            node = Percent(node)
        return node

    def _atom(self) -> Node:
        token = self._advance()
        if token.kind == "number":
            return Number(float(token.text))
        if token.kind == "constant":
            return Constant(token.text)
        if token.kind == "function":
            opened = self._advance()
            if opened.kind != "lparen":  # pragma: no cover - tokenizer guarantees '('
                raise ExpressionSyntaxError(f"Expected '(' after {token.text}")
            operand = self._expression()
            self._expect_rparen(opened)
            return UnaryFunction(token.text, operand)
        if token.kind == "lparen":
            node = self._expression()
            self._expect_rparen(token)
            return node
        if token.kind == "rparen":
            raise ExpressionSyntaxError(f"Empty operand before ')' at position {token.position}")
        raise ExpressionSyntaxError(f"Dangling operator '{token.text}' at position {token.position}")


def parse(tokens: Sequence[Token]) -> Node:
    """Build an expression tree from ``tokens``."""

    return _Parser(tokens).parse()


def _checked(value: float) -> float:
    if isinstance(value, complex):
        raise MathError("Complex results are not supported")
    if math.isnan(value):
        raise MathError("Result is not a number")
    if math.isinf(value):
        raise MathError("Result is not finite")
    return value


def _apply_binary(op: str, left: float, right: float) -> float:
    try:
        if op == "+":
            return left + right
        if op == "-":
            return left - right
        if op == "*":
            return left * right
        if op == "/":
            return left / right
        if op == "**":
            return math.pow(left, right)
    except ZeroDivisionError as exc:
        raise MathError("Division by zero") from exc
    except OverflowError as exc:
        raise MathError("Result is not finite") from exc
    except ValueError as exc:
        raise MathError(f"Math domain error in '{op}'") from exc
    raise ExpressionSyntaxError(f"Unsupported operator '{op}'")  # pragma: no cover


def evaluate_tree(node: Node) -> float:
    """Evaluate an expression tree, raising :class:`MathError` on invalid math."""

    if isinstance(node, Number):
        value = node.value
    elif isinstance(node, Constant):
        value = CONSTANTS[node.name]
    elif isinstance(node, Negate):
        value = -evaluate_tree(node.operand)
    elif isinstance(node, Percent):
        value = evaluate_tree(node.operand) / 100
    elif isinstance(node, UnaryFunction):
        operand = evaluate_tree(node.operand)
        try:
            value = FUNCTIONS[node.name](operand)
        except (ValueError, OverflowError) as exc:
            raise MathError(f"{node.name}({operand!r}) is undefined") from exc
    elif isinstance(node, BinaryOp):
        value = _apply_binary(node.op, evaluate_tree(node.left), evaluate_tree(node.right))
    else:  # pragma: no cover - parser only builds the node types above
        raise ExpressionSyntaxError("Unsupported expression element")
    return _checked(value)


def format_result(value: float) -> str:
    """Round to eight decimals and render the shortest round-tripping string."""

    rounded = round(value, DISPLAY_DECIMALS)
    if rounded == 0:
        return "0"
    if abs(rounded) >= _EXPONENT_THRESHOLD:
        return repr(rounded)
    text = format(Decimal(repr(rounded)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


@dataclass(frozen=True, slots=True)
class EvaluationResult:
    expression: str
    value: float
    formatted: str


def evaluate_expression(buffer: str) -> EvaluationResult:
    """Tokenize, parse and evaluate ``buffer``.

    Raises:
        EvaluationError: any tokenize, syntax or math failure.
    """

    tree = parse(tokenize(buffer))
    value = evaluate_tree(tree)
    return EvaluationResult(expression=buffer, value=value, formatted=format_result(value))


__all__ = [
    "BinaryOp",
    "Constant",
    "EvaluationError",
    "EvaluationResult",
    "Number",
    "Negate",
    "Node",
    "Percent",
    "UnaryFunction",
    "evaluate_expression",
    "evaluate_tree",
    "format_result",
    "parse",
]
