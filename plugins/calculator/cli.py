"""Command line interface for the Calculator plugin."""

from __future__ import annotations

import argparse
import json
from typing import Any

from .core import CalculatorStore, EvaluationError, UnknownSymbolError, evaluate_expression

_KEY_COMMANDS = {
    "=": "evaluate",
    "AC": "clear",
    "DEL": "backspace",
    "ANS": "append_answer",
}


def _print(payload: dict[str, Any]) -> None:
    print(json.dumps(payload, indent=2, sort_keys=True, ensure_ascii=False))


def command_evaluate(args: argparse.Namespace) -> None:
    expression = " ".join(args.expression)
    try:
        result = evaluate_expression(expression)
    except EvaluationError as exc:
        _print({"expression": expression, "error": str(exc), "kind": exc.kind})
        raise SystemExit(1) from exc
    _print({"expression": expression, "result": result.value, "formatted": result.formatted})


def command_keys(args: argparse.Namespace) -> None:
    store = CalculatorStore()
    for key in args.keys:
        command = _KEY_COMMANDS.get(key)
        if command is None:
            try:
                store.append(key)
            except UnknownSymbolError as exc:
                _print({"key": key, "error": str(exc)})
                raise SystemExit(1) from exc
        else:
            getattr(store, command)()
    snapshot = store.snapshot().to_dict()
    snapshot.pop("assistant")
    _print(snapshot)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Calculator CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    evaluate_parser = subparsers.add_parser("evaluate", help="Evaluate a single expression")
    evaluate_parser.add_argument("expression", nargs="+", help="Expression, e.g. '2+3×4'")
    evaluate_parser.set_defaults(func=command_evaluate)

    keys_parser = subparsers.add_parser("keys", help="Replay keypad presses and print the final state")
    keys_parser.add_argument(
        "keys",
        nargs="+",
        help="Keypad symbols; '=' evaluates, 'AC' clears, 'DEL' deletes, 'ANS' inserts the last result",
    )
    keys_parser.set_defaults(func=command_keys)

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    args.func(args)


if __name__ == "__main__":
    main()
