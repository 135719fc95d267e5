"""API routes for the Calculator plugin."""

from __future__ import annotations

import threading

from flask import Blueprint, Response, current_app, request

from common.errors import NotFoundAppError, ValidationAppError
from common.responses import fail, ok
from common.validation import SchemaModel, ValidationError, parse_model

from ..core import (
    CalculatorStore,
    EvaluationError,
    UnknownCalculationError,
    UnknownSymbolError,
    evaluate_expression,
    load_settings,
)

STORE_EXTENSION = "calculator_store"
_STORE_LOCK = threading.Lock()


class InputPayload(SchemaModel):
    symbol: str


class AskPayload(SchemaModel):
    query: str


class ComputePayload(SchemaModel):
    expression: str


api_bp = Blueprint("calculator_api", __name__, url_prefix="/api/calculator")


def get_store() -> CalculatorStore:
    """Return the application-wide store, creating it on first use."""

    with _STORE_LOCK:
        store = current_app.extensions.get(STORE_EXTENSION)
        if store is None:
            raw = current_app.config.get("PLUGIN_SETTINGS", {}).get("calculator")
            store = CalculatorStore(load_settings(raw))
            current_app.extensions[STORE_EXTENSION] = store
        return store


def _invalid_request(exc: ValidationError) -> Response:
    return fail(
        ValidationAppError(
            message=str(exc),
            code="calculator.invalid_request",
            details=getattr(exc, "details", None),
        )
    )


def _state() -> Response:
    return ok(get_store().snapshot().to_dict())


@api_bp.get("/state")
def state() -> Response:
    return _state()


@api_bp.post("/input")
def append_symbol() -> Response:
    raw_payload = request.get_json(silent=True) or {}
    try:
        payload = parse_model(InputPayload, raw_payload)
    except ValidationError as exc:
        return _invalid_request(exc)
    try:
        get_store().append(payload.symbol)
    except UnknownSymbolError as exc:
        return fail(ValidationAppError(message=str(exc), code="calculator.invalid_symbol"))
    return _state()


@api_bp.post("/answer")
def append_answer() -> Response:
    get_store().append_answer()
    return _state()


@api_bp.post("/backspace")
def backspace() -> Response:
    get_store().backspace()
    return _state()


@api_bp.post("/clear")
def clear() -> Response:
    get_store().clear()
    return _state()


@api_bp.post("/evaluate")
def evaluate() -> Response:
    get_store().evaluate()
    return _state()


@api_bp.get("/history")
def history() -> Response:
    entries = get_store().snapshot().history
    return ok({"entries": [entry.to_dict() for entry in entries]})


@api_bp.delete("/history")
def purge_history() -> Response:
    get_store().purge_history()
    return ok({"entries": []})


@api_bp.post("/history/<calculation_id>/recall")
def recall(calculation_id: str) -> Response:
    try:
        get_store().recall(calculation_id)
    except UnknownCalculationError as exc:
        return fail(NotFoundAppError(message=str(exc), code="calculator.unknown_calculation"))
    return _state()


@api_bp.get("/graph")
def graph() -> Response:
    points = get_store().snapshot().graph
    return ok({"points": [point.to_dict() for point in points]})


@api_bp.get("/assistant")
def assistant_state() -> Response:
    return ok(get_store().snapshot().assistant.to_dict())


@api_bp.post("/assistant/explain")
def explain() -> Response:
    future = get_store().explain_current()
    data = get_store().snapshot().assistant.to_dict()
    data["started"] = future is not None
    return ok(data, status=202 if future is not None else 200)


@api_bp.post("/assistant/ask")
def ask() -> Response:
    raw_payload = request.get_json(silent=True) or {}
    try:
        payload = parse_model(AskPayload, raw_payload)
    except ValidationError as exc:
        return _invalid_request(exc)
    if not payload.query:
        return fail(ValidationAppError(message="Query is required", code="calculator.empty_query"))
    get_store().ask(payload.query)
    data = get_store().snapshot().assistant.to_dict()
    data["started"] = True
    return ok(data, status=202)


@api_bp.get("/clipboard")
def clipboard() -> Response:
    return ok({"text": get_store().clipboard_text()})


@api_bp.post("/compute")
def compute() -> Response:
    raw_payload = request.get_json(silent=True) or {}
    try:
        payload = parse_model(ComputePayload, raw_payload)
    except ValidationError as exc:
        return _invalid_request(exc)
    try:
        result = evaluate_expression(payload.expression)
    except EvaluationError as exc:
        return fail(ValidationAppError(message=str(exc), code=f"calculator.{exc.kind}_error"))
    return ok({"expression": result.expression, "result": result.value, "formatted": result.formatted})


blueprints = [api_bp]


__all__ = [
    "blueprints",
    "get_store",
    "state",
    "append_symbol",
    "append_answer",
    "backspace",
    "clear",
    "evaluate",
    "history",
    "purge_history",
    "recall",
    "graph",
    "assistant_state",
    "explain",
    "ask",
    "clipboard",
    "compute",
]
