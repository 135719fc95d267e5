from __future__ import annotations

import pytest

from app import create_app
from plugins.calculator.api import STORE_EXTENSION


@pytest.fixture
def client(store):
    app = create_app("TestingConfig")
    app.extensions[STORE_EXTENSION] = store
    return app.test_client()


def _press(client, *symbols: str) -> None:
    for symbol in symbols:
        response = client.post("/api/calculator/input", json={"symbol": symbol})
        assert response.status_code == 200


def test_state_starts_at_default(client):
    response = client.get("/api/calculator/state")
    assert response.status_code == 200
    payload = response.get_json()
    assert payload["success"] is True
    assert payload["data"]["display"] == "0"
    assert payload["data"]["status"] == "editing"
    assert payload["data"]["history"] == []


def test_keypad_and_evaluate(client):
    _press(client, "2", "+", "2")
    response = client.post("/api/calculator/evaluate")
    data = response.get_json()["data"]
    assert data["display"] == "4"
    assert data["echo"] == "2+2 ="
    assert data["history"][0]["expression"] == "2+2"
    assert data["history"][0]["result"] == "4"
    assert data["graph"][0]["y"] == 4

    history = client.get("/api/calculator/history").get_json()["data"]["entries"]
    assert [entry["id"] for entry in history] == ["calc-1"]
    graph = client.get("/api/calculator/graph").get_json()["data"]["points"]
    assert len(graph) == 1


def test_invalid_symbol_rejected(client):
    response = client.post("/api/calculator/input", json={"symbol": "x"})
    assert response.status_code == 400
    payload = response.get_json()
    assert payload["success"] is False
    assert payload["error"]["code"] == "calculator.invalid_symbol"


def test_invalid_payload_rejected(client):
    response = client.post("/api/calculator/input", json={"key": "1"})
    assert response.status_code == 400
    error = response.get_json()["error"]
    assert error["code"] == "calculator.invalid_request"
    problems = {tuple(item["loc"]): item["type"] for item in error["details"]}
    assert problems == {("symbol",): "missing", ("key",): "extra_forbidden"}


def test_editing_endpoints(client):
    _press(client, "1", "2", "sin(")
    data = client.post("/api/calculator/backspace").get_json()["data"]
    assert data["display"] == "12"
    data = client.post("/api/calculator/clear").get_json()["data"]
    assert data["display"] == "0"


def test_error_state_and_reset(client, scheduler):
    _press(client, "5", "÷", "0")
    data = client.post("/api/calculator/evaluate").get_json()["data"]
    assert data["display"] == "Error"
    assert data["error_kind"] == "math"

    scheduler.advance(1.5)
    data = client.get("/api/calculator/state").get_json()["data"]
    assert data["display"] == "0"
    assert data["status"] == "editing"


def test_answer_recall_and_purge(client):
    _press(client, "6", "×", "7")
    calc_id = client.post("/api/calculator/evaluate").get_json()["data"]["history"][0]["id"]
    client.post("/api/calculator/clear")
    data = client.post("/api/calculator/answer").get_json()["data"]
    assert data["display"] == "42"

    client.post("/api/calculator/clear")
    data = client.post(f"/api/calculator/history/{calc_id}/recall").get_json()["data"]
    assert data["display"] == "42"
    assert data["echo"] == "6×7 ="

    missing = client.post("/api/calculator/history/nope/recall")
    assert missing.status_code == 404
    assert missing.get_json()["error"]["code"] == "calculator.unknown_calculation"

    response = client.delete("/api/calculator/history")
    assert response.get_json()["data"]["entries"] == []
    state = client.get("/api/calculator/state").get_json()["data"]
    assert state["history"] == []
    assert len(state["graph"]) == 1


def test_clipboard(client):
    _press(client, "3", ".", "1", "4")
    response = client.get("/api/calculator/clipboard")
    assert response.get_json()["data"] == {"text": "3.14"}


def test_assistant_explain_and_ask(client, assistant):
    response = client.post("/api/calculator/assistant/explain")
    assert response.status_code == 200
    assert response.get_json()["data"]["started"] is False

    _press(client, "9")
    response = client.post("/api/calculator/assistant/explain")
    assert response.status_code == 202
    data = response.get_json()["data"]
    assert data["started"] is True
    assert data["pending"] is True

    assistant.futures[-1].set_result("Nine: a square number.")
    data = client.get("/api/calculator/assistant").get_json()["data"]
    assert data["pending"] is False
    assert data["response"] == "Nine: a square number."
    assert data["paragraphs"] == [{"kind": "header", "text": "Nine: a square number."}]

    response = client.post("/api/calculator/assistant/ask", json={"query": "integrate x^2"})
    assert response.status_code == 202
    assert assistant.calls[-1] == ("solve", "integrate x^2")


def test_assistant_ask_requires_query(client, assistant):
    response = client.post("/api/calculator/assistant/ask", json={"query": "   "})
    assert response.status_code == 400
    assert response.get_json()["error"]["code"] == "calculator.empty_query"
    assert assistant.calls == []


@pytest.mark.parametrize(
    "expression, formatted",
    [("2+3×4", "14"), ("sqrt(16)+log(100)", "6"), ("10%", "0.1"), ("1÷3", "0.33333333")],
)
def test_compute_endpoint(client, expression, formatted):
    response = client.post("/api/calculator/compute", json={"expression": expression})
    assert response.status_code == 200
    assert response.get_json()["data"]["formatted"] == formatted


@pytest.mark.parametrize(
    "expression, code",
    [
        ("5÷0", "calculator.math_error"),
        ("2+", "calculator.syntax_error"),
        ("2$", "calculator.tokenize_error"),
    ],
)
def test_compute_endpoint_errors(client, expression, code):
    response = client.post("/api/calculator/compute", json={"expression": expression})
    assert response.status_code == 400
    assert response.get_json()["error"]["code"] == code


def test_unknown_route_returns_json_envelope(client):
    response = client.get("/api/calculator/missing")
    assert response.status_code == 404
    assert response.get_json()["success"] is False
