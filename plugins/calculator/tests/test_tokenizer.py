import pytest

from plugins.calculator.core import TokenizeError, sanitize, tokenize


def test_sanitize_replaces_display_symbols():
    assert sanitize("2×3÷4^2") == "2*3/4**2"
    assert sanitize("log(100)+π") == "log10(100)+pi"
    assert sanitize("sqrt(9)-e") == "sqrt(9)-e"


def test_sanitize_rewrites_percent_literals_after_symbols():
    assert sanitize("45%") == "(45/100)"
    assert sanitize("45+5%") == "45+(5/100)"
    assert sanitize("3.5%×2") == "(3.5/100)*2"


def test_sanitize_leaves_non_literal_percent_alone():
    assert sanitize("(2+3)%") == "(2+3)%"
    assert sanitize("π%") == "pi%"


def test_tokenize_produces_flat_stream():
    tokens = tokenize("sin(π÷2)+10%")
    kinds = [token.kind for token in tokens]
    texts = [token.text for token in tokens]
    assert kinds == [
        "function",
        "lparen",
        "constant",
        "operator",
        "number",
        "rparen",
        "operator",
        "lparen",
        "number",
        "operator",
        "number",
        "rparen",
    ]
    assert texts[0] == "sin"
    assert texts[2] == "pi"
    assert texts[3] == "/"


def test_tokenize_reads_power_as_single_operator():
    tokens = tokenize("2^3")
    assert [token.text for token in tokens] == ["2", "**", "3"]


@pytest.mark.parametrize("buffer", ["", "   ", "Error", "2$3", "abc", "sin 3"])
def test_tokenize_rejects_invalid_input(buffer):
    with pytest.raises(TokenizeError):
        tokenize(buffer)


def test_number_token_includes_exponent_suffix():
    tokens = tokenize("1.5e+22-e")
    assert [(token.kind, token.text) for token in tokens] == [
        ("number", "1.5e+22"),
        ("operator", "-"),
        ("constant", "e"),
    ]
