import pytest

from plugins.calculator.core import MAX_LENGTH, InputBuffer, UnknownSymbolError


def _type(buffer: InputBuffer, *symbols: str) -> None:
    for symbol in symbols:
        buffer.append(symbol)


def test_first_digit_replaces_default(buffer):
    assert buffer.text == "0"
    buffer.append("7")
    assert buffer.text == "7"


def test_operator_after_default_keeps_zero(buffer):
    buffer.append("+")
    assert buffer.text == "0+"
    buffer.clear()
    buffer.append(".")
    assert buffer.text == "0."


def test_function_prefix_replaces_default(buffer):
    buffer.append("sqrt(")
    assert buffer.text == "sqrt("


def test_operator_collision_replaces_last_unit(buffer):
    _type(buffer, "5", "+")
    buffer.append("-")
    assert buffer.text == "5-"
    buffer.append(".")
    assert buffer.text == "5."


def test_length_ceiling_makes_append_a_noop(buffer):
    _type(buffer, *["9"] * (MAX_LENGTH + 5))
    assert len(buffer.text) == MAX_LENGTH
    buffer.append("+")
    assert buffer.text == "9" * MAX_LENGTH


def test_multi_character_symbol_never_exceeds_ceiling(buffer):
    _type(buffer, *["1"] * (MAX_LENGTH - 2))
    buffer.append("sqrt(")
    assert buffer.text == "1" * (MAX_LENGTH - 2)
    buffer.append("(")
    assert len(buffer.text) == MAX_LENGTH - 1


def test_collision_still_applies_at_ceiling(buffer):
    _type(buffer, *["1"] * (MAX_LENGTH - 1), "+")
    assert len(buffer.text) == MAX_LENGTH
    buffer.append("×")
    assert buffer.text.endswith("×")
    assert len(buffer.text) == MAX_LENGTH


def test_unknown_symbol_rejected(buffer):
    with pytest.raises(UnknownSymbolError):
        buffer.append("x")
    assert buffer.text == "0"


def test_append_then_backspace_restores_prior_buffer(buffer):
    _type(buffer, "1", "2", "+")
    before = buffer.text
    buffer.append("3")
    buffer.backspace()
    assert buffer.text == before

    buffer.append("sin(")
    buffer.backspace()
    assert buffer.text == before


def test_backspace_after_operator_replacement_does_not_restore(buffer):
    _type(buffer, "1", "+")
    before = buffer.text
    buffer.append("-")
    buffer.backspace()
    assert buffer.text == "1"
    assert buffer.text != before


@pytest.mark.parametrize("prefix", ["sin(", "cos(", "tan(", "log(", "sqrt("])
def test_backspace_removes_function_prefix_atomically(buffer, prefix):
    buffer.append(prefix)
    buffer.backspace()
    assert buffer.text == "0"

    _type(buffer, "2", "×", prefix)
    buffer.backspace()
    assert buffer.text == "2×"


def test_backspace_single_character_resets_to_default(buffer):
    buffer.append("8")
    buffer.backspace()
    assert buffer.text == "0"
    buffer.backspace()
    assert buffer.text == "0"


def test_clear_discards_echo(buffer):
    buffer.show_result("2+2", "4")
    assert buffer.echo == "2+2 ="
    buffer.clear()
    assert buffer.text == "0"
    assert buffer.echo == ""


def test_append_clears_echo(buffer):
    buffer.show_result("2+2", "4")
    buffer.append("+")
    assert buffer.echo == ""
    assert buffer.text == "4+"


def test_error_state_resets_after_delay(buffer, scheduler):
    buffer.append("5")
    buffer.show_error()
    assert buffer.status == "error"
    assert buffer.text == "Error"
    scheduler.advance(1.0)
    assert buffer.status == "error"
    scheduler.advance(0.5)
    assert buffer.status == "editing"
    assert buffer.text == "0"


def test_append_during_error_starts_from_default(buffer, scheduler):
    buffer.append("5")
    buffer.show_error()
    buffer.append("+")
    assert buffer.status == "editing"
    assert buffer.text == "0+"
    assert scheduler.pending == 0


def test_edit_cancels_pending_reset(buffer, scheduler):
    buffer.show_error()
    buffer.append("7")
    buffer.append("8")
    scheduler.advance(5)
    assert buffer.text == "78"


def test_backspace_during_error_resets(buffer):
    _type(buffer, "1", "2")
    buffer.show_error()
    buffer.backspace()
    assert buffer.status == "editing"
    assert buffer.text == "0"


def test_reset_notifies_listener(scheduler):
    calls = []
    buffer = InputBuffer(scheduler=scheduler, on_reset=lambda: calls.append("reset"))
    buffer.show_error()
    scheduler.advance(2)
    assert calls == ["reset"]


def test_result_longer_than_ceiling_is_shown_but_not_extended(scheduler):
    buffer = InputBuffer(scheduler=scheduler, max_length=5)
    result = "123456.5"
    buffer.show_result("123456+0.5", result)
    assert buffer.text == result
    buffer.append("1")
    buffer.append("+")
    assert buffer.text == result
    buffer.backspace()
    assert buffer.text == result[:-1]
