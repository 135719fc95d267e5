"""Configuration helpers for the calculator plugin."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from .buffer import ERROR_RESET_SECONDS, MAX_LENGTH
from .history import DEFAULT_GRAPH_LIMIT, DEFAULT_HISTORY_LIMIT


@dataclass(frozen=True)
class AssistantSettings:
    enabled: bool = True
    api_key_env: str = "GEMINI_API_KEY"
    base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    explain_model: str = "gemini-2.5-flash"
    solve_model: str = "gemini-2.5-pro"
    timeout_seconds: float = 30.0
    explain_temperature: float = 0.7
    explain_top_p: float = 0.95
    solve_temperature: float = 0.8
    max_workers: int = 2


@dataclass(frozen=True)
class CalculatorSettings:
    max_length: int = MAX_LENGTH
    history_limit: int = DEFAULT_HISTORY_LIMIT
    graph_limit: int = DEFAULT_GRAPH_LIMIT
    error_reset_seconds: float = ERROR_RESET_SECONDS
    assistant: AssistantSettings = field(default_factory=AssistantSettings)


def _as_int(raw: Mapping[str, Any], key: str, default: int, *, minimum: int = 1) -> int:
    try:
        value = int(float(raw.get(key, default)))
    except (TypeError, ValueError):
        value = default
    return max(value, minimum)


def _as_float(raw: Mapping[str, Any], key: str, default: float, *, minimum: float = 0.0) -> float:
    try:
        value = float(raw.get(key, default))
    except (TypeError, ValueError):
        value = default
    return max(value, minimum)


def _as_str(raw: Mapping[str, Any], key: str, default: str) -> str:
    value = raw.get(key)
    if value is None or not str(value).strip():
        return default
    return str(value).strip()


def _load_assistant(raw: Mapping[str, Any] | None) -> AssistantSettings:
    if not isinstance(raw, Mapping):
        return AssistantSettings()
    defaults = AssistantSettings()
    return AssistantSettings(
        enabled=bool(raw.get("enabled", defaults.enabled)),
        api_key_env=_as_str(raw, "api_key_env", defaults.api_key_env),
        base_url=_as_str(raw, "base_url", defaults.base_url).rstrip("/"),
        explain_model=_as_str(raw, "explain_model", defaults.explain_model),
        solve_model=_as_str(raw, "solve_model", defaults.solve_model),
        timeout_seconds=_as_float(raw, "timeout_seconds", defaults.timeout_seconds, minimum=1.0),
        explain_temperature=_as_float(raw, "explain_temperature", defaults.explain_temperature),
        explain_top_p=_as_float(raw, "explain_top_p", defaults.explain_top_p),
        solve_temperature=_as_float(raw, "solve_temperature", defaults.solve_temperature),
        max_workers=_as_int(raw, "max_workers", defaults.max_workers),
    )


def load_settings(raw: Mapping[str, Any] | None) -> CalculatorSettings:
    """Build :class:`CalculatorSettings` from the ``plugins.calculator`` block.

    Missing or malformed values fall back to the defaults so that a broken
    ``config.yml`` never prevents the application from starting.
    """

    raw = raw if isinstance(raw, Mapping) else {}
    return CalculatorSettings(
        max_length=_as_int(raw, "max_length", MAX_LENGTH),
        history_limit=_as_int(raw, "history_limit", DEFAULT_HISTORY_LIMIT),
        graph_limit=_as_int(raw, "graph_limit", DEFAULT_GRAPH_LIMIT),
        error_reset_seconds=_as_float(raw, "error_reset_seconds", ERROR_RESET_SECONDS),
        assistant=_load_assistant(raw.get("assistant")),
    )


__all__ = ["AssistantSettings", "CalculatorSettings", "load_settings"]
