"""Assistant collaborator that explains results and answers math questions.

The calculator never waits on the assistant: each request returns a
:class:`~concurrent.futures.Future` that resolves to display text. Transport
and payload problems resolve to a fixed fallback message instead of raising.
"""

from __future__ import annotations

import os
import re
from concurrent.futures import Executor, Future
from dataclasses import dataclass
from typing import Any, Literal, Mapping

import requests

from common.logging import get_logger
from common.tasks import background_executor, completed

from .settings import AssistantSettings

logger = get_logger(__name__)

EXPLAIN_FALLBACK = "Error connecting to the assistant. Check your connection."
SOLVE_FALLBACK = "Failed to process the query. The assistant is currently unavailable."

_EXPLAIN_PROMPT = (
    "Explain the mathematical concept or the calculation of: {value} = {context}. "
    "Keep the tone scientific but easy to understand. Max 100 words."
)
_SOLVE_PROMPT = (
    "Solve this mathematical query or explain this formula: {query}. "
    'Format your response with clear sections: "Solution", "Concept", and "Formula". '
    "Use LaTeX-style symbols where appropriate."
)

HEADER_MAX_LENGTH = 50
_HEADER_MARKS = re.compile(r"^#+\s*")

ParagraphKind = Literal["header", "body", "spacer"]


@dataclass(frozen=True, slots=True)
class Paragraph:
    kind: ParagraphKind
    text: str

    def to_dict(self) -> dict[str, str]:
        return {"kind": self.kind, "text": self.text}


def format_response(text: str) -> tuple[Paragraph, ...]:
    """Split an assistant answer into display paragraphs.

    Blank lines become spacers. Markdown headings and short lines containing
    a colon are treated as section headers.
    """

    paragraphs: list[Paragraph] = []
    for line in text.split("\n"):
        if not line.strip():
            paragraphs.append(Paragraph("spacer", ""))
            continue
        is_header = line.startswith("#") or (":" in line and len(line) < HEADER_MAX_LENGTH)
        paragraphs.append(Paragraph("header" if is_header else "body", _HEADER_MARKS.sub("", line)))
    return tuple(paragraphs)


def _extract_text(payload: Mapping[str, Any]) -> str:
    candidates = payload.get("candidates") or []
    if not candidates:
        return ""
    parts = candidates[0]["content"].get("parts") or []
    return "".join(str(part.get("text", "")) for part in parts).strip()


class GeminiAssistant:
    """Assistant backed by the Gemini ``generateContent`` REST endpoint."""

    def __init__(
        self,
        settings: AssistantSettings | None = None,
        *,
        api_key: str | None = None,
        session: requests.Session | None = None,
        executor: Executor | None = None,
    ) -> None:
        self._settings = settings or AssistantSettings()
        if api_key is None:
            api_key = os.environ.get(self._settings.api_key_env, "")
        self._api_key = api_key
        self._session = session or requests.Session()
        self._executor = executor or background_executor(self._settings.max_workers)

    @property
    def available(self) -> bool:
        return self._settings.enabled and bool(self._api_key)

    def explain(self, value: str, context: str) -> Future:
        prompt = _EXPLAIN_PROMPT.format(value=value, context=context)
        generation = {
            "temperature": self._settings.explain_temperature,
            "topP": self._settings.explain_top_p,
        }
        return self._submit(self._settings.explain_model, prompt, generation, EXPLAIN_FALLBACK)

    def solve(self, query: str) -> Future:
        prompt = _SOLVE_PROMPT.format(query=query)
        generation = {"temperature": self._settings.solve_temperature}
        return self._submit(self._settings.solve_model, prompt, generation, SOLVE_FALLBACK)

    def _submit(self, model: str, prompt: str, generation: Mapping[str, float], fallback: str) -> Future:
        if not self.available:
            logger.warning("assistant disabled or %s not set", self._settings.api_key_env)
            return completed(fallback)
        return self._executor.submit(self._generate, model, prompt, generation, fallback)

    def _generate(self, model: str, prompt: str, generation: Mapping[str, float], fallback: str) -> str:
        url = f"{self._settings.base_url}/models/{model}:generateContent"
        body = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": dict(generation),
        }
        try:
            response = self._session.post(
                url,
                json=body,
                headers={"x-goog-api-key": self._api_key},
                timeout=self._settings.timeout_seconds,
            )
            response.raise_for_status()
            return _extract_text(response.json())
        except requests.RequestException as exc:
            logger.warning("assistant request to %s failed: %s", model, exc)
        except (ValueError, KeyError, IndexError, TypeError, AttributeError) as exc:
            logger.warning("assistant returned an unexpected payload: %s", exc)
        return fallback


__all__ = [
    "EXPLAIN_FALLBACK",
    "GeminiAssistant",
    "Paragraph",
    "SOLVE_FALLBACK",
    "format_response",
]
