"""Bounded records derived from successful evaluations."""

from __future__ import annotations

from collections import deque
from dataclasses import asdict, dataclass
from typing import Any, Iterator

DEFAULT_HISTORY_LIMIT = 20
DEFAULT_GRAPH_LIMIT = 20


@dataclass(frozen=True, slots=True)
class Calculation:
    """A completed calculation as shown in the history view."""

    id: str
    expression: str
    result: str
    timestamp: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class GraphPoint:
    """One plotted value: evaluation time against the unrounded result."""

    x: int
    y: float

    def to_dict(self) -> dict[str, Any]:
        return {"x": self.x, "y": self.y}


class HistoryLog:
    """Most-recent-first calculation log capped at ``limit`` entries."""

    def __init__(self, limit: int = DEFAULT_HISTORY_LIMIT) -> None:
        if limit < 1:
            raise ValueError("History limit must be at least 1")
        self._entries: deque[Calculation] = deque(maxlen=limit)

    @property
    def limit(self) -> int:
        return self._entries.maxlen or 0

    def record(self, calculation: Calculation) -> None:
        # appendleft on a bounded deque evicts from the right, i.e. the oldest.
        self._entries.appendleft(calculation)

    def purge_all(self) -> None:
        self._entries.clear()

    def peek_most_recent(self) -> Calculation | None:
        return self._entries[0] if self._entries else None

    def find(self, calculation_id: str) -> Calculation | None:
        for entry in self._entries:
            if entry.id == calculation_id:
                return entry
        return None

    def __iter__(self) -> Iterator[Calculation]:
        return iter(tuple(self._entries))

    def __len__(self) -> int:
        return len(self._entries)


class GraphSeries:
    """Chronological series of plotted results capped at ``limit`` points."""

    def __init__(self, limit: int = DEFAULT_GRAPH_LIMIT) -> None:
        if limit < 1:
            raise ValueError("Graph limit must be at least 1")
        self._points: deque[GraphPoint] = deque(maxlen=limit)

    @property
    def limit(self) -> int:
        return self._points.maxlen or 0

    def record(self, point: GraphPoint) -> None:
        self._points.append(point)

    def __iter__(self) -> Iterator[GraphPoint]:
        return iter(tuple(self._points))

    def __len__(self) -> int:
        return len(self._points)


__all__ = [
    "Calculation",
    "GraphPoint",
    "GraphSeries",
    "HistoryLog",
    "DEFAULT_HISTORY_LIMIT",
    "DEFAULT_GRAPH_LIMIT",
]
