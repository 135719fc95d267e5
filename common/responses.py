"""Standardized JSON response helpers."""

from __future__ import annotations

from typing import Any

from flask import Response, jsonify

from .errors import AppError


def ok(data: Any, *, status: int = 200) -> Response:
    """Return a success envelope: ``{"success": true, "data": ...}``."""

    response = jsonify({"success": True, "data": data})
    response.status_code = status
    return response


def fail(error: AppError, *, status: int | None = None) -> Response:
    """Return a failure envelope: ``{"success": false, "error": {...}}``."""

    response = jsonify({"success": False, "error": error.to_dict()})
    response.status_code = status or error.status_code
    return response


__all__ = ["ok", "fail"]
