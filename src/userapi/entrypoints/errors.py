"""ABOUTME: JSON error bodies returned by every API endpoint
ABOUTME: One shape for field validation, not-found, conflict and dependency failures"""

from datetime import UTC, datetime
from typing import Any

from flask import Response, jsonify, request


def error_body(
    status: int,
    error: str,
    message: str,
    path: str = "",
    validation_errors: list[str] | None = None,
) -> dict[str, Any]:
    body: dict[str, Any] = {
        "timestamp": datetime.now(UTC).isoformat(),
        "status": status,
        "error": error,
        "message": message,
        "path": path or request.path,
    }
    if validation_errors is not None:
        body["validationErrors"] = validation_errors
    return body


def error_response(
    status: int, error: str, message: str, validation_errors: list[str] | None = None
) -> tuple[Response, int]:
    return jsonify(error_body(status, error, message, validation_errors=validation_errors)), status
