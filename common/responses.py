"""Standardized JSON response helpers."""

from __future__ import annotations

from typing import Any, Mapping

from flask import Flask, Response, jsonify

from .errors import (
    AppError,
    MethodNotAllowedAppError,
    NotFoundAppError,
    ensure_app_error,
)
from .logging import get_logger


def ok(data: Any, *, status: int = 200) -> Response:
    """Return a success envelope."""

    response = jsonify({"success": True, "data": data})
    response.status_code = status
    return response


def fail(error: AppError | Mapping[str, Any], *, status: int | None = None) -> Response:
    """Return a standardized failure envelope."""

    if isinstance(error, AppError):
        response = jsonify({"success": False, "error": error.to_dict()})
        response.status_code = status or error.status_code
        return response

    response = jsonify({"success": False, "error": dict(error)})
    response.status_code = status or 400
    return response


def install_error_handlers(app: Flask) -> None:
    """Render HTTP errors with the same envelope as the plugin APIs."""

    logger = get_logger()

    @app.errorhandler(404)
    def not_found(error):
        return fail(NotFoundAppError(message="Resource not found"))

    @app.errorhandler(405)
    def method_not_allowed(error):
        return fail(MethodNotAllowedAppError(message="Method not allowed"))

    @app.errorhandler(413)
    def payload_too_large(error):  # pragma: no cover - depends on MAX_CONTENT_LENGTH
        return fail({"code": "payload_too_large", "message": "Request body too large"}, status=413)

    @app.errorhandler(500)
    def server_error(error):  # pragma: no cover - exercised only on crashes
        original = getattr(error, "original_exception", None) or error
        logger.exception("unhandled error", exc_info=original)
        return fail(ensure_app_error(original, fallback_code="internal_error"))


__all__ = ["ok", "fail", "install_error_handlers"]
