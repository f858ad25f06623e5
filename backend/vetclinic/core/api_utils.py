"""
Common API utilities for consistent response formatting across all controllers.
"""

import logging
from typing import Any, Optional

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from vetclinic.core.exceptions import (
    AuthorizationError,
    ConflictError,
    InvalidStateError,
    NotFoundError,
    SchedulingError,
    ValidationError,
)

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR = {
    ValidationError: 400,
    AuthorizationError: 403,
    NotFoundError: 404,
    ConflictError: 409,
    InvalidStateError: 409,
}


def api_response(
    success: bool, message: str, data: Optional[Any] = None, status_code: int = 200
) -> tuple:
    """
    Standardized API response format for all endpoints.

    Returns:
        Tuple of (json_response, status_code)
    """
    response = {"success": success, "message": message}

    if data is not None:
        response["data"] = data

    return jsonify(response), status_code


def error_response(error: str, message: str, status_code: int, field: Optional[str] = None):
    body = {"success": False, "error": error, "message": message}
    if field:
        body["field"] = field
    return jsonify(body), status_code


def register_error_handlers(app: Flask) -> None:
    """Translate service exceptions into the uniform JSON error body."""

    @app.errorhandler(SchedulingError)
    def handle_scheduling_error(exc: SchedulingError):
        status = next(
            (code for kind, code in _STATUS_BY_ERROR.items() if isinstance(exc, kind)),
            400,
        )
        logger.info(
            f"Request rejected: {exc.message}",
            extra={"context": {"error": exc.error_code, "status_code": status}},
        )
        return error_response(exc.error_code, exc.message, status, exc.field)

    @app.errorhandler(HTTPException)
    def handle_http_error(exc: HTTPException):
        return error_response(
            exc.name.lower().replace(" ", "_"), exc.description or exc.name, exc.code or 500
        )

    @app.errorhandler(Exception)
    def handle_unexpected_error(exc: Exception):
        logger.error(
            "Unhandled error while serving request",
            extra={"context": {"error": str(exc)}},
            exc_info=True,
        )
        return error_response("server_error", "Internal server error", 500)
