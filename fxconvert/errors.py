"""Application-wide error utilities and handlers."""

from __future__ import annotations

import logging
from typing import Any

from flask import Flask, jsonify

from fxconvert.services.conversion import (
    ConversionError,
    InvalidRate,
    RatesUnavailable,
    UnknownCurrency,
)

logger = logging.getLogger(__name__)


class APIError(Exception):
    """Base class for API-level errors."""

    status_code: int = 400

    def __init__(
        self, message: str, *, status_code: int | None = None, payload: dict[str, Any] | None = None
    ):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.payload = payload or {}


class ServiceUnavailableError(APIError):
    """Raised when a dependency the route needs is not ready."""

    status_code = 503


DEFAULT_STATUS_MESSAGES: dict[int, str] = {
    400: "Request could not be processed.",
    404: "Resource not found.",
    422: "Submitted data is invalid.",
    502: "Upstream rate data is invalid.",
    503: "Service temporarily unavailable. Please retry in a moment.",
}

CONVERSION_STATUS_CODES: dict[type[ConversionError], int] = {
    RatesUnavailable: 503,
    UnknownCurrency: 422,
    InvalidRate: 502,
}


def conversion_status_code(error: ConversionError) -> int:
    for error_type, status in CONVERSION_STATUS_CODES.items():
        if isinstance(error, error_type):
            return status
    return 400


def register_error_handlers(app: Flask) -> None:
    """Attach error handlers to the Flask application."""

    @app.errorhandler(APIError)
    def handle_api_error(error: APIError):
        message = error.message or DEFAULT_STATUS_MESSAGES.get(error.status_code, "Request failed.")
        response: dict[str, Any] = {"message": message}
        if error.payload:
            response.update(error.payload)
        return jsonify(response), error.status_code

    @app.errorhandler(ConversionError)
    def handle_conversion_error(error: ConversionError):
        status = conversion_status_code(error)
        logger.info("Conversion rejected (%s): %s", error.kind, error)
        response: dict[str, Any] = {"message": str(error), "error": error.kind}
        if isinstance(error, UnknownCurrency):
            response["codes"] = list(error.codes)
        return jsonify(response), status
