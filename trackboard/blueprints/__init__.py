"""
TrackBoard blueprint registry and app-wide error mapping.

Services raise the exceptions in ``trackboard.core.exceptions``; the
handlers below translate them to ``{"error", "code"}`` JSON bodies so no
route needs its own try/except.
"""

import logging

from flask import request
from werkzeug.exceptions import HTTPException

from trackboard.core.exceptions import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    PermissionDenied,
    ValidationError,
)
from trackboard.models import db
from trackboard.utils.errors import E, api_error

logger = logging.getLogger(__name__)

_HTTP_CODES = {
    400: E.VALIDATION_INVALID,
    401: E.UNAUTHORIZED,
    403: E.FORBIDDEN,
    404: E.NOT_FOUND,
    405: E.METHOD_NOT_ALLOWED,
    409: E.CONFLICT_DUPLICATE,
    429: E.RATE_LIMITED,
}


def json_body() -> dict:
    """The request JSON object; a missing or unparsable body reads as {}.

    Any other JSON value (array, string, number) is rejected with 400.
    """
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def parse_limit(default=None, max_limit=1000):
    """Read an optional positive ``limit`` query parameter."""
    raw = request.args.get("limit")
    if raw is None:
        return default
    try:
        limit = int(raw)
    except (TypeError, ValueError):
        raise ValidationError("limit must be an integer", details={"limit": "invalid"})
    if limit < 1:
        raise ValidationError("limit must be positive", details={"limit": "invalid"})
    return min(limit, max_limit)


def register_error_handlers(app):
    """Map service exceptions and HTTP errors to JSON responses."""

    @app.errorhandler(NotFoundError)
    def _handle_not_found(error: NotFoundError):
        logger.info("Not found on %s %s: %s", request.method, request.path, error)
        return api_error(E.NOT_FOUND, error.public_message)

    @app.errorhandler(ValidationError)
    def _handle_validation(error: ValidationError):
        code = E.VALIDATION_REQUIRED if "required" in error.details.values() else E.VALIDATION_INVALID
        return api_error(code, str(error), details=error.details)

    @app.errorhandler(ConflictError)
    def _handle_conflict(error: ConflictError):
        return api_error(E.CONFLICT_DUPLICATE, error.public_message)

    @app.errorhandler(AuthenticationError)
    def _handle_unauthenticated(error: AuthenticationError):
        return api_error(E.UNAUTHORIZED, str(error) or "Unauthorized")

    @app.errorhandler(PermissionDenied)
    def _handle_forbidden(error: PermissionDenied):
        return api_error(E.FORBIDDEN, str(error))

    @app.errorhandler(HTTPException)
    def _handle_http(error: HTTPException):
        code = _HTTP_CODES.get(error.code, E.VALIDATION_INVALID if error.code < 500 else E.INTERNAL)
        message = "Too many requests" if error.code == 429 else error.name
        return api_error(code, message, status=error.code)

    @app.errorhandler(Exception)
    def _handle_unexpected(error: Exception):
        logger.exception("Unexpected error endpoint=%s", request.endpoint)
        db.session.rollback()
        return api_error(E.INTERNAL, "Internal server error")
