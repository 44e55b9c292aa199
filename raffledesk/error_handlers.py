"""Map exceptions to the JSON error envelope."""

from __future__ import annotations

import logging

from flask import Flask, g
from marshmallow import ValidationError as MarshmallowValidationError
from sqlalchemy.exc import IntegrityError
from werkzeug.exceptions import HTTPException

from raffledesk.errors import AppError, ConflictError, ValidationError
from raffledesk.utils.responses import fail

logger = logging.getLogger(__name__)


def _mark_failed() -> None:
    # Handled errors reach teardown with exc=None; this forces a rollback.
    g.db_failed = True


def register_error_handlers(app: Flask) -> None:
    """Register error handlers for the Flask app."""

    @app.errorhandler(AppError)
    def _handle_app_error(exc: AppError):
        _mark_failed()
        if exc.status_code >= 500:
            logger.warning("Request failed code=%s message=%s", exc.code, exc.message)
        return fail(exc.code, exc.message, exc.status_code, exc.details)

    @app.errorhandler(MarshmallowValidationError)
    def _handle_schema_error(exc: MarshmallowValidationError):
        _mark_failed()
        wrapped = ValidationError(details=exc.messages)
        return fail(wrapped.code, wrapped.message, wrapped.status_code, wrapped.details)

    @app.errorhandler(IntegrityError)
    def _handle_integrity_error(exc: IntegrityError):
        _mark_failed()
        logger.info("Integrity error", exc_info=exc)
        wrapped = ConflictError(details=str(exc.orig) if exc.orig else str(exc))
        return fail(wrapped.code, wrapped.message, wrapped.status_code, wrapped.details)

    @app.errorhandler(HTTPException)
    def _handle_http_exception(exc: HTTPException):
        _mark_failed()
        status = int(getattr(exc, "code", 500) or 500)
        if status == 404:
            return fail("not_found", "Not found", 404)
        if status == 405:
            return fail("method_not_allowed", "Method not allowed", 405)

        return fail(
            "http_error",
            getattr(exc, "description", "HTTP error"),
            status,
            details={"name": getattr(exc, "name", "HTTPException")},
        )

    @app.errorhandler(Exception)
    def _handle_unexpected(exc: Exception):
        _mark_failed()
        logger.exception("Unhandled exception")
        return fail("internal_error", "Internal server error", 500)
