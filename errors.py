import logging

from flask import jsonify
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from extensions import db

logger = logging.getLogger(__name__)


class AppError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message=None, status_code=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code


class Unauthorized(AppError):
    status_code = 401
    default_message = "Unauthorized"


class Forbidden(AppError):
    status_code = 403
    default_message = "Forbidden"


class NotFound(AppError):
    status_code = 404
    default_message = "Not found"


class ValidationError(AppError):
    status_code = 400
    default_message = "Invalid request"


def parse_id(value, field="id"):
    """Integer primary key from request data, 400 when it is not one."""
    if isinstance(value, bool):
        raise ValidationError(f"Invalid {field}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {field}")


class InvalidTransition(AppError):
    status_code = 409
    default_message = "Invalid status transition"


class BackendFailure(AppError):
    status_code = 500
    default_message = "Backend failure"


class ConfigurationError(AppError):
    status_code = 500
    default_message = "Server configuration error"

    def __init__(self, detail=None):
        message = f"Server configuration error: {detail}" if detail else None
        super().__init__(message)


def error_response(message, status_code):
    return jsonify({"error": message}), status_code


def register_error_handlers(app):
    @app.errorhandler(AppError)
    def handle_app_error(err):
        if err.status_code >= 500:
            logger.error("%s: %s", type(err).__name__, err.message)
        return error_response(err.message, err.status_code)

    @app.errorhandler(HTTPException)
    def handle_http_exception(err):
        return error_response(err.description or err.name, err.code)

    @app.errorhandler(SQLAlchemyError)
    def handle_database_error(err):
        db.session.rollback()
        logger.exception("Database error")
        return error_response("Database operation failed", 500)

    @app.errorhandler(Exception)
    def handle_unexpected(err):
        logger.exception("Unhandled exception")
        return error_response("Internal server error", 500)
