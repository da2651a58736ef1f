"""
GamerBoy - Custom Exceptions and Exception Handlers
"""
import structlog
from flask import jsonify, request, current_app
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from utils import now_utc, isoformat

logger = structlog.get_logger('exceptions')


class ErrorCode:
    BAD_REQUEST = "BAD_REQUEST"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    DATABASE_ERROR = "DATABASE_ERROR"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"


class GamerBoyException(Exception):
    """Base exception for GamerBoy"""
    status_code = 500

    def __init__(self, message: str, code: str = ErrorCode.INTERNAL_SERVER_ERROR, details=None, status_code=None):
        self.message = message
        self.code = code
        self.details = details
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)

    def to_dict(self):
        payload = {
            'error': type(self).__name__,
            'code': self.code,
            'message': self.message,
            'timestamp': isoformat(now_utc()),
        }
        if self.details is not None:
            payload['details'] = self.details
        return payload


class BadRequestException(GamerBoyException):
    """Malformed or missing parameters, invalid ids or rating values"""
    status_code = 400

    def __init__(self, message: str = "Bad request", details=None):
        super().__init__(message, code=ErrorCode.BAD_REQUEST, details=details)


class ValidationException(GamerBoyException):
    """Schema-level validation failures (query/body bounds)"""
    status_code = 400

    def __init__(self, message: str = "Validation failed", details=None):
        super().__init__(message, code=ErrorCode.VALIDATION_ERROR, details=details)


class NotFoundException(GamerBoyException):
    status_code = 404

    def __init__(self, message: str = "Resource not found", details=None):
        super().__init__(message, code=ErrorCode.NOT_FOUND, details=details)


class RateLimitException(GamerBoyException):
    """Too many requests for the client's current window"""
    status_code = 429

    def __init__(self, retry_after_seconds: int, limit=None, window=None):
        self.retry_after_seconds = retry_after_seconds
        details = {'retryAfter': retry_after_seconds}
        if limit is not None:
            details['limit'] = limit
        if window is not None:
            details['window'] = window
        super().__init__(
            f"Rate limit exceeded. Try again in {retry_after_seconds} seconds.",
            code=ErrorCode.RATE_LIMIT_EXCEEDED,
            details=details,
        )


class DatabaseException(GamerBoyException):
    """Database-related exceptions"""
    status_code = 500

    def __init__(self, message: str = "Database operation failed", details=None):
        super().__init__(message, code=ErrorCode.DATABASE_ERROR, details=details)
        logger.error(f"Database error: {message}", details=details)


class InternalServerException(GamerBoyException):
    status_code = 500

    def __init__(self, message: str = "An unexpected error occurred", details=None):
        super().__init__(message, code=ErrorCode.INTERNAL_SERVER_ERROR, details=details)


def error_response(exc: GamerBoyException):
    """Render a GamerBoyException as the JSON error envelope"""
    response = jsonify(exc.to_dict())
    response.status_code = exc.status_code
    if isinstance(exc, RateLimitException):
        response.headers['Retry-After'] = str(exc.retry_after_seconds)
    return response


def register_exception_handlers(app):
    """Register exception handlers with Flask app"""

    @app.errorhandler(HTTPException)
    def handle_http_exception(e):
        """Handle HTTP exceptions (unknown routes, bad methods, malformed JSON)"""
        if e.code == 404:
            exc = NotFoundException(e.description)
        elif e.code and e.code < 500:
            exc = BadRequestException(e.description)
            exc.status_code = e.code
        else:
            exc = InternalServerException()
        return error_response(exc)

    @app.errorhandler(GamerBoyException)
    def handle_gamerboy_exception(e):
        """Handle GamerBoy custom exceptions"""
        if e.status_code >= 500:
            logger.error(f"[{request.path}] {type(e).__name__}: {e.message}", code=e.code, details=e.details)
        else:
            logger.warning(f"[{request.path}] {type(e).__name__}: {e.message}", code=e.code)
        return error_response(e)

    @app.errorhandler(SQLAlchemyError)
    def handle_database_exception(e):
        """Handle database errors that escaped the service layer"""
        from db import db
        db.session.rollback()
        return error_response(DatabaseException(details={'originalError': str(e)}))

    @app.errorhandler(Exception)
    def handle_generic_exception(e):
        """Handle all other exceptions"""
        logger.error(f"[{request.path}] Unhandled exception: {e}", exc_info=True)
        details = {'originalError': str(e)} if current_app.debug else None
        return error_response(InternalServerException(details=details))
