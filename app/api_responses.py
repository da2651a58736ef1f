"""
API Response Utilities - JSON responses with cache headers and a common
error boundary for route handlers
"""

from flask import jsonify, Response
from functools import wraps
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException
import logging

from db import db
from exceptions import GamerBoyException, DatabaseException, InternalServerException

logger = logging.getLogger("main")


def success_response(data, status_code=200, cache_control=None):
    """
    Plain JSON body (no envelope) with an optional Cache-Control header
    """
    response = jsonify(data)
    response.status_code = status_code
    if cache_control:
        response.headers["Cache-Control"] = cache_control
    return response


def raw_json_response(body: str, status_code=200, cache_control=None):
    """
    Serve an already-serialized JSON document (e.g. a cache hit)
    """
    response = Response(body, status=status_code, mimetype="application/json")
    if cache_control:
        response.headers["Cache-Control"] = cache_control
    return response


def pagination_payload(page, limit, total):
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "hasMore": page * limit < total,
    }


def paginated_games_payload(games, total, page, limit):
    """
    Standard paginated body for game listings
    """
    return {
        "games": games,
        "pagination": pagination_payload(page, limit, total),
    }


def handle_api_errors(f):
    """
    Decorator to standardize error handling for API endpoints.
    Typed errors pass through to the registered handlers; raw database
    errors become DatabaseException and anything else InternalServerException.
    """

    @wraps(f)
    def wrapper(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except (GamerBoyException, HTTPException):
            raise
        except SQLAlchemyError as e:
            db.session.rollback()
            raise DatabaseException(
                f"Database operation failed in {f.__name__}", details={"originalError": str(e)}
            ) from e
        except Exception as e:
            logger.error(f"Unhandled exception in {f.__name__}: {e}", exc_info=True)
            raise InternalServerException() from e

    return wrapper
