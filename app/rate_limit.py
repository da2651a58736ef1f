"""
Rate limiting (Flask-Limiter, fixed window) keyed by client address.

Storage comes from RATELIMIT_STORAGE_URI: memory:// keeps counters in the
current process only and loses them on restart; use redis:// to share them
between instances.
"""

import math
import time
import logging

from flask import request, current_app
from flask_limiter import Limiter
from flask_limiter.errors import RateLimitExceeded

from constants import RATE_LIMIT_PRESETS, UNKNOWN_CLIENT
from exceptions import RateLimitException, error_response
from metrics import rate_limit_rejections_total

logger = logging.getLogger("main")


def client_identifier():
    """First X-Forwarded-For entry, else X-Real-IP, else a shared bucket"""
    forwarded = request.headers.get("X-Forwarded-For", "")
    first = forwarded.split(",")[0].strip()
    if first:
        return first
    real_ip = request.headers.get("X-Real-IP", "").strip()
    return real_ip or UNKNOWN_CLIENT


# Retry-After is set by error_response, from the same value as details.retryAfter
limiter = Limiter(key_func=client_identifier, strategy="fixed-window")


def get_preset(preset):
    """(max requests, window seconds) of a preset; the app config may override the table"""
    presets = current_app.config.get("RATE_LIMIT_PRESETS") or RATE_LIMIT_PRESETS
    return presets[preset]


def limit_for(preset):
    max_requests, window = get_preset(preset)
    return f"{max_requests} per {window} seconds"


def rate_limited(preset):
    """
    Decorator applying one of the named presets (strict, moderate, relaxed)
    to a view.
    """
    if preset not in RATE_LIMIT_PRESETS:
        raise ValueError(f"Unknown rate limit preset: {preset}")
    return limiter.limit(lambda: limit_for(preset))


def retry_after_seconds(window, reset_at=None):
    """
    Seconds until the breached window resets, between 1 and the window length.
    reset_at defaults to the reset time of the limit checked for this request.
    """
    window = int(window)
    if reset_at is None:
        current = limiter.current_limit
        if current is None:
            return max(1, window)
        reset_at = current.reset_at
    return min(max(1, window), max(1, math.ceil(reset_at - time.time())))


def handle_rate_limit_exceeded(e):
    item = e.limit.limit
    window = item.get_expiry()
    retry_after = retry_after_seconds(window)
    rate_limit_rejections_total.labels(endpoint=request.endpoint or "unknown").inc()
    logger.warning(
        f"Rate limit exceeded: client={client_identifier()} endpoint={request.endpoint} retry_after={retry_after}s"
    )
    return error_response(RateLimitException(retry_after, limit=item.amount, window=window))


def init_rate_limiting(app):
    limiter.init_app(app)
    app.register_error_handler(RateLimitExceeded, handle_rate_limit_exceeded)
    logger.info(
        f"Rate limiting {'enabled' if app.config.get('RATELIMIT_ENABLED', True) else 'disabled'} "
        f"(storage: {app.config.get('RATELIMIT_STORAGE_URI', 'memory://')})"
    )
