from prometheus_client import Counter, Histogram, Gauge, generate_latest, CONTENT_TYPE_LATEST
from flask import Response, request
from sqlalchemy.exc import SQLAlchemyError
import logging
import time
from functools import wraps

logger = logging.getLogger("main")

# Query layer metrics
db_query_duration_seconds = Histogram(
    "gamerboy_db_query_duration_seconds", "Query layer call duration", ["operation", "phase"]
)

db_query_total = Counter("gamerboy_db_queries_total", "Total query layer calls", ["operation", "status"])

# Catalog metrics
catalog_games_total = Gauge("gamerboy_games_total", "Total number of games in the catalog")
catalog_categories_total = Gauge("gamerboy_categories_total", "Total number of categories")
catalog_ratings_total = Gauge("gamerboy_ratings_total", "Total number of stored ratings")

# API Metrics
api_request_duration_seconds = Histogram(
    "gamerboy_api_request_duration_seconds", "API request duration", ["endpoint", "method"]
)

api_requests_total = Counter("gamerboy_api_requests_total", "Total API requests", ["endpoint", "method", "status_code"])

# Ratings and rate limiting
rating_submissions_total = Counter("gamerboy_rating_submissions_total", "Rating submissions", ["status"])

rate_limit_rejections_total = Counter(
    "gamerboy_rate_limit_rejections_total", "Requests rejected by the rate limiter", ["endpoint"]
)


def init_metrics(app):
    @app.route("/api/metrics")
    def metrics():
        update_catalog_metrics()
        return Response(generate_latest(), mimetype=CONTENT_TYPE_LATEST)

    @app.before_request
    def before_request():
        request.start_time = time.time()

    @app.after_request
    def after_request(response):
        duration = time.time() - getattr(request, "start_time", time.time())
        api_request_duration_seconds.labels(endpoint=request.endpoint or "unknown", method=request.method).observe(
            duration
        )
        api_requests_total.labels(
            endpoint=request.endpoint or "unknown", method=request.method, status_code=response.status_code
        ).inc()
        return response

    app.logger.info("Prometheus metrics initialized at /api/metrics")


def update_catalog_metrics():
    """Refresh catalog gauges (games, categories, ratings)."""
    from repositories.games_repository import GamesRepository
    from repositories.category_repository import CategoryRepository
    from repositories.rating_repository import RatingRepository

    try:
        catalog_games_total.set(GamesRepository.count())
        catalog_categories_total.set(CategoryRepository.count())
        catalog_ratings_total.set(RatingRepository.count())
    except SQLAlchemyError as e:
        logger.warning(f"Could not refresh catalog metrics: {e}")


def track_db_query(operation, phase="unknown"):
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            start_time = time.time()
            try:
                result = func(*args, **kwargs)
                db_query_total.labels(operation=operation, status="success").inc()
                return result
            except Exception:
                db_query_total.labels(operation=operation, status="error").inc()
                raise
            finally:
                duration = time.time() - start_time
                db_query_duration_seconds.labels(operation=operation, phase=phase).observe(duration)

        return wrapper

    return decorator
