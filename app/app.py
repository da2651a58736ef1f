import logging
import sys

from flask import Flask
import structlog

from constants import BUILD_VERSION
from settings import reload_conf
from utils import ColoredFormatter, FilterRemoveDateFromWerkzeugLogs
from db import db, init_db
from exceptions import register_exception_handlers
from metrics import init_metrics
from rate_limit import init_rate_limiting
from redis_cache import init_cache, get_cache_stats

from routes.games import games_bp
from routes.ratings import ratings_bp
from routes.categories import categories_bp

_logging_configured = False


def configure_logging(log_settings):
    """Colored stdlib logging on stdout plus structlog (console or JSON renderer)"""
    global _logging_configured

    level = getattr(logging, str(log_settings.get("level", "INFO")).upper(), logging.INFO)
    logging.getLogger("main").setLevel(level)

    if _logging_configured:
        return

    formatter = ColoredFormatter(
        '[%(asctime)s.%(msecs)03d] %(levelname)s (%(module)s) %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
    )
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    logging.basicConfig(
        level=level,
        handlers=[handler]
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer() if log_settings.get("format") == 'json' else structlog.dev.ConsoleRenderer()
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # Apply filter to hide date from http access logs
    logging.getLogger('werkzeug').addFilter(FilterRemoveDateFromWerkzeugLogs())
    _logging_configured = True


logger = structlog.get_logger('main')


def create_app(test_config=None):
    """Application factory"""
    app_settings = reload_conf()
    configure_logging(app_settings["logging"])

    app = Flask(__name__)
    app.config["SQLALCHEMY_DATABASE_URI"] = app_settings["database"]["url"]
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
    app.config["RATELIMIT_ENABLED"] = bool(app_settings["rate_limit"]["enabled"])
    app.config["RATELIMIT_STORAGE_URI"] = app_settings["rate_limit"]["storage_uri"]
    app.config["REDIS_URL"] = app_settings["cache"]["redis_url"]
    app.config["SITE_URL"] = app_settings["site"]["base_url"]

    if test_config:
        app.config.update(test_config)

    # Initialize components
    db.init_app(app)
    init_rate_limiting(app)

    # Register exception handlers
    register_exception_handlers(app)

    # Register blueprints
    app.register_blueprint(games_bp)
    app.register_blueprint(ratings_bp)
    app.register_blueprint(categories_bp)

    @app.route("/api/health")
    def health():
        return {"status": "healthy", "version": BUILD_VERSION, "cache": get_cache_stats()}

    # Initialize metrics
    init_metrics(app)

    init_cache(app.config.get("REDIS_URL"))
    init_db(app)

    return app


if __name__ == '__main__':
    app = create_app()
    logger.info(f'Build Version: {BUILD_VERSION}')
    logger.info('Starting server on port 8465...')
    app.run(debug=False, use_reloader=False, host="0.0.0.0", port=8465)
    logger.info('Shutting down server...')
