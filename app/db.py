from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import event
import sqlite3
import logging
from utils import now_utc

# Retrieve main logger
logger = logging.getLogger("main")

db = SQLAlchemy()


def init_db(app):
    """Create the schema (idempotent) and configure SQLite connections"""
    # Registers the tables on db.metadata
    import models  # noqa: F401

    with app.app_context():
        engine = db.engine

        # Ensure foreign keys (cascades) and a busy timeout on every connection
        @event.listens_for(engine, "connect")
        def set_sqlite_pragma(dbapi_connection, connection_record):
            if not isinstance(dbapi_connection, sqlite3.Connection):
                return

            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON;")
            cursor.execute("PRAGMA busy_timeout=30000;")
            cursor.close()

        # Connections opened before the listener existed miss the pragmas
        engine.dispose()

        db.create_all()
        logger.info(f"Database ready ({engine.dialect.name})")
