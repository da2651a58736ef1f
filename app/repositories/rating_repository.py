"""
Repository for Rating database operations
"""

import logging

from sqlalchemy import func
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError

from db import db
from metrics import track_db_query
from models.rating import Rating
from utils import now_utc

logger = logging.getLogger("main")

# Dialects with INSERT ... ON CONFLICT DO UPDATE
UPSERT_INSERTS = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
}


class RatingRepository:
    """Repository for Rating database operations"""

    @staticmethod
    @track_db_query("rating_stats", phase="aggregate")
    def get_stats(game_id):
        """
        Returns (average, count) for a game; average is 0 when unrated
        """
        average, total = (
            db.session.query(func.coalesce(func.avg(Rating.rating), 0), func.count(Rating.id))
            .filter(Rating.game_id == game_id)
            .one()
        )
        return float(average), int(total)

    @staticmethod
    def get_user_rating(game_id, fingerprint):
        """The stored value for (game, fingerprint), or None"""
        row = (
            db.session.query(Rating.rating)
            .filter(Rating.game_id == game_id, Rating.user_fingerprint == fingerprint)
            .first()
        )
        return row[0] if row else None

    @staticmethod
    @track_db_query("rating_upsert", phase="write")
    def upsert(game_id, fingerprint, rating):
        """
        Insert or update the rating of (game, fingerprint) in one statement.
        Dialects without ON CONFLICT use select-then-write in one transaction.
        """
        dialect = db.session.get_bind().dialect.name
        now = now_utc()
        try:
            insert = UPSERT_INSERTS.get(dialect)
            if insert is not None:
                stmt = insert(Rating).values(
                    game_id=game_id,
                    user_fingerprint=fingerprint,
                    rating=rating,
                    created_at=now,
                    updated_at=now,
                )
                stmt = stmt.on_conflict_do_update(
                    index_elements=["game_id", "user_fingerprint"],
                    set_={"rating": stmt.excluded.rating, "updated_at": stmt.excluded.updated_at},
                )
                db.session.execute(stmt)
            else:
                existing = (
                    Rating.query.filter_by(game_id=game_id, user_fingerprint=fingerprint)
                    .with_for_update()
                    .first()
                )
                if existing:
                    existing.rating = rating
                    existing.updated_at = now
                else:
                    db.session.add(Rating(game_id=game_id, user_fingerprint=fingerprint, rating=rating))
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            raise
        logger.debug(f"RatingRepository.upsert: game_id={game_id} rating={rating} dialect={dialect}")

    @staticmethod
    def count():
        """Count total Rating records"""
        return Rating.query.count()
