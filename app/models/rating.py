"""
Model: Rating
One row per (game, fingerprint), enforced by a unique constraint so the
write path can be a single INSERT ... ON CONFLICT DO UPDATE.
"""

from db import db, now_utc
from utils import isoformat


class Rating(db.Model):
    __tablename__ = "ratings"

    id = db.Column(db.Integer, primary_key=True)
    game_id = db.Column(db.Integer, db.ForeignKey("games.id", ondelete="CASCADE"), nullable=False)
    user_fingerprint = db.Column(db.String, nullable=False)
    rating = db.Column(db.Integer, nullable=False)  # 1-5
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=now_utc)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=now_utc, onupdate=now_utc)

    __table_args__ = (
        db.UniqueConstraint("game_id", "user_fingerprint", name="uq_ratings_game_fingerprint"),
        db.CheckConstraint("rating BETWEEN 1 AND 5", name="ck_ratings_range"),
        db.Index("idx_ratings_game_id", "game_id"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "gameId": self.game_id,
            "rating": self.rating,
            "createdAt": isoformat(self.created_at),
            "updatedAt": isoformat(self.updated_at),
        }
