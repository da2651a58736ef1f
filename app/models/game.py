"""
Model: Game
"""

from db import db, now_utc
from utils import isoformat


class Game(db.Model):
    __tablename__ = "games"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String, nullable=False)
    slug = db.Column(db.String, unique=True, nullable=False, index=True)  # Externally addressable id
    description = db.Column(db.Text, nullable=False)
    thumbnail = db.Column(db.String, nullable=False)
    game_id = db.Column(db.String, nullable=False)  # External player (GameDistribution) id
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=now_utc)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=now_utc, onupdate=now_utc)

    def to_dict(self, categories=None):
        """
        Serialize the game. When `categories` is given the result is a
        GameWithCategories payload.
        """
        data = {
            "id": self.id,
            "title": self.title,
            "slug": self.slug,
            "description": self.description,
            "thumbnail": self.thumbnail,
            "gameId": self.game_id,
            "createdAt": isoformat(self.created_at),
            "updatedAt": isoformat(self.updated_at),
        }
        if categories is not None:
            data["categories"] = [c.to_dict() for c in categories]
        return data

    def __repr__(self):
        return f"<Game {self.id} {self.slug}>"
