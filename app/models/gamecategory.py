"""
Model: GameCategory
Many-to-many link between games and categories. Duplicate pairs are
tolerated; readers collapse them.
"""

from db import db, now_utc


class GameCategory(db.Model):
    __tablename__ = "game_categories"

    id = db.Column(db.Integer, primary_key=True)
    game_id = db.Column(db.Integer, db.ForeignKey("games.id", ondelete="CASCADE"), nullable=False)
    category_id = db.Column(db.Integer, db.ForeignKey("categories.id", ondelete="CASCADE"), nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=now_utc)

    __table_args__ = (
        db.Index("idx_game_categories_game_id", "game_id"),
        db.Index("idx_game_categories_category_id", "category_id"),
    )
