"""
Repository for Category database operations
"""

from db import db
from models.category import Category


class CategoryRepository:
    """Repository for Category database operations"""

    @staticmethod
    def get_all():
        """Get all categories ordered by name"""
        return Category.query.order_by(Category.name).all()

    @staticmethod
    def count():
        """Count total Category records"""
        return db.session.query(Category.id).count()
