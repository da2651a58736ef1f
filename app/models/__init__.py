"""
Models package

One module per table:
- category.py
- game.py
- gamecategory.py
- rating.py

GameWithCategories is not persisted; the query layer builds it on read by
passing the resolved categories to Game.to_dict().
"""

from .category import Category
from .game import Game
from .gamecategory import GameCategory
from .rating import Rating

__all__ = [
    "Category",
    "Game",
    "GameCategory",
    "Rating",
]
