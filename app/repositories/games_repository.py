"""
Repository for Games database operations
Listing, lookup and related-games queries. Every list result is a list of
GameWithCategories payloads (Game.to_dict(categories=...)).
"""

import time
import logging
from typing import NamedTuple, List, Optional

from sqlalchemy import func, distinct, select
from sqlalchemy.orm import aliased

from constants import ALL_CATEGORIES, DEFAULT_PAGE, DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, DEFAULT_RELATED_LIMIT, DEFAULT_FEATURED_LIMIT
from db import db
from metrics import track_db_query
from models.game import Game
from models.category import Category
from models.gamecategory import GameCategory

logger = logging.getLogger("main")

LIKE_ESCAPE = "\\"


class GamesPage(NamedTuple):
    games: List[dict]
    total_count: int


def normalize_search(search: Optional[str]) -> Optional[str]:
    """Blank or whitespace-only search means no search filter"""
    if search is None:
        return None
    search = search.strip()
    return search or None


def normalize_categories(categories) -> List[str]:
    """
    An empty list, a list containing "all" or a list whose first entry is ""
    means no category filter. Other empty entries are dropped.
    """
    if not categories:
        return []
    categories = list(categories)
    if categories[0] == "" or ALL_CATEGORIES in categories:
        return []
    return [c for c in categories if c]


def escape_like(text: str) -> str:
    """Escape LIKE wildcards so they match literally"""
    return (
        text.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", f"{LIKE_ESCAPE}%")
        .replace("_", f"{LIKE_ESCAPE}_")
    )


def title_contains(search: str):
    return Game.title.ilike(f"%{escape_like(search)}%", escape=LIKE_ESCAPE)


def category_game_ids(slugs: List[str]) -> List[int]:
    """Resolve category slugs to the ids of games linked to any of them (one query)"""
    rows = (
        db.session.query(distinct(GameCategory.game_id))
        .join(Category, Category.id == GameCategory.category_id)
        .filter(Category.slug.in_(slugs))
        .all()
    )
    return [row[0] for row in rows]


def attach_categories(games: List[Game]) -> List[dict]:
    """
    Load the categories of the given games with a single join query and
    serialize each game with its categories (ordered by category id,
    duplicate links collapsed).
    """
    if not games:
        return []

    game_ids = [game.id for game in games]
    rows = (
        db.session.query(GameCategory.game_id, Category)
        .join(Category, Category.id == GameCategory.category_id)
        .filter(GameCategory.game_id.in_(game_ids))
        .order_by(GameCategory.game_id, Category.id)
        .all()
    )

    by_game = {}
    for game_id, category in rows:
        categories = by_game.setdefault(game_id, [])
        if not categories or categories[-1].id != category.id:
            categories.append(category)

    return [game.to_dict(categories=by_game.get(game.id, [])) for game in games]


class GamesRepository:
    """Repository for Games database operations"""

    @staticmethod
    @track_db_query("get_games", phase="list")
    def get_games(search=None, categories=None, page=DEFAULT_PAGE, limit=DEFAULT_PAGE_SIZE) -> GamesPage:
        """
        Filtered, paginated listing ordered by id.
        Issues one COUNT query, one page query and one category query
        (plus one query to resolve the category filter when present).
        """
        page = max(int(page), 1)
        limit = min(max(int(limit), 1), MAX_PAGE_SIZE)
        search = normalize_search(search)
        slugs = normalize_categories(categories)

        start = time.time()
        query = Game.query

        if slugs:
            game_ids = category_game_ids(slugs)
            if not game_ids:
                logger.debug(f"GamesRepository.get_games: no games for categories={slugs}")
                return GamesPage([], 0)
            query = query.filter(Game.id.in_(game_ids))

        if search:
            query = query.filter(title_contains(search))

        total = query.count()
        games = []
        if total and (page - 1) * limit < total:
            games = query.order_by(Game.id).offset((page - 1) * limit).limit(limit).all()

        result = GamesPage(attach_categories(games), total)
        duration = (time.time() - start) * 1000.0
        logger.info(
            f"GamesRepository.get_games: search={search!r} categories={slugs} page={page} limit={limit} "
            f"total={total} duration_ms={duration:.1f}"
        )
        return result

    @staticmethod
    @track_db_query("get_games_by_ids", phase="list")
    def get_games_by_ids(ids) -> List[dict]:
        """
        Games in the order of `ids`. Unknown ids are dropped and repeated ids
        are returned once (first occurrence).
        """
        unique_ids = list(dict.fromkeys(ids))
        if not unique_ids:
            return []

        rows = Game.query.filter(Game.id.in_(unique_ids)).all()
        by_id = {game.id: game for game in rows}
        ordered = [by_id[game_id] for game_id in unique_ids if game_id in by_id]
        return attach_categories(ordered)

    @staticmethod
    @track_db_query("get_related_games", phase="list")
    def get_related_games(game_id, limit=DEFAULT_RELATED_LIMIT) -> List[dict]:
        """
        Games sharing at least one category with `game_id`, most shared
        categories first, ties broken by ascending id.
        """
        if limit <= 0:
            return []

        target = aliased(GameCategory)
        target_categories = select(target.category_id).where(target.game_id == game_id)
        shared = func.count(distinct(GameCategory.category_id)).label("shared")

        rows = (
            db.session.query(GameCategory.game_id, shared)
            .filter(GameCategory.category_id.in_(target_categories))
            .filter(GameCategory.game_id != game_id)
            .group_by(GameCategory.game_id)
            .order_by(shared.desc(), GameCategory.game_id.asc())
            .limit(limit)
            .all()
        )
        if not rows:
            return []

        return GamesRepository.get_games_by_ids([row[0] for row in rows])

    @staticmethod
    def get_game_by_id(game_id) -> Optional[dict]:
        game = db.session.get(Game, game_id)
        if game is None:
            return None
        return attach_categories([game])[0]

    @staticmethod
    def get_game_by_slug(slug) -> Optional[dict]:
        game = Game.query.filter_by(slug=slug).first()
        if game is None:
            return None
        return attach_categories([game])[0]

    @staticmethod
    @track_db_query("get_featured_games", phase="list")
    def get_featured_games(limit=DEFAULT_FEATURED_LIMIT) -> List[dict]:
        """First `limit` games by id"""
        games = Game.query.order_by(Game.id).limit(limit).all()
        return attach_categories(games)

    @staticmethod
    @track_db_query("get_games_by_category", phase="list")
    def get_games_by_category(categories) -> List[dict]:
        """All games linked to any of the category slugs (unpaginated)"""
        slugs = normalize_categories(categories)
        query = Game.query
        if slugs:
            game_ids = category_game_ids(slugs)
            if not game_ids:
                return []
            query = query.filter(Game.id.in_(game_ids))
        return attach_categories(query.order_by(Game.id).all())

    @staticmethod
    @track_db_query("search_games", phase="list")
    def search_games(search) -> List[dict]:
        """All games whose title contains `search` (case-insensitive)"""
        search = normalize_search(search)
        query = Game.query
        if search:
            query = query.filter(title_contains(search))
        return attach_categories(query.order_by(Game.id).all())

    @staticmethod
    def exists(game_id) -> bool:
        return db.session.query(Game.id).filter(Game.id == game_id).first() is not None

    @staticmethod
    def count():
        """Count total Game records"""
        return Game.query.count()
