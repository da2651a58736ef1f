"""
Service layer for the game catalog
"""
import logging
from typing import List, Optional
from urllib.parse import quote

from constants import GAME_PLAYER_URL
from exceptions import BadRequestException, NotFoundException
from repositories.games_repository import GamesRepository
from api_responses import paginated_games_payload
from utils import parse_id_list

logger = logging.getLogger("main")


def generate_iframe_url(external_game_id: str, game_slug: str, base_url: Optional[str] = None) -> str:
    """
    Player URL for a game, carrying the page it is embedded in as the
    referrer parameter.
    """
    page_url = f"{(base_url or '').rstrip('/')}/games/{game_slug}"
    return f"{GAME_PLAYER_URL}/{external_game_id}/?gd_sdk_referrer_url={quote(page_url, safe='')}"


def list_games(search=None, categories: Optional[str] = None, page=1, limit=12):
    """Paginated listing payload: {games, pagination}"""
    result = GamesRepository.get_games(
        search=search,
        categories=[part.strip() for part in categories.split(",")] if categories is not None else None,
        page=page,
        limit=limit,
    )
    return paginated_games_payload(result.games, result.total_count, page, limit)


def games_by_ids(raw_ids: str) -> List[dict]:
    ids = parse_id_list(raw_ids)
    if not ids:
        raise BadRequestException("No valid game ids provided", details={"ids": raw_ids})
    return GamesRepository.get_games_by_ids(ids)


def game_detail(slug: str, base_url: Optional[str] = None):
    """{game, iframeUrl} for a slug"""
    game = GamesRepository.get_game_by_slug(slug)
    if game is None:
        raise NotFoundException(f"Game '{slug}' not found")
    return {
        "game": game,
        "iframeUrl": generate_iframe_url(game["gameId"], game["slug"], base_url),
    }
