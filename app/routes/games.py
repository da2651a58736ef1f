"""
Games Routes - catalog listing, lookup by ids, detail and related games
"""

import logging

from flask import Blueprint, request, current_app

import redis_cache
from api_responses import handle_api_errors, success_response, raw_json_response
from constants import (
    CACHE_CONTROL_GAMES,
    CACHE_CONTROL_GAMES_BY_IDS,
    CACHE_TTL_GAMES,
    CACHE_TTL_GAMES_BY_IDS,
)
from rate_limit import rate_limited
from repositories.games_repository import GamesRepository
from schemas import GamesQuery, GamesByIdsQuery, RelatedGamesQuery, FeaturedGamesQuery, parse_game_id, validate_args
from services import games_service

logger = logging.getLogger("main")

games_bp = Blueprint("games", __name__, url_prefix="/api")


def cached_response(cache_key, cache_control):
    """Serve a cached payload, or None on a miss"""
    cached_data = redis_cache.cache_get(cache_key)
    if not cached_data:
        return None
    resp = raw_json_response(cached_data, cache_control=cache_control)
    resp.headers["X-Cache"] = "HIT"
    return resp


@games_bp.route("/games")
@rate_limited("relaxed")
@handle_api_errors
def list_games():
    """Paginated catalog filtered by title search and category slugs"""
    args = validate_args(GamesQuery, request.args)

    cache_key = redis_cache.make_cache_key(
        "games", page=args.page, limit=args.limit, q=args.q or "", categories=args.categories or ""
    )
    hit = cached_response(cache_key, CACHE_CONTROL_GAMES)
    if hit is not None:
        return hit

    payload = games_service.list_games(
        search=args.q, categories=args.categories, page=args.page, limit=args.limit
    )
    redis_cache.cache_set(cache_key, payload, ttl=CACHE_TTL_GAMES)
    return success_response(payload, cache_control=CACHE_CONTROL_GAMES)


@games_bp.route("/games/by-ids")
@rate_limited("moderate")
@handle_api_errors
def games_by_ids():
    """Games for a comma separated id list, in the order given"""
    args = validate_args(GamesByIdsQuery, request.args)

    cache_key = redis_cache.make_cache_key("games_by_ids", ids=args.ids)
    hit = cached_response(cache_key, CACHE_CONTROL_GAMES_BY_IDS)
    if hit is not None:
        return hit

    payload = {"games": games_service.games_by_ids(args.ids)}
    redis_cache.cache_set(cache_key, payload, ttl=CACHE_TTL_GAMES_BY_IDS)
    return success_response(payload, cache_control=CACHE_CONTROL_GAMES_BY_IDS)


@games_bp.route("/games/featured")
@rate_limited("relaxed")
@handle_api_errors
def featured_games():
    args = validate_args(FeaturedGamesQuery, request.args)
    games = GamesRepository.get_featured_games(args.limit)
    return success_response({"games": games}, cache_control=CACHE_CONTROL_GAMES)


@games_bp.route("/games/<slug>")
@rate_limited("relaxed")
@handle_api_errors
def game_detail(slug):
    """Single game with its categories and player URL"""
    payload = games_service.game_detail(slug, base_url=current_app.config.get("SITE_URL"))
    return success_response(payload, cache_control=CACHE_CONTROL_GAMES)


@games_bp.route("/games/<int:game_id>/related")
@rate_limited("relaxed")
@handle_api_errors
def related_games(game_id):
    game_id = parse_game_id(game_id)
    args = validate_args(RelatedGamesQuery, request.args)
    games = GamesRepository.get_related_games(game_id, args.limit)
    return success_response({"games": games}, cache_control=CACHE_CONTROL_GAMES)
