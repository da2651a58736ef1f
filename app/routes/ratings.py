"""
Ratings Routes - aggregated stats and per-fingerprint submissions
"""

from flask import Blueprint, request

import redis_cache
from api_responses import handle_api_errors, success_response, raw_json_response
from constants import CACHE_CONTROL_RATINGS, CACHE_CONTROL_NO_STORE, CACHE_TTL_RATINGS
from exceptions import BadRequestException
from rate_limit import rate_limited
from schemas import RatingsQuery, parse_game_id, validate_args
from services.rating_service import RatingService

ratings_bp = Blueprint("ratings", __name__, url_prefix="/api")


@ratings_bp.route("/ratings/<game_id>", methods=["GET"])
@rate_limited("moderate")
@handle_api_errors
def get_ratings(game_id):
    """Average, count and (optionally) the caller's own rating"""
    game_id = parse_game_id(game_id)
    args = validate_args(RatingsQuery, request.args)

    cache_key = redis_cache.make_cache_key(
        redis_cache.ratings_cache_prefix(game_id), fingerprint=args.fingerprint or ""
    )
    cached_data = redis_cache.cache_get(cache_key)
    if cached_data:
        resp = raw_json_response(cached_data, cache_control=CACHE_CONTROL_RATINGS)
        resp.headers["X-Cache"] = "HIT"
        return resp

    stats = RatingService.get_stats(game_id, args.fingerprint)
    redis_cache.cache_set(cache_key, stats, ttl=CACHE_TTL_RATINGS)
    return success_response(stats, cache_control=CACHE_CONTROL_RATINGS)


@ratings_bp.route("/ratings/<game_id>", methods=["POST"])
@rate_limited("strict")
@handle_api_errors
def submit_rating(game_id):
    game_id = parse_game_id(game_id)

    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        raise BadRequestException("Request body must be a JSON object")

    result = RatingService.submit(game_id, body.get("rating"), body.get("fingerprint"))
    return success_response(result, cache_control=CACHE_CONTROL_NO_STORE)
