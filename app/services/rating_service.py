"""
Service layer for game ratings: validation, aggregation and the upsert path
"""
import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Dict, Any

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from constants import MIN_RATING, MAX_RATING
from exceptions import BadRequestException, DatabaseException
from metrics import rating_submissions_total
from redis_cache import invalidate_ratings_cache
from repositories.games_repository import GamesRepository
from repositories.rating_repository import RatingRepository

logger = logging.getLogger("main")

NO_RATINGS_LABEL = "No ratings"


def round_average(average) -> float:
    """Round half up to one decimal"""
    return float(Decimal(str(average)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def format_average(average, total) -> str:
    """Display label for an average rating"""
    if not total or not average:
        return NO_RATINGS_LABEL
    return f"{round_average(average):.1f}"


def validate_rating(value) -> int:
    """Accept integers 1..5 only (booleans and fractional numbers are rejected)"""
    if isinstance(value, bool):
        raise BadRequestException(f"Rating must be an integer between {MIN_RATING} and {MAX_RATING}")
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if not isinstance(value, int) or not MIN_RATING <= value <= MAX_RATING:
        raise BadRequestException(f"Rating must be an integer between {MIN_RATING} and {MAX_RATING}")
    return value


def validate_fingerprint(fingerprint) -> str:
    if not isinstance(fingerprint, str) or not fingerprint.strip():
        raise BadRequestException("User fingerprint is required")
    return fingerprint


class RatingService:
    """Aggregated rating stats and per-fingerprint submissions"""

    @staticmethod
    def get_stats(game_id: int, fingerprint: Optional[str] = None) -> Dict[str, Any]:
        try:
            average, total = RatingRepository.get_stats(game_id)
            user_rating = RatingRepository.get_user_rating(game_id, fingerprint) if fingerprint else None
        except SQLAlchemyError as e:
            raise DatabaseException("Failed to fetch ratings", details={"originalError": str(e)}) from e

        return {
            "gameId": game_id,
            "averageRating": round_average(average),
            "totalRatings": total,
            "userRating": user_rating,
        }

    @staticmethod
    def submit(game_id: int, rating, fingerprint) -> Dict[str, Any]:
        """
        Store (or replace) the fingerprint's rating of a game and return the
        fresh aggregate.
        """
        try:
            rating = validate_rating(rating)
            fingerprint = validate_fingerprint(fingerprint)
        except BadRequestException:
            rating_submissions_total.labels(status="rejected").inc()
            raise

        try:
            if not GamesRepository.exists(game_id):
                rating_submissions_total.labels(status="rejected").inc()
                raise BadRequestException(f"Game {game_id} does not exist")
            RatingRepository.upsert(game_id, fingerprint, rating)
        except IntegrityError as e:
            rating_submissions_total.labels(status="rejected").inc()
            raise BadRequestException("Rating could not be stored", details={"originalError": str(e.orig)}) from e
        except SQLAlchemyError as e:
            rating_submissions_total.labels(status="error").inc()
            raise DatabaseException("Failed to submit rating", details={"originalError": str(e)}) from e

        rating_submissions_total.labels(status="success").inc()
        invalidate_ratings_cache(game_id)
        logger.info(f"Rating stored: game_id={game_id} rating={rating}")

        stats = RatingService.get_stats(game_id, fingerprint)
        return {"success": True, **stats}
