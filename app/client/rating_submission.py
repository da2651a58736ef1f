"""
Rating widget logic: optimistic selection, submission and rollback
"""
from dataclasses import dataclass
import logging
import threading
from typing import Optional

from client.api_client import ApiError
from constants import MIN_RATING, MAX_RATING

logger = logging.getLogger("main")


class SubmissionStatus:
    IDLE = "idle"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class RatingView:
    rating: int = 0  # value shown as selected, 0 = none
    average_rating: float = 0.0
    total_ratings: int = 0
    status: str = SubmissionStatus.IDLE
    error: Optional[str] = None
    retry_after: Optional[int] = None


class RatingSubmission:
    """
    idle -> submitting -> succeeded | failed. Input is rejected while a
    submission is in flight; failures revert to the last confirmed rating.
    Errors other than ApiError also revert and are then re-raised.
    Nothing is retried automatically.
    """

    def __init__(self, api, game_id, fingerprint, initial_rating=0, average_rating=0.0, total_ratings=0):
        self.api = api
        self.game_id = game_id
        self.fingerprint = fingerprint
        self.confirmed_rating = initial_rating
        self.view = RatingView(rating=initial_rating, average_rating=average_rating, total_ratings=total_ratings)
        self._lock = threading.Lock()

    @property
    def is_submitting(self):
        return self.view.status == SubmissionStatus.SUBMITTING

    def select(self, value):
        """Submit `value`. Returns False when the input was not accepted."""
        with self._lock:
            if self.is_submitting or not MIN_RATING <= value <= MAX_RATING:
                return False

            self.view.rating = value
            self.view.status = SubmissionStatus.SUBMITTING
            self.view.error = None
            self.view.retry_after = None

        try:
            result = self.api.submit_rating(self.game_id, value, self.fingerprint)
            average_rating = result.get("averageRating", self.view.average_rating)
            total_ratings = result.get("totalRatings", self.view.total_ratings)
        except Exception as e:
            logger.error(f"Failed to submit rating for game {self.game_id}: {e}")
            with self._lock:
                self.view.rating = self.confirmed_rating
                self.view.status = SubmissionStatus.FAILED
                if isinstance(e, ApiError):
                    self.view.error = e.message
                    self.view.retry_after = e.retry_after
                else:
                    self.view.error = str(e)
            if not isinstance(e, ApiError):
                raise
            return True

        with self._lock:
            self.confirmed_rating = value
            self.view.average_rating = average_rating
            self.view.total_ratings = total_ratings
            self.view.status = SubmissionStatus.SUCCEEDED
        return True

    def message(self):
        """Status line for the widget"""
        if self.view.status == SubmissionStatus.SUBMITTING:
            return "Submitting..."
        if self.view.status == SubmissionStatus.FAILED:
            if self.view.retry_after:
                return f"Too many ratings. Try again in {self.view.retry_after} seconds."
            return "Failed to submit rating"
        if self.view.rating > 0:
            return f"You rated this game {self.view.rating} star{'s' if self.view.rating != 1 else ''}"
        return ""
