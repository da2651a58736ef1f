"""
Categories Routes
"""

from flask import Blueprint

from api_responses import handle_api_errors, success_response
from constants import CACHE_CONTROL_GAMES
from rate_limit import rate_limited
from repositories.category_repository import CategoryRepository

categories_bp = Blueprint("categories", __name__, url_prefix="/api")


@categories_bp.route("/categories")
@rate_limited("relaxed")
@handle_api_errors
def list_categories():
    """All categories ordered by name"""
    categories = [category.to_dict() for category in CategoryRepository.get_all()]
    return success_response({"categories": categories}, cache_control=CACHE_CONTROL_GAMES)
