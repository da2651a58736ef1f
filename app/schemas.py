"""
Request validation schemas for the public API
"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator, ValidationError as PydanticValidationError

from constants import DEFAULT_PAGE, DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, DEFAULT_RELATED_LIMIT, DEFAULT_FEATURED_LIMIT, MAX_ID
from exceptions import ValidationException


class GamesQuery(BaseModel):
    page: int = Field(DEFAULT_PAGE, gt=0)
    limit: int = Field(DEFAULT_PAGE_SIZE, gt=0, le=MAX_PAGE_SIZE)
    q: Optional[str] = Field(None, min_length=1)
    categories: Optional[str] = None


class GamesByIdsQuery(BaseModel):
    ids: str = Field(min_length=1)


class RelatedGamesQuery(BaseModel):
    limit: int = Field(DEFAULT_RELATED_LIMIT, gt=0, le=MAX_PAGE_SIZE)


class FeaturedGamesQuery(BaseModel):
    limit: int = Field(DEFAULT_FEATURED_LIMIT, gt=0, le=MAX_PAGE_SIZE)


class GameIdParam(BaseModel):
    gameId: str = Field(pattern=r"^\d+$")

    @field_validator("gameId")
    @classmethod
    def fits_id_column(cls, value):
        if int(value) > MAX_ID:
            raise ValueError(f"must be at most {MAX_ID}")
        return value


class RatingsQuery(BaseModel):
    fingerprint: Optional[str] = None


def validate_args(schema, data):
    """
    Validate a mapping of request values against `schema`.
    Raises ValidationException listing every offending field.
    """
    try:
        return schema.model_validate(dict(data))
    except PydanticValidationError as e:
        errors = [
            {"field": ".".join(str(part) for part in err["loc"]), "message": err["msg"]}
            for err in e.errors()
        ]
        raise ValidationException("Invalid request parameters", details={"errors": errors}) from e


def parse_game_id(game_id) -> int:
    """Validated numeric game id from a URL segment"""
    return int(validate_args(GameIdParam, {"gameId": str(game_id)}).gameId)
