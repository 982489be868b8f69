"""
Rating Schemas - Pydantic models for rating request/response validation
"""
from pydantic import ConfigDict, Field

from catalog_api.schemas.common import CamelModel


class RatingSubmit(CamelModel):
    """Schema for creating/updating a rating (0.5 - 5.0 in 0.5 steps)"""
    rating: float = Field(..., description="Rating value (0.5 - 5.0, half steps)")

    model_config = ConfigDict(json_schema_extra={"example": {"rating": 4.5}})


class RatingResult(CamelModel):
    movie_title: str
    rater_id: str
    rating: float


class RatingAggregate(CamelModel):
    """Average (one decimal) and number of ratings for a movie"""
    average: float = Field(..., description="Average user rating")
    count: int = Field(..., description="Total ratings for this movie")

    model_config = ConfigDict(json_schema_extra={"example": {"average": 4.2, "count": 156}})
