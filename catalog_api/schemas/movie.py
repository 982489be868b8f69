"""
Movie Schemas - request/response models for the catalogue endpoints
"""
from pydantic import ConfigDict, Field
from typing import List, Optional

from catalog_api.schemas.common import CamelModel


class MovieCreate(CamelModel):
    """
    Candidate movie submitted by a client.
    Presence and format checks happen in MovieService so they apply to every caller.
    """
    title: str = Field(..., description="Unique movie title")
    genre: str = Field(..., description="Genre name")
    release_date: str = Field(..., description="Release date (YYYY-MM-DD)")
    distributor: Optional[str] = None
    budget: Optional[int] = Field(None, description="Production budget")
    mpa_rating: Optional[str] = Field(None, description="MPA rating classification")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Inception",
                "genre": "Sci-Fi",
                "releaseDate": "2010-07-16",
                "distributor": "Warner Bros.",
                "budget": 160000000,
                "mpaRating": "PG-13",
            }
        }
    )


class Revenue(CamelModel):
    worldwide: int = 0
    opening_weekend_usa: Optional[int] = Field(None, alias="openingWeekendUSA")


class BoxOfficeInfo(CamelModel):
    """Normalized box office enrichment as stored and served"""
    revenue: Revenue
    currency: str
    source: str
    last_updated: str


class MovieResponse(CamelModel):
    id: str
    title: str
    release_date: str
    genre: str
    distributor: Optional[str] = None
    budget: Optional[int] = None
    mpa_rating: Optional[str] = None
    box_office: Optional[BoxOfficeInfo] = None


class MoviePage(CamelModel):
    """One page of the listing; next_cursor is absent on the last page"""
    items: List[MovieResponse]
    next_cursor: Optional[str] = None
