"""
Upstream box office payloads.
Mirrors the third-party API; every field is optional because the upstream
omits what it does not know.
"""
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


class UpstreamRevenue(BaseModel):
    worldwide: Optional[int] = None
    opening_weekend_usa: Optional[int] = Field(None, alias="openingWeekendUSA")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class UpstreamBoxOffice(BaseModel):
    title: Optional[str] = None
    distributor: Optional[str] = None
    release_date: Optional[str] = Field(None, alias="releaseDate")
    budget: Optional[int] = None
    revenue: Optional[UpstreamRevenue] = Field(default_factory=UpstreamRevenue)
    mpa_rating: Optional[str] = Field(None, alias="mpaRating")
    currency: Optional[str] = None
    source: Optional[str] = None
    last_updated: Optional[str] = Field(None, alias="lastUpdated")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class UpstreamError(BaseModel):
    error: str = ""
    message: str = ""
