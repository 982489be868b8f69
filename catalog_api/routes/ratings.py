"""
Rating Routes - submit ratings and read per-movie aggregates
"""

from fastapi import APIRouter, Depends, Path, Response, status
from sqlalchemy.orm import Session
from urllib.parse import quote

from catalog_api.database import get_db
from catalog_api.schemas.common import ErrorResponse
from catalog_api.schemas.rating import RatingSubmit, RatingResult, RatingAggregate
from catalog_api.services.rating_service import RatingService
from catalog_api.utils.dependencies import require_rater

router = APIRouter(prefix="/movies", tags=["Ratings"])


@router.post(
    "/{title}/ratings",
    response_model=RatingResult,
    status_code=status.HTTP_201_CREATED,
    responses={
        200: {"model": RatingResult, "description": "Rating updated"},
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
def submit_rating(
    rating_data: RatingSubmit,
    response: Response,
    title: str = Path(..., description="Movie title"),
    rater_id: str = Depends(require_rater),
    db: Session = Depends(get_db)
):
    """
    Submit or update a rating for a movie

    - **rating**: 0.5 to 5.0 in steps of 0.5
    - **X-Rater-Id** header identifies the rater

    Returns 201 with a Location header for a rater's first rating of the
    movie, 200 when an existing rating is overwritten.
    """
    result, created = RatingService.submit_rating(db, title, rater_id, rating_data.rating)

    if created:
        response.headers["Location"] = f"/movies/{quote(result.movie_title)}/ratings/{quote(rater_id)}"
    else:
        response.status_code = status.HTTP_200_OK

    return result


@router.get(
    "/{title}/rating",
    response_model=RatingAggregate,
    responses={404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def get_rating_aggregate(
    title: str = Path(..., description="Movie title"),
    db: Session = Depends(get_db)
):
    """
    Average rating (one decimal) and number of ratings for a movie

    404 when the movie does not exist or has no ratings yet.
    """
    return RatingService.get_aggregate(db, title)
