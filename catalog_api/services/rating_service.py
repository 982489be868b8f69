"""
Rating Service - Handle all rating-related business logic
"""

from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.dialects.sqlite import insert
from sqlalchemy import func
from typing import Tuple
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
import logging

from catalog_api.database import transaction
from catalog_api.exceptions import InternalFailure, NotFound, ValidationFailure
from catalog_api.models.movie import Movie
from catalog_api.models.rating import Rating
from catalog_api.schemas.rating import RatingResult, RatingAggregate

logger = logging.getLogger(__name__)

MIN_RATING = 0.5
MAX_RATING = 5.0


def round_average(value: float) -> float:
    """Round to one decimal place, halves away from zero (1.25 -> 1.3)"""
    return float(Decimal(str(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


class RatingService:
    """Service for movie rating operations"""

    @staticmethod
    def validate_rating(rating: float) -> None:
        """Allowed values are 0.5, 1.0, ..., 5.0"""
        if not (MIN_RATING <= rating <= MAX_RATING) or not float(rating * 2).is_integer():
            raise ValidationFailure("rating must be between 0.5 and 5.0 in steps of 0.5")

    @staticmethod
    def _get_movie_id(db: Session, title: str) -> str:
        """Resolve a movie by exact title or raise NotFound"""
        try:
            movie_id = db.query(Movie.id).filter(Movie.title == title).scalar()
        except SQLAlchemyError as e:
            logger.error(f"Failed to look up movie '{title}': {e}", exc_info=True)
            raise InternalFailure("failed to look up movie") from e

        if movie_id is None:
            raise NotFound("movie not found")
        return movie_id

    @staticmethod
    def submit_rating(
        db: Session,
        title: str,
        rater_id: str,
        rating: float
    ) -> Tuple[RatingResult, bool]:
        """
        Add a new rating or update the rater's existing one

        Args:
            db: Database session
            title: Movie title (surrounding whitespace ignored)
            rater_id: Rater identifier
            rating: Rating value

        Returns:
            (result, created). created is False when the rater had already
            rated this movie and the rating was overwritten.

        Raises:
            ValidationFailure: Rating outside the allowed set, or empty rater
            NotFound: No movie with this title
            InternalFailure: Store or transaction error
        """
        RatingService.validate_rating(rating)
        if not rater_id:
            raise ValidationFailure("rater id is required")

        title = title.strip()
        movie_id = RatingService._get_movie_id(db, title)

        try:
            # Decides the create/update outcome; the upsert below stays correct either way
            existing = db.query(Rating.rater_id).filter(
                Rating.movie_id == movie_id,
                Rating.rater_id == rater_id
            ).first()

            with transaction(db):
                stmt = insert(Rating.__table__).values(
                    movie_id=movie_id,
                    rater_id=rater_id,
                    rating=rating,
                    updated_at=datetime.now(timezone.utc),
                )
                stmt = stmt.on_conflict_do_update(
                    index_elements=["movie_id", "rater_id"],
                    set_={"rating": stmt.excluded.rating, "updated_at": stmt.excluded.updated_at},
                )
                db.execute(stmt)
        except SQLAlchemyError as e:
            logger.error(f"Failed to store rating for '{title}' by {rater_id}: {e}", exc_info=True)
            raise InternalFailure("failed to store rating") from e

        created = existing is None
        logger.debug(f"Rating {'created' if created else 'updated'}: '{title}' by {rater_id} = {rating}")

        return RatingResult(movie_title=title, rater_id=rater_id, rating=rating), created

    @staticmethod
    def get_aggregate(db: Session, title: str) -> RatingAggregate:
        """
        Average and count of all ratings for a movie

        Raises:
            NotFound: Unknown movie, or a movie nobody has rated yet
            InternalFailure: Store error
        """
        title = title.strip()
        movie_id = RatingService._get_movie_id(db, title)

        try:
            average, count = db.query(
                func.avg(Rating.rating),
                func.count(Rating.rater_id)
            ).filter(Rating.movie_id == movie_id).one()
        except SQLAlchemyError as e:
            logger.error(f"Failed to aggregate ratings for '{title}': {e}", exc_info=True)
            raise InternalFailure("failed to aggregate ratings") from e

        if not count:
            raise NotFound("no ratings")

        return RatingAggregate(average=round_average(average), count=count)
