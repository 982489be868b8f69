"""
Movie Service - catalogue writes (create with enrichment) and reads (filtered,
cursor-paginated listing)
"""

from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.dialects.sqlite import insert
from sqlalchemy import func
from typing import List, Optional, Tuple, Union
import logging

from catalog_api.database import transaction
from catalog_api.exceptions import InternalFailure, ValidationFailure
from catalog_api.models.movie import Movie
from catalog_api.models.box_office import BoxOffice
from catalog_api.schemas.movie import MovieCreate, MovieResponse, BoxOfficeInfo, Revenue
from catalog_api.services.boxoffice_service import BoxOfficeClient
from catalog_api.services.enrichment import fetch_box_office
from catalog_api.utils.ids import new_movie_id

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 20
# One extra row is fetched per page, and SQLite LIMIT is a signed 64-bit integer
MAX_LIMIT = 2**63 - 2

# Columns selected for every movie read; box office columns are NULL when unmatched
_MOVIE_COLUMNS = (
    Movie.id,
    Movie.title,
    Movie.release_date,
    Movie.genre,
    Movie.distributor,
    Movie.budget,
    Movie.mpa_rating,
    BoxOffice.currency,
    BoxOffice.source,
    BoxOffice.last_updated,
    BoxOffice.revenue_worldwide,
    BoxOffice.revenue_opening_weekend_usa,
)


def parse_limit(raw: Union[str, int, None]) -> int:
    """
    Page size from a query value.

    Anything missing, unparseable, < 1 or beyond a 64-bit integer gives the
    default; huge values that still fit are capped at MAX_LIMIT.
    """
    if raw is None:
        return DEFAULT_LIMIT
    try:
        limit = int(raw)
    except (TypeError, ValueError):
        return DEFAULT_LIMIT
    if limit < 1 or limit > 2**63 - 1:
        return DEFAULT_LIMIT
    return min(limit, MAX_LIMIT)


class MovieService:
    """Service for catalogue operations"""

    # ==================== WRITES ====================

    @staticmethod
    def _validate_candidate(movie_data: MovieCreate) -> None:
        """
        Reject candidates the catalogue cannot store.
        releaseDate only needs the YYYY-MM-DD shape; the calendar date is not checked.
        """
        if not movie_data.title.strip() or not movie_data.genre.strip() or not movie_data.release_date.strip():
            raise ValidationFailure("title, genre and releaseDate are required")

        release_date = movie_data.release_date
        if len(release_date) != 10 or release_date[4] != "-" or release_date[7] != "-":
            raise ValidationFailure("invalid releaseDate format")

    @staticmethod
    def _insert_movie(db: Session, movie_id: str, movie_data: MovieCreate) -> bool:
        """INSERT OR IGNORE; returns False when a movie with this title already exists"""
        stmt = insert(Movie.__table__).values(
            id=movie_id,
            title=movie_data.title,
            release_date=movie_data.release_date,
            genre=movie_data.genre,
            distributor=movie_data.distributor,
            budget=movie_data.budget,
            mpa_rating=movie_data.mpa_rating,
        ).on_conflict_do_nothing()
        result = db.execute(stmt)
        return result.rowcount > 0

    @staticmethod
    def _upsert_box_office(db: Session, movie_id: str, box_office: BoxOfficeInfo) -> None:
        """INSERT OR REPLACE keyed by movie id"""
        values = {
            "currency": box_office.currency,
            "source": box_office.source,
            "last_updated": box_office.last_updated,
            "revenue_worldwide": box_office.revenue.worldwide,
            "revenue_opening_weekend_usa": box_office.revenue.opening_weekend_usa,
        }
        stmt = insert(BoxOffice.__table__).values(movie_id=movie_id, **values)
        stmt = stmt.on_conflict_do_update(index_elements=["movie_id"], set_=values)
        db.execute(stmt)

    @staticmethod
    def create_movie(
        db: Session,
        movie_data: MovieCreate,
        box_office_client: Optional[BoxOfficeClient] = None
    ) -> Tuple[MovieResponse, bool]:
        """
        Create a movie, enriched with box office data when the upstream knows it

        Args:
            db: Database session
            movie_data: Candidate movie
            box_office_client: Upstream client, None disables enrichment

        Returns:
            (stored movie, created). created is False when the title already
            existed; the stored movie is returned unchanged in that case.

        Raises:
            ValidationFailure: Missing fields or malformed releaseDate
            InternalFailure: Store or transaction error
        """
        MovieService._validate_candidate(movie_data)

        # Upstream call happens before the transaction and never fails creation
        box_office = fetch_box_office(box_office_client, movie_data.title)
        movie_id = new_movie_id()

        try:
            with transaction(db):
                created = MovieService._insert_movie(db, movie_id, movie_data)
                # A skipped insert leaves no row for movie_id to reference
                if created and box_office is not None:
                    MovieService._upsert_box_office(db, movie_id, box_office)
                stored = MovieService._get_by_title(db, movie_data.title)
        except SQLAlchemyError as e:
            logger.error(f"Failed to store movie '{movie_data.title}': {e}", exc_info=True)
            raise InternalFailure("failed to store movie") from e

        if created:
            logger.info(f"Created movie {movie_id} '{movie_data.title}' (box office: {box_office is not None})")
        else:
            logger.info(f"Movie '{movie_data.title}' already exists as {stored.id}, insert skipped")

        return stored, created

    # ==================== READS ====================

    @staticmethod
    def _movie_query(db: Session):
        return db.query(*_MOVIE_COLUMNS).outerjoin(BoxOffice, BoxOffice.movie_id == Movie.id)

    @staticmethod
    def _row_to_movie(row) -> MovieResponse:
        """Build the response; box_office only when at least one of its columns is set"""
        box_office = None
        enrichment = (
            row.currency,
            row.source,
            row.last_updated,
            row.revenue_worldwide,
            row.revenue_opening_weekend_usa,
        )
        if any(value is not None for value in enrichment):
            box_office = BoxOfficeInfo(
                revenue=Revenue(
                    worldwide=row.revenue_worldwide or 0,
                    opening_weekend_usa=row.revenue_opening_weekend_usa,
                ),
                currency=row.currency or "",
                source=row.source or "",
                last_updated=row.last_updated or "",
            )

        return MovieResponse(
            id=row.id,
            title=row.title,
            release_date=row.release_date,
            genre=row.genre,
            distributor=row.distributor,
            budget=row.budget,
            mpa_rating=row.mpa_rating,
            box_office=box_office,
        )

    @staticmethod
    def _get_by_title(db: Session, title: str) -> Optional[MovieResponse]:
        row = MovieService._movie_query(db).filter(Movie.title == title).first()
        return MovieService._row_to_movie(row) if row else None

    @staticmethod
    def list_movies(
        db: Session,
        q: Optional[str] = None,
        year: Optional[str] = None,
        genre: Optional[str] = None,
        limit: int = DEFAULT_LIMIT,
        cursor: Optional[str] = None
    ) -> Tuple[List[MovieResponse], Optional[str]]:
        """
        List movies in ascending id order, one page at a time

        Args:
            db: Database session
            q: Case-sensitive substring of the title
            year: Release year, compared with the first 4 characters of releaseDate
            genre: Exact genre
            limit: Page size
            cursor: Id of the last movie of the previous page

        Returns:
            (movies, next_cursor). next_cursor is None on the last page.

        Raises:
            InternalFailure: Store error
        """
        query = MovieService._movie_query(db)

        # Empty strings mean "no filter"
        if q:
            query = query.filter(func.instr(Movie.title, q) > 0)
        if year:
            query = query.filter(func.substr(Movie.release_date, 1, 4) == year)
        if genre:
            query = query.filter(Movie.genre == genre)
        if cursor:
            query = query.filter(Movie.id > cursor)

        try:
            rows = query.order_by(Movie.id).limit(limit + 1).all()
        except SQLAlchemyError as e:
            logger.error(f"Failed to list movies: {e}", exc_info=True)
            raise InternalFailure("failed to list movies") from e

        movies = [MovieService._row_to_movie(row) for row in rows]

        next_cursor = None
        if len(movies) > limit:
            movies = movies[:limit]
            next_cursor = movies[-1].id

        return movies, next_cursor
