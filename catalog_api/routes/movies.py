"""
Movie Routes - catalogue listing and creation
"""

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session
from typing import Optional
from urllib.parse import quote

from catalog_api.database import get_db
from catalog_api.schemas.common import ErrorResponse
from catalog_api.schemas.movie import MovieCreate, MoviePage, MovieResponse
from catalog_api.services.boxoffice_service import BoxOfficeClient
from catalog_api.services.movie_service import MovieService, parse_limit
from catalog_api.utils.dependencies import get_box_office_client, require_bearer

router = APIRouter(prefix="/movies", tags=["Movies"])


@router.get(
    "",
    response_model=MoviePage,
    response_model_exclude_none=True,
    responses={500: {"model": ErrorResponse}},
)
def list_movies(
    q: Optional[str] = Query(None, description="Title substring (case-sensitive)"),
    year: Optional[str] = Query(None, description="Release year (YYYY)"),
    genre: Optional[str] = Query(None, description="Exact genre"),
    limit: Optional[str] = Query(None, description="Page size (default 20)"),
    cursor: Optional[str] = Query(None, description="nextCursor from the previous page"),
    db: Session = Depends(get_db)
):
    """
    List and search movies, ordered by id

    - **q**: substring of the title
    - **year**: release year taken from releaseDate
    - **genre**: exact genre
    - **limit**: page size; missing or invalid values fall back to 20
    - **cursor**: pass the previous page's nextCursor to continue

    nextCursor is absent on the last page.
    """
    movies, next_cursor = MovieService.list_movies(
        db, q=q, year=year, genre=genre, limit=parse_limit(limit), cursor=cursor
    )
    return MoviePage(items=movies, next_cursor=next_cursor)


@router.post(
    "",
    response_model=MovieResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_bearer)],
    responses={401: {"model": ErrorResponse}, 422: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def create_movie(
    movie_data: MovieCreate,
    response: Response,
    db: Session = Depends(get_db),
    box_office_client: Optional[BoxOfficeClient] = Depends(get_box_office_client)
):
    """
    Create a movie and enrich it with box office data when available

    The upstream lookup is synchronous and best effort: when it finds nothing
    or fails, the movie is stored without boxOffice.

    Submitting a title that already exists stores nothing new and returns the
    existing movie.
    """
    movie, _ = MovieService.create_movie(db, movie_data, box_office_client)
    response.headers["Location"] = f"/movies/{quote(movie.title)}"
    return movie
