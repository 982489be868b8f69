"""
Import all models to ensure they are registered with SQLAlchemy
"""
from catalog_api.models.movie import Movie
from catalog_api.models.box_office import BoxOffice
from catalog_api.models.rating import Rating

__all__ = [
    "Movie",
    "BoxOffice",
    "Rating",
]
