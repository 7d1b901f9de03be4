"""
Import all models to ensure they are registered with SQLAlchemy
"""
from app.models.movie import Movie, Genre

__all__ = [
    "Movie",
    "Genre",
]
