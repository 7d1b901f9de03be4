"""
Movie Store - CRUD access to persisted movies

Exposes the five operations the directory relies on:
find, find_by_id, create, update_by_id, delete_by_id.
Each call runs in its own session and commits before returning.
"""
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker
from typing import List, Optional
import logging

from app.models.movie import Movie
from app.utils.errors import ConflictError, StoreError

logger = logging.getLogger(__name__)


class MovieStore:
    """Service for movie persistence"""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def find(self, text: Optional[str] = None) -> List[Movie]:
        """
        List movies that are not soft-deleted.

        Args:
            text: When given, keep movies whose title or genre contains it
                  (case-insensitive substring match)

        Returns:
            Movies in the store's default retrieval order
        """
        db = self._session_factory()
        try:
            query = db.query(Movie).filter(Movie.deleted_at.is_(None))
            if text is not None:
                query = query.filter(
                    or_(
                        Movie.title.icontains(text, autoescape=True),
                        Movie.genre.icontains(text, autoescape=True),
                    )
                )
            return query.all()
        except SQLAlchemyError as e:
            logger.error(f"Failed to query movies: {str(e)}")
            raise StoreError(f"Failed to query movies: {str(e)}") from e
        finally:
            db.close()

    def find_by_id(self, movie_id: str) -> Optional[Movie]:
        db = self._session_factory()
        try:
            return db.get(Movie, movie_id)
        except SQLAlchemyError as e:
            logger.error(f"Failed to load movie {movie_id}: {str(e)}")
            raise StoreError(f"Failed to load movie: {str(e)}") from e
        finally:
            db.close()

    def create(self, fields: dict) -> Movie:
        """Persist a new movie; a (title, genre) collision raises ConflictError"""
        db = self._session_factory()
        try:
            movie = Movie(**fields)
            db.add(movie)
            db.commit()
            db.refresh(movie)
            return movie
        except IntegrityError as e:
            db.rollback()
            logger.warning(f"Duplicate movie rejected: title={fields.get('title')!r} genre={fields.get('genre')!r}")
            raise ConflictError() from e
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to create movie: {str(e)}")
            raise StoreError(f"Failed to create movie: {str(e)}") from e
        finally:
            db.close()

    def update_by_id(self, movie_id: str, fields: dict) -> Optional[Movie]:
        """
        Apply fields to an existing movie.

        Returns:
            The updated movie, or None if no movie has this id
        """
        db = self._session_factory()
        try:
            movie = db.get(Movie, movie_id)
            if movie is None:
                return None

            for name, value in fields.items():
                setattr(movie, name, value)

            db.commit()
            db.refresh(movie)
            return movie
        except IntegrityError as e:
            db.rollback()
            logger.warning(f"Update of movie {movie_id} collides with an existing title/genre")
            raise ConflictError() from e
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to update movie {movie_id}: {str(e)}")
            raise StoreError(f"Failed to update movie: {str(e)}") from e
        finally:
            db.close()

    def delete_by_id(self, movie_id: str) -> Optional[Movie]:
        """Hard-delete a movie; returns the removed movie or None if absent"""
        db = self._session_factory()
        try:
            movie = db.get(Movie, movie_id)
            if movie is None:
                return None

            db.delete(movie)
            db.commit()
            return movie
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to delete movie {movie_id}: {str(e)}")
            raise StoreError(f"Failed to delete movie: {str(e)}") from e
        finally:
            db.close()
