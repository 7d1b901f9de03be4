"""
Movie Directory - cache-aside reads and invalidating writes

Reads (list, search) consult the cache first and populate it on a miss.
Writes (create, update, delete) go to the store, then delete the cache
entries they may have made stale. The store write and the cache delete are
two separate steps: a concurrent reader can see the old cached value until
the delete lands, and a crash between the two leaves it until TTL expiry.
"""
from pydantic import ValidationError
from typing import List, Optional
import logging

from app.schemas.movie import MovieCreate, MovieUpdate, MovieDocument
from app.services.movie_store import MovieStore
from app.utils.cache import CacheStore, CacheKeys
from app.utils.errors import ClientError, NotFoundError

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("title", "genre", "rating", "streaming_link")
NON_NULLABLE_FIELDS = ("title", "genre", "rating")


def _validation_message(exc: ValidationError) -> str:
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    return f"Invalid value for {location}: {first.get('msg')}" if location else first.get("msg")


class MovieDirectory:
    """Listing, search and CRUD for movies with a read-through cache"""

    def __init__(self, store: MovieStore, cache: CacheStore, ttl: int):
        self.store = store
        self.cache = cache
        self.ttl = ttl

    def list(self) -> List[dict]:
        """All movies; served from cache when present"""
        cached = self.cache.get(CacheKeys.MOVIES)
        if cached is not None:
            logger.debug("Cache hit for movie listing")
            return cached

        logger.debug("Cache miss for movie listing")
        movies = [MovieDocument.dump(movie) for movie in self.store.find()]
        self.cache.set(CacheKeys.MOVIES, movies, self.ttl)
        return movies

    def search(self, query: Optional[str]) -> List[dict]:
        """
        Movies whose title or genre contains query (case-insensitive).

        An empty result is cached like any other.
        """
        if not query:
            raise ClientError("Query parameter required")

        cache_key = CacheKeys.search(query)
        cached = self.cache.get(cache_key)
        if cached is not None:
            logger.debug(f"Cache hit for {cache_key}")
            return cached

        logger.debug(f"Cache miss for {cache_key}")
        movies = [MovieDocument.dump(movie) for movie in self.store.find(text=query)]
        self.cache.set(cache_key, movies, self.ttl)
        return movies

    def create(self, fields: dict) -> dict:
        """Validate, persist, then drop the cached listing"""
        if any(not fields.get(name) for name in REQUIRED_FIELDS):
            raise ClientError("one or more fields are missing!")

        try:
            movie_in = MovieCreate(**{name: fields[name] for name in REQUIRED_FIELDS})
        except ValidationError as e:
            raise ClientError(_validation_message(e)) from e

        movie = self.store.create(movie_in.model_dump(mode="json"))
        self._invalidate(CacheKeys.MOVIES)
        return MovieDocument.dump(movie)

    def update(self, movie_id: str, fields: dict) -> dict:
        """
        Apply the provided fields to a movie.

        Invalidates the listing and the search entry for the movie's new
        title only. Search entries for the old title, or ones that matched
        on genre, stay cached until their TTL runs out.
        """
        for name in NON_NULLABLE_FIELDS:
            if name in fields and fields[name] is None:
                raise ClientError(f"{name} cannot be null")

        try:
            changes = MovieUpdate(**fields).model_dump(mode="json", include=set(fields))
        except ValidationError as e:
            raise ClientError(_validation_message(e)) from e

        movie = self.store.update_by_id(movie_id, changes)
        if movie is None:
            raise NotFoundError("Movie not found")

        self._invalidate(CacheKeys.MOVIES)
        self._invalidate(CacheKeys.search(movie.title))
        return MovieDocument.dump(movie)

    def delete(self, movie_id: str) -> dict:
        movie = self.store.delete_by_id(movie_id)
        if movie is None:
            raise NotFoundError("Movie not found")

        self._invalidate(CacheKeys.MOVIES)
        return {"message": "Movie deleted successfully"}

    def _invalidate(self, key: str) -> None:
        self.cache.delete(key)
        logger.info(f"Invalidated cache entry {key}")
