"""
Caching Utilities
=================
Redis-backed cache adapter used by the movie directory.

Features:
- JSON serialization of cached query results
- Per-entry TTL (Time To Live) via SETEX
- Whole-entry invalidation (no partial updates)
- Hit/miss statistics for the health endpoint

Usage:
    from app.utils.cache import CacheStore, CacheKeys

    cache = CacheStore(redis_client)
    movies = cache.get(CacheKeys.MOVIES)
    if movies is None:
        movies = load_movies()
        cache.set(CacheKeys.MOVIES, movies, ttl=3600)

    # After a write
    cache.delete(CacheKeys.MOVIES)
"""
from typing import Any, Optional
import json
import logging
import threading

import redis

from app.utils.errors import CacheError

logger = logging.getLogger(__name__)


class CacheKeys:
    """Key families stored in the cache"""

    MOVIES = "movies"
    SEARCH_PREFIX = "search:"

    @staticmethod
    def search(query: str) -> str:
        """Key for a search result set; the query is kept verbatim (case-preserving)"""
        return f"{CacheKeys.SEARCH_PREFIX}{query}"


def build_redis_client(redis_url: str) -> redis.Redis:
    """
    Create a redis client from a connection URL.

    Responses are decoded to str since every cached value is JSON text.
    """
    return redis.Redis.from_url(redis_url, encoding="utf-8", decode_responses=True)


class CacheStore:
    """
    Thin adapter over a key-value cache.

    Errors from the cache service are logged and re-raised as CacheError;
    there are no retries and no local fallback.
    """

    def __init__(self, client: redis.Redis):
        """
        Initialize cache store.

        Args:
            client: Redis client (or any object with get/setex/delete)
        """
        self.client = client
        self._hits = 0
        self._misses = 0
        # Handlers run in a threadpool
        self._stats_lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        """
        Get a cached value.

        Args:
            key: Cache key

        Returns:
            Deserialized value, or None on a miss
        """
        try:
            data = self.client.get(key)
        except redis.RedisError as e:
            logger.error(f"Error fetching from cache (key={key}): {str(e)}")
            raise CacheError(f"Failed to read cache: {str(e)}") from e

        if data is None:
            with self._stats_lock:
                self._misses += 1
            return None

        with self._stats_lock:
            self._hits += 1
        if isinstance(data, bytes):
            data = data.decode("utf-8")
        return json.loads(data)

    def set(self, key: str, value: Any, ttl: int) -> None:
        """
        Store a value with an expiry, overwriting any existing entry.

        Args:
            key: Cache key
            value: JSON-serializable value
            ttl: Time to live in seconds
        """
        payload = json.dumps(value)
        try:
            self.client.setex(key, ttl, payload)
        except redis.RedisError as e:
            logger.error(f"Error writing to cache (key={key}): {str(e)}")
            raise CacheError(f"Failed to write cache: {str(e)}") from e

    def delete(self, key: str) -> None:
        """Delete a cache key. Deleting a missing key is a no-op."""
        try:
            self.client.delete(key)
        except redis.RedisError as e:
            logger.error(f"Error deleting from cache (key={key}): {str(e)}")
            raise CacheError(f"Failed to delete cache entry: {str(e)}") from e

    def get_stats(self) -> dict:
        """
        Get cache statistics.

        Returns:
            Dictionary with cache stats
        """
        with self._stats_lock:
            hits, misses = self._hits, self._misses
        total_requests = hits + misses
        hit_rate = (hits / total_requests * 100) if total_requests > 0 else 0

        return {
            'hits': hits,
            'misses': misses,
            'hit_rate': f"{hit_rate:.2f}%"
        }
