"""
Cache-aside behaviour of the movie directory
============================================
Runs the directory against an in-memory SQLite store and a fake redis.
"""
import json
import pytest

from app.utils.cache import CacheKeys
from app.utils.errors import CacheError, ClientError, ConflictError, NotFoundError

from conftest import CACHE_TTL


def cached(fake_redis, key):
    raw = fake_redis.data.get(key)
    return None if raw is None else json.loads(raw)


# ============================================
# Reads
# ============================================

class TestList:

    def test_miss_loads_from_store_and_populates_cache(self, directory, store, fake_redis, sample_movie):
        created = directory.create(sample_movie)

        movies = directory.list()

        assert [m["id"] for m in movies] == [created["id"]]
        assert store.find_calls == 1
        assert cached(fake_redis, CacheKeys.MOVIES) == movies
        assert fake_redis.ttls[CacheKeys.MOVIES] == CACHE_TTL

    def test_second_call_is_served_from_cache(self, directory, store, sample_movie):
        directory.create(sample_movie)

        first = directory.list()
        second = directory.list()

        assert first == second
        assert store.find_calls == 1

    def test_cache_hit_is_returned_verbatim(self, directory, store, fake_redis):
        fake_redis.data[CacheKeys.MOVIES] = json.dumps([{"id": "cached-only", "title": "Ghost"}])

        assert directory.list() == [{"id": "cached-only", "title": "Ghost"}]
        assert store.find_calls == 0

    def test_empty_listing_is_cached(self, directory, store):
        assert directory.list() == []
        assert directory.list() == []
        assert store.find_calls == 1

    def test_movie_document_shape(self, directory, sample_movie):
        directory.create(sample_movie)

        movie = directory.list()[0]

        assert set(movie) == {
            "id", "title", "genre", "rating", "streamingLink",
            "createdAt", "updatedAt", "deletedAt",
        }
        assert movie["streamingLink"] == sample_movie["streaming_link"]
        assert movie["deletedAt"] is None


class TestSearch:

    def test_matches_title_or_genre_case_insensitively(self, directory, sample_movie):
        directory.create(sample_movie)
        directory.create({"title": "Superbad", "genre": "Comedy", "rating": 7.6, "streaming_link": "http://x"})
        directory.create({"title": "Scream", "genre": "Horror", "rating": 7.4, "streaming_link": "http://x"})

        assert [m["title"] for m in directory.search("incep")] == ["Inception"]
        assert [m["title"] for m in directory.search("COMEDY")] == ["Superbad"]
        assert sorted(m["title"] for m in directory.search("s")) == ["Inception", "Scream", "Superbad"]

    def test_query_is_a_literal_substring(self, directory):
        directory.create({"title": "100% Wolf", "genre": "Comedy", "rating": 5, "streaming_link": "http://x"})
        directory.create({"title": "Wolfwalkers", "genre": "Drama", "rating": 8, "streaming_link": "http://x"})

        assert [m["title"] for m in directory.search("0% W")] == ["100% Wolf"]
        assert directory.search("f%w") == []

    def test_results_cached_under_verbatim_query_key(self, directory, store, fake_redis, sample_movie):
        directory.create(sample_movie)

        results = directory.search("Incep")

        assert cached(fake_redis, "search:Incep") == results
        assert fake_redis.ttls["search:Incep"] == CACHE_TTL
        assert "search:incep" not in fake_redis.data

        directory.search("Incep")
        assert store.find_calls == 1

    def test_empty_result_is_cached(self, directory, store, fake_redis):
        assert directory.search("nothing") == []
        assert directory.search("nothing") == []
        assert store.find_calls == 1
        assert cached(fake_redis, "search:nothing") == []

    @pytest.mark.parametrize("query", [None, ""])
    def test_missing_query_is_client_error(self, directory, store, fake_redis, query):
        with pytest.raises(ClientError):
            directory.search(query)

        assert fake_redis.calls == []
        assert store.find_calls == 0


# ============================================
# Writes
# ============================================

class TestCreate:

    def test_returns_created_movie_with_id_and_timestamps(self, directory, sample_movie):
        movie = directory.create(sample_movie)

        assert movie["id"]
        assert movie["title"] == "Inception"
        assert movie["genre"] == "Sci-Fi"
        assert movie["rating"] == 8.8
        assert movie["createdAt"] is not None
        assert movie["updatedAt"] is not None

    def test_invalidates_listing(self, directory, store, sample_movie):
        assert directory.list() == []

        directory.create(sample_movie)

        assert [m["title"] for m in directory.list()] == ["Inception"]
        assert store.find_calls == 2

    @pytest.mark.parametrize("missing", ["title", "genre", "rating", "streaming_link"])
    def test_missing_field_rejected_before_store_or_cache(self, directory, store, fake_redis, sample_movie, missing):
        del sample_movie[missing]

        with pytest.raises(ClientError, match="missing"):
            directory.create(sample_movie)

        assert fake_redis.calls == []
        assert store.find() == []

    def test_empty_title_rejected(self, directory, store, fake_redis):
        with pytest.raises(ClientError):
            directory.create({"title": "", "genre": "Drama", "rating": 5, "streaming_link": "x"})

        assert fake_redis.calls == []
        assert store.find() == []

    def test_zero_rating_counts_as_missing(self, directory, sample_movie):
        sample_movie["rating"] = 0

        with pytest.raises(ClientError):
            directory.create(sample_movie)

    def test_unknown_genre_rejected(self, directory, store, sample_movie):
        sample_movie["genre"] = "Western"

        with pytest.raises(ClientError, match="genre"):
            directory.create(sample_movie)
        assert store.find() == []

    @pytest.mark.parametrize("rating", [-1, 10.5])
    def test_rating_out_of_range_rejected(self, directory, sample_movie, rating):
        sample_movie["rating"] = rating

        with pytest.raises(ClientError, match="rating"):
            directory.create(sample_movie)

    def test_duplicate_title_and_genre_conflicts(self, directory, store, sample_movie):
        directory.create(sample_movie)

        with pytest.raises(ConflictError):
            directory.create(dict(sample_movie, rating=3))

        assert len(store.find()) == 1

    def test_same_title_in_other_genre_is_allowed(self, directory, sample_movie):
        directory.create(sample_movie)
        directory.create(dict(sample_movie, genre="Drama"))

        assert len(directory.list()) == 2


class TestUpdate:

    def test_applies_only_provided_fields(self, directory, sample_movie):
        movie = directory.create(sample_movie)

        updated = directory.update(movie["id"], {"rating": 9.1})

        assert updated["rating"] == 9.1
        assert updated["title"] == "Inception"
        assert updated["streamingLink"] == sample_movie["streaming_link"]

    def test_invalidates_listing(self, directory, sample_movie):
        movie = directory.create(sample_movie)
        assert directory.list()[0]["rating"] == 8.8

        directory.update(movie["id"], {"rating": 9.5})

        assert directory.list()[0]["rating"] == 9.5

    def test_invalidates_search_for_new_title(self, directory, sample_movie):
        movie = directory.create(sample_movie)
        assert directory.search("Inception Redux") == []

        directory.update(movie["id"], {"title": "Inception Redux"})

        assert [m["id"] for m in directory.search("Inception Redux")] == [movie["id"]]

    def test_old_title_search_stays_stale(self, directory, sample_movie):
        # Only search:<new title> is invalidated; search:<old title> keeps serving
        # the pre-update result until its TTL expires.
        movie = directory.create(sample_movie)
        before = directory.search("Inception")
        assert before[0]["title"] == "Inception"

        directory.update(movie["id"], {"title": "Interstellar"})

        assert directory.search("Inception") == before

    def test_genre_search_stays_stale(self, directory, sample_movie):
        movie = directory.create(sample_movie)
        before = directory.search("Sci-Fi")

        directory.update(movie["id"], {"genre": "Drama"})

        assert directory.search("Sci-Fi") == before
        assert directory.list()[0]["genre"] == "Drama"

    def test_unknown_id_is_not_found_and_cache_untouched(self, directory, fake_redis):
        directory.list()
        fake_redis.calls.clear()

        with pytest.raises(NotFoundError):
            directory.update("does-not-exist", {"rating": 5})

        assert not any(call[0] == "delete" for call in fake_redis.calls)
        assert CacheKeys.MOVIES in fake_redis.data

    def test_null_title_rejected(self, directory, sample_movie):
        movie = directory.create(sample_movie)

        with pytest.raises(ClientError):
            directory.update(movie["id"], {"title": None})

    def test_streaming_link_can_be_cleared(self, directory, sample_movie):
        movie = directory.create(sample_movie)

        updated = directory.update(movie["id"], {"streaming_link": None})

        assert updated["streamingLink"] is None

    def test_update_into_existing_title_and_genre_conflicts(self, directory, sample_movie):
        directory.create(sample_movie)
        other = directory.create(dict(sample_movie, title="Tenet"))

        with pytest.raises(ConflictError):
            directory.update(other["id"], {"title": "Inception"})


class TestDelete:

    def test_removes_movie_and_invalidates_listing(self, directory, sample_movie):
        movie = directory.create(sample_movie)
        assert len(directory.list()) == 1

        result = directory.delete(movie["id"])

        assert result == {"message": "Movie deleted successfully"}
        assert directory.list() == []

    def test_unknown_id_is_not_found(self, directory):
        with pytest.raises(NotFoundError):
            directory.delete("does-not-exist")


# ============================================
# Dependency faults
# ============================================

class TestCacheFaults:

    def test_read_fault_propagates(self, directory, store, fake_redis):
        fake_redis.fail = True

        with pytest.raises(CacheError):
            directory.list()
        assert store.find_calls == 0

    def test_invalidation_fault_propagates_after_store_write(self, directory, store, fake_redis, sample_movie):
        fake_redis.fail = True

        with pytest.raises(CacheError):
            directory.create(sample_movie)

        # The write is not rolled back: store and cache are not transactional
        assert len(store.find()) == 1
