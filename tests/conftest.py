from datetime import timedelta
import pytest
import redis
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401  (register tables)
from app.config import Settings
from app.database import Base, build_session_factory
from app.main import create_app
from app.services.movie_directory import MovieDirectory
from app.services.movie_store import MovieStore
from app.utils.cache import CacheStore
from app.utils.security import create_access_token

TEST_SECRET = "test-signing-secret"
ADMIN_KEY = "admin-access-key"
ADMIN_SECRET = "admin-secret-key"
CACHE_TTL = 120


class FakeRedis:
    """In-memory stand-in for the get/setex/delete subset of redis.Redis"""

    def __init__(self):
        self.data = {}
        self.ttls = {}
        self.calls = []
        self.fail = False
        self.closed = False

    def _maybe_fail(self):
        if self.fail:
            raise redis.ConnectionError("cache unreachable")

    def get(self, key):
        self.calls.append(("get", key))
        self._maybe_fail()
        return self.data.get(key)

    def setex(self, key, ttl, value):
        self.calls.append(("setex", key))
        self._maybe_fail()
        self.data[key] = value
        self.ttls[key] = ttl
        return True

    def delete(self, *keys):
        self.calls.append(("delete",) + keys)
        self._maybe_fail()
        removed = 0
        for key in keys:
            if self.data.pop(key, None) is not None:
                self.ttls.pop(key, None)
                removed += 1
        return removed

    def close(self):
        self.closed = True


class RecordingMovieStore(MovieStore):
    """MovieStore that counts find() calls to prove cache hits skip the store"""

    def __init__(self, session_factory):
        super().__init__(session_factory)
        self.find_calls = 0

    def find(self, text=None):
        self.find_calls += 1
        return super().find(text)


@pytest.fixture
def engine():
    """Fresh in-memory database per test"""
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=test_engine)
    try:
        yield test_engine
    finally:
        Base.metadata.drop_all(bind=test_engine)
        test_engine.dispose()


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def store(engine):
    return RecordingMovieStore(build_session_factory(engine))


@pytest.fixture
def cache(fake_redis):
    return CacheStore(fake_redis)


@pytest.fixture
def directory(store, cache):
    return MovieDirectory(store=store, cache=cache, ttl=CACHE_TTL)


@pytest.fixture
def settings():
    return Settings(
        database_url="sqlite://",
        cache_ttl=CACHE_TTL,
        admin_access_key=ADMIN_KEY,
        admin_secret_key=ADMIN_SECRET,
        secret_key=TEST_SECRET,
        rate_limit_requests=1000,
        rate_limit_window_seconds=3600,
    )


@pytest.fixture
def client(settings, engine, fake_redis):
    """FastAPI test client wired to the in-memory store and fake cache."""
    test_app = create_app(settings, engine=engine, redis_client=fake_redis)
    with TestClient(test_app) as test_client:
        yield test_client


def make_token(role="admin", secret=TEST_SECRET, expires=timedelta(hours=1), identity=ADMIN_KEY):
    return create_access_token(
        data={"sub": identity, "role": role},
        secret_key=secret,
        expires_delta=expires,
    )


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {make_token()}"}


@pytest.fixture
def sample_movie():
    return {
        "title": "Inception",
        "genre": "Sci-Fi",
        "rating": 8.8,
        "streaming_link": "http://example.com/inception",
    }


@pytest.fixture
def token_factory():
    return make_token
