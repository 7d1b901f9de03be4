"""
Application settings loaded from environment variables (.env supported)
"""
from pydantic import BaseModel
from typing import Optional
from dotenv import load_dotenv
import os

# Load environment variables
load_dotenv()


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


class Settings(BaseModel):
    """Runtime configuration for the movie catalog API"""

    # Document store
    database_url: str = "sqlite:///./movies.db"
    db_pool_size: int = 5
    db_max_overflow: int = 10
    db_pool_timeout: int = 30
    db_pool_recycle: int = 3600
    db_echo: bool = False

    # Cache
    redis_url: str = "redis://localhost:6379/0"
    cache_ttl: int = 3600

    # Admin credentials and token signing
    admin_access_key: Optional[str] = None
    admin_secret_key: Optional[str] = None
    secret_key: Optional[str] = None
    algorithm: str = "HS256"
    admin_token_expire_minutes: int = 60

    # Transport
    allowed_origin: str = "http://localhost:3000"
    rate_limit_requests: int = 100
    rate_limit_window_seconds: int = 3600
    trust_proxy: bool = False

    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the process environment"""
        return cls(
            database_url=os.getenv("DATABASE_URL", "sqlite:///./movies.db"),
            db_pool_size=_int_env("DB_POOL_SIZE", 5),
            db_max_overflow=_int_env("DB_MAX_OVERFLOW", 10),
            db_pool_timeout=_int_env("DB_POOL_TIMEOUT", 30),
            db_pool_recycle=_int_env("DB_POOL_RECYCLE", 3600),
            db_echo=os.getenv("DB_ECHO", "false").lower() == "true",
            redis_url=os.getenv("REDIS_URL", "redis://localhost:6379/0"),
            cache_ttl=_int_env("CACHE_TTL", 3600),
            admin_access_key=os.getenv("ADMIN_ACCESS_KEY") or None,
            admin_secret_key=os.getenv("ADMIN_SECRET_KEY") or None,
            secret_key=os.getenv("SECRET_KEY") or None,
            algorithm=os.getenv("ALGORITHM", "HS256"),
            admin_token_expire_minutes=_int_env("ADMIN_TOKEN_EXPIRE_MINUTES", 60),
            allowed_origin=os.getenv("ALLOWED_ORIGIN", "http://localhost:3000"),
            rate_limit_requests=_int_env("RATE_LIMIT_REQUESTS", 100),
            rate_limit_window_seconds=_int_env("RATE_LIMIT_WINDOW_SECONDS", 3600),
            trust_proxy=os.getenv("TRUST_PROXY", "false").lower() == "true",
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )
