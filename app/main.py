from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional
import logging

import redis
from sqlalchemy.engine import Engine

from app.config import Settings
from app.database import build_engine, build_session_factory, init_db
from app.middleware import RateLimitMiddleware
from app.routes import movies, admin
from app.services.access_gate import AccessGate
from app.services.admin_service import AdminSessionIssuer
from app.services.movie_directory import MovieDirectory
from app.services.movie_store import MovieStore
from app.utils.cache import CacheStore, build_redis_client
from app.utils.errors import MovieCatalogError

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def create_app(
    settings: Optional[Settings] = None,
    engine: Optional[Engine] = None,
    redis_client: Optional[redis.Redis] = None,
) -> FastAPI:
    """
    Build the movie catalog application.

    engine and redis_client may be injected (tests); anything not injected
    is created from settings at startup and closed again at shutdown.
    """
    settings = settings or Settings.from_env()

    # ============================================
    # Application Lifespan Management
    # ============================================

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Startup:
        - Connect to the movie store (fatal on failure)
        - Connect the cache client
        - Wire directory, access gate and admin issuer onto app.state

        Shutdown:
        - Close only the clients created here
        """
        logger.info("=" * 60)
        logger.info("Movie Catalog API Starting...")
        logger.info(f"   CORS Origin: {settings.allowed_origin}")
        logger.info(f"   Cache TTL: {settings.cache_ttl}s")
        logger.info("=" * 60)

        owns_engine = engine is None
        owns_redis = redis_client is None
        db_engine = engine if engine is not None else build_engine(settings)
        cache_client = redis_client if redis_client is not None else build_redis_client(settings.redis_url)

        def release_owned():
            if owns_redis:
                try:
                    cache_client.close()
                    logger.info("   Cache client closed")
                except redis.RedisError as e:
                    logger.error(f"Error closing cache client: {str(e)}")
            if owns_engine:
                db_engine.dispose()
                logger.info("   Store connections disposed")

        try:
            init_db(db_engine)
        except Exception as e:
            logger.critical(f"Unable to connect to the movie store: {str(e)}")
            release_owned()
            raise

        if not settings.secret_key:
            logger.warning("SECRET_KEY is not set: admin login and movie writes will fail")

        cache = CacheStore(cache_client)
        app.state.cache = cache
        app.state.movie_directory = MovieDirectory(
            store=MovieStore(build_session_factory(db_engine)),
            cache=cache,
            ttl=settings.cache_ttl,
        )
        app.state.access_gate = AccessGate(settings.secret_key, settings.algorithm)
        app.state.admin_issuer = AdminSessionIssuer(
            access_key=settings.admin_access_key,
            secret_key=settings.admin_secret_key,
            signing_secret=settings.secret_key,
            expire_minutes=settings.admin_token_expire_minutes,
            algorithm=settings.algorithm,
        )

        yield

        logger.info("=" * 60)
        logger.info("Movie Catalog API Shutting Down...")
        release_owned()
        logger.info("=" * 60)

    app = FastAPI(
        title="Movie Catalog API",
        description="API for managing movies",
        version="1.0.0",
        docs_url="/api-docs",
        redoc_url=None,
        lifespan=lifespan
    )

    # CORS - only the configured origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.allowed_origin],
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    app.add_middleware(
        RateLimitMiddleware,
        max_requests=settings.rate_limit_requests,
        window_seconds=settings.rate_limit_window_seconds,
        trust_proxy=settings.trust_proxy,
    )

    # ============================================
    # Exception Handlers
    # ============================================

    @app.exception_handler(MovieCatalogError)
    async def catalog_error_handler(request: Request, exc: MovieCatalogError):
        if exc.status_code >= 500:
            logger.error(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})

    # ============================================
    # Routes
    # ============================================

    @app.get("/health", tags=["Health"])
    async def health_check(request: Request):
        """Liveness and cache statistics"""
        cache = getattr(request.app.state, "cache", None)
        return {
            "status": "healthy",
            "api_version": "1.0.0",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "cache": cache.get_stats() if cache else None,
        }

    app.include_router(movies.router)
    app.include_router(admin.router)

    return app


_settings = Settings.from_env()
configure_logging(_settings.log_level)
app = create_app(_settings)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=8000,
        log_level="info"
    )
