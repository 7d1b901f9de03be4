from sqlalchemy import create_engine, pool, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.ext.declarative import declarative_base
from sqlalchemy.orm import sessionmaker
from app.config import Settings
import logging

logger = logging.getLogger(__name__)

Base = declarative_base()


def build_engine(settings: Settings) -> Engine:
    """
    Create the SQLAlchemy engine for the movie store.

    SQLite URLs get a single-file connection without pooling options;
    every other backend uses a QueuePool sized from settings.
    """
    if settings.database_url.startswith("sqlite"):
        engine = create_engine(
            settings.database_url,
            connect_args={"check_same_thread": False},
            echo=settings.db_echo,
        )
    else:
        # QueuePool maintains a pool of connections that can be reused
        engine = create_engine(
            settings.database_url,
            poolclass=pool.QueuePool,
            pool_size=settings.db_pool_size,  # Number of connections to keep open
            max_overflow=settings.db_max_overflow,  # Max connections beyond pool_size
            pool_timeout=settings.db_pool_timeout,  # Seconds to wait for connection
            pool_recycle=settings.db_pool_recycle,  # Recycle connections after 1 hour
            pool_pre_ping=True,  # Test connections before using them
            echo=settings.db_echo,
        )

    @event.listens_for(engine, "connect")
    def receive_connect(dbapi_conn, connection_record):
        """Log when a new connection is created"""
        logger.debug("Database connection established")

    return engine


def build_session_factory(engine: Engine) -> sessionmaker:
    # Objects stay readable after commit; the store hands them out past the session
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


def init_db(engine: Engine) -> None:
    """
    Create tables and verify the store answers.

    Called once at startup. Any exception propagates so the
    application refuses to boot without a reachable store.
    """
    # Import models so they are registered with Base
    import app.models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
    logger.info("Movie store connection verified")
