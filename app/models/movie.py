from sqlalchemy import Column, String, Float, DateTime, Index, text
from datetime import datetime, timezone
from enum import Enum
import uuid
from app.database import Base


class Genre(str, Enum):
    ACTION = "Action"
    COMEDY = "Comedy"
    DRAMA = "Drama"
    HORROR = "Horror"
    SCI_FI = "Sci-Fi"
    ROMANCE = "Romance"


def _new_id() -> str:
    return uuid.uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Movie(Base):
    __tablename__ = "movies"
    __table_args__ = (
        # (title, genre) is unique among movies that are not soft-deleted
        Index(
            "uq_movies_title_genre",
            "title",
            "genre",
            unique=True,
            sqlite_where=text("deleted_at IS NULL"),
            postgresql_where=text("deleted_at IS NULL"),
        ),
    )

    id = Column(String(32), primary_key=True, default=_new_id)
    title = Column(String, nullable=False)
    genre = Column(String(20), nullable=False)
    rating = Column(Float, nullable=False, default=0.0)
    streaming_link = Column(String, nullable=True, default=None)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)
    deleted_at = Column(DateTime(timezone=True), nullable=True, default=None)

    def soft_delete(self) -> None:
        """Mark the movie as logically deleted; caller commits"""
        self.deleted_at = _utcnow()

    def __repr__(self):
        return f"<Movie(id={self.id}, title='{self.title}', genre='{self.genre}')>"
