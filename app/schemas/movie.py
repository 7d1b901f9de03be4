from pydantic import BaseModel, Field, ConfigDict, AliasChoices
from datetime import datetime
from typing import Optional

from app.models.movie import Genre

class MoviePayload(BaseModel):
    """
    Request body for create/update.

    Every field is optional here so that a missing field reaches the
    directory and is reported as a 400 rather than a schema error.
    """
    title: Optional[str] = None
    genre: Optional[str] = None
    rating: Optional[float] = None
    streaming_link: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("streamingLink", "streaming_link"),
        serialization_alias="streamingLink",
    )

    def provided_fields(self) -> dict:
        """Only the fields the client actually sent"""
        return self.model_dump(exclude_unset=True)


# Field rules enforced before any store interaction
class MovieCreate(BaseModel):
    title: str = Field(..., min_length=1)
    genre: Genre
    rating: float = Field(0, ge=0, le=10)
    streaming_link: Optional[str] = None


class MovieUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1)
    genre: Optional[Genre] = None
    rating: Optional[float] = Field(None, ge=0, le=10)
    streaming_link: Optional[str] = None


class MovieDocument(BaseModel):
    """Serialized movie as returned to clients and stored in the cache"""
    id: str
    title: str
    genre: str
    rating: float
    streaming_link: Optional[str] = Field(None, serialization_alias="streamingLink")
    created_at: Optional[datetime] = Field(None, serialization_alias="createdAt")
    updated_at: Optional[datetime] = Field(None, serialization_alias="updatedAt")
    deleted_at: Optional[datetime] = Field(None, serialization_alias="deletedAt")

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def dump(cls, movie) -> dict:
        """ORM movie -> JSON-safe dict with camelCase keys"""
        return cls.model_validate(movie).model_dump(mode="json", by_alias=True)


class DeleteResponse(BaseModel):
    message: str
