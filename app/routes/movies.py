from fastapi import APIRouter, Depends, Query, status
from typing import Optional

from app.schemas.movie import MoviePayload, DeleteResponse
from app.services.access_gate import Principal
from app.services.movie_directory import MovieDirectory
from app.utils.dependencies import get_movie_directory, require_admin

router = APIRouter(prefix="/movies", tags=["Movies"])


# ============================================
# Public reads (cached)
# ============================================

@router.get("")
def list_movies(directory: MovieDirectory = Depends(get_movie_directory)):
    """
    Get all movies

    Served from cache when available; a miss loads from the store
    and repopulates the cache.
    """
    return directory.list()


@router.get("/search")
def search_movies(
    q: Optional[str] = Query(None, description="Text matched against title or genre"),
    directory: MovieDirectory = Depends(get_movie_directory)
):
    """Search movies by title or genre (case-insensitive)"""
    return directory.search(q)


# ============================================
# Admin writes (invalidate cache)
# ============================================

@router.post("", status_code=status.HTTP_201_CREATED)
def add_movie(
    payload: MoviePayload,
    admin: Principal = Depends(require_admin),
    directory: MovieDirectory = Depends(get_movie_directory)
):
    """
    Add a new movie

    - **title**, **genre**, **rating**, **streamingLink** are all required
    - **genre**: Action, Comedy, Drama, Horror, Sci-Fi or Romance
    - **rating**: 0-10

    **Requires admin token**
    """
    return directory.create(payload.provided_fields())


@router.put("/{movie_id}")
def update_movie(
    movie_id: str,
    payload: MoviePayload,
    admin: Principal = Depends(require_admin),
    directory: MovieDirectory = Depends(get_movie_directory)
):
    """
    Update an existing movie; only the fields sent are changed

    **Requires admin token**
    """
    return directory.update(movie_id, payload.provided_fields())


@router.delete("/{movie_id}", response_model=DeleteResponse)
def delete_movie(
    movie_id: str,
    admin: Principal = Depends(require_admin),
    directory: MovieDirectory = Depends(get_movie_directory)
):
    """Delete a movie by id. **Requires admin token**"""
    return directory.delete(movie_id)
