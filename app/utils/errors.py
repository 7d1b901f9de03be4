"""
Exception hierarchy for the movie catalog.

Each error carries the HTTP status it maps to; the exception handler
registered in app.main renders any MovieCatalogError as {"detail": message}.
"""
from fastapi import status


class MovieCatalogError(Exception):
    """Base error for the catalog core"""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Something went wrong!"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ClientError(MovieCatalogError):
    """Malformed or missing input"""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class AuthenticationError(MovieCatalogError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized"


class AuthorizationError(MovieCatalogError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden"


class NotFoundError(MovieCatalogError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Movie not found"


class ConflictError(MovieCatalogError):
    """A movie with the same title and genre already exists"""

    status_code = status.HTTP_409_CONFLICT
    default_message = "A movie with this title and genre already exists"


class DependencyFault(MovieCatalogError):
    """Cache or store unreachable or erroring"""

    default_message = "A backing service failed"


class CacheError(DependencyFault):
    default_message = "Cache service failed"


class StoreError(DependencyFault):
    default_message = "Movie store failed"


class ConfigurationError(MovieCatalogError):
    default_message = "internal server error"
