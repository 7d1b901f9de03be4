from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Optional
import logging

from app.services.access_gate import AccessGate, AccessDecision, Invalid, Principal, ADMIN_ROLE
from app.services.admin_service import AdminSessionIssuer
from app.services.movie_directory import MovieDirectory
from app.utils.errors import AuthenticationError, AuthorizationError

logger = logging.getLogger(__name__)

# auto_error=False so a missing header is reported as 401 by us, not by HTTPBearer
security = HTTPBearer(auto_error=False)


def get_movie_directory(request: Request) -> MovieDirectory:
    return request.app.state.movie_directory


def get_access_gate(request: Request) -> AccessGate:
    return request.app.state.access_gate


def get_admin_issuer(request: Request) -> AdminSessionIssuer:
    return request.app.state.admin_issuer


# Dependency guarding admin-only routes
def require_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    gate: AccessGate = Depends(get_access_gate),
) -> Principal:
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Unauthorized")

    result = gate.verify(credentials.credentials)
    if isinstance(result, Invalid):
        logger.info(f"Rejected bearer token: {result.reason}")
        raise AuthorizationError("Forbidden")

    if gate.require_role(result, ADMIN_ROLE) is AccessDecision.DENIED:
        raise AuthorizationError("Admin role required")

    return result
