"""
Admin Routes
Exchange the configured admin key pair for a bearer token used by movie writes
"""

from fastapi import APIRouter, Depends

from app.schemas.admin import AdminLogin, TokenResponse
from app.services.admin_service import AdminSessionIssuer
from app.utils.dependencies import get_admin_issuer

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.post("/login", response_model=TokenResponse)
def login_admin(
    credentials: AdminLogin,
    issuer: AdminSessionIssuer = Depends(get_admin_issuer)
):
    """
    Admin login

    Returns a signed token carrying the admin role, valid for 1 hour.
    Wrong key or secret both yield the same 401.
    """
    return issuer.login(credentials.key, credentials.secret)
