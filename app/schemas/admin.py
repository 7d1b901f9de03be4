from pydantic import BaseModel
from typing import Optional


# Schema for admin login; fields are optional so a missing one is a 401, not a 422
class AdminLogin(BaseModel):
    key: Optional[str] = None
    secret: Optional[str] = None


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
