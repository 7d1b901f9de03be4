"""
Access Gate - bearer credential checks for admin-only operations

Two stages: verify() answers "is this a valid
credential at all", require_role() answers "may it perform this action".
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from app.utils.errors import ConfigurationError
from app.utils.security import decode_token, DEFAULT_ALGORITHM

ADMIN_ROLE = "admin"


@dataclass(frozen=True)
class Principal:
    """Identity resolved from a valid credential"""
    identity: str
    role: str


@dataclass(frozen=True)
class Invalid:
    reason: str


class AccessDecision(str, Enum):
    ALLOWED = "allowed"
    DENIED = "denied"


VerifyResult = Union[Principal, Invalid]


class AccessGate:
    def __init__(self, secret_key: Optional[str], algorithm: str = DEFAULT_ALGORITHM):
        self.secret_key = secret_key
        self.algorithm = algorithm

    def verify(self, raw_token: Optional[str]) -> VerifyResult:
        """
        Check signature and expiry of a raw bearer token.

        Returns Principal on success and Invalid otherwise; never raises for a
        bad token. An unconfigured signing secret raises ConfigurationError.
        """
        if not self.secret_key:
            raise ConfigurationError("Token signing secret is not configured")
        if not raw_token:
            return Invalid("missing token")

        payload = decode_token(raw_token, self.secret_key, self.algorithm)
        if payload is None:
            return Invalid("malformed, expired or wrongly signed token")
        if payload.get("type") != "access":
            return Invalid("not an access token")

        identity = payload.get("sub")
        role = payload.get("role")
        if not identity or not role:
            return Invalid("token is missing identity or role claims")

        return Principal(identity=identity, role=role)

    @staticmethod
    def require_role(principal: Principal, role: str) -> AccessDecision:
        # Exact match only; there is no role hierarchy
        if principal.role == role:
            return AccessDecision.ALLOWED
        return AccessDecision.DENIED
