from datetime import timedelta
from typing import Optional
import logging

from app.services.access_gate import ADMIN_ROLE
from app.utils.errors import AuthenticationError, ConfigurationError
from app.utils.security import create_access_token, constant_time_equals, DEFAULT_ALGORITHM

logger = logging.getLogger(__name__)


class AdminSessionIssuer:
    """Exchanges the configured admin key pair for a short-lived bearer token"""

    def __init__(
        self,
        access_key: Optional[str],
        secret_key: Optional[str],
        signing_secret: Optional[str],
        expire_minutes: int = 60,
        algorithm: str = DEFAULT_ALGORITHM,
    ):
        self.access_key = access_key
        self.secret_key = secret_key
        self.signing_secret = signing_secret
        self.expire_minutes = expire_minutes
        self.algorithm = algorithm

    def login(self, key: Optional[str], secret: Optional[str]) -> dict:
        # Both fields are always compared; the error never says which one was wrong
        key_ok = constant_time_equals(key, self.access_key)
        secret_ok = constant_time_equals(secret, self.secret_key)
        if not (key_ok and secret_ok):
            logger.warning("Admin login failed: invalid credentials")
            raise AuthenticationError("Invalid credentials")

        # No signing without a configured secret
        if not self.signing_secret:
            logger.error("Admin login refused: SECRET_KEY is not configured")
            raise ConfigurationError("Token signing secret is not configured")

        access_token = create_access_token(
            data={"sub": key, "role": ADMIN_ROLE},
            secret_key=self.signing_secret,
            expires_delta=timedelta(minutes=self.expire_minutes),
            algorithm=self.algorithm,
        )
        logger.info("Admin login succeeded")

        return {
            "access_token": access_token,
            "token_type": "bearer",
            "expires_in": self.expire_minutes * 60,
        }
