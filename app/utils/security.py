from jose import JWTError, jwt
from datetime import datetime, timedelta, timezone
from typing import Optional
import secrets

DEFAULT_ALGORITHM = "HS256"


# JWT token creation
def create_access_token(
    data: dict,
    secret_key: str,
    expires_delta: timedelta,
    algorithm: str = DEFAULT_ALGORITHM,
) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + expires_delta
    to_encode.update({"exp": expire, "type": "access"})
    return jwt.encode(to_encode, secret_key, algorithm=algorithm)


# JWT token decoding; signature and expiry are both checked
def decode_token(token: str, secret_key: str, algorithm: str = DEFAULT_ALGORITHM) -> Optional[dict]:
    try:
        return jwt.decode(token, secret_key, algorithms=[algorithm])
    except JWTError:
        return None


def constant_time_equals(supplied: Optional[str], expected: Optional[str]) -> bool:
    """Exact string equality without timing leaks; an unset expected value never matches"""
    if supplied is None or expected is None:
        return False
    return secrets.compare_digest(supplied.encode("utf-8"), expected.encode("utf-8"))
