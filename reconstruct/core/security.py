"""Password hashing and JWT access tokens."""
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt
from passlib.context import CryptContext

from reconstruct.core.config import get_settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# bcrypt hard limit: 72 bytes (UTF-8)
MAX_PASSWORD_BYTES = 72
MIN_PASSWORD_LENGTH = 8


def verify_password(plain: str, hashed: str | None) -> bool:
    if not hashed:
        return False
    return pwd_context.verify(plain, hashed)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def create_access_token(subject: str | int, extra: dict[str, Any] | None = None) -> str:
    """Sign a JWT for the user id; expires after access_token_expire_minutes."""
    settings = get_settings()
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.access_token_expire_minutes)
    to_encode = {"sub": str(subject), "exp": expire, "type": "access"}
    if extra:
        to_encode.update(extra)
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str) -> dict | None:
    """Return the token claims, or None if the signature or expiry is invalid."""
    settings = get_settings()
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError:
        return None


def user_id_from_token(token: str) -> int | None:
    claims = decode_access_token(token)
    if not claims:
        return None
    try:
        return int(claims["sub"])
    except (KeyError, TypeError, ValueError):
        return None
