"""Bro password hashes and the signed session cookie payload."""
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt
from passlib.context import CryptContext

from pctcup.config import settings

# argon2 only; bros created with older parameters are re-hashed at login
pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_and_update_password(password: str, hashed_password: str) -> tuple[bool, str | None]:
    """Check a login attempt against the stored hash.

    Returns ``(ok, new_hash)``. ``new_hash`` is set only when the stored hash
    should be replaced, and the login route persists it.
    """
    return pwd_context.verify_and_update(password, hashed_password)


def _session_expiry(expires_delta: timedelta | None) -> datetime:
    lifetime = expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    return datetime.now(timezone.utc) + lifetime


def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    """Sign the session cookie value. ``data["sub"]`` carries the user id as a string."""
    claims = {**data, "exp": _session_expiry(expires_delta)}
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> dict[str, Any] | None:
    """Claims of a session cookie, or None when it is expired, forged or malformed."""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        return None
