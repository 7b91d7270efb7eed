"""Credential hashing and access-token (JWT) signing."""

from datetime import UTC, datetime, timedelta
from typing import Any

import bcrypt
import jwt

from idhub.core.config import settings

# Bcrypt cost (rounds); 12 is a good default for security vs speed.
BCRYPT_ROUNDS = 12

# Non-production marker for stored passwords.
PLAIN_PASSWORD_PREFIX = "TEXT:"

# Min/max password lengths accepted by request schemas and scripts.
PASSWORD_MIN_LEN = 8
PASSWORD_MAX_LEN = 128


def _is_production() -> bool:
    return settings.APP_ENV == "prod"


def hash_password(plain_password: str) -> str:
    """
    Hash a plain-text password for storage.

    Production stores a salted bcrypt hash; other environments store a
    ``TEXT:`` tagged value so fixtures stay readable.
    """
    if not plain_password:
        raise ValueError("Password is empty")
    if not _is_production():
        return f"{PLAIN_PASSWORD_PREFIX}{plain_password}"
    # bcrypt has a 72-byte limit; truncate to avoid errors (validation already limits length).
    pw_bytes = plain_password.encode("utf-8")[:72]
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain_password: str, hashed: str | None) -> bool:
    """Verify a plain password against a stored hash. Social accounts have none."""
    if not plain_password or not hashed:
        return False
    if hashed.startswith(PLAIN_PASSWORD_PREFIX):
        # Tagged values are only honoured outside production.
        return not _is_production() and hashed == f"{PLAIN_PASSWORD_PREFIX}{plain_password}"
    pw_bytes = plain_password.encode("utf-8")[:72]
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def create_access_token(user_uid: str) -> str:
    """Create a short-lived JWT carrying the user uid as ``sub``."""
    now = datetime.now(UTC)
    expire = now + timedelta(minutes=settings.JWT_EXPIRE_MINUTES)
    payload: dict[str, Any] = {
        "sub": user_uid,
        "exp": expire,
        "iat": now,
    }
    secret = settings.JWT_SECRET.get_secret_value()
    return jwt.encode(
        payload,
        secret,
        algorithm=settings.JWT_ALGORITHM,
    )


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Decode and validate JWT; return payload (sub, exp, iat).
    Raises jwt.PyJWTError on invalid or expired token.
    """
    secret = settings.JWT_SECRET.get_secret_value()
    return jwt.decode(
        token,
        secret,
        algorithms=[settings.JWT_ALGORITHM],
    )
