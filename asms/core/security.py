from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any
import hashlib
import logging
import time

import bcrypt
from jose import JWTError, jwt

from asms.config import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    """Authenticated caller resolved from an access token."""

    user_id: int
    email: str
    issued_at: datetime
    expires_at: datetime


def _prepare_password_for_bcrypt(password: str) -> bytes:
    """
    Prepare password for bcrypt hashing.

    Bcrypt has a 72-byte limit. If password exceeds this, we hash it with
    SHA-256 first to get a fixed 32-byte digest.
    """
    password_bytes = password.encode("utf-8")
    if len(password_bytes) <= 72:
        return password_bytes
    return hashlib.sha256(password_bytes).digest()


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against a hashed password."""
    prepared_password = _prepare_password_for_bcrypt(plain_password)
    try:
        return bcrypt.checkpw(prepared_password, hashed_password.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


def get_password_hash(password: str) -> str:
    """Hash a password using bcrypt."""
    prepared_password = _prepare_password_for_bcrypt(password)
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(prepared_password, salt)
    return hashed.decode("utf-8")


def create_access_token(user_id: int, email: str, expires_delta: timedelta | None = None) -> str:
    """Issue a signed access token for a user."""
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)
    # JWT iat/exp claims must be Unix timestamps (integers), not datetime objects
    issued_at = int(time.time())
    to_encode: dict[str, Any] = {
        "sub": str(user_id),
        "email": email,
        "iat": issued_at,
        "exp": issued_at + int(expires_delta.total_seconds()),
    }
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def verify_token(token: str) -> dict[str, Any] | None:
    """Verify and decode a JWT token."""
    try:
        return jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.algorithm],
            options={"require_exp": True, "require_iat": True, "require_sub": True},
        )
    except JWTError as e:
        logger.warning("Rejected access token: %s", e)
        return None


def validate_access_token(token: str | None) -> Identity | None:
    """Resolve a token to an Identity.

    Fails closed: malformed, unsigned, tampered, expired or incomplete tokens
    all yield None. Never raises.
    """
    if not token:
        return None

    try:
        payload = verify_token(token)
    except Exception:
        logger.warning("Access token could not be decoded", exc_info=True)
        return None
    if payload is None:
        return None

    try:
        user_id = int(payload["sub"])
        email = str(payload["email"])
        issued_at = datetime.fromtimestamp(int(payload["iat"]), tz=timezone.utc).replace(tzinfo=None)
        expires_at = datetime.fromtimestamp(int(payload["exp"]), tz=timezone.utc).replace(tzinfo=None)
    except (KeyError, ValueError, TypeError, OverflowError):
        logger.warning("Access token has an invalid payload")
        return None

    return Identity(user_id=user_id, email=email, issued_at=issued_at, expires_at=expires_at)
