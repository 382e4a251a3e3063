"""
Security utilities: signing secret, password hashing and session tokens.
Passwords are hashed with bcrypt via passlib. Tokens are HS256 JWTs via python-jose.
"""
from __future__ import annotations

import base64
import binascii
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Any

from jose import ExpiredSignatureError, JWTError, jwt
from jose.utils import base64url_decode, base64url_encode
from passlib.context import CryptContext

from app.core.config import settings
from app.core.exceptions import (
    InvalidPasswordException,
    InvalidSignatureException,
    MalformedTokenException,
    TokenExpiredException,
)

logger = logging.getLogger(__name__)

MIN_SECRET_BYTES = 32

# ── Signing secret ────────────────────────────────────────────────────────────


def load_secret(configured: str | None) -> bytes:
    """
    Resolve the token signing secret.

    A configured value is used when it base64-decodes to at least 32 bytes,
    or else when its raw bytes are at least 32 long. Otherwise 32 random
    bytes are generated; sessions issued with them die with the process.
    """
    if configured:
        try:
            decoded = base64.b64decode(configured, validate=True)
        except (binascii.Error, ValueError):
            decoded = b""
        if len(decoded) >= MIN_SECRET_BYTES:
            return decoded
        raw = configured.encode("utf-8")
        if len(raw) >= MIN_SECRET_BYTES:
            return raw
        logger.warning("AUTH_SECRET is shorter than %d bytes and was ignored", MIN_SECRET_BYTES)

    logger.warning("Generated random auth secret; set AUTH_SECRET to persist sessions")
    return secrets.token_bytes(MIN_SECRET_BYTES)


@lru_cache(maxsize=1)
def get_signing_secret() -> bytes:
    """Process-wide signing secret, resolved once."""
    return load_secret(settings.AUTH_SECRET)


# ── Password hashing ──────────────────────────────────────────────────────────
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)


def hash_password(plain_password: str) -> str:
    """Return bcrypt hash of the given plain-text password."""
    return pwd_context.hash(plain_password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Return True if plain_password matches the stored hash."""
    return pwd_context.verify(plain_password, hashed_password)


def validate_password_strength(password: str) -> str:
    """
    Enforce password policy: at least PASSWORD_MIN_LENGTH characters
    ignoring surrounding whitespace. The password itself is returned as typed.
    """
    if len(password.strip()) < settings.PASSWORD_MIN_LENGTH:
        raise InvalidPasswordException(
            f"Password must be at least {settings.PASSWORD_MIN_LENGTH} characters long"
        )
    return password


# ── Session tokens ────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class SessionClaims:
    user_id: int
    role: str
    expires_at: datetime


def create_session_token(
    user_id: int,
    role: str,
    *,
    secret: bytes | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """Issue a signed token carrying user id, role and expiry."""
    now = datetime.now(timezone.utc)
    if expires_delta is None:
        expires_delta = timedelta(days=settings.AUTH_TOKEN_EXPIRE_DAYS)
    payload: dict[str, Any] = {
        "sub": str(user_id),
        "role": role,
        "iat": now,
        "exp": now + expires_delta,
    }
    return jwt.encode(
        payload,
        secret if secret is not None else get_signing_secret(),
        algorithm=settings.JWT_ALGORITHM,
    )


def _is_canonical_segment(segment: str) -> bool:
    try:
        return base64url_encode(base64url_decode(segment.encode("ascii"))).decode("ascii") == segment
    except (binascii.Error, ValueError, UnicodeEncodeError):
        return False


def decode_session_token(token: str, *, secret: bytes | None = None) -> SessionClaims:
    """
    Verify a session token and return its claims.

    Raises MalformedTokenException, InvalidSignatureException or
    TokenExpiredException; all of them are 401 to the client.
    """
    parts = token.split(".")
    if len(parts) != 3 or not all(parts):
        raise MalformedTokenException()
    try:
        jwt.get_unverified_claims(token)
    except JWTError:
        raise MalformedTokenException()

    # Trailing bits of the last base64 char are ignored by the decoder.
    if not _is_canonical_segment(parts[2]):
        raise InvalidSignatureException()

    try:
        payload = jwt.decode(
            token,
            secret if secret is not None else get_signing_secret(),
            algorithms=[settings.JWT_ALGORITHM],
        )
    except ExpiredSignatureError:
        raise TokenExpiredException()
    except JWTError:
        raise InvalidSignatureException()

    sub, role, exp = payload.get("sub"), payload.get("role"), payload.get("exp")
    if not isinstance(sub, str) or not sub.isdigit():
        raise MalformedTokenException("Malformed token: invalid subject")
    if not isinstance(role, str) or not role:
        raise MalformedTokenException("Malformed token: missing role")
    if not isinstance(exp, (int, float)):
        raise MalformedTokenException("Malformed token: missing expiry")

    return SessionClaims(
        user_id=int(sub),
        role=role,
        expires_at=datetime.fromtimestamp(exp, tz=timezone.utc),
    )
