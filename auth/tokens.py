"""
auth/tokens.py -- JWT signing/verification and password hashing.

Security design decisions:
  JWT: python-jose with HS256. Tokens carry the wire claims
       {"username", "isAdmin", "iat", "exp"}. verify() is a pure boundary
       call: it either returns an Identity or raises InvalidCredential. The
       secret is always passed in explicitly; nothing here caches it.

  Passwords: bcrypt directly (no passlib wrapper). The cost factor comes from
       Settings.bcrypt_rounds. authenticate() in auth/store.py runs bcrypt
       against a dummy hash for unknown usernames so response time does not
       reveal whether a username exists.

Layer rule: no imports from api/ or listings/. Import from core/ is allowed.
"""

from __future__ import annotations

import logging
import time
from functools import lru_cache
from typing import Any

import bcrypt
from jose import JWTError, jwt

from auth.models import Identity, User
from core.config import get_settings

logger = logging.getLogger("jobly.auth")

_ALGORITHM = "HS256"


class InvalidCredential(Exception):
    """Raised by verify() for malformed, expired, or wrongly-signed tokens."""


# ---------------------------------------------------------------------------
# JWT encode / decode
# ---------------------------------------------------------------------------


def sign(payload: dict[str, Any], secret: str) -> str:
    """Encode payload as an HS256-signed JWT."""
    return jwt.encode(payload, secret, algorithm=_ALGORITHM)


def verify(token: str, secret: str) -> Identity:
    """Decode and verify a JWT, returning the Identity it carries.

    Raises InvalidCredential when the signature does not match, the token is
    expired or malformed, or the payload lacks a string "username" or a
    boolean "isAdmin".
    """
    try:
        payload = jwt.decode(token, secret, algorithms=[_ALGORITHM])
    except JWTError as exc:
        raise InvalidCredential(str(exc)) from exc

    username = payload.pop("username", None)
    is_admin = payload.pop("isAdmin", None)
    if not isinstance(username, str) or not username:
        raise InvalidCredential("Token has no username claim")
    if not isinstance(is_admin, bool):
        raise InvalidCredential("Token has no isAdmin claim")
    issued_at = payload.pop("iat", None)
    return Identity(username=username, is_admin=is_admin, issued_at=issued_at, extra=payload)


def create_token(user: User, secret: str | None = None, expire_seconds: int = 0) -> str:
    """Issue a signed token for user.

    Args:
        user:           The authenticated or freshly registered user.
        secret:         Signing key. Defaults to Settings.secret_key.
        expire_seconds: Token lifetime. If 0 (default), uses
                        Settings.token_expire_seconds.
    """
    settings = get_settings()
    now = int(time.time())
    duration = expire_seconds if expire_seconds > 0 else settings.token_expire_seconds
    payload = {
        "username": user.username,
        "isAdmin": bool(user.is_admin),
        "iat": now,
        "exp": now + duration,
    }
    return sign(payload, secret or settings.secret_key)


# ---------------------------------------------------------------------------
# Password hashing (bcrypt -- direct usage, no passlib wrapper)
# ---------------------------------------------------------------------------


def hash_password(plain: str) -> str:
    """Return a bcrypt hash of the given plaintext password.

    Passwords longer than 72 bytes are truncated by bcrypt. The API layer
    caps password length well below that (pydantic max_length).
    """
    rounds = get_settings().bcrypt_rounds
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash."""
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        logger.warning("Stored password hash is not a valid bcrypt hash")
        return False


@lru_cache
def dummy_hash() -> str:
    """Hash used to equalize login timing when the username does not exist.

    Computed once on first use so later unknown-user logins cost exactly one
    bcrypt check, the same as a wrong-password login.
    """
    return hash_password("jobly_timing_dummy")
