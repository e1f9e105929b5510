"""
Password hashing and access tokens.

- Passwords are hashed with bcrypt (salted, configurable work factor).
- Access tokens are HS256 JWTs carrying the user id (`sub`) and the admin flag.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import bcrypt
import jwt

from eventbook.config.settings import AuthSettings
from eventbook.core.errors import AuthenticationError, ConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Principal:
    """The authenticated caller, as decoded from a bearer token."""

    user_id: str
    is_admin: bool = False


def hash_password(password: str, *, rounds: int = 10) -> str:
    hashed = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds))
    return hashed.decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash.
        return False


def _secret(auth: AuthSettings) -> str:
    if not auth.jwt_secret:
        raise ConfigurationError("auth.jwt_secret is not configured")
    return auth.jwt_secret


def issue_token(principal: Principal, auth: AuthSettings, *, now: datetime | None = None) -> str:
    """Sign a token for `principal` that expires after `auth.token_ttl_seconds`."""
    issued_at = now or datetime.now(timezone.utc)
    payload = {
        "sub": principal.user_id,
        "is_admin": bool(principal.is_admin),
        "iat": issued_at,
        "exp": issued_at + timedelta(seconds=auth.token_ttl_seconds),
    }
    return jwt.encode(payload, _secret(auth), algorithm=auth.jwt_algorithm)


def decode_token(token: str, auth: AuthSettings) -> Principal:
    """Verify signature/expiry and return the principal.

    Raises:
        AuthenticationError: On any invalid, expired or malformed token.
    """
    try:
        payload = jwt.decode(token, _secret(auth), algorithms=[auth.jwt_algorithm])
    except jwt.PyJWTError as e:
        logger.info("Rejected access token: %s", e)
        raise AuthenticationError("Authentication failed") from e

    user_id = payload.get("sub")
    if not isinstance(user_id, str) or not user_id:
        raise AuthenticationError("Authentication failed")
    return Principal(user_id=user_id, is_admin=bool(payload.get("is_admin", False)))
