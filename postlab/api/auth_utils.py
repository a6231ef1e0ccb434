"""
Bearer token encoding.

Tokens are HS256 JWTs. Every token carries ``iat`` and ``exp``; callers add
the identity claims (``sub``, ``email``, ``fullname``).
"""

import os
from datetime import UTC, datetime, timedelta
from typing import Any, cast

from jose import ExpiredSignatureError, JWTError, jwt

DEV_SECRET_KEY = "dev-secret-unsafe"
ALGORITHM = "HS256"
DEFAULT_TOKEN_TTL = timedelta(hours=24)


class TokenError(ValueError):
    """Token could not be verified. ``reason`` is safe to show to the caller."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


def signing_key(secret_key: str | None = None) -> str:
    return secret_key or os.environ.get("POSTLAB_SECRET_KEY") or DEV_SECRET_KEY


def encode_token(
    claims: dict[str, Any],
    *,
    secret_key: str | None = None,
    ttl: timedelta = DEFAULT_TOKEN_TTL,
    now_utc: datetime | None = None,
) -> str:
    """
    Sign ``claims`` into a token valid for ``ttl``.

    ``now_utc`` pins the issue time (tests); defaults to the current time.
    """
    issued_at = now_utc if now_utc is not None else datetime.now(UTC)
    payload = {**claims, "iat": issued_at, "exp": issued_at + ttl}
    token: str = jwt.encode(payload, signing_key(secret_key), algorithm=ALGORITHM)
    return token


def decode_token(token: str, *, secret_key: str | None = None) -> dict[str, Any]:
    """Verify signature and expiry. Raises TokenError."""
    try:
        payload = jwt.decode(token, signing_key(secret_key), algorithms=[ALGORITHM])
    except ExpiredSignatureError as e:
        raise TokenError("Token expired") from e
    except JWTError as e:
        raise TokenError("Invalid token") from e
    return cast(dict[str, Any], payload)
