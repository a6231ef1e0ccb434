from datetime import timedelta

from postlab.api.auth_utils import DEFAULT_TOKEN_TTL, TokenError, decode_token, encode_token
from postlab.domain.entities import Identity
from postlab.domain.errors import Unauthenticated


class JWTIdentityResolver:
    """
    Resolves the caller from a bearer token.

    The request context is the raw token (or None). Claims: sub, email, fullname.
    """

    def __init__(self, secret_key: str | None = None) -> None:
        self._secret_key = secret_key

    def issue(self, identity: Identity, ttl: timedelta = DEFAULT_TOKEN_TTL) -> str:
        return encode_token(
            {"sub": identity.id, "email": identity.email, "fullname": identity.fullname},
            secret_key=self._secret_key,
            ttl=ttl,
        )

    def resolve(self, context: str | None) -> Identity:
        if not context:
            raise Unauthenticated("Not authenticated")

        try:
            claims = decode_token(context, secret_key=self._secret_key)
        except TokenError as e:
            raise Unauthenticated(e.reason) from e

        user_id = claims.get("sub")
        email = claims.get("email")
        if not isinstance(user_id, str) or not isinstance(email, str) or not email:
            raise Unauthenticated("Invalid token payload")

        return Identity(id=user_id, email=email, fullname=str(claims.get("fullname") or ""))
