# domainstore/app/security/jwt.py
"""
Bearer token codec.

Tokens carry a login-time snapshot ``{id, username, isAdmin}``. They prove
identity only; authorization always re-reads the user row.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import ExpiredSignatureError, JWTError, jwt
from pydantic import ValidationError

from domainstore.app.core.config import Settings
from domainstore.app.schemas.user import TokenClaims


class InvalidToken(Exception):
    """Malformed token, bad signature or missing claims (``exp`` included)."""


class ExpiredToken(InvalidToken):
    """Signature is valid but ``exp`` is in the past."""


def create_access_token(
    claims: TokenClaims,
    settings: Settings,
    expires_delta: Optional[timedelta] = None,
) -> str:
    if expires_delta is None:
        expires_delta = timedelta(days=settings.ACCESS_TOKEN_EXPIRE_DAYS)

    to_encode = claims.model_dump(by_alias=True)
    to_encode["exp"] = datetime.now(timezone.utc) + expires_delta
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str, settings: Settings) -> TokenClaims:
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM],
            options={"require_exp": True},
        )
    except ExpiredSignatureError as exc:
        raise ExpiredToken("token expired") from exc
    except JWTError as exc:
        raise InvalidToken(str(exc)) from exc

    try:
        return TokenClaims.model_validate(payload)
    except ValidationError as exc:
        raise InvalidToken("token claims are incomplete") from exc
