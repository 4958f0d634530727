# domainstore/app/services/access.py
"""
Access control decisions.

Authorization is split in two phases:

1. Authenticate: decode the bearer token. Cheap, and tells us *who* the
   caller claims to be.
2. Authorize: re-read the user (and domain) rows and decide from their
   current state. The token's ``isAdmin`` claim is never consulted, so a
   revoked privilege takes effect on the next request rather than when the
   token expires.

Gates run in a fixed order and the first failure wins:

    authentication -> domain existence -> user currency -> membership
    authentication -> user currency -> admin              (management)
"""
import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from domainstore.app.core.config import Settings
from domainstore.app.core.exceptions import ForbiddenError, NotFoundError, UnauthorizedError
from domainstore.app.crud import domain as domain_crud
from domainstore.app.crud import user as user_crud
from domainstore.app.models.domain import Domain
from domainstore.app.models.user import User
from domainstore.app.schemas.user import TokenClaims
from domainstore.app.security.jwt import ExpiredToken, InvalidToken, decode_access_token

logger = logging.getLogger(__name__)

NO_TOKEN = "Unauthorized, no token provided"
INVALID_TOKEN = "Unauthorized, invalid token"
USER_UNAVAILABLE = "User not found or inactive"
DOMAIN_NOT_FOUND = "Domain not found"
DOMAIN_DENIED = "Access denied to this domain"
ADMIN_REQUIRED = "Access denied. Admin required."


def authenticate(token: Optional[str], settings: Settings) -> TokenClaims:
    """Gate 1: a present, correctly signed, unexpired token."""
    if not token:
        raise UnauthorizedError(NO_TOKEN)
    try:
        return decode_access_token(token, settings)
    except ExpiredToken:
        logger.info("Rejected expired token")
        raise UnauthorizedError(INVALID_TOKEN)
    except InvalidToken:
        logger.info("Rejected invalid token")
        raise UnauthorizedError(INVALID_TOKEN)


async def require_domain(db: AsyncSession, name: str) -> Domain:
    """Gate 2: the target domain exists and is not deleted."""
    domain = await domain_crud.get_domain(db, name)
    if domain is None:
        raise NotFoundError(DOMAIN_NOT_FOUND)
    return domain


async def require_current_user(db: AsyncSession, claims: TokenClaims) -> User:
    """Gate 3: the token's user still exists and is active, per a fresh read."""
    user = await user_crud.get_user(db, claims.id)
    if user is None or not user.is_active:
        raise UnauthorizedError(USER_UNAVAILABLE)
    return user


def can_access_domain(user: User, domain_name: str) -> bool:
    """Gate 4 decision: admins reach every domain, others need membership."""
    if user.is_admin:
        return True
    return domain_name in user.domain_set


async def authorize_domain(db: AsyncSession, claims: TokenClaims, domain_name: str) -> User:
    """Gates 2-4 for per-domain data endpoints."""
    await require_domain(db, domain_name)
    user = await require_current_user(db, claims)
    if not can_access_domain(user, domain_name):
        logger.info("User %s denied access to domain %r", user.id, domain_name)
        raise ForbiddenError(DOMAIN_DENIED)
    return user


async def authorize_admin(db: AsyncSession, claims: TokenClaims) -> User:
    """Gate 5: the fresh row must be both active and admin."""
    user = await user_crud.get_user(db, claims.id)
    if user is None or not (user.is_active and user.is_admin):
        logger.info("User %s denied admin access", claims.id)
        raise ForbiddenError(ADMIN_REQUIRED)
    return user
