# domainstore/app/api/deps.py
"""
FastAPI dependencies wiring the access gates into endpoints.

The token is always decoded first (authentication); every dependency that
returns a ``User`` has re-read that user from the database.
"""
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from domainstore.app.core.config import Settings
from domainstore.app.db.session import get_db
from domainstore.app.models.user import User
from domainstore.app.schemas.user import TokenClaims
from domainstore.app.services import access

# auto_error=False: a missing header is reported by the gate itself, as 401
reusable_bearer = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_token_claims(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(reusable_bearer),
    settings: Settings = Depends(get_settings),
) -> TokenClaims:
    token = credentials.credentials if credentials else None
    return access.authenticate(token, settings)


async def get_current_user(
    db: AsyncSession = Depends(get_db),
    claims: TokenClaims = Depends(get_token_claims),
) -> User:
    return await access.require_current_user(db, claims)


async def require_domain_access(
    domain: str,
    db: AsyncSession = Depends(get_db),
    claims: TokenClaims = Depends(get_token_claims),
) -> User:
    """Caller may read and write their own records in ``domain``."""
    return await access.authorize_domain(db, claims, domain)


async def require_admin(
    db: AsyncSession = Depends(get_db),
    claims: TokenClaims = Depends(get_token_claims),
) -> User:
    return await access.authorize_admin(db, claims)


async def require_domain_admin(
    domain: str,
    db: AsyncSession = Depends(get_db),
    claims: TokenClaims = Depends(get_token_claims),
) -> User:
    """Admin acting on a specific, live domain."""
    await access.require_domain(db, domain)
    return await access.authorize_admin(db, claims)
