# domainstore/app/api/endpoints/admin.py
"""
Administration of domains and user accounts.

Every route depends on ``deps.require_admin``, which re-reads the caller and
demands an active admin row regardless of what the token claims.
"""
import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from domainstore.app.api import deps
from domainstore.app.core.config import Settings
from domainstore.app.core.exceptions import NotFoundError, ValidationError
from domainstore.app.crud import domain as domain_crud
from domainstore.app.crud import user as user_crud
from domainstore.app.db.session import get_db
from domainstore.app.models.user import User, format_domains, parse_domains
from domainstore.app.schemas.common import MessageResponse
from domainstore.app.schemas.domain import (
    DomainCreate,
    DomainCreateResponse,
    DomainListResponse,
    DomainName,
    DomainResponse,
)
from domainstore.app.schemas.user import (
    AdminUserCreate,
    AdminUserUpdate,
    AdminUserUpdateResponse,
    MembershipRequest,
    MembershipResponse,
    RegisterResponse,
    UserDetail,
    UserListResponse,
)
from domainstore.app.security import hashing
from domainstore.app.services import membership

logger = logging.getLogger(__name__)

router = APIRouter()

# First path segments owned by other routes
RESERVED_DOMAIN_NAMES = frozenset({"admin", "users", "login", "register", "healthz"})


# ─────────────────────────────────────────────────────────────────────────────
# Domains
# ─────────────────────────────────────────────────────────────────────────────
@router.get("/domains", response_model=DomainListResponse)
async def read_domains(
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(deps.require_admin),
):
    domains = await domain_crud.list_domains(db)
    return DomainListResponse(domains=[DomainResponse.model_validate(d) for d in domains])


@router.post("/domains", response_model=DomainCreateResponse, status_code=status.HTTP_201_CREATED)
async def create_domain(
    domain_in: DomainCreate,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(deps.require_admin),
):
    name = domain_crud.normalize_domain_name(domain_in.name)
    if not name:
        raise ValidationError("Domain name is required")
    if "," in name or "/" in name:
        raise ValidationError("Domain name may not contain ',' or '/'")
    if name in RESERVED_DOMAIN_NAMES:
        raise ValidationError(f"Domain name {name!r} is reserved")

    await domain_crud.create_domain(db, name)
    logger.info("Admin %s created domain %r", admin.id, name)
    return DomainCreateResponse(message="Domain created successfully", domain=DomainName(name=name))


@router.delete("/domains/{domain}", response_model=MessageResponse)
async def delete_domain(
    domain: str,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(deps.require_admin),
):
    name = domain_crud.normalize_domain_name(domain)
    if not await domain_crud.soft_delete_domain(db, name):
        raise NotFoundError("Domain not found")
    logger.info("Admin %s deleted domain %r", admin.id, name)
    return MessageResponse(message="Domain deleted successfully")


# ─────────────────────────────────────────────────────────────────────────────
# Users
# ─────────────────────────────────────────────────────────────────────────────
@router.get("/users", response_model=UserListResponse)
async def read_users(
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(deps.require_admin),
):
    users = await user_crud.list_users(db)
    return UserListResponse(users=[UserDetail.model_validate(u) for u in users])


@router.post("/users", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    user_in: AdminUserCreate,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(deps.require_admin),
):
    domains = {domain_crud.normalize_domain_name(d) for d in parse_domains(user_in.domain)}
    for name in sorted(domains):
        if await domain_crud.get_domain(db, name) is None:
            raise NotFoundError(f"Domain {name!r} not found")

    password_hash = await run_in_threadpool(hashing.get_password_hash, user_in.password)
    new_user = await user_crud.create_user(
        db,
        username=user_in.username,
        password_hash=password_hash,
        is_active=user_in.is_active,
        is_admin=user_in.is_admin,
        domains=format_domains(domains),
    )
    logger.info("Admin %s created user %s (%r)", admin.id, new_user.id, new_user.username)
    return RegisterResponse(message="User created", id=new_user.id)


@router.put("/users/{user_id}", response_model=AdminUserUpdateResponse)
async def update_user(
    user_id: int,
    user_in: AdminUserUpdate,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(deps.require_admin),
):
    changes = user_in.model_dump(exclude_none=True)
    if not changes:
        raise ValidationError("Nothing to update")

    db_user = await user_crud.update_user_flags(db, user_id, **changes)
    if db_user is None:
        raise NotFoundError("User not found")
    logger.info("Admin %s updated user %s: %s", admin.id, user_id, changes)
    return AdminUserUpdateResponse(message="User updated", user=UserDetail.model_validate(db_user))


@router.delete("/users/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(deps.require_admin),
):
    if not await user_crud.soft_delete_user(db, user_id):
        raise NotFoundError("User not found")
    logger.info("Admin %s deleted user %s", admin.id, user_id)
    return MessageResponse(message="User deleted successfully")


# ─────────────────────────────────────────────────────────────────────────────
# Domain membership
# ─────────────────────────────────────────────────────────────────────────────
@router.post("/users/{user_id}/domains", response_model=MembershipResponse)
async def add_user_domain(
    user_id: int,
    body: MembershipRequest,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(deps.get_settings),
    admin: User = Depends(deps.require_admin),
):
    name = domain_crud.normalize_domain_name(body.domain)
    if await domain_crud.get_domain(db, name) is None:
        raise NotFoundError("Domain not found")

    result = await membership.add_domain(
        db, user_id, name, max_retries=settings.MEMBERSHIP_MAX_RETRIES
    )
    if result.changed:
        logger.info("Admin %s gave user %s access to %r", admin.id, user_id, name)
    message = "Domain added to user" if result.changed else "User already has this domain"
    return MembershipResponse(message=message, domains=sorted(result.domains))


@router.delete("/users/{user_id}/domains/{domain}", response_model=MembershipResponse)
async def remove_user_domain(
    user_id: int,
    domain: str,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(deps.get_settings),
    admin: User = Depends(deps.require_admin),
):
    name = domain_crud.normalize_domain_name(domain)
    result = await membership.remove_domain(
        db, user_id, name, max_retries=settings.MEMBERSHIP_MAX_RETRIES
    )
    if result.changed:
        logger.info("Admin %s revoked access to %r from user %s", admin.id, name, user_id)
    message = "Domain removed from user" if result.changed else "User does not have this domain"
    return MembershipResponse(message=message, domains=sorted(result.domains))
