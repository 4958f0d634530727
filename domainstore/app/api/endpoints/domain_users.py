# domainstore/app/api/endpoints/domain_users.py
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from domainstore.app.api import deps
from domainstore.app.core.exceptions import NotFoundError
from domainstore.app.crud import user as user_crud
from domainstore.app.db.session import get_db
from domainstore.app.models.user import User
from domainstore.app.schemas.user import (
    DomainUsersResponse,
    UserStatusResponse,
    UserStatusUpdate,
    UserSummary,
)

router = APIRouter()


@router.get("/{domain}/users", response_model=DomainUsersResponse)
async def read_domain_users(
    domain: str,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(deps.require_domain_admin),
):
    """Members of the domain plus admins, who can reach every domain."""
    users = await user_crud.list_domain_users(db, domain)
    return DomainUsersResponse(users=[UserSummary.model_validate(u) for u in users])


@router.put("/{domain}/users/{user_id}", response_model=UserStatusResponse)
async def update_domain_user_status(
    domain: str,
    user_id: int,
    body: UserStatusUpdate,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(deps.require_domain_admin),
):
    changes = await user_crud.set_user_active(db, user_id, body.is_active)
    if changes == 0:
        raise NotFoundError("User not found")
    return UserStatusResponse(message="User updated", changes=changes)
