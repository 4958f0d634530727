# domainstore/app/api/endpoints/data.py
"""
Per-domain key-value data of the calling user.

Every route runs the full gate chain through ``deps.require_domain_access``
before touching the store.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from domainstore.app.api import deps
from domainstore.app.core.exceptions import NotFoundError
from domainstore.app.crud import record as record_crud
from domainstore.app.db.session import get_db
from domainstore.app.models.user import User
from domainstore.app.schemas.common import MessageResponse
from domainstore.app.schemas.record import (
    RecordCreate,
    RecordEnvelope,
    RecordListEnvelope,
    RecordResponse,
    RecordUpdate,
)

router = APIRouter()


# 1. LIST
@router.get("/{domain}/data", response_model=RecordListEnvelope)
async def read_records(
    domain: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(deps.require_domain_access),
):
    records = await record_crud.list_records(db, current_user.id, domain)
    return RecordListEnvelope(data=[RecordResponse.model_validate(r) for r in records])


# 2. UPSERT
@router.post("/{domain}/data", response_model=RecordEnvelope, status_code=status.HTTP_201_CREATED)
async def upsert_record(
    domain: str,
    item_in: RecordCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(deps.require_domain_access),
):
    record = await record_crud.upsert_record(
        db, current_user.id, domain, item_in.key, item_in.value
    )
    return RecordEnvelope(data=RecordResponse.model_validate(record))


# 3. READ ONE
@router.get("/{domain}/data/{key}", response_model=RecordEnvelope)
async def read_record(
    domain: str,
    key: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(deps.require_domain_access),
):
    record = await record_crud.get_record(db, current_user.id, domain, key)
    if record is None:
        raise NotFoundError("No data found")
    return RecordEnvelope(data=RecordResponse.model_validate(record))


# 4. UPDATE (live keys only, never resurrects)
@router.put("/{domain}/data/{key}", response_model=RecordEnvelope)
async def update_record(
    domain: str,
    key: str,
    item_in: RecordUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(deps.require_domain_access),
):
    changed = await record_crud.update_record_value(
        db, current_user.id, domain, key, item_in.value
    )
    if not changed:
        raise NotFoundError("Key not found")

    record = await record_crud.get_record(db, current_user.id, domain, key)
    if record is None:
        # Deleted between the update and the read
        raise NotFoundError("Key not found")
    return RecordEnvelope(data=RecordResponse.model_validate(record))


# 5. SOFT DELETE
@router.delete("/{domain}/data/{key}", response_model=MessageResponse)
async def delete_record(
    domain: str,
    key: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(deps.require_domain_access),
):
    if not await record_crud.soft_delete_record(db, current_user.id, domain, key):
        raise NotFoundError("Key not found")
    return MessageResponse(message="Key deleted")
