# domainstore/app/crud/domain.py
"""Storage operations on the domains table."""
from typing import List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from domainstore.app.core.exceptions import ConflictError
from domainstore.app.models.domain import Domain


def normalize_domain_name(name: str) -> str:
    return name.strip().lower()


async def get_domain(db: AsyncSession, name: str) -> Optional[Domain]:
    """Live domain by exact name, or None if absent or soft-deleted."""
    result = await db.execute(
        select(Domain).where(Domain.name == name, Domain.is_deleted.is_(False))
    )
    return result.scalars().first()


async def list_domains(db: AsyncSession) -> List[Domain]:
    result = await db.execute(
        select(Domain).where(Domain.is_deleted.is_(False)).order_by(Domain.name)
    )
    return list(result.scalars().all())


async def create_domain(db: AsyncSession, name: str) -> Domain:
    """
    Insert a domain. ``name`` must already be normalized.

    The name is the primary key, so a soft-deleted domain still blocks
    re-creation under the same name.

    Raises:
        ConflictError: if the name is taken
    """
    db_domain = Domain(name=name, is_deleted=False)
    db.add(db_domain)
    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        raise ConflictError("Domain already exists") from exc
    await db.refresh(db_domain)
    return db_domain


async def soft_delete_domain(db: AsyncSession, name: str) -> bool:
    result = await db.execute(
        update(Domain)
        .where(Domain.name == name, Domain.is_deleted.is_(False))
        .values(is_deleted=True, modified_at=func.now())
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    return result.rowcount > 0
