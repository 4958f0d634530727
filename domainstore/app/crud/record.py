# domainstore/app/crud/record.py
"""
Storage operations on the key-value records table.

Rows are never removed. Soft-deleted rows are invisible to reads and to
value updates, and are revived by an upsert on the same key.
"""
from typing import List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from domainstore.app.models.record import Record

_UPSERT_INSERTS = {
    "sqlite": sqlite_insert,
    "postgresql": pg_insert,
}


def _live(user_id: int, domain: str, key: str):
    return (
        Record.user_id == user_id,
        Record.domain == domain,
        Record.key == key,
        Record.is_deleted.is_(False),
    )


async def list_records(db: AsyncSession, user_id: int, domain: str) -> List[Record]:
    result = await db.execute(
        select(Record)
        .where(
            Record.user_id == user_id,
            Record.domain == domain,
            Record.is_deleted.is_(False),
        )
        .order_by(Record.key)
    )
    return list(result.scalars().all())


async def get_record(db: AsyncSession, user_id: int, domain: str, key: str) -> Optional[Record]:
    result = await db.execute(select(Record).where(*_live(user_id, domain, key)))
    return result.scalars().first()


async def upsert_record(
    db: AsyncSession,
    user_id: int,
    domain: str,
    key: str,
    value: Optional[str],
) -> Record:
    """
    Insert the record, or overwrite ``value`` on the existing
    ``(user_id, domain, key)`` row, clearing ``is_deleted``.

    This is a single ``INSERT .. ON CONFLICT DO UPDATE .. RETURNING``
    statement, never a read followed by a write.
    """
    dialect = db.get_bind().dialect.name
    try:
        insert = _UPSERT_INSERTS[dialect]
    except KeyError:
        raise NotImplementedError(f"upsert is not supported on {dialect}") from None

    stmt = insert(Record).values(
        user_id=user_id,
        domain=domain,
        key=key,
        value=value,
        is_deleted=False,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=[Record.user_id, Record.domain, Record.key],
        set_={
            "value": stmt.excluded.value,
            "is_deleted": False,
            "modified_at": func.now(),
        },
    ).returning(Record)

    result = await db.scalars(stmt, execution_options={"populate_existing": True})
    record = result.one()
    await db.commit()
    return record


async def update_record_value(
    db: AsyncSession,
    user_id: int,
    domain: str,
    key: str,
    value: Optional[str],
) -> bool:
    """Overwrite the value of a live record. Returns whether a row changed."""
    result = await db.execute(
        update(Record)
        .where(*_live(user_id, domain, key))
        .values(value=value, modified_at=func.now())
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    return result.rowcount > 0


async def soft_delete_record(db: AsyncSession, user_id: int, domain: str, key: str) -> bool:
    """Flag a live record as deleted. A missing or already deleted key is a no-op (False)."""
    result = await db.execute(
        update(Record)
        .where(*_live(user_id, domain, key))
        .values(is_deleted=True, modified_at=func.now())
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    return result.rowcount > 0
