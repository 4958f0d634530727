# domainstore/app/crud/user.py
"""
Storage operations on the users table.

Lookups never return soft-deleted rows. Every write is one statement
followed by a commit.
"""
from typing import List, Optional

from sqlalchemy import func, literal, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from domainstore.app.core.exceptions import ConflictError
from domainstore.app.models.user import User


async def get_user(db: AsyncSession, user_id: int) -> Optional[User]:
    """
    Retrieve a live user by ID.

    Always re-reads the row, even if the session already holds it.

    Args:
        db: Database session
        user_id: ID of the user to retrieve

    Returns:
        User object or None if absent or soft-deleted
    """
    result = await db.execute(
        select(User)
        .where(User.id == user_id, User.is_deleted.is_(False))
        .execution_options(populate_existing=True)
    )
    return result.scalars().first()


async def get_user_by_username(db: AsyncSession, username: str) -> Optional[User]:
    """Retrieve a live user by exact (case-sensitive) username."""
    result = await db.execute(
        select(User).where(User.username == username, User.is_deleted.is_(False))
    )
    return result.scalars().first()


async def list_users(db: AsyncSession) -> List[User]:
    result = await db.execute(
        select(User).where(User.is_deleted.is_(False)).order_by(User.id)
    )
    return list(result.scalars().all())


async def list_domain_users(db: AsyncSession, domain: str) -> List[User]:
    """
    Users who may act inside ``domain``: members whose stored list holds the
    exact name, plus every admin.
    """
    wrapped = literal(",") + func.coalesce(User.domains, "") + literal(",")
    result = await db.execute(
        select(User)
        .where(
            User.is_deleted.is_(False),
            or_(User.is_admin.is_(True), wrapped.contains(f",{domain},", autoescape=True)),
        )
        .order_by(User.id)
    )
    return list(result.scalars().all())


async def create_user(
    db: AsyncSession,
    username: str,
    password_hash: str,
    is_active: bool = False,
    is_admin: bool = False,
    domains: Optional[str] = None,
) -> User:
    """
    Insert a new user.

    Raises:
        ConflictError: if a live user already has this username
    """
    db_user = User(
        username=username,
        password_hash=password_hash,
        is_active=is_active,
        is_admin=is_admin,
        domains=domains,
        version=1,
        is_deleted=False,
    )
    db.add(db_user)
    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        raise ConflictError("Username already exists") from exc
    await db.refresh(db_user)
    return db_user


async def update_user_flags(
    db: AsyncSession,
    user_id: int,
    is_active: Optional[bool] = None,
    is_admin: Optional[bool] = None,
    is_deleted: Optional[bool] = None,
) -> Optional[User]:
    """
    Set any of the boolean flags on a live user.

    Returns:
        The updated user, or None if no live user has this ID
    """
    changes = {}
    if is_active is not None:
        changes["is_active"] = is_active
    if is_admin is not None:
        changes["is_admin"] = is_admin
    if is_deleted is not None:
        changes["is_deleted"] = is_deleted

    stmt = (
        update(User)
        .where(User.id == user_id, User.is_deleted.is_(False))
        .values(**changes, modified_at=func.now())
        .returning(User)
    )
    result = await db.execute(stmt, execution_options={"populate_existing": True})
    db_user = result.scalars().first()
    await db.commit()
    return db_user


async def set_user_active(db: AsyncSession, user_id: int, is_active: bool) -> int:
    """Returns the number of rows changed (0 or 1)."""
    result = await db.execute(
        update(User)
        .where(User.id == user_id, User.is_deleted.is_(False))
        .values(is_active=is_active, modified_at=func.now())
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    return result.rowcount


async def soft_delete_user(db: AsyncSession, user_id: int) -> bool:
    result = await db.execute(
        update(User)
        .where(User.id == user_id, User.is_deleted.is_(False))
        .values(is_deleted=True, modified_at=func.now())
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    return result.rowcount > 0


async def replace_domains(
    db: AsyncSession,
    user_id: int,
    expected_version: int,
    domains: Optional[str],
) -> bool:
    """
    Compare-and-swap the stored domain list.

    The write only lands if the row still carries ``expected_version``;
    the version is bumped in the same statement.

    Returns:
        True if the row was written, False if another writer got there first
        (or the user is gone)
    """
    result = await db.execute(
        update(User)
        .where(
            User.id == user_id,
            User.version == expected_version,
            User.is_deleted.is_(False),
        )
        .values(domains=domains, version=User.version + 1, modified_at=func.now())
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    return result.rowcount == 1
