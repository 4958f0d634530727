# domainstore/app/services/membership.py
"""
Edits to a user's domain access list.

Each edit reads the row, computes the new set and writes it back with a
compare-and-swap on ``users.version``. If another edit landed in between,
the write misses and the edit is recomputed from a fresh read.
"""
import logging
from dataclasses import dataclass
from typing import Callable, FrozenSet

from sqlalchemy.ext.asyncio import AsyncSession

from domainstore.app.core.exceptions import ConflictError, NotFoundError
from domainstore.app.crud import user as user_crud
from domainstore.app.models.user import format_domains

logger = logging.getLogger(__name__)

DEFAULT_MAX_RETRIES = 5


@dataclass(frozen=True)
class MembershipResult:
    changed: bool
    domains: FrozenSet[str]


async def _edit(
    db: AsyncSession,
    user_id: int,
    transform: Callable[[FrozenSet[str]], FrozenSet[str]],
    max_retries: int,
) -> MembershipResult:
    for attempt in range(1, max_retries + 1):
        user = await user_crud.get_user(db, user_id)
        if user is None:
            raise NotFoundError("User not found")

        current = user.domain_set
        updated = transform(current)
        if updated == current:
            return MembershipResult(changed=False, domains=current)

        if await user_crud.replace_domains(db, user_id, user.version, format_domains(updated)):
            return MembershipResult(changed=True, domains=updated)

        logger.warning(
            "Domain list of user %s changed concurrently, retrying (%d/%d)",
            user_id, attempt, max_retries,
        )

    raise ConflictError("Domain list was modified concurrently, try again")


async def add_domain(
    db: AsyncSession,
    user_id: int,
    domain_name: str,
    max_retries: int = DEFAULT_MAX_RETRIES,
) -> MembershipResult:
    """
    Grant ``user_id`` access to ``domain_name``.

    The caller checks that the domain exists. Adding a domain the user
    already has is a successful no-op.
    """
    return await _edit(db, user_id, lambda current: current | {domain_name}, max_retries)


async def remove_domain(
    db: AsyncSession,
    user_id: int,
    domain_name: str,
    max_retries: int = DEFAULT_MAX_RETRIES,
) -> MembershipResult:
    """Revoke access. Removing a domain the user does not have is a no-op."""
    return await _edit(db, user_id, lambda current: current - {domain_name}, max_retries)
