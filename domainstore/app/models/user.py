# domainstore/app/models/user.py
from typing import FrozenSet, Iterable, Optional

from sqlalchemy import Boolean, Column, DateTime, Index, Integer, String, text
from sqlalchemy.sql import func

from domainstore.app.db.base import Base


def parse_domains(raw: Optional[str]) -> FrozenSet[str]:
    """Decode the stored comma list into a set of trimmed, non-empty names."""
    if not raw:
        return frozenset()
    return frozenset(part.strip() for part in raw.split(",") if part.strip())


def format_domains(domains: Iterable[str]) -> Optional[str]:
    """Encode a domain set for storage. An empty set is stored as NULL."""
    cleaned = sorted({name.strip() for name in domains if name and name.strip()})
    return ",".join(cleaned) if cleaned else None


class User(Base):
    __tablename__ = "users"
    # Usernames are unique among live rows only, so a soft-deleted
    # name can be registered again
    __table_args__ = (
        Index(
            "uq_users_username_live",
            "username",
            unique=True,
            sqlite_where=text("NOT is_deleted"),
            postgresql_where=text("NOT is_deleted"),
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(100), index=True, nullable=False)

    # Never serialized
    password_hash = Column(String(255), nullable=False)

    is_active = Column(Boolean, nullable=False, default=False)
    is_admin = Column(Boolean, nullable=False, default=False)

    # Comma-joined domain names; use domain_set everywhere else
    domains = Column(String, nullable=True)

    # Bumped by every membership rewrite (compare-and-swap key)
    version = Column(Integer, nullable=False, default=1)

    is_deleted = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    modified_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    @property
    def domain_set(self) -> FrozenSet[str]:
        return parse_domains(self.domains)

    def __repr__(self) -> str:
        return f"<User id={self.id} username={self.username!r}>"
