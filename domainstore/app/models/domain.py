# domainstore/app/models/domain.py
from sqlalchemy import Boolean, Column, DateTime, String
from sqlalchemy.sql import func

from domainstore.app.db.base import Base


class Domain(Base):
    """
    A tenant namespace.

    Names are trimmed and lowercased before insert. Deleting a domain only
    sets ``is_deleted``; users and records that reference it are left in
    place and simply stop being reachable.
    """
    __tablename__ = "domains"

    name = Column(String(100), primary_key=True)
    is_deleted = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    modified_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )
