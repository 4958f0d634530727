# domainstore/app/models/record.py
from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.sql import func

from domainstore.app.db.base import Base


class Record(Base):
    """
    One key-value entry owned by a user inside a domain.

    ``(user_id, domain, key)`` is the upsert target. A deleted row keeps its
    slot: writing the same key again revives the row instead of adding one.
    """
    __tablename__ = "records"
    __table_args__ = (
        UniqueConstraint("user_id", "domain", "key", name="uq_records_user_domain_key"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    domain = Column(String(100), nullable=False)
    key = Column(String(255), nullable=False)

    value = Column(Text, nullable=True)
    is_deleted = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    modified_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )
