# domainstore/app/db/base.py
"""
SQLAlchemy declarative base.

All ORM models inherit from ``Base``; ``Base.metadata`` is what the
lifespan hook and ``init_db.py`` create tables from.
"""
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Usage:
        class Domain(Base):
            __tablename__ = "domains"
            name = Column(String(100), primary_key=True)
            ...
    """
    pass
