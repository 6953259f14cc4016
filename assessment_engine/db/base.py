"""
SQLAlchemy declarative base.

All assessment engine models inherit from this Base class so Alembic
can see every table through a single metadata object.
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass
