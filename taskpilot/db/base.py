"""
Declarative base for all ORM models.

Every model in taskpilot.models inherits from Base so that
Base.metadata knows about every table (used by tests and Alembic).
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """SQLAlchemy 2.0 declarative base class."""
    pass
