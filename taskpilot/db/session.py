"""
Database session management - SQLAlchemy engine and session factory.
This module provides the database engine and the session factory services are built with.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from taskpilot.core.config import settings

# ---------------------------------------------------------------------------
# DATABASE ENGINE
# ---------------------------------------------------------------------------
# - pool_pre_ping=True: check pooled connections before use so a database
#   restart does not surface as errors on the next request.
# - SQLite connections are shared between FastAPI's worker threads and the
#   recurrence loop, which requires check_same_thread=False.
_connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
    connect_args=_connect_args,
)

# ---------------------------------------------------------------------------
# SESSION FACTORY
# ---------------------------------------------------------------------------
# - autocommit=False: you must call db.commit()
# - autoflush=False: flushes happen when you decide
# - expire_on_commit=False: returned ORM objects stay readable after commit,
#   which the room booking resolver relies on when building its result.
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
    bind=engine,
)
