# label_lifecycle/database.py
"""
Engine, session factory and declarative base.

The URL comes from Settings, which already rewrites postgresql:// to the
psycopg2 driver form.
"""

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from label_lifecycle.config import get_settings

DATABASE_URL = get_settings().DATABASE_URL

_engine_kwargs: dict = {"future": True, "echo": False}
if DATABASE_URL.startswith("postgresql"):
    _engine_kwargs.update(pool_pre_ping=True, pool_size=5, max_overflow=5)

engine = create_engine(DATABASE_URL, **_engine_kwargs)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    future=True,
)

Base = declarative_base()


def get_db() -> Iterator[Session]:
    """
    FastAPI dependency that gives you a DB session and cleans it up after.
    """
    db: Session = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def session_scope() -> Iterator[Session]:
    """Session for work outside a request (background tasks, CLI). Commits are explicit."""
    db: Session = SessionLocal()
    try:
        yield db
    finally:
        db.close()
