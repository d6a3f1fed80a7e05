"""
Database configuration, session management and the unit-of-work boundary.
"""

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from app.config import settings

logger = logging.getLogger("freezer.database")

# Create SQLAlchemy Base
Base = declarative_base()


def build_engine(url: str, echo: bool = False, **kwargs):
    """Create an engine; SQLite connections are shared across request threads."""
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
    return create_engine(url, echo=echo, future=True, **kwargs)


# Create engine
engine = build_engine(settings.database_url, echo=settings.db_echo)

# Create session factory
SessionLocal = sessionmaker(bind=engine, future=True, expire_on_commit=False)


def init_database(bind=None):
    """Initialize database schema and seed the reference rows"""
    from domain.models.seed import seed_reference_data

    bind = bind if bind is not None else engine
    Base.metadata.create_all(bind=bind)
    logger.info("Database tables created successfully")

    session = Session(bind=bind, future=True)
    try:
        with unit_of_work(session):
            seed_reference_data(session)
    finally:
        session.close()


def get_db_session():
    """Get database session (for FastAPI dependency injection)"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def unit_of_work(db: Session) -> Iterator[Session]:
    """
    Run a block of work as one atomic transaction on ``db``.

    Inner operations receive the same session and never commit on their own;
    the block commits once at the end, or rolls back every effect (locks,
    generated codes, flags, inserted rows) if anything raises.
    """
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
