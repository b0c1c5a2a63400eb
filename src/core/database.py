"""Database connection and session management.

This module handles the database connection pool using SQLAlchemy. SQLite is
used by default; any SQLAlchemy URL (e.g. MySQL) can be set via DATABASE_URL.
"""

import logging

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from config import DATA_DIR, DATABASE_URL, DB_POOL_SIZE, DB_TIMEOUT_SECONDS
from models.base import Base
# Import models to ensure they are registered with Base.metadata
import models  # noqa: F401

logger = logging.getLogger(__name__)


def create_db_engine(url: str = DATABASE_URL) -> Engine:
    """Create a pooled engine whose connections give up after DB_TIMEOUT_SECONDS.

    Args:
        url: SQLAlchemy database URL.

    Returns:
        Configured Engine.
    """
    if url.startswith("sqlite"):
        if str(DATA_DIR) in url:
            # Ensure data directory exists
            DATA_DIR.mkdir(parents=True, exist_ok=True)
        return create_engine(
            url,
            connect_args={
                "check_same_thread": False,
                # busy timeout while another writer holds the lock
                "timeout": DB_TIMEOUT_SECONDS,
            },
        )

    return create_engine(
        url,
        pool_size=DB_POOL_SIZE,
        pool_timeout=DB_TIMEOUT_SECONDS,
        pool_pre_ping=True,
    )


engine = create_db_engine()

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(bind: Engine = engine) -> None:
    """Create tables if they do not exist."""
    Base.metadata.create_all(bind=bind)
    logger.info("Database ready: %s", bind.url.render_as_string(hide_password=True))


def get_db():
    """Dependency for getting a database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
