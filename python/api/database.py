"""
Database Connection Module

Provides database connection and session management.
"""

import logging
import os
from contextlib import contextmanager
from typing import Any, Generator

from sqlalchemy import Table, create_engine, insert, text
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from .tables import metadata

logger = logging.getLogger(__name__)

# Database URL from environment
DATABASE_URL = os.getenv(
    "DATABASE_URL",
    f"postgresql://{os.getenv('POSTGRES_USER', 'finance')}:"
    f"{os.getenv('POSTGRES_PASSWORD', 'password')}@"
    f"{os.getenv('POSTGRES_HOST', 'localhost')}:"
    f"{os.getenv('POSTGRES_PORT', '5432')}/"
    f"{os.getenv('POSTGRES_DB', 'finance_tracker')}"
)


def _engine_options(url: str) -> dict:
    """Engine keyword arguments for the configured backend."""
    if url.startswith("sqlite"):
        # Single shared connection so in-memory databases survive across sessions
        return {
            "connect_args": {"check_same_thread": False},
            "poolclass": StaticPool,
        }
    return {
        "pool_pre_ping": True,
        "pool_size": 5,
        "max_overflow": 10,
    }


# Create engine
engine = create_engine(DATABASE_URL, **_engine_options(DATABASE_URL))

# Session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db() -> None:
    """Create any missing tables."""
    metadata.create_all(engine)
    logger.info("Database tables ready")


@contextmanager
def get_db_context() -> Generator[Session, None, None]:
    """Get database session as context manager.

    Yields:
        Database session
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def execute_query(query: Any, params: dict | None = None) -> list[dict]:
    """Execute a statement and return any rows as dictionaries.

    Args:
        query: SQL string or SQLAlchemy statement
        params: Query parameters

    Returns:
        List of result dictionaries (empty for statements without rows)
    """
    statement = text(query) if isinstance(query, str) else query

    with get_db_context() as db:
        result = db.execute(statement, params) if params else db.execute(statement)

        rows = []
        if result.returns_rows:
            rows = [dict(row._mapping) for row in result.fetchall()]

        db.commit()
        return rows


def execute_insert(
    table: Table,
    data: dict,
    returning: str = "id",
) -> dict | None:
    """Execute INSERT and return the inserted row.

    Args:
        table: Target table
        data: Column-value dictionary
        returning: Column to return (default: id)

    Returns:
        Inserted row or None
    """
    statement = insert(table).values(**data).returning(table.c[returning])
    results = execute_query(statement)
    return results[0] if results else None
