"""Database session management."""

from typing import Any

from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from court_vision.config import settings


def _engine_options(url: str) -> dict[str, Any]:
    """Pool options for the configured database."""
    if url.startswith("sqlite"):
        # Single shared connection so in-memory databases survive across sessions
        return {"connect_args": {"check_same_thread": False}, "poolclass": StaticPool}
    return {"pool_pre_ping": True, "pool_size": 5, "max_overflow": 10}


engine = create_engine(settings.database_url, **_engine_options(settings.database_url))

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
    bind=engine,
)


def init_db() -> None:
    """Initialize database connection and verify connectivity."""
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
