"""Database session management.

Provides session factory for SQLite database access with proper
thread-safety for FastAPI concurrency.
"""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Generator

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from userdash.config import DEFAULT_DB_PATH
from userdash.db.schema import Base

# Module-level engine cache for connection pooling
_engine_cache: dict[str, Engine] = {}

# Module-level session factory cache
_session_factory_cache: dict[str, sessionmaker] = {}


def _cache_key(db_path: Path | None) -> tuple[Path, str]:
    db_path = Path(db_path) if db_path is not None else DEFAULT_DB_PATH
    return db_path, str(db_path.resolve())


def get_engine(db_path: Path | None = None) -> Engine:
    """Get SQLAlchemy engine for the database.

    Engines are cached by resolved db_path, so repeated calls with the
    same path share one connection pool.

    Args:
        db_path: Path to SQLite database file. Defaults to data/userdash.db.

    Returns:
        SQLAlchemy engine instance (cached).
    """
    db_path, cache_key = _cache_key(db_path)

    if cache_key in _engine_cache:
        return _engine_cache[cache_key]

    # Create parent directories only when creating a new engine
    db_path.parent.mkdir(parents=True, exist_ok=True)

    # Pooled connections are checked out from FastAPI worker threads
    engine = create_engine(
        f"sqlite:///{db_path}",
        echo=False,
        connect_args={"check_same_thread": False},
    )
    _engine_cache[cache_key] = engine

    return engine


def get_session(db_path: Path | None = None) -> Session:
    """Get a database session.

    Note: Caller is responsible for closing the session. For automatic
    resource management, use get_db_session() context manager instead.
    """
    db_path, cache_key = _cache_key(db_path)

    factory = _session_factory_cache.get(cache_key)
    if factory is None:
        factory = sessionmaker(bind=get_engine(db_path))
        _session_factory_cache[cache_key] = factory

    return factory()


@contextmanager
def get_db_session(db_path: Path | None = None) -> Generator[Session, None, None]:
    """Context manager for database sessions with automatic cleanup.

    Commits on successful exit, rolls back on exception, and always
    closes the session.

    Example:
        with get_db_session() as session:
            repo.create_user(session, user)
    """
    session = get_session(db_path)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db(db_path: Path | None = None) -> None:
    """Create all tables. Call once during application startup."""
    engine = get_engine(db_path)
    Base.metadata.create_all(engine)
