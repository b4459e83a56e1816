# =============================================================================
# lib/database.py - SQLAlchemy Engine and Session Management
# =============================================================================
# This module owns the single engine (and its connection pool) shared by the
# whole process. Every data-access call opens a short-lived session through
# Database.session(), which commits on success and rolls back on error.
#
# Usage:
#   from lib.database import Database
#   Database.configure("sqlite:///./catalog.db")
#   Database.create_all()
#   with Database.session() as session:
#       session.execute(...)
# =============================================================================

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from core.tables import Base

logger = logging.getLogger(__name__)


class DatabaseError(Exception):
    """Raised when the database layer is used before it is configured."""

    def __init__(self, message: str, suggestion: str | None = None):
        super().__init__(message)
        self.message = message
        self.suggestion = suggestion

    def __str__(self) -> str:
        result = self.message
        if self.suggestion:
            result += f" Suggestion: {self.suggestion}"
        return result


def _enable_sqlite_foreign_keys(dbapi_connection: Any, connection_record: Any) -> None:
    # SQLite ignores REFERENCES clauses unless this is set per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """
    Process-wide engine and session factory.

    All methods are class methods; one engine instance is shared across
    the application and reconfigured only at startup (or by tests).
    """

    _engine: Engine | None = None
    _session_factory: sessionmaker | None = None

    @classmethod
    def configure(cls, url: str, pool_size: int = 10, echo: bool = False) -> Engine:
        """
        Create the engine for the given URL, replacing any previous one.

        Args:
            url: SQLAlchemy connection URL
            pool_size: Pool size for server databases
            echo: Log every SQL statement

        Returns:
            Engine: The configured engine
        """
        cls.dispose()

        is_sqlite = url.startswith("sqlite")
        if is_sqlite:
            engine = create_engine(
                url,
                echo=echo,
                # Requests may be served from a worker thread pool
                connect_args={"check_same_thread": False, "timeout": 30},
            )
            event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        else:
            engine = create_engine(
                url,
                echo=echo,
                pool_size=pool_size,
                pool_pre_ping=True,
                pool_recycle=3600,
            )

        cls._engine = engine
        cls._session_factory = sessionmaker(bind=engine, expire_on_commit=False)
        logger.info(f"Database engine configured ({engine.dialect.name})")
        return engine

    @classmethod
    def get_engine(cls) -> Engine:
        if cls._engine is None:
            raise DatabaseError(
                "Database is not configured",
                suggestion="Call Database.configure() during application startup",
            )
        return cls._engine

    @classmethod
    def create_all(cls) -> None:
        """Create all tables that don't exist yet. Safe to call repeatedly."""
        Base.metadata.create_all(cls.get_engine(), checkfirst=True)
        logger.info("Database tables ready")

    @classmethod
    @contextmanager
    def session(cls) -> Iterator[Session]:
        """
        Open a transactional session.

        Commits when the block exits cleanly, rolls back and re-raises
        otherwise.
        """
        if cls._session_factory is None:
            raise DatabaseError(
                "Database is not configured",
                suggestion="Call Database.configure() during application startup",
            )

        session = cls._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    @classmethod
    def dispose(cls) -> None:
        """Close all pooled connections and forget the engine."""
        if cls._engine is not None:
            cls._engine.dispose()
        cls._engine = None
        cls._session_factory = None
