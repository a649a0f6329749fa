"""
Database connection and session management for the SQL key-value store.
"""

from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Optional

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from feed_aggregator.models import Base


def build_sqlite_url(db_path: str) -> str:
    """Build a SQLite URL, ``:memory:`` giving an in-process database."""
    if db_path == ":memory:":
        return "sqlite:///:memory:"
    return f"sqlite:///{Path(db_path).resolve()}"


class DatabaseManager:
    """Database manager for context-managed database operations."""

    def __init__(self, db_path: str, echo: bool = False):
        """Initialize database manager.

        Args:
            db_path: SQLite database file path, or ``:memory:``
            echo: Echo SQL statements
        """
        self.db_path = db_path
        self.echo = echo
        self._engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None

    @property
    def engine(self) -> Engine:
        """Get the database engine."""
        if self._engine is None:
            kwargs = {
                "echo": self.echo,
                "connect_args": {"check_same_thread": False},
            }
            if self.db_path == ":memory:":
                # One shared connection, otherwise each session sees an empty database
                kwargs["poolclass"] = StaticPool
            else:
                Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

            self._engine = create_engine(build_sqlite_url(self.db_path), **kwargs)

            @event.listens_for(self._engine, "connect")
            def _set_sqlite_pragma(dbapi_connection, connection_record):
                cursor = dbapi_connection.cursor()
                cursor.execute("PRAGMA journal_mode=WAL")
                cursor.close()

        return self._engine

    def init_db(self, drop_all: bool = False) -> None:
        """Initialize database tables.

        Args:
            drop_all: If True, drop existing tables first
        """
        if drop_all:
            Base.metadata.drop_all(bind=self.engine)

        Base.metadata.create_all(bind=self.engine)

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """Get a database session.

        Yields:
            SQLAlchemy Session instance
        """
        if self._session_factory is None:
            self._session_factory = sessionmaker(
                autocommit=False,
                autoflush=False,
                bind=self.engine,
            )
        session = self._session_factory()

        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def close(self) -> None:
        """Close database connections."""
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
            self._session_factory = None

    def __enter__(self) -> "DatabaseManager":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.close()
