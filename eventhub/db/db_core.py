"""Core database functionality and configuration.

This module provides database management with environment-driven
configuration, connection pooling, and transactional session handling.
"""

from contextlib import contextmanager
import logging
from pathlib import Path
from typing import Optional, Dict, Any, Generator
import os

from sqlalchemy import create_engine, Engine, inspect
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from ..models import Base
from ..config.environment import IS_PRODUCTION_ENVIRONMENT

logger = logging.getLogger(__name__)

DEFAULT_SQLITE_PATH = Path.cwd() / 'data' / 'eventhub.db'

class DatabaseConfig:
    """Database configuration settings."""

    def __init__(
        self,
        url: Optional[str] = None,
        echo: bool = False,
        pool_size: int = 3,
        max_overflow: int = 4,
        pool_timeout: int = 30,
        pool_recycle: int = 3600,
        pool_pre_ping: bool = True
    ):
        """
        Initialize database configuration.

        In production environment, DATABASE_URL must be set in environment variables
        or provided explicitly via the url parameter.

        Args:
            url: SQLAlchemy connection URL. Falls back to DATABASE_URL, and
                 outside production to a SQLite file under ./data
            echo: Whether to echo SQL statements
            pool_size: Size of the connection pool (permanent connections)
            max_overflow: Maximum number of extra connections to allow temporarily
            pool_timeout: Seconds to wait for an available connection
            pool_recycle: Seconds before connections are recycled (prevent stale)
            pool_pre_ping: Whether to ping connections before using them

        Raises:
            ValueError: If in production environment and no database URL is provided
                      either via url parameter or DATABASE_URL env variable
        """
        self.url = url or os.environ.get('DATABASE_URL')
        if not self.url:
            if IS_PRODUCTION_ENVIRONMENT:
                raise ValueError(
                    "Database URL must be provided either via url parameter "
                    "or DATABASE_URL environment variable when in production environment"
                )
            self.url = f"sqlite:///{DEFAULT_SQLITE_PATH}"
        elif self.url.startswith("postgres://"):
            # SQLAlchemy rejects the legacy postgres:// scheme
            self.url = "postgresql://" + self.url[len("postgres://"):]

        self.echo = echo
        self.pool_size = pool_size
        self.max_overflow = max_overflow
        self.pool_timeout = pool_timeout
        self.pool_recycle = pool_recycle
        self.pool_pre_ping = pool_pre_ping

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith('sqlite')

    @property
    def sqlite_path(self) -> Optional[Path]:
        """File path of a file-backed SQLite database, None otherwise."""
        if not self.is_sqlite:
            return None
        path = self.url.split(':///', 1)[1] if ':///' in self.url else ''
        if not path or path == ':memory:':
            return None
        return Path(path)

    def get_engine_args(self) -> Dict[str, Any]:
        """Get SQLAlchemy engine arguments based on configuration."""
        args = {"echo": self.echo}

        # SQLite-specific configuration
        if self.is_sqlite:
            args["connect_args"] = {"check_same_thread": False}
            args["poolclass"] = StaticPool

        # Server database configuration
        else:
            args.update({
                "pool_size": self.pool_size,
                "max_overflow": self.max_overflow,
                "pool_timeout": self.pool_timeout,
                "pool_recycle": self.pool_recycle,
                "pool_pre_ping": self.pool_pre_ping
            })

        return args

class DatabaseError(Exception):
    """Base exception for database-related errors."""
    pass

class ConnectionError(DatabaseError):
    """Raised when there are issues connecting to the database."""
    pass

class SessionError(DatabaseError):
    """Raised when there are issues with database sessions."""
    pass

class Database:
    """Core database management class.

    One instance is created per application and handed to request handlers
    through the application state.
    """

    def __init__(self, config: Optional[DatabaseConfig] = None):
        """Initialize the database manager."""
        self.config = config or DatabaseConfig()
        self.engine: Optional[Engine] = None
        self._tables_checked = False
        self._session_factory = sessionmaker()

        # Initialize engine on creation
        self._setup_engine()

    def _setup_engine(self) -> None:
        """Set up the SQLAlchemy engine."""
        try:
            self.engine = create_engine(
                self.config.url,
                **self.config.get_engine_args()
            )
            self._session_factory.configure(bind=self.engine)
        except Exception as e:
            raise ConnectionError(f"Failed to create database engine: {e}") from e

    def init_db(self) -> None:
        """Initialize the database schema."""
        if not self.engine:
            raise ConnectionError("Database engine not initialized")

        try:
            self._ensure_sqlite_directory()
            Base.metadata.create_all(self.engine)
            self._tables_checked = True
            logger.info("Database schema initialized successfully")
        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to initialize database schema: {e}") from e

    def ensure_tables_exist(self) -> None:
        """Ensure all required database tables exist."""
        if not self._tables_checked:
            if not self.engine:
                raise ConnectionError("Database engine not initialized")

            try:
                self._ensure_sqlite_directory()
                inspector = inspect(self.engine)
                existing_tables = inspector.get_table_names()
                required_tables = set(Base.metadata.tables)

                if not required_tables.issubset(existing_tables):
                    logger.info("Some tables missing, initializing database schema")
                    Base.metadata.create_all(self.engine)
                    logger.info("Database schema initialized successfully")

                self._tables_checked = True

            except SQLAlchemyError as e:
                raise DatabaseError(f"Failed to verify/create database schema: {e}") from e

    def drop_all(self) -> None:
        """Drop every table. Used by tests and maintenance scripts."""
        Base.metadata.drop_all(self.engine)
        self._tables_checked = False

    def _ensure_sqlite_directory(self) -> None:
        path = self.config.sqlite_path
        if path is not None:
            path.parent.mkdir(parents=True, exist_ok=True)

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """
        Provide a transactional scope around a series of operations.

        Commits when the block completes and rolls back on any exception, so a
        failed operation never leaves partial writes behind.

        Example:
            with db.session() as session:
                user = session.query(User).first()
                user.name = "New Name"
                # No need to call commit - it's handled automatically

        Raises:
            SessionError: If SQLAlchemy fails inside the session
            DatabaseError: If database schema verification fails
        """
        # Ensure tables exist before providing a session
        self.ensure_tables_exist()

        session = self._session_factory()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            raise SessionError(f"Database session error: {e}") from e
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def dispose(self) -> None:
        """Release pooled connections."""
        if self.engine is not None:
            self.engine.dispose()
