"""Database configuration and session management."""

from typing import Optional

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from ..config.logging import get_logger
from ..config.settings import get_settings

logger = get_logger(__name__)

# Base class for all ORM models
Base = declarative_base()

# Global engine and session factory
_engine: Optional[Engine] = None
_SessionLocal: Optional[sessionmaker] = None


def _configure_sqlite_for_performance(dbapi_connection, connection_record):
    """Configure SQLite for concurrent readers and reasonable durability."""
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA synchronous=NORMAL")
        cursor.execute("PRAGMA temp_store=MEMORY")
    finally:
        cursor.close()


def create_engine_for_url(database_url: str, echo: bool = False) -> Engine:
    """Create a database engine with settings suited to the URL's backend."""
    settings = get_settings()

    logger.info(
        "Creating database engine",
        url_type="sqlite" if database_url.startswith("sqlite") else "other",
        echo_sql=echo,
    )

    engine_kwargs = {
        "echo": echo,
        "pool_pre_ping": settings.database_pool_pre_ping,
    }

    if database_url.startswith("sqlite"):
        engine_kwargs["connect_args"] = {
            "check_same_thread": False,
            "timeout": 30,
        }
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            engine_kwargs["poolclass"] = StaticPool
    else:
        engine_kwargs.update(
            {
                "pool_size": 5,
                "max_overflow": 10,
                "pool_recycle": settings.database_pool_recycle,
            }
        )

    engine = create_engine(database_url, **engine_kwargs)

    if database_url.startswith("sqlite") and "memory" not in database_url:
        event.listen(engine, "connect", _configure_sqlite_for_performance)

    return engine


def get_engine() -> Engine:
    """Get the database engine, creating it from settings if necessary."""
    global _engine

    if _engine is None:
        settings = get_settings()
        _engine = create_engine_for_url(
            settings.get_database_url(), echo=settings.database_echo_sql
        )
        logger.info("Database engine initialized")

    return _engine


def get_session_factory() -> sessionmaker:
    """Get the session factory, creating it if necessary."""
    global _SessionLocal

    if _SessionLocal is None:
        _SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            bind=get_engine(),
            expire_on_commit=False,  # Keep objects accessible after commit
        )
        logger.debug("Session factory created")

    return _SessionLocal


def get_session_sync() -> Session:
    """
    Get a synchronous database session.

    Returns:
        Session: SQLAlchemy database session (caller responsible for closing)
    """
    return get_session_factory()()


def create_tables(engine: Optional[Engine] = None) -> None:
    """Create all database tables."""
    # Register models on Base.metadata
    from . import models  # noqa: F401

    logger.info("Creating database tables")
    Base.metadata.create_all(bind=engine or get_engine())
    logger.info("Database tables created successfully")
