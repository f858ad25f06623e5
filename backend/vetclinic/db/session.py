import logging
import os

from sqlalchemy import create_engine
from sqlalchemy.engine.url import make_url
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

# Create Base class for models
Base = declarative_base()

# Internal lazy globals
_engine = None
_SessionLocal = None
_database_url = None

DEFAULT_DATABASE_URL = "sqlite:///./vetclinic.db"


def build_engine(database_url: str):
    """Create an engine suited to the backend behind ``database_url``."""
    try:
        url = make_url(database_url)
        is_postgres = url.drivername.startswith("postgres")
    except Exception:
        # If URL parsing fails, assume non-Postgres to avoid passing incompatible connect_args
        is_postgres = False

    if is_postgres:
        return create_engine(
            database_url,
            pool_size=10,
            max_overflow=20,
            pool_pre_ping=True,  # Detects and refreshes stale connections
            pool_recycle=3600,
            connect_args={
                "application_name": "vetclinic",
                "connect_timeout": 10,
            },
            echo=False,
        )

    if database_url.startswith("sqlite") and ":memory:" in database_url:
        # Single shared in-memory database so DDL persists across sessions
        return create_engine(
            database_url,
            echo=False,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

    return create_engine(database_url, echo=False)


def get_engine():
    """Return a cached SQLAlchemy engine, creating it from DATABASE_URL on
    first call. This allows tests to set DATABASE_URL before the engine is
    constructed."""
    global _engine, _database_url, _SessionLocal
    database_url = os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL)
    if _engine is None or _database_url != database_url:
        if _engine is not None:
            _engine.dispose()
        _engine = build_engine(database_url)
        _SessionLocal = None
        _database_url = database_url
        logger.info(
            "Database engine created",
            extra={"context": {"dialect": _engine.dialect.name}},
        )
    return _engine


def get_sessionmaker():
    """Return a cached sessionmaker bound to the lazy engine."""
    global _SessionLocal
    engine = get_engine()
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    return _SessionLocal


def SessionLocal():
    """Return a new Session bound to the configured engine."""
    return get_sessionmaker()()


def create_tables(engine=None):
    """Create all tables in the database."""
    # Ensure models are imported so Base.metadata is populated
    from vetclinic.db import base  # noqa: F401

    Base.metadata.create_all(bind=engine or get_engine())
