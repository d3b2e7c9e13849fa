"""Database connection and session management."""
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from typing import Generator
import logging

from app.config import settings


logger = logging.getLogger(__name__)


def _engine_options() -> dict:
    """Build engine keyword arguments for the configured backend."""
    if settings.is_sqlite:
        # FastAPI serves requests from a thread pool
        return {
            "connect_args": {
                "check_same_thread": False,
                "timeout": settings.db_connect_timeout,
            }
        }
    return {
        "pool_size": settings.db_pool_size,
        "max_overflow": settings.db_max_overflow,
        "pool_timeout": settings.db_pool_timeout,
        "connect_args": {
            "connect_timeout": settings.db_connect_timeout,
            "read_timeout": settings.db_connect_timeout,
            "write_timeout": settings.db_connect_timeout,
        },
    }


# Create database engine
engine = create_engine(
    settings.database_url,
    pool_pre_ping=True,
    pool_recycle=settings.db_pool_recycle,
    echo=settings.debug,
    **_engine_options()
)

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for ORM models
Base = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """
    Dependency function to get database session.

    Yields:
        Session: SQLAlchemy database session
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """Initialize database by creating all tables."""
    # Register models on the metadata before creating tables
    import app.models  # noqa: F401

    try:
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables created successfully")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}")
        raise
