"""
Database configuration and session management.

This module sets up SQLAlchemy with SQLite and provides
database session management for the application.
"""

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, Session, declarative_base
from sqlalchemy.engine import Engine
from pathlib import Path

from brainwave.config import get_settings

settings = get_settings()

# Get the backend directory path (parent of brainwave directory)
BACKEND_DIR = Path(__file__).parent.parent
DATA_DIR = BACKEND_DIR / "data"

# Database file path, used when no URL is configured
DB_FILE = DATA_DIR / "brainwave.db"
DATABASE_URL = settings.database.DATABASE_URL or f"sqlite:///{DB_FILE}"

if DATABASE_URL == f"sqlite:///{DB_FILE}":
    DATA_DIR.mkdir(parents=True, exist_ok=True)

# Create SQLAlchemy engine
engine = create_engine(
    DATABASE_URL,
    connect_args={"check_same_thread": False},  # Needed for SQLite
    echo=settings.database.ECHO_SQL,
)


# Enable foreign key constraints for SQLite
@event.listens_for(Engine, "connect")
def set_sqlite_pragma(dbapi_conn, connection_record):
    """Enable foreign key constraints on SQLite connections."""
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for all models (using SQLAlchemy 2.0 style)
Base = declarative_base()


def get_db() -> Iterator[Session]:
    """
    Dependency function to get database session.

    Yields:
        Session: Database session that will be automatically closed.

    Usage:
        @router.get("/users/{username}")
        async def get_user(username: str, db: Session = Depends(get_db)):
            return UserManager(db).get(username)
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """
    Run a block of writes as one unit of work.

    Commits when the block completes and rolls back on any exception,
    which is then re-raised to the caller.

    Example:
        with transaction(db):
            db.add(topic)
            db.query(User).filter(User.id == user_id).update(...)
    """
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise


def init_db(bind: Engine = None) -> None:
    """
    Initialise the database.

    Creates all tables defined in the models if they don't exist.
    This is called on application startup.
    """
    # Import all models here so they are registered with Base
    from brainwave.models import user, topic, message  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
    print(f"Database initialised at {DATABASE_URL}")
