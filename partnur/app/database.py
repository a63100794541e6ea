"""
Database configuration for the Partnur backend
"""
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
from pathlib import Path

from partnur.app.config import settings

DATABASE_URL = settings.DATABASE_URL


def ensure_db_directory():
    """Create the SQLite database directory if it doesn't exist"""
    if DATABASE_URL.startswith("sqlite:///"):
        Path(DATABASE_URL.replace("sqlite:///", "", 1)).parent.mkdir(parents=True, exist_ok=True)


def build_engine(url: str):
    """
    Create a SQLAlchemy engine for *url*

    In-memory SQLite shares one connection so every session sees the same data.
    """
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}  # Needed for SQLite
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, echo=False, **kwargs)
    return create_engine(url, echo=False, pool_pre_ping=True, pool_timeout=settings.DB_POOL_TIMEOUT)


# Create SQLAlchemy engine
engine = None


def get_engine():
    """Get or create database engine"""
    global engine
    if engine is None:
        ensure_db_directory()
        engine = build_engine(DATABASE_URL)
    return engine


# Create SessionLocal class
SessionLocal = None


def get_session_local():
    """Get or create SessionLocal"""
    global SessionLocal
    if SessionLocal is None:
        SessionLocal = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=get_engine())
    return SessionLocal


# Create Base class for models
Base = declarative_base()


def init_db(engine_instance=None):
    """
    Initialize database - create all tables
    """
    from partnur.app.models.profile import UserProfile  # noqa: F401
    from partnur.app.models.conversation import ConversationLog  # noqa: F401
    if engine_instance is None:
        engine_instance = get_engine()
    Base.metadata.create_all(bind=engine_instance)
