"""Database engine, connection pool and session management."""

from collections.abc import Callable, Generator
from contextlib import AbstractContextManager

from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from app.config import get_settings


def _connect_args(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    if url.startswith("postgresql"):
        settings = get_settings()
        return {"sslmode": settings.DB_SSLMODE, "connect_timeout": settings.DB_CONNECT_TIMEOUT}
    return {}


settings = get_settings()
engine = create_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_pre_ping=True,
    pool_recycle=settings.DB_POOL_RECYCLE,
    connect_args=_connect_args(settings.DATABASE_URL),
)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


def get_db() -> Generator[Session, None, None]:
    """Yield a database session, released on every exit path."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# Work outside a request (background tasks, display streams) opens its own session.
session_factory: Callable[[], AbstractContextManager[Session]] = SessionLocal


def open_session() -> AbstractContextManager[Session]:
    """Open a standalone session for use in a with-block."""
    return session_factory()
