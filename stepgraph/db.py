from __future__ import annotations

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase

from .settings import settings


class Base(DeclarativeBase):
    pass


_engine = None
_session_factory = None


def init_engine(database_url: str | None = None):
    """(Re)build the engine and session factory for `database_url`."""
    global _engine, _session_factory
    url = database_url or settings.database_url
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    _engine = create_engine(url, pool_pre_ping=True, connect_args=connect_args)
    _session_factory = sessionmaker(autocommit=False, autoflush=False, bind=_engine)
    return _engine


def get_engine():
    if _engine is None:
        init_engine()
    return _engine


def session_factory():
    if _session_factory is None:
        init_engine()
    return _session_factory


def create_tables() -> None:
    # Import for side effect: registers every table on Base.metadata
    from . import models  # noqa: F401

    Base.metadata.create_all(bind=get_engine())


def get_db():
    db = session_factory()()
    try:
        yield db
    finally:
        db.close()
