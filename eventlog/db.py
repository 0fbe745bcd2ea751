"""Engine and change-logging session factories."""
from __future__ import annotations

from collections.abc import Generator, Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from eventlog.config import get_settings
from eventlog.core.actor import Actor
from eventlog.models.base import Base
from eventlog.services import change_log

engine: Engine | None = None
SessionLocal: sessionmaker[Session] | None = None


def make_sessionmaker(bind: Engine) -> sessionmaker[Session]:
    """Build a session factory whose sessions log every resource change on flush.

    Objects stay usable after commit so that API responses and the create/update
    logs can read their attributes without another round trip.
    """

    factory = sessionmaker(bind=bind, autoflush=False, expire_on_commit=False)
    change_log.install(factory)
    return factory


def init_engine() -> Engine:
    global engine, SessionLocal
    if engine is None:
        url = get_settings().database_url
        connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
        engine = create_engine(url, connect_args=connect_args)
        SessionLocal = make_sessionmaker(engine)
    return engine


def get_engine() -> Engine:
    return engine if engine is not None else init_engine()


def get_sessionmaker() -> sessionmaker[Session]:
    if SessionLocal is None:
        init_engine()
    assert SessionLocal is not None  # for type-checkers
    return SessionLocal


def create_all() -> None:
    Base.metadata.create_all(bind=get_engine())


def close_engine() -> None:
    global engine, SessionLocal
    if engine is not None:
        engine.dispose()
        engine = None
        SessionLocal = None


@contextmanager
def session_as(actor: Actor | None) -> Iterator[Session]:
    """Open a session whose flushes are attributed to ``actor``; for scripts and jobs."""

    session = get_sessionmaker()()
    try:
        with change_log.acting_as(session, actor):
            yield session
    finally:
        session.close()


def get_db() -> Generator[Session, None, None]:
    """Request-scoped session; routes attribute writes with ``acting_as``."""

    session = get_sessionmaker()()
    try:
        yield session
    finally:
        session.close()


__all__ = [
    "close_engine",
    "create_all",
    "get_db",
    "get_engine",
    "get_sessionmaker",
    "init_engine",
    "make_sessionmaker",
    "session_as",
]
