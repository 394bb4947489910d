"""Database setup utilities for the local quotes backend."""

from __future__ import annotations

from contextlib import contextmanager
from datetime import date
from typing import Iterator

from sqlalchemy import (
    Column,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    create_engine,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

metadata = MetaData()


def _current_year() -> int:
    return date.today().year


quotes = Table(
    "quotes",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("text", Text, nullable=False),
    Column("source", String(2048), nullable=False),
    Column("category", String(64), nullable=False, index=True),
    Column("votesInteresting", Integer, nullable=False, default=0, server_default="0"),
    Column("votesMindblowing", Integer, nullable=False, default=0, server_default="0"),
    Column("votesFalse", Integer, nullable=False, default=0, server_default="0"),
    Column("createdIn", Integer, nullable=False, default=_current_year),
)


def create_db_engine(database_url: str) -> Engine:
    """Return a SQLAlchemy engine for the provided URL."""

    return create_engine(database_url, future=True)


def init_schema(engine: Engine) -> None:
    """Create database tables if they do not exist."""

    metadata.create_all(engine)


@contextmanager
def session_scope(engine: Engine) -> Iterator[Session]:
    """Context manager that yields a SQLAlchemy :class:`Session`."""

    with Session(engine, future=True) as session:
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
