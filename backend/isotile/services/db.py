"""
Database configuration and session management for the tiling backend.

This module defines a SQLModel engine targeting a SQLite database stored
in the project's ``storage`` directory.  The location can be moved with
the ``ISOTILE_STORAGE_DIR`` environment variable, or replaced entirely
with ``ISOTILE_DATABASE_URL`` (useful for tests and deployments).
"""

from __future__ import annotations

import os
from pathlib import Path

from sqlmodel import Session, SQLModel, create_engine

STORAGE_DIR = Path(
    os.getenv("ISOTILE_STORAGE_DIR", str(Path(__file__).resolve().parents[2] / "storage"))
)

DATABASE_URL = os.getenv("ISOTILE_DATABASE_URL")
if not DATABASE_URL:
    STORAGE_DIR.mkdir(parents=True, exist_ok=True)
    DATABASE_URL = f"sqlite:///{(STORAGE_DIR / 'isotile.db').as_posix()}"

engine = create_engine(DATABASE_URL, echo=False)


def create_db_and_tables() -> None:
    """Create all tables in the database.

    Safe to call repeatedly; existing tables are left alone.
    """
    SQLModel.metadata.create_all(engine)


def get_session() -> Session:
    """Return a new SQLModel session bound to the engine.

    Use as a context manager (``with get_session() as session: ...``)
    so the connection is closed afterwards.
    """
    return Session(engine)
