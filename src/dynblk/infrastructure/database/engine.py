"""Database engine setup for block library files.

SQLite is the persistence layer: a library is a single file that can be
copied and shared. The default rollback journal is kept (no WAL) so the
artifact never depends on sidecar files.

SQLAlchemy Core (not ORM) is used because a regeneration run is a
short-lived process that rewrites the whole library on each save.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from sqlalchemy import create_engine, event, inspect
from sqlalchemy.engine import Engine

from dynblk.infrastructure.database.schema import metadata


def create_db_engine(db_path: Path) -> Engine:
    """Create a SQLite engine with foreign keys enabled."""
    engine = create_engine(f"sqlite:///{db_path}", echo=False)

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn: Any, _: Any) -> None:
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return engine


def init_library_schema(engine: Engine) -> None:
    """Create all library tables. Idempotent."""
    metadata.create_all(engine)


def has_library_schema(engine: Engine) -> bool:
    """True when every library table is present in the file."""
    present = set(inspect(engine).get_table_names())
    return set(metadata.tables) <= present
