"""Tests for library database engine setup."""

from __future__ import annotations

from pathlib import Path

from sqlalchemy import inspect, text

from dynblk.infrastructure.database.engine import (
    create_db_engine,
    has_library_schema,
    init_library_schema,
)


class TestEngine:
    def test_foreign_keys_enabled(self, tmp_path: Path) -> None:
        engine = create_db_engine(tmp_path / "lib.blklib")
        try:
            with engine.connect() as conn:
                assert conn.execute(text("PRAGMA foreign_keys")).scalar() == 1
        finally:
            engine.dispose()

    def test_init_creates_tables(self, tmp_path: Path) -> None:
        engine = create_db_engine(tmp_path / "lib.blklib")
        try:
            assert not has_library_schema(engine)
            init_library_schema(engine)
            init_library_schema(engine)
            assert has_library_schema(engine)
            names = set(inspect(engine).get_table_names())
            assert {"library", "subgraphs", "blocks", "lines"} <= names
        finally:
            engine.dispose()

    def test_no_wal_sidecar(self, tmp_path: Path) -> None:
        path = tmp_path / "lib.blklib"
        engine = create_db_engine(path)
        try:
            init_library_schema(engine)
        finally:
            engine.dispose()
        assert not (tmp_path / "lib.blklib-wal").exists()
