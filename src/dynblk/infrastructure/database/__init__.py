"""SQLite block-library file: engine setup and schema via SQLAlchemy Core."""

from dynblk.infrastructure.database.engine import create_db_engine, init_library_schema
from dynblk.infrastructure.database.schema import blocks, library, lines, metadata, subgraphs

__all__ = [
    "blocks",
    "create_db_engine",
    "init_library_schema",
    "library",
    "lines",
    "metadata",
    "subgraphs",
]
