"""SQLAlchemy Core table definitions for a block library file.

One library per file. Block parameters are stored as a JSON object;
positions are cosmetic and may be NULL.
"""

from __future__ import annotations

from sqlalchemy import (
    Column,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    Table,
    Text,
    UniqueConstraint,
)

metadata = MetaData()

library = Table(
    "library",
    metadata,
    Column("name", Text, primary_key=True),
    Column("locked", Integer, nullable=False, default=0, server_default="0"),
    Column("format_version", Integer, nullable=False, default=1, server_default="1"),
    Column("created", Text, nullable=False),
    Column("modified", Text, nullable=False),
)

subgraphs = Table(
    "subgraphs",
    metadata,
    Column("name", Text, primary_key=True),
    Column("x", Integer),
    Column("y", Integer),
    Column("modified", Text, nullable=False),
)

blocks = Table(
    "blocks",
    metadata,
    Column("subgraph", Text, ForeignKey("subgraphs.name", ondelete="CASCADE"), nullable=False),
    Column("id", Integer, nullable=False),
    Column("name", Text, nullable=False),
    Column("kind", Text, nullable=False),
    Column("params", Text, nullable=False, default="{}", server_default="{}"),  # JSON object
    Column("x", Integer),
    Column("y", Integer),
    UniqueConstraint("subgraph", "id"),
    UniqueConstraint("subgraph", "name"),
)

lines = Table(
    "lines",
    metadata,
    Column("subgraph", Text, ForeignKey("subgraphs.name", ondelete="CASCADE"), nullable=False),
    Column("src_id", Integer, nullable=False),
    Column("src_port", Integer, nullable=False),
    Column("dst_id", Integer, nullable=False),
    Column("dst_port", Integer, nullable=False),
    # An input port has exactly one driver.
    UniqueConstraint("subgraph", "dst_id", "dst_port"),
)

Index("ix_blocks_subgraph", blocks.c.subgraph)
Index("ix_lines_subgraph", lines.c.subgraph)

FORMAT_VERSION = 1
