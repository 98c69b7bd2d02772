"""Block library sessions and the manager that opens them.

A :class:`LibrarySession` is the editing handle for one library file. It
holds every subgraph in memory; :meth:`LibrarySession.persist` rewrites
the file from that state inside one SQL transaction, so the file is
always either the previous checkpoint or the new one.

:class:`LibraryManager` owns the "one open library at a time" rule:
opening a library first closes whatever session it handed out before,
discarding unsaved edits.

Write protection (``locked``) is a cooperative flag. Nothing here refuses
edits on a locked session; builders unlock before editing and the run
locks again on completion.
"""

from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING

from sqlalchemy import delete, insert, select
from sqlalchemy.exc import SQLAlchemyError

from dynblk.domain.blocks import Node, NodeKind, port_counts
from dynblk.domain.errors import ContainerIOError
from dynblk.infrastructure.database.engine import (
    create_db_engine,
    has_library_schema,
    init_library_schema,
)
from dynblk.infrastructure.database.schema import (
    FORMAT_VERSION,
    blocks,
    library,
    lines,
    subgraphs,
)
from dynblk.infrastructure.graph.engine import Subgraph

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlalchemy import Connection
    from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)

LIBRARY_SUFFIX = ".blklib"


def _now() -> str:
    return datetime.now(UTC).isoformat()


# ---------------------------------------------------------------------------
# LibrarySession — the explicit editing handle
# ---------------------------------------------------------------------------


class LibrarySession:
    """An open block library: in-memory subgraphs backed by one file."""

    def __init__(
        self,
        name: str,
        path: Path,
        engine: Engine,
        *,
        locked: bool = False,
        created: str | None = None,
    ) -> None:
        self.name = name
        self.path = path
        self.locked = locked
        self.created = created or _now()
        self._engine = engine
        self._subgraphs: dict[str, Subgraph] = {}
        self._positions: dict[str, tuple[int, int]] = {}
        self._closed = False

    def __repr__(self) -> str:
        state = "closed" if self._closed else ("locked" if self.locked else "unlocked")
        return f"LibrarySession({self.name!r}, {state}, subgraphs={self.subgraph_names()})"

    @property
    def closed(self) -> bool:
        return self._closed

    # ------------------------------------------------------------------
    # Subgraph access
    # ------------------------------------------------------------------

    def subgraph_names(self) -> list[str]:
        return sorted(self._subgraphs)

    def has_subgraph(self, name: str) -> bool:
        return name in self._subgraphs

    def subgraph(self, name: str) -> Subgraph:
        """Return the subgraph called *name* (KeyError if absent)."""
        try:
            return self._subgraphs[name]
        except KeyError:
            msg = f"No subgraph '{name}' in library '{self.name}'"
            raise KeyError(msg) from None

    def create_subgraph(self, name: str) -> Subgraph:
        """Add an empty subgraph. Raises ValueError if *name* is taken."""
        self._require_open()
        if name in self._subgraphs:
            msg = f"Subgraph '{name}' already exists in library '{self.name}'"
            raise ValueError(msg)
        sg = Subgraph(name)
        self._subgraphs[name] = sg
        return sg

    def delete_subgraph(self, name: str) -> bool:
        """Delete *name* if present. Returns whether anything was removed."""
        self._require_open()
        self._positions.pop(name, None)
        return self._subgraphs.pop(name, None) is not None

    def subgraph_position(self, name: str) -> tuple[int, int] | None:
        return self._positions.get(name)

    def set_subgraph_position(self, name: str, position: tuple[int, int]) -> None:
        self.subgraph(name)
        self._positions[name] = position

    # ------------------------------------------------------------------
    # Transactions and persistence
    # ------------------------------------------------------------------

    @contextmanager
    def transaction(self) -> Iterator[LibrarySession]:
        """Snapshot the in-memory library; restore it if the block raises.

        Usage::

            with session.transaction():
                session.delete_subgraph("inertia")
                sg = session.create_subgraph("inertia")
                ...  # any exception here leaves the library as it was
        """
        self._require_open()
        snapshot = {name: sg.copy() for name, sg in self._subgraphs.items()}
        positions = dict(self._positions)
        try:
            yield self
        except BaseException:
            self._subgraphs = snapshot
            self._positions = positions
            logger.debug("Rolled back in-memory changes to library %s", self.name)
            raise

    def persist(self) -> None:
        """Write the full in-memory state to the library file."""
        self._require_open()
        now = _now()
        try:
            with self._engine.begin() as conn:
                conn.execute(delete(lines))
                conn.execute(delete(blocks))
                conn.execute(delete(subgraphs))
                conn.execute(delete(library))
                conn.execute(
                    insert(library).values(
                        name=self.name,
                        locked=int(self.locked),
                        format_version=FORMAT_VERSION,
                        created=self.created,
                        modified=now,
                    )
                )
                for name in self.subgraph_names():
                    self._write_subgraph(conn, self._subgraphs[name], now)
        except (SQLAlchemyError, OSError) as exc:
            raise ContainerIOError(self.path, f"save failed: {exc}") from exc
        logger.debug("Saved library %s to %s (locked=%s)", self.name, self.path, self.locked)

    def close(self) -> None:
        """Release the file handle. Unsaved changes are discarded."""
        if self._closed:
            return
        self._engine.dispose()
        self._subgraphs = {}
        self._positions = {}
        self._closed = True

    def _write_subgraph(self, conn: Connection, sg: Subgraph, now: str) -> None:
        pos = self._positions.get(sg.name)
        conn.execute(
            insert(subgraphs).values(
                name=sg.name,
                x=pos[0] if pos else None,
                y=pos[1] if pos else None,
                modified=now,
            )
        )
        block_rows = []
        for node in sg.nodes():
            bpos = sg.position(node.id)
            block_rows.append(
                {
                    "subgraph": sg.name,
                    "id": node.id,
                    "name": node.name,
                    "kind": str(node.kind),
                    "params": json.dumps(node.params, sort_keys=True),
                    "x": bpos[0] if bpos else None,
                    "y": bpos[1] if bpos else None,
                }
            )
        if block_rows:
            conn.execute(insert(blocks), block_rows)
        line_rows = [
            {
                "subgraph": sg.name,
                "src_id": e.src,
                "src_port": e.src_port,
                "dst_id": e.dst,
                "dst_port": e.dst_port,
            }
            for e in sg.lines()
        ]
        if line_rows:
            conn.execute(insert(lines), line_rows)

    def _load(self) -> None:
        """Populate subgraphs from the file (used when opening)."""
        with self._engine.connect() as conn:
            for row in conn.execute(select(subgraphs).order_by(subgraphs.c.name)):
                sg = Subgraph(row.name)
                self._subgraphs[row.name] = sg
                if row.x is not None and row.y is not None:
                    self._positions[row.name] = (row.x, row.y)

            for row in conn.execute(select(blocks).order_by(blocks.c.subgraph, blocks.c.id)):
                kind = NodeKind(row.kind)
                params = json.loads(row.params)
                inputs, outputs = port_counts(kind, params)
                node = Node(
                    id=row.id,
                    name=row.name,
                    kind=kind,
                    inputs=inputs,
                    outputs=outputs,
                    params=params,
                )
                position = (row.x, row.y) if row.x is not None and row.y is not None else None
                self._subgraphs[row.subgraph].restore(node, position)

            for row in conn.execute(select(lines)):
                self._subgraphs[row.subgraph].connect(
                    row.src_id, row.dst_id, src_port=row.src_port, dst_port=row.dst_port
                )

    def _require_open(self) -> None:
        if self._closed:
            raise ContainerIOError(self.path, "library session is closed")


# ---------------------------------------------------------------------------
# LibraryManager
# ---------------------------------------------------------------------------


class LibraryManager:
    """Opens, creates, locks and saves block libraries.

    Holds at most one active session; :meth:`open_or_create` closes the
    previous one before touching the file system.
    """

    def __init__(self) -> None:
        self._active: LibrarySession | None = None

    @property
    def active(self) -> LibrarySession | None:
        return self._active

    def open_or_create(self, name: str, path: Path | str) -> LibrarySession:
        """Open the library at *path*, creating and saving it if absent."""
        if self._active is not None:
            logger.debug("Closing previously open library %s", self._active.name)
            self.close(self._active)

        path = Path(path)
        session = self._open(name, path) if path.exists() else self._create(name, path)
        self._active = session
        return session

    def open_existing(self, path: Path | str) -> LibrarySession:
        """Open a library for reading. Raises ContainerIOError if absent."""
        path = Path(path)
        if not path.exists():
            raise ContainerIOError(path, "library file does not exist")
        if self._active is not None:
            self.close(self._active)
        session = self._open(None, path)
        self._active = session
        return session

    def unlock(self, session: LibrarySession) -> None:
        session.locked = False

    def lock(self, session: LibrarySession) -> None:
        session.locked = True

    def persist(self, session: LibrarySession) -> None:
        session.persist()

    def finalize(self, session: LibrarySession) -> None:
        """Lock, save and close *session*."""
        self.lock(session)
        try:
            self.persist(session)
        finally:
            self.close(session)

    def close(self, session: LibrarySession) -> None:
        session.close()
        if self._active is session:
            self._active = None

    # ------------------------------------------------------------------

    def _create(self, name: str, path: Path) -> LibrarySession:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ContainerIOError(path, f"cannot create directory: {exc}") from exc

        engine = create_db_engine(path)
        try:
            init_library_schema(engine)
        except SQLAlchemyError as exc:
            engine.dispose()
            raise ContainerIOError(path, f"cannot create library: {exc}") from exc

        session = LibrarySession(name, path, engine, locked=False)
        try:
            session.persist()
        except ContainerIOError:
            engine.dispose()
            raise
        logger.info("Created block library %s at %s", name, path)
        return session

    def _open(self, name: str | None, path: Path) -> LibrarySession:
        engine = create_db_engine(path)
        try:
            if not has_library_schema(engine):
                raise ContainerIOError(path, "not a block library file")
            with engine.connect() as conn:
                row = conn.execute(select(library)).first()
            if row is None:
                raise ContainerIOError(path, "library record is missing")
            if row.format_version != FORMAT_VERSION:
                raise ContainerIOError(path, f"unsupported format version {row.format_version}")

            if name is not None and row.name != name:
                logger.info(
                    "Library at %s is named '%s', not '%s'; keeping stored name",
                    path,
                    row.name,
                    name,
                )
            session = LibrarySession(
                row.name, path, engine, locked=bool(row.locked), created=row.created
            )
            session._load()
        except ContainerIOError:
            engine.dispose()
            raise
        except (SQLAlchemyError, ValueError, KeyError) as exc:
            engine.dispose()
            raise ContainerIOError(path, f"cannot open library: {exc}") from exc
        logger.info("Opened block library %s at %s", session.name, path)
        return session
