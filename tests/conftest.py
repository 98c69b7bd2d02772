"""Shared pytest fixtures for dynblk tests."""

from __future__ import annotations

import logging
from collections.abc import Generator
from pathlib import Path

import pytest
import sympy
from click.testing import CliRunner

from dynblk.config.settings import DynblkSettings
from dynblk.infrastructure.library import LibraryManager, LibrarySession
from dynblk.infrastructure.symbols import InMemoryRowStore, RowExpressionStore
from dynblk.services.telemetry import _current_span, disable_telemetry

Q1, Q2, Q3 = sympy.symbols("q1:4")


@pytest.fixture(autouse=True)
def _restore_logging() -> Generator[None]:
    """Undo configure_logging() calls made by CLI invocations."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    dyn = logging.getLogger("dynblk")
    dyn_level = dyn.level
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
    dyn.setLevel(dyn_level)


@pytest.fixture(autouse=True)
def _reset_telemetry() -> Generator[None]:
    """The --verbose flag enables telemetry through a ContextVar; reset it."""
    yield
    disable_telemetry()
    _current_span.set(None)


@pytest.fixture(autouse=True)
def _no_config_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("DYNBLK_CONFIG", raising=False)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def settings(tmp_path: Path) -> DynblkSettings:
    """Default settings rooted at a temp project directory."""
    return DynblkSettings.from_cli(root=tmp_path)


@pytest.fixture
def manager() -> Generator[LibraryManager]:
    mgr = LibraryManager()
    try:
        yield mgr
    finally:
        if mgr.active is not None:
            mgr.close(mgr.active)


@pytest.fixture
def library_path(settings: DynblkSettings) -> Path:
    return settings.library_path


@pytest.fixture
def session(manager: LibraryManager, library_path: Path) -> LibrarySession:
    """A freshly created, unlocked library session."""
    sess = manager.open_or_create("robotslib", library_path)
    manager.unlock(sess)
    return sess


@pytest.fixture
def row_store(settings: DynblkSettings) -> RowExpressionStore:
    """On-disk row store in the project's symbols directory (initially empty)."""
    return RowExpressionStore(settings.symbols_path)


@pytest.fixture
def two_joint_rows() -> InMemoryRowStore:
    """A two-joint robot whose second inertia row is structurally zero."""
    return InMemoryRowStore({1: [Q1, Q2], 2: [0, 0]})


@pytest.fixture
def three_joint_rows() -> InMemoryRowStore:
    return InMemoryRowStore(
        {
            1: [Q1**2 + 1, sympy.cos(Q2), 0],
            2: [sympy.cos(Q2), Q2 * Q3, Q3],
            3: [0, Q3, 2],
        }
    )


@pytest.fixture
def _isolated_project(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, row_store: RowExpressionStore
) -> None:
    """CWD is a temp project with rows 1..2 of a two-joint robot saved.

    Use via ``@pytest.mark.usefixtures("_isolated_project")`` on command
    test classes.
    """
    row_store.save(1, [Q1, Q2])
    row_store.save(2, [0, 0])
    monkeypatch.chdir(tmp_path)
