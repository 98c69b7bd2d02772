"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, dynblk.toml only contains
overrides. A robot project usually needs only [library] name and
[robot] joints.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from dynblk.domain.capabilities import ZERO_ROW_FIX_VERSION

# --- dynblk.toml sections ---


class LibraryConfig(BaseModel):
    """[library] section."""

    model_config = {"frozen": True}

    name: str = "robotslib"
    directory: str = "."


class SymbolsConfig(BaseModel):
    """[symbols] section."""

    model_config = {"frozen": True}

    directory: str = "symbolics"


class RobotConfig(BaseModel):
    """[robot] section."""

    model_config = {"frozen": True}

    joints: int | None = Field(default=None, ge=1)
    coordinate: str = "q"


class CodegenConfig(BaseModel):
    """[codegen] section.

    ``zero_row_quirk`` forces the degenerate-row correction on or off;
    when unset it follows ``host_version < quirk_fixed_in``.
    """

    model_config = {"frozen": True}

    host_version: str | None = None
    quirk_fixed_in: str = ZERO_ROW_FIX_VERSION
    zero_row_quirk: bool | None = None


class BlocksConfig(BaseModel):
    """[blocks] section."""

    model_config = {"frozen": True}

    inertia: str = "inertia"
    inverse: str = "invinertia"


class LayoutConfig(BaseModel):
    """[layout] section."""

    model_config = {"frozen": True}

    column_spacing: int = 150
    row_spacing: int = 80

