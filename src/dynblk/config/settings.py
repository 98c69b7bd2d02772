"""Unified settings — CLI flags, env vars, and TOML config in one object.

Priority chain (highest to lowest):
  1. Init kwargs  — CLI flags passed by Click
  2. Env vars     — ``DYNBLK_*`` prefix
  3. TOML file    — ``dynblk.toml`` discovered via walk-up
  4. Code defaults — baked into the section models

Uses Pydantic Settings v2 with a custom :class:`TomlSettingsSource` that
reuses the walk-up discovery from :mod:`dynblk.config.discovery`.
"""

from __future__ import annotations

import threading
import tomllib
from pathlib import Path
from typing import Any, ClassVar

from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from dynblk.config.discovery import find_config
from dynblk.config.models import (
    BlocksConfig,
    CodegenConfig,
    LayoutConfig,
    LibraryConfig,
    RobotConfig,
    SymbolsConfig,
)
from dynblk.domain.capabilities import Capabilities, resolve_capabilities
from dynblk.infrastructure.library import LIBRARY_SUFFIX


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Read settings from a ``dynblk.toml`` file discovered via walk-up."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if toml_path and toml_path.is_file():
            raw = toml_path.read_text(encoding="utf-8")
            try:
                self._data = tomllib.loads(raw)
            except tomllib.TOMLDecodeError as exc:
                import click

                msg = f"Invalid TOML in {toml_path}: {exc}"
                raise click.ClickException(msg) from exc

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Return ``(value, field_name, value_is_complex)``."""
        val = self._data.get(field_name)
        return val, field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        """Return the full TOML data dict for Pydantic to merge."""
        return self._data


# Thread-local storage for TOML path during construction.
_tls = threading.local()


class DynblkSettings(BaseSettings):
    """Unified settings for the dynblk CLI.

    Merges CLI flags, environment variables, TOML config sections,
    and code-baked defaults into a single frozen object.

    Attributes:
        root: Project directory (parent of ``dynblk.toml``, or CWD if no
            config found). Relative library and symbol paths resolve here.
        config_path: The TOML file in use, or None.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "DYNBLK_",
        "env_nested_delimiter": "__",
    }

    # --- Resolved path (not in TOML — derived from config location) ---
    root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None

    # --- CLI flags ---
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False

    # --- TOML sections ---
    library: LibraryConfig = Field(default_factory=LibraryConfig)
    symbols: SymbolsConfig = Field(default_factory=SymbolsConfig)
    robot: RobotConfig = Field(default_factory=RobotConfig)
    codegen: CodegenConfig = Field(default_factory=CodegenConfig)
    blocks: BlocksConfig = Field(default_factory=BlocksConfig)
    layout: LayoutConfig = Field(default_factory=LayoutConfig)

    # Retained for type-checker visibility; not used at runtime.
    _toml_path: ClassVar[Path | None] = None

    @property
    def library_path(self) -> Path:
        """``<root>/<library.directory>/<library.name>.blklib``."""
        return self.root / self.library.directory / f"{self.library.name}{LIBRARY_SUFFIX}"

    @property
    def symbols_path(self) -> Path:
        return self.root / self.symbols.directory

    def capabilities(self) -> Capabilities:
        """Resolve the host capability flags for one run."""
        return resolve_capabilities(
            host_version=self.codegen.host_version,
            quirk_fixed_in=self.codegen.quirk_fixed_in,
            zero_row_quirk=self.codegen.zero_row_quirk,
        )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert TOML source between env vars and defaults."""
        toml_path = getattr(_tls, "toml_path", None)
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, toml_path),
        )

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        root: Path | None = None,
        **cli_flags: Any,
    ) -> DynblkSettings:
        """Construct settings from CLI invocation.

        Discovers ``dynblk.toml`` via walk-up (or explicit *config_path*),
        resolves *root* from the config file's parent directory,
        and merges CLI flags as highest-priority overrides.
        """
        toml_path: Path | None = None
        if config_path:
            p = Path(config_path)
            if p.is_file():
                toml_path = p
        else:
            toml_path = find_config(root)

        resolved_root = root
        if resolved_root is None:
            resolved_root = toml_path.parent if toml_path else Path.cwd()

        _tls.toml_path = toml_path
        try:
            return cls(
                root=resolved_root,
                config_path=toml_path,
                **cli_flags,
            )
        finally:
            _tls.toml_path = None
