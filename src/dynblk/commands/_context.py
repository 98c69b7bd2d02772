"""AppContext — shared Click context for all commands.

Created once by the root CLI group and flows to all subcommands via
``@click.pass_obj``.  Provides a lazy LibraryManager and centralized
result emission (stdout/stderr routing + exit codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from dynblk.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from dynblk.config.settings import DynblkSettings
    from dynblk.infrastructure.library import LibraryManager
    from dynblk.services.result import ServiceResult


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    The library manager is created on first use so ``--help`` and
    ``--version`` never touch the library file.
    """

    def __init__(self, settings: DynblkSettings) -> None:
        self.settings = settings
        self._manager: LibraryManager | None = None

        from dynblk.config.logging import configure_logging

        configure_logging(
            verbose=settings.verbose, quiet=settings.quiet, log_json=settings.log_json
        )

        if settings.verbose:
            from dynblk.services.telemetry import enable_telemetry

            enable_telemetry()

    @property
    def manager(self) -> LibraryManager:
        """The library manager (created lazily on first access)."""
        if self._manager is None:
            from dynblk.infrastructure.library import LibraryManager

            self._manager = LibraryManager()
        return self._manager

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success (``result.ok``): writes to stdout, returns normally.
          Warnings are emitted to stderr so they don't pollute piped output.
        * Failure: writes to stderr, exits with code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
