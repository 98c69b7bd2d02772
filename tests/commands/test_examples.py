"""Tests for the --examples flag."""

from __future__ import annotations

import pytest
from click.testing import CliRunner

from dynblk.cli import cli


class TestExamples:
    @pytest.mark.parametrize("command", ["generate", "show", "rows"])
    def test_command_examples(self, cli_runner: CliRunner, command: str) -> None:
        result = cli_runner.invoke(cli, [command, "--examples"])
        assert result.exit_code == 0
        assert "Examples for" in result.output
        assert f"dynblk {command}" in result.output

    def test_group_examples(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--examples"])
        assert result.exit_code == 0
        assert "dynblk generate --joints 3" in result.output
