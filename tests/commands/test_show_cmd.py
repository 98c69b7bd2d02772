"""Tests for the show CLI command."""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from dynblk.cli import cli


@pytest.mark.usefixtures("_isolated_project")
class TestShowCommand:
    def test_no_library(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "show"])
        assert result.exit_code == 1
        assert json.loads(result.stderr)["error"]["code"] == "NOT_FOUND"

    def test_overview(self, cli_runner: CliRunner) -> None:
        cli_runner.invoke(cli, ["generate", "--joints", "2"])
        result = cli_runner.invoke(cli, ["show"])
        assert result.exit_code == 0, result.output
        assert "robotslib" in result.stdout
        assert "inertia" in result.stdout
        assert "invinertia" in result.stdout

    def test_subgraph_json(self, cli_runner: CliRunner) -> None:
        cli_runner.invoke(cli, ["generate", "--joints", "2"])
        result = cli_runner.invoke(cli, ["--json", "show", "invinertia"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)["data"]
        names = {item["name"] for item in data["items"]}
        assert names == {"q", "inertiaMatrix", "inverse", "out"}
        assert {"from": "inverse:1", "to": "out:1"} in data["lines"]

    def test_subgraph_human(self, cli_runner: CliRunner) -> None:
        cli_runner.invoke(cli, ["generate", "--joints", "2", "--quirk"])
        result = cli_runner.invoke(cli, ["show", "inertia"])
        assert result.exit_code == 0, result.output
        assert "DimCorrection2" in result.stdout
        assert "inertia_row_2:1 -> DimCorrection2:2" in result.stdout

    def test_unknown_subgraph(self, cli_runner: CliRunner) -> None:
        cli_runner.invoke(cli, ["generate", "--joints", "2"])
        result = cli_runner.invoke(cli, ["show", "nope"])
        assert result.exit_code == 1
        assert "nope" in result.stderr
