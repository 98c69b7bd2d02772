"""Tests for the generate CLI command."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from dynblk.cli import cli


@pytest.mark.usefixtures("_isolated_project")
class TestGenerateCommand:
    def test_generate(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        result = cli_runner.invoke(cli, ["generate", "--joints", "2"])
        assert result.exit_code == 0, result.output
        assert "OK" in result.stdout
        assert "invinertia" in result.stdout
        assert (tmp_path / "robotslib.blklib").is_file()

    def test_generate_json(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "generate", "--joints", "2"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["ok"] is True
        assert data["op"] == "generate"
        assert data["data"]["locked"] is True
        assert data["data"]["collapses_zero_rows"] is False

    def test_quirk_flag(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "generate", "--joints", "2", "--quirk"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["data"]["subgraphs"]["inertia"]["corrected_rows"] == [2]

    def test_no_quirk_overrides_config(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        (tmp_path / "dynblk.toml").write_text("[codegen]\nzero_row_quirk = true\n")
        result = cli_runner.invoke(cli, ["--json", "generate", "--joints", "2", "--no-quirk"])
        data = json.loads(result.stdout)
        assert data["data"]["collapses_zero_rows"] is False

    def test_joints_from_config(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        (tmp_path / "dynblk.toml").write_text('[robot]\njoints = 2\n[library]\nname = "arm"\n')
        result = cli_runner.invoke(cli, ["--json", "generate"])
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["data"]["library"] == "arm"
        assert (tmp_path / "arm.blklib").is_file()

    def test_library_option(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        target = tmp_path / "build" / "lib.blklib"
        result = cli_runner.invoke(cli, ["generate", "-n", "2", "--library", str(target)])
        assert result.exit_code == 0, result.output
        assert target.is_file()

    def test_missing_row(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "generate", "--joints", "3"])
        assert result.exit_code == 1
        assert result.stdout == ""
        payload = json.loads(result.stderr)
        assert payload["ok"] is False
        assert payload["error"]["code"] == "ROW_EXPRESSION_MISSING"
        assert payload["error"]["detail"]["name"] == "inertia_row_3"

    def test_failure_stderr_is_only_json(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        (tmp_path / "robotslib.blklib").write_text("not a library\n" * 20)
        result = cli_runner.invoke(cli, ["--json", "generate", "--joints", "1"])
        assert result.exit_code == 1
        assert result.stderr.lstrip().startswith("{")
        assert json.loads(result.stderr)["error"]["code"] == "CONTAINER_IO"

    def test_missing_row_human(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["generate", "--joints", "3"])
        assert result.exit_code == 1
        assert "ERROR" in result.stderr
        assert "Save symbolic expressions to disk first!" in " ".join(result.stderr.split())

    def test_joints_required(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "generate"])
        assert result.exit_code == 1
        assert json.loads(result.stderr)["error"]["code"] == "INVALID_INPUT"

    def test_joints_must_be_positive(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["generate", "--joints", "0"])
        assert result.exit_code == 2

    def test_quiet(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["-q", "generate", "--joints", "2"])
        assert result.exit_code == 0
        assert result.stdout.strip() == "OK: generate"

    def test_verbose_shows_telemetry(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["-v", "generate", "--joints", "2"])
        assert result.exit_code == 0, result.output
        assert "GenerateService.generate" in result.stdout
        assert "row_2" in result.stdout
