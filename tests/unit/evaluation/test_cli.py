"""Tests for the evaluation CLI."""

from fincore_ml.evaluation.__main__ import app
from typer.testing import CliRunner

runner = CliRunner()


def test_normalize_command() -> None:
    result = runner.invoke(app, ["normalize", "UBER* TRIP 4821 09/14"])

    assert result.exit_code == 0
    assert "uber trip" in result.output


def test_replay_missing_file(tmp_path) -> None:
    result = runner.invoke(app, ["replay", str(tmp_path / "missing.csv")])

    assert result.exit_code == 1
    assert "File not found" in result.output
