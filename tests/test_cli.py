"""CLI smoke tests."""

import pytest
from typer.testing import CliRunner

from matchsim.cli.app import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def default_logging(monkeypatch):
    # Cached loggers would keep CliRunner's temporary stdout after the invocation
    monkeypatch.setattr("matchsim.cli.app.configure_logging", lambda settings: None)


@pytest.fixture
def config_dir(tmp_path):
    db_path = (tmp_path / "runs.duckdb").as_posix()
    (tmp_path / "default.toml").write_text(
        f'[storage]\ndb_path = "{db_path}"\n\n[logging]\nlevel = "WARNING"\n'
    )
    return tmp_path


def test_timeline_show(config_dir):
    result = runner.invoke(app, ["--config-dir", str(config_dir), "timeline", "show", "--seed", "7"])
    assert result.exit_code == 0, result.output
    assert "Quantum Strikers vs Celestial FC" in result.output
    assert "Counts:" in result.output


def test_match_run_save_list_report(config_dir):
    base = ["--config-dir", str(config_dir), "match"]
    result = runner.invoke(app, base + ["run", "--seed", "3", "--stake", "10", "--save", "--no-feed"])
    assert result.exit_code == 0, result.output
    assert "Saved run " in result.output
    assert "staked" in result.output
    assert "W1   continuous" in result.output
    run_id = result.output.split("Saved run ")[1].split()[0]

    listed = runner.invoke(app, base + ["list"])
    assert listed.exit_code == 0, listed.output
    assert run_id in listed.output

    report = runner.invoke(app, base + ["report", "--run-id", run_id])
    assert report.exit_code == 0, report.output
    assert f"Run: {run_id}" in report.output


def test_match_report_unknown_run(config_dir):
    result = runner.invoke(app, ["--config-dir", str(config_dir), "match", "report", "--run-id", "missing"])
    assert result.exit_code == 1
    assert "Run not found" in result.output


def test_match_run_rejects_unknown_side(config_dir):
    result = runner.invoke(
        app, ["--config-dir", str(config_dir), "match", "run", "--stake", "5", "--back", "abandoned"]
    )
    assert result.exit_code == 1
