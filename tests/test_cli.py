"""Tests for the command-line interface."""

from __future__ import annotations

import json
from pathlib import Path

from typer.testing import CliRunner

from wca_stats import cli


FIXTURE = Path(__file__).parent / "fixtures" / "WCA_export_Results.tsv"

runner = CliRunner()


def _write_config(tmp_path: Path) -> Path:
    path = tmp_path / "cfg.yaml"
    path.write_text(
        "rankings:\n"
        f"  input: {FIXTURE.as_posix()}\n"
        f"  output: {(tmp_path / 'from_config.json').as_posix()}\n"
        "  top_n: 2\n",
        encoding="utf-8",
    )
    return path


def test_rankings_command(tmp_path: Path) -> None:
    out = tmp_path / "rankings.json"
    result = runner.invoke(cli.app, ["rankings", "--input", str(FIXTURE), "--output", str(out)])

    assert result.exit_code == 0, result.output
    assert "Processed 4 averages" in result.output
    assert "1. 2012PARK03: 5.62s (WC2019)" in result.output
    assert "- Unique competitors: 3" in result.output
    assert "- Unique competitions: 3" in result.output
    assert "- Average solves per competitor: 1.33" in result.output
    assert len(json.loads(out.read_text(encoding="utf-8"))) == 4


def test_rankings_uses_config_file(tmp_path: Path) -> None:
    result = runner.invoke(cli.app, ["rankings", "--config", str(_write_config(tmp_path))])

    assert result.exit_code == 0, result.output
    assert (tmp_path / "from_config.json").exists()
    assert "Top 2 averages of all time:" in result.output
    assert "3. " not in result.output


def test_rankings_options_override_config(tmp_path: Path) -> None:
    out = tmp_path / "fours.json"
    result = runner.invoke(
        cli.app,
        ["rankings", "--config", str(_write_config(tmp_path)), "--event", "444", "--output", str(out)],
    )

    assert result.exit_code == 0, result.output
    data = json.loads(out.read_text(encoding="utf-8"))
    assert [item["personId"] for item in data] == ["2012PARK03", "2014DOEJ01"]
    assert not (tmp_path / "from_config.json").exists()


def test_rankings_missing_input_exits_nonzero(tmp_path: Path) -> None:
    out = tmp_path / "rankings.json"
    result = runner.invoke(
        cli.app, ["rankings", "--input", str(tmp_path / "missing.tsv"), "--output", str(out)]
    )

    assert result.exit_code == 1
    assert "Error processing rankings" in result.output
    assert not out.exists()


def test_rankings_bad_header_exits_nonzero(tmp_path: Path) -> None:
    bad = tmp_path / "bad.tsv"
    bad.write_text("eventId\tpersonId\n333\tA\n", encoding="utf-8")
    out = tmp_path / "rankings.json"
    result = runner.invoke(cli.app, ["rankings", "--input", str(bad), "--output", str(out)])

    assert result.exit_code == 1
    assert "missing required column" in result.output
    assert not out.exists()


def test_missing_config_exits_nonzero(tmp_path: Path) -> None:
    result = runner.invoke(cli.app, ["rankings", "--config", str(tmp_path / "nope.yaml")])
    assert result.exit_code == 1
    assert "Error loading config" in result.output


def test_setup_db_reports_failure(tmp_path: Path, monkeypatch) -> None:
    from wca_stats import database
    from wca_stats.errors import ProvisioningError

    def fake_provision(cfg, keep_files=False):
        raise ProvisioningError("Download failed for https://example.org")

    monkeypatch.setattr(database, "provision_database", fake_provision)
    result = runner.invoke(cli.app, ["setup-db"])

    assert result.exit_code == 1
    assert "Setup failed: Download failed" in result.output


def test_setup_db_success(monkeypatch) -> None:
    from wca_stats import database

    seen = {}

    def fake_provision(cfg, keep_files=False):
        seen["keep_files"] = keep_files
        return {"database": cfg.name, "created": True, "elapsed_seconds": 1.25}

    monkeypatch.setattr(database, "provision_database", fake_provision)
    result = runner.invoke(cli.app, ["setup-db", "--keep-files"])

    assert result.exit_code == 0, result.output
    assert seen["keep_files"] is True
    assert "Setup completed successfully!" in result.output
