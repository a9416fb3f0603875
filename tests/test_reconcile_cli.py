from __future__ import annotations

import json
from pathlib import Path

from typer.testing import CliRunner

from options_reconcile.cli import app
from tests.reconcile_fixtures import write_extract_dir, write_text


def _invoke(tmp_path: Path, *args: str):
    runner = CliRunner()
    return runner.invoke(app, ["--log-dir", str(tmp_path / "logs"), *args])


def test_run_json_prints_summary_artifact(tmp_path: Path) -> None:
    data_dir = write_extract_dir(tmp_path)

    result = _invoke(tmp_path, "run", "--data-dir", str(data_dir), "--json")

    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert payload["universe_contracts"] == 4
    assert payload["moneyness_rows"] == 3
    assert payload["identity_violations"][0]["contract_id"] == "C140"
    assert [c["category"] for c in payload["categories"]][:3] == ["stream", "snapshot", "option_space"]


def test_run_renders_tables(tmp_path: Path) -> None:
    data_dir = write_extract_dir(tmp_path)

    result = _invoke(tmp_path, "run", "--data-dir", str(data_dir), "--workers", "3")

    assert result.exit_code == 0, result.output
    assert "option_space" in result.output


def test_run_with_config_file(tmp_path: Path) -> None:
    data_dir = write_extract_dir(tmp_path)
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    repo_config = Path(__file__).resolve().parents[1] / "config"
    write_text(
        config_dir / "reconcile.schema.json",
        (repo_config / "reconcile.schema.json").read_text(encoding="utf-8"),
    )
    config_path = write_text(
        config_dir / "reconcile.yaml",
        "schema_version: 1\n"
        f"data_directory: {data_dir.as_posix()}\n"
        "categories:\n"
        "  - name: option_space\n"
        "    pattern: '*option_space*.csv'\n",
    )

    result = _invoke(tmp_path, "run", "--config", str(config_path), "--json")

    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert [c["category"] for c in payload["categories"]][0] == "option_space"
    assert payload["universe_contracts"] == 4
    assert payload["moneyness_rows"] == 0


def test_identity_lists_changed_descriptions(tmp_path: Path) -> None:
    data_dir = write_extract_dir(tmp_path)

    result = _invoke(tmp_path, "identity", "--data-dir", str(data_dir))

    assert result.exit_code == 0, result.output
    assert "C140" in result.output


def test_identity_reports_clean_universe(tmp_path: Path) -> None:
    data_dir = tmp_path / "clean"
    data_dir.mkdir()
    write_text(
        data_dir / "option_space.csv",
        "id,description,expiryDate,type,strikePrice,underlyingId\n"
        "C1,AAPL C1,2024-01-19,Call,100,AAPL\n",
    )

    result = _invoke(tmp_path, "identity", "--data-dir", str(data_dir))

    assert result.exit_code == 0, result.output
    assert "No identity violations" in result.output


def test_moneyness_shows_contracts(tmp_path: Path) -> None:
    data_dir = write_extract_dir(tmp_path)

    result = _invoke(tmp_path, "moneyness", "--data-dir", str(data_dir), "--top", "2")

    assert result.exit_code == 0, result.output
    assert "C140" in result.output


def test_moneyness_without_prices(tmp_path: Path) -> None:
    data_dir = tmp_path / "no_prices"
    data_dir.mkdir()
    write_text(
        data_dir / "option_space.csv",
        "id,description,expiryDate,type,strikePrice,underlyingId\n"
        "C1,AAPL C1,2024-01-19,Call,100,AAPL\n",
    )

    result = _invoke(tmp_path, "moneyness", "--data-dir", str(data_dir))

    assert result.exit_code == 0, result.output
    assert "No contracts with a close" in result.output


def test_run_exits_on_load_failure(tmp_path: Path) -> None:
    data_dir = write_extract_dir(tmp_path)
    write_text(data_dir / "stream_bad.csv", "timestamp,askPrice\n2024-01-02T10:00:00Z,1.0\n")

    result = _invoke(tmp_path, "run", "--data-dir", str(data_dir))

    assert result.exit_code == 1
    assert "Load failed" in result.output


def test_run_exits_on_missing_directory(tmp_path: Path) -> None:
    result = _invoke(tmp_path, "run", "--data-dir", str(tmp_path / "nope"))

    assert result.exit_code == 1
    assert "Data directory not found" in result.output


def test_run_exits_on_bad_config(tmp_path: Path) -> None:
    result = _invoke(tmp_path, "run", "--config", str(tmp_path / "missing.yaml"))

    assert result.exit_code == 1
    assert "Config error" in result.output


def test_run_requires_data_dir_or_config(tmp_path: Path) -> None:
    result = _invoke(tmp_path, "run")

    assert result.exit_code != 0
