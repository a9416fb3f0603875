from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from typer.testing import CliRunner

from options_reconcile.cli import app
from options_reconcile.observability import build_log_path
from tests.reconcile_fixtures import write_extract_dir


def test_cli_logging_creates_log_file(tmp_path: Path) -> None:
    runner = CliRunner()
    log_dir = tmp_path / "logs"
    data_dir = write_extract_dir(tmp_path)
    result = runner.invoke(
        app,
        [
            "--log-dir",
            str(log_dir),
            "run",
            "--data-dir",
            str(data_dir),
        ],
    )
    assert result.exit_code == 0, result.output
    logs = list(log_dir.rglob("*.log"))
    assert logs, "expected log file in log dir"
    assert logs[0].name.startswith("run_")
    content = logs[0].read_text(encoding="utf-8")
    assert "Start run" in content
    assert "End run" in content
    assert "Loaded category=option_space files=2 rows=5" in content


def test_cli_logging_records_load_failure(tmp_path: Path) -> None:
    runner = CliRunner()
    log_dir = tmp_path / "logs"
    result = runner.invoke(
        app,
        [
            "--log-dir",
            str(log_dir),
            "identity",
            "--data-dir",
            str(tmp_path / "missing"),
        ],
    )
    assert result.exit_code == 1
    content = next(log_dir.rglob("*.log")).read_text(encoding="utf-8")
    assert "ERROR options_reconcile.cli: Load failed" in content
    assert "End identity" in content


def test_build_log_path_uses_date_folder() -> None:
    now = datetime(2024, 1, 19, 14, 30, 5, tzinfo=timezone.utc)
    path = build_log_path(Path("logs"), "run moneyness", now=now)
    assert path.parent == Path("logs") / "2024-01-19"
    assert path.name.startswith("run_moneyness_20240119T143005Z_")
    assert path.suffix == ".log"
