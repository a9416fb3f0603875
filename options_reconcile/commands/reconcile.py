from __future__ import annotations

import json
import logging
from pathlib import Path

import typer
from rich.console import Console

from options_reconcile.data.extract_schemas import DEFAULT_CATEGORY_PATTERNS
from options_reconcile.data.file_sets import FileSetLoadError, LoaderConfig
from options_reconcile.data.reconcile_config import ConfigError, load_reconcile_config
from options_reconcile.pipelines.reconcile import ReconcileError, ReconcileResult, run_reconcile
from options_reconcile.reporting import (
    render_diagnostics,
    render_identity_report,
    render_load_summary,
    render_moneyness,
)

logger = logging.getLogger("options_reconcile.cli")


def _build_config(data_dir: Path | None, config_path: Path | None, workers: int | None) -> LoaderConfig:
    if config_path is not None:
        cfg = load_reconcile_config(
            config_path,
            config_path.with_name("reconcile.schema.json"),
            data_directory=data_dir,
        )
        if workers is None:
            return cfg
        return LoaderConfig(
            data_directory=cfg.data_directory,
            category_patterns=cfg.category_patterns,
            max_workers=workers,
        )
    if data_dir is None:
        raise typer.BadParameter("Provide --data-dir or --config.")
    return LoaderConfig(
        data_directory=data_dir,
        category_patterns=DEFAULT_CATEGORY_PATTERNS,
        max_workers=workers or 1,
    )


def _run(console: Console, data_dir: Path | None, config_path: Path | None, workers: int | None) -> ReconcileResult:
    try:
        config = _build_config(data_dir, config_path, workers)
        return run_reconcile(config)
    except ConfigError as exc:
        logger.error("Config error: %s", exc)
        console.print(f"[red]Config error:[/red] {exc}")
        raise typer.Exit(1) from exc
    except FileSetLoadError as exc:
        logger.error("Load failed category=%s path=%s: %s", exc.category, exc.path, exc)
        console.print(f"[red]Load failed ({exc.category}):[/red] {exc}")
        raise typer.Exit(1) from exc
    except ReconcileError as exc:
        logger.error("Reconcile failed stage=%s: %s", exc.stage, exc)
        console.print(f"[red]Reconcile failed ({exc.stage}):[/red] {exc}")
        raise typer.Exit(1) from exc


_DATA_DIR_HELP = "Directory of raw extract files."
_CONFIG_HELP = "YAML run config (schema file expected alongside as reconcile.schema.json)."


def run_command(
    data_dir: Path | None = typer.Option(None, "--data-dir", help=_DATA_DIR_HELP),
    config_path: Path | None = typer.Option(None, "--config", help=_CONFIG_HELP),
    workers: int | None = typer.Option(None, "--workers", min=1, help="Parallel category loads."),
    as_json: bool = typer.Option(False, "--json", help="Print the summary artifact as JSON."),
) -> None:
    """Load all extracts, reconcile them and print diagnostics."""
    console = Console()
    result = _run(console, data_dir, config_path, workers)
    if as_json:
        typer.echo(json.dumps(result.diagnostics.to_dict(), indent=2))
        return
    render_load_summary(console, result.diagnostics)
    render_diagnostics(console, result.diagnostics)


def identity_command(
    data_dir: Path | None = typer.Option(None, "--data-dir", help=_DATA_DIR_HELP),
    config_path: Path | None = typer.Option(None, "--config", help=_CONFIG_HELP),
) -> None:
    """List contract ids whose description changed between observations."""
    console = Console()
    result = _run(console, data_dir, config_path, None)
    render_identity_report(console, result.identity)


def moneyness_command(
    data_dir: Path | None = typer.Option(None, "--data-dir", help=_DATA_DIR_HELP),
    config_path: Path | None = typer.Option(None, "--config", help=_CONFIG_HELP),
    top: int = typer.Option(20, "--top", min=1, help="Number of contracts to show."),
) -> None:
    """Show the contracts with the highest moneyness at expiry."""
    console = Console()
    result = _run(console, data_dir, config_path, None)
    if result.moneyness.empty:
        console.print("No contracts with a close on their expiry date.")
        return
    render_moneyness(console, result.moneyness, top=top)
