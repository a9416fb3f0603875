from __future__ import annotations

from pathlib import Path

import typer

from options_reconcile.commands.reconcile import identity_command, moneyness_command, run_command
from options_reconcile.observability import finalize_run_logger, setup_run_logger

app = typer.Typer(add_completion=False, help="Reconcile option market extracts into analytical tables.")

app.command("run")(run_command)
app.command("identity")(identity_command)
app.command("moneyness")(moneyness_command)


@app.callback()
def main(
    ctx: typer.Context,
    log_dir: Path = typer.Option(
        Path("data/logs"),
        "--log-dir",
        help="Directory for per-run log files (one dated subfolder per day).",
    ),
) -> None:
    command_name = ctx.invoked_subcommand or "options-reconcile"
    run_logger = setup_run_logger(log_dir, command_name)
    if run_logger is not None:
        ctx.call_on_close(lambda: finalize_run_logger(run_logger))


if __name__ == "__main__":
    app()
