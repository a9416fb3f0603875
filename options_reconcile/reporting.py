from __future__ import annotations

import pandas as pd
from rich.console import Console
from rich.table import Table

from options_reconcile.analysis.universe import IdentityReport
from options_reconcile.schemas.reconcile import ReconcileSummaryArtifact


def _fmt_num(val: float | None, digits: int = 2) -> str:
    if val is None or pd.isna(val):
        return "-"
    return f"{float(val):,.{digits}f}"


def _fmt_date(val: object) -> str:
    if val is None or pd.isna(val):
        return "-"
    return pd.Timestamp(val).date().isoformat()


def render_load_summary(console: Console, summary: ReconcileSummaryArtifact) -> None:
    table = Table(title=f"Extracts ({summary.data_directory})")
    table.add_column("Category")
    table.add_column("Pattern")
    table.add_column("Files", justify="right")
    table.add_column("Rows", justify="right")
    for cat in summary.categories:
        table.add_row(cat.category, cat.pattern, str(len(cat.files)), str(cat.rows))
    console.print(table)


def render_diagnostics(console: Console, summary: ReconcileSummaryArtifact) -> None:
    table = Table(title="Reconcile Diagnostics")
    table.add_column("Check")
    table.add_column("Value", justify="right")
    rows = [
        ("Contracts (universe)", summary.universe_contracts),
        ("Duplicate option rows dropped", summary.duplicate_option_rows),
        ("Ids checked for identity", summary.identity_checked_ids),
        ("Identity violations", summary.identity_violation_count),
        ("Orphan stream rows", summary.orphan_stream_rows),
        ("Orphan snapshot rows", summary.orphan_snapshot_rows),
        ("Contracts with streams", summary.contracts_with_streams),
        ("Contracts without expiry close", summary.contracts_without_expiry_price),
        ("Contracts with unknown type", summary.contracts_with_unknown_type),
        ("Moneyness rows", summary.moneyness_rows),
        ("Ranked contracts", summary.ranked_rows),
    ]
    for label, value in rows:
        style = "yellow" if label == "Identity violations" and value else None
        table.add_row(label, str(value), style=style)
    console.print(table)


def render_identity_report(console: Console, report: IdentityReport) -> None:
    if not report.violations:
        console.print(f"No identity violations across {report.checked_ids} contract ids.")
        return
    table = Table(title=f"Identity violations ({report.violation_count} of {report.checked_ids} ids)")
    table.add_column("Contract")
    table.add_column("Descriptions")
    for violation in report.violations:
        table.add_row(violation.contract_id, " | ".join(violation.descriptions))
    console.print(table)


def render_moneyness(console: Console, moneyness: pd.DataFrame, *, top: int = 20) -> None:
    table = Table(title=f"Top {top} contracts by moneyness")
    table.add_column("Contract")
    table.add_column("Underlying")
    table.add_column("Type")
    table.add_column("Expiry")
    table.add_column("Strike", justify="right")
    table.add_column("Close", justify="right")
    table.add_column("Moneyness", justify="right")
    table.add_column("Heartbeats", justify="right")

    ordered = moneyness.sort_values("moneyness", ascending=False, na_position="last", kind="mergesort")
    for row in ordered.head(top).itertuples(index=False):
        style = None
        if not pd.isna(row.moneyness):
            style = "green" if row.moneyness > 0 else "red" if row.moneyness < 0 else None
        table.add_row(
            str(row.contract_id),
            str(row.underlying_id),
            str(row.contract_type),
            _fmt_date(row.expiry_date),
            _fmt_num(row.strike_price),
            _fmt_num(row.close_on_expiry),
            _fmt_num(row.moneyness),
            str(row.observation_count),
            style=style,
        )
    console.print(table)
