from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Callable, TypeVar

import pandas as pd

from options_reconcile.analysis.joins import MATCHED_COLUMN, join_snapshots, join_streams, summarize_snapshots
from options_reconcile.analysis.moneyness import compute_moneyness
from options_reconcile.analysis.ranks import rank_contracts
from options_reconcile.analysis.stock_prices import build_stock_price_registry
from options_reconcile.analysis.stream_aggregate import build_stream_aggregate
from options_reconcile.analysis.universe import IdentityReport, build_option_universe, check_contract_identity
from options_reconcile.data.extract_schemas import (
    CATEGORY_MONEYNESS_PRICES,
    CATEGORY_NAMES,
    CATEGORY_OPTION_SPACE,
    CATEGORY_SNAPSHOT,
    CATEGORY_STOCK_OPTIONS,
    CATEGORY_STOCK_PRICES,
    CATEGORY_STREAM,
    schema_for,
)
from options_reconcile.data.file_sets import LoaderConfig, empty_extract, load_file_sets
from options_reconcile.models import SOURCE_FILE_COLUMN
from options_reconcile.schemas.reconcile import (
    CategoryLoadSummary,
    IdentityViolationRow,
    ReconcileSummaryArtifact,
)


logger = logging.getLogger(__name__)

T = TypeVar("T")


class ReconcileError(RuntimeError):
    def __init__(self, message: str, *, stage: str) -> None:
        super().__init__(message)
        self.stage = stage


@dataclass(frozen=True)
class ReconcileResult:
    file_sets: dict[str, pd.DataFrame]
    universe: pd.DataFrame
    stream_joined: pd.DataFrame
    snapshot_joined: pd.DataFrame
    snapshot_summary: pd.DataFrame
    stock_prices: pd.DataFrame
    stream_aggregate: pd.DataFrame
    moneyness: pd.DataFrame
    ranked: pd.DataFrame
    identity: IdentityReport
    diagnostics: ReconcileSummaryArtifact


def _stage(name: str, fn: Callable[..., T], *args: object) -> T:
    try:
        return fn(*args)
    except Exception as exc:  # noqa: BLE001 - name the stage that broke
        raise ReconcileError(f"Reconcile stage '{name}' failed: {exc}", stage=name) from exc


def _complete_file_sets(file_sets: dict[str, pd.DataFrame]) -> dict[str, pd.DataFrame]:
    """Every known category present; unconfigured ones are empty tables."""
    out = dict(file_sets)
    for category in CATEGORY_NAMES:
        if category not in out:
            out[category] = empty_extract(schema_for(category))
    return out


def _category_summaries(
    file_sets: dict[str, pd.DataFrame],
    patterns: dict[str, str],
) -> list[CategoryLoadSummary]:
    out: list[CategoryLoadSummary] = []
    for category, frame in file_sets.items():
        files = list(dict.fromkeys(frame[SOURCE_FILE_COLUMN].dropna().astype(str))) if not frame.empty else []
        out.append(
            CategoryLoadSummary(
                category=category,
                pattern=patterns.get(category, ""),
                files=files,
                rows=int(len(frame)),
            )
        )
    return out


def reconcile_file_sets(
    file_sets: dict[str, pd.DataFrame],
    *,
    data_directory: str = "",
    patterns: dict[str, str] | None = None,
) -> ReconcileResult:
    """Run every derivation stage over already-loaded category tables."""
    sets = _complete_file_sets(file_sets)
    option_space = sets[CATEGORY_OPTION_SPACE]

    universe = _stage("option_universe", build_option_universe, option_space)
    identity = _stage(
        "contract_identity",
        check_contract_identity,
        [option_space, sets[CATEGORY_STOCK_OPTIONS]],
    )
    stream_joined = _stage("stream_join", join_streams, sets[CATEGORY_STREAM], universe)
    snapshot_joined = _stage("snapshot_join", join_snapshots, sets[CATEGORY_SNAPSHOT], universe)
    snapshot_summary = _stage("snapshot_summary", summarize_snapshots, snapshot_joined)
    stock_prices = _stage(
        "stock_prices",
        build_stock_price_registry,
        sets[CATEGORY_MONEYNESS_PRICES],
        sets[CATEGORY_STOCK_PRICES],
    )
    stream_aggregate = _stage("stream_aggregate", build_stream_aggregate, stream_joined, universe)
    moneyness = _stage("moneyness", compute_moneyness, universe, stock_prices, stream_aggregate)
    ranked = _stage("ranks", rank_contracts, universe)

    diagnostics = _build_diagnostics(
        sets,
        patterns=patterns or {},
        data_directory=data_directory,
        universe=universe,
        identity=identity,
        stream_joined=stream_joined,
        snapshot_joined=snapshot_joined,
        stock_prices=stock_prices,
        moneyness=moneyness,
        ranked=ranked,
    )
    logger.info(
        "Reconcile done: contracts=%d moneyness=%d identity_violations=%d",
        diagnostics.universe_contracts,
        diagnostics.moneyness_rows,
        diagnostics.identity_violation_count,
    )
    return ReconcileResult(
        file_sets=sets,
        universe=universe,
        stream_joined=stream_joined,
        snapshot_joined=snapshot_joined,
        snapshot_summary=snapshot_summary,
        stock_prices=stock_prices,
        stream_aggregate=stream_aggregate,
        moneyness=moneyness,
        ranked=ranked,
        identity=identity,
        diagnostics=diagnostics,
    )


def _build_diagnostics(
    sets: dict[str, pd.DataFrame],
    *,
    patterns: dict[str, str],
    data_directory: str,
    universe: pd.DataFrame,
    identity: IdentityReport,
    stream_joined: pd.DataFrame,
    snapshot_joined: pd.DataFrame,
    stock_prices: pd.DataFrame,
    moneyness: pd.DataFrame,
    ranked: pd.DataFrame,
) -> ReconcileSummaryArtifact:
    option_rows = sets[CATEGORY_OPTION_SPACE]
    with_id = int(option_rows["id"].notna().sum()) if "id" in option_rows.columns else 0

    price_keys = set(zip(stock_prices["underlying_id"], stock_prices["date"]))
    without_price = sum(
        1
        for underlying_id, expiry in zip(universe["underlying_id"], universe["expiry_date"])
        if (underlying_id, expiry) not in price_keys
    )
    unknown_type = int((~universe["contract_type"].isin(["Call", "Put"])).sum())
    streamed = stream_joined.loc[stream_joined[MATCHED_COLUMN], "contract_id"].nunique()

    return ReconcileSummaryArtifact(
        data_directory=data_directory,
        categories=_category_summaries(sets, patterns),
        universe_contracts=int(len(universe)),
        duplicate_option_rows=max(with_id - int(len(universe)), 0),
        identity_checked_ids=identity.checked_ids,
        identity_violations=[
            IdentityViolationRow(contract_id=v.contract_id, descriptions=list(v.descriptions))
            for v in identity.violations
        ],
        orphan_stream_rows=int((~stream_joined[MATCHED_COLUMN]).sum()),
        orphan_snapshot_rows=int((~snapshot_joined[MATCHED_COLUMN]).sum()),
        contracts_with_streams=int(streamed),
        contracts_without_expiry_price=int(without_price),
        contracts_with_unknown_type=unknown_type,
        moneyness_rows=int(len(moneyness)),
        ranked_rows=int(len(ranked)),
    )


def run_reconcile(config: LoaderConfig) -> ReconcileResult:
    """Load every category from ``config.data_directory`` and derive all tables.

    A load failure in any category aborts the run with ``FileSetLoadError``.
    """
    file_sets = load_file_sets(config)
    return reconcile_file_sets(
        file_sets,
        data_directory=str(config.data_directory),
        patterns=dict(config.category_patterns),
    )


__all__ = [
    "ReconcileError",
    "ReconcileResult",
    "reconcile_file_sets",
    "run_reconcile",
]
