from __future__ import annotations

import logging

import pandas as pd

from options_reconcile.models import CANONICAL_JOIN_COLUMNS, SNAPSHOT_COLUMNS, STREAM_COLUMNS


logger = logging.getLogger(__name__)

MATCHED_COLUMN = "matched"


def join_to_universe(
    observations: pd.DataFrame,
    universe: pd.DataFrame,
    *,
    key: str = "contract_id",
    label: str = "observations",
) -> pd.DataFrame:
    """Left-join observation rows onto the canonical contracts by ``key`` == ``id``.

    Every observation is kept. Matched rows gain the canonical contract fields;
    unmatched (orphan) rows carry nulls for all of them. Observation columns
    that clash with a canonical name are kept with a ``_raw`` suffix.
    """
    canonical = universe[["id"] + CANONICAL_JOIN_COLUMNS].rename(columns={"id": key})
    obs = observations.reset_index(drop=True)
    out = obs.merge(
        canonical,
        on=key,
        how="left",
        suffixes=("_raw", ""),
        indicator=True,
        validate="many_to_one",
    )
    out[MATCHED_COLUMN] = out.pop("_merge").eq("both")

    orphans = int((~out[MATCHED_COLUMN]).sum())
    if orphans:
        orphan_ids = out.loc[~out[MATCHED_COLUMN], key].dropna().unique()
        logger.warning(
            "%s: %d rows reference %d unknown contracts",
            label,
            orphans,
            len(orphan_ids),
        )
    return out


def join_streams(stream: pd.DataFrame, universe: pd.DataFrame) -> pd.DataFrame:
    return join_to_universe(_with_columns(stream, STREAM_COLUMNS), universe, label="stream")


def join_snapshots(snapshot: pd.DataFrame, universe: pd.DataFrame) -> pd.DataFrame:
    return join_to_universe(_with_columns(snapshot, SNAPSHOT_COLUMNS), universe, label="snapshot")


def summarize_snapshots(snapshot_joined: pd.DataFrame) -> pd.DataFrame:
    """Per contract: number of snapshots and mean snapshot mid (nulls skipped)."""
    df = snapshot_joined[snapshot_joined["contract_id"].notna()]
    mid = pd.to_numeric(df["mid_price"], errors="coerce")
    work = pd.DataFrame({"contract_id": df["contract_id"], "mid_price": mid})
    out = (
        work.groupby("contract_id", sort=True)
        .agg(snapshot_count=("mid_price", "size"), mean_snapshot_mid=("mid_price", "mean"))
        .reset_index()
    )
    out["snapshot_count"] = out["snapshot_count"].astype("int64")
    return out


def _with_columns(df: pd.DataFrame, columns: list[str]) -> pd.DataFrame:
    missing = [c for c in columns if c not in df.columns]
    if not missing:
        return df
    out = df.copy()
    for col in missing:
        out[col] = None
    return out


__all__ = [
    "MATCHED_COLUMN",
    "join_snapshots",
    "join_streams",
    "join_to_universe",
    "summarize_snapshots",
]
