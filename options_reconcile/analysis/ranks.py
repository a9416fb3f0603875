"""Group-relative rank offsets for strikes and expiries.

Both ranks follow one recipe: rank ascending within the group, then subtract
``floor(median(rank))`` of that group so the group's middle sits at zero.

Ties are broken by order of first appearance (``method="first"``) for both
ranks, so two contracts with the same strike (or expiry) in one group get
consecutive ranks in row order. For the expiry rank this means contracts of one
(underlying, type) group that share an expiry still get distinct offsets: the
offset is a position among rows, not a distance between expiry dates.

Rows with a null value or a null group key get a null rank.
"""
from __future__ import annotations

import numpy as np
import pandas as pd

from options_reconcile.models import RANKED_COLUMNS

STRIKE_RANK_GROUP = ["underlying_id", "contract_type", "expiry_date"]
EXPIRY_RANK_GROUP = ["underlying_id", "contract_type"]
TIE_BREAK_METHOD = "first"


def _rankable(values: pd.Series) -> pd.Series:
    if pd.api.types.is_datetime64_any_dtype(values):
        ns = values.to_numpy(dtype="datetime64[ns]").view("int64")
        return pd.Series(ns, index=values.index, dtype="float64").where(values.notna())
    return pd.to_numeric(values, errors="coerce")


def centered_rank(df: pd.DataFrame, *, value: str, by: list[str]) -> pd.Series:
    work = df[by].copy()
    work[value] = _rankable(df[value])
    work["_rank"] = work.groupby(by, sort=False)[value].rank(method=TIE_BREAK_METHOD, ascending=True)
    median = work.groupby(by, sort=False)["_rank"].transform("median")
    centered = work["_rank"] - np.floor(median)
    return centered.round().astype("Int64")


def add_strike_rank(df: pd.DataFrame, *, column: str = "strike_rank") -> pd.DataFrame:
    out = df.copy()
    out[column] = centered_rank(df, value="strike_price", by=STRIKE_RANK_GROUP)
    return out


def add_expiry_rank(df: pd.DataFrame, *, column: str = "expiry_rank") -> pd.DataFrame:
    out = df.copy()
    out[column] = centered_rank(df, value="expiry_date", by=EXPIRY_RANK_GROUP)
    return out


def rank_contracts(universe: pd.DataFrame) -> pd.DataFrame:
    ranked = add_expiry_rank(add_strike_rank(universe.rename(columns={"id": "contract_id"})))
    return ranked[RANKED_COLUMNS].reset_index(drop=True)


__all__ = [
    "EXPIRY_RANK_GROUP",
    "STRIKE_RANK_GROUP",
    "TIE_BREAK_METHOD",
    "add_expiry_rank",
    "add_strike_rank",
    "centered_rank",
    "rank_contracts",
]
