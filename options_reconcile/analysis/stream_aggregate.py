from __future__ import annotations

import pandas as pd

from options_reconcile.analysis.frames import col_as_float
from options_reconcile.models import STREAM_AGGREGATE_COLUMNS


def aggregate_streams(stream_joined: pd.DataFrame) -> pd.DataFrame:
    """Reduce raw stream ticks to one row per contract id.

    - ``observation_count`` counts ticks where ask *and* bid are both missing,
      i.e. heartbeat updates rather than priced quotes.
    - ``mean_ask``/``mean_bid``/``mean_ask_size``/``mean_bid_size`` are
      arithmetic means over the non-null values only; a contract whose values
      are all null gets a null mean.

    Orphan ticks (no canonical contract) are aggregated under their own id.
    """
    df = stream_joined[stream_joined["contract_id"].notna()]
    ask = col_as_float(df, "ask")
    bid = col_as_float(df, "bid")
    work = pd.DataFrame(
        {
            "contract_id": df["contract_id"],
            "heartbeat": (ask.isna() & bid.isna()).astype("int64"),
            "ask": ask,
            "bid": bid,
            "ask_size": col_as_float(df, "ask_size"),
            "bid_size": col_as_float(df, "bid_size"),
        }
    )
    out = (
        work.groupby("contract_id", sort=True)
        .agg(
            observation_count=("heartbeat", "sum"),
            mean_ask_size=("ask_size", "mean"),
            mean_bid_size=("bid_size", "mean"),
            mean_ask=("ask", "mean"),
            mean_bid=("bid", "mean"),
        )
        .reset_index()
    )
    out["observation_count"] = out["observation_count"].astype("int64")
    return out[STREAM_AGGREGATE_COLUMNS]


def backfill_stream_aggregate(aggregate: pd.DataFrame, universe: pd.DataFrame) -> pd.DataFrame:
    """Add a zero-count row for every canonical contract with no stream ticks."""
    known = set(aggregate["contract_id"].dropna())
    missing = [cid for cid in universe["id"].dropna() if cid not in known]
    if not missing:
        return aggregate.reset_index(drop=True)

    filler = pd.DataFrame(
        {
            "contract_id": missing,
            "observation_count": 0,
            "mean_ask_size": float("nan"),
            "mean_bid_size": float("nan"),
            "mean_ask": float("nan"),
            "mean_bid": float("nan"),
        }
    )
    parts = [p for p in (aggregate, filler) if not p.empty]
    out = pd.concat(parts, ignore_index=True)
    out["observation_count"] = out["observation_count"].astype("int64")
    return out[STREAM_AGGREGATE_COLUMNS]


def build_stream_aggregate(stream_joined: pd.DataFrame, universe: pd.DataFrame) -> pd.DataFrame:
    return backfill_stream_aggregate(aggregate_streams(stream_joined), universe)


__all__ = ["aggregate_streams", "backfill_stream_aggregate", "build_stream_aggregate"]
