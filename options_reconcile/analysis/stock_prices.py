from __future__ import annotations

import logging

import pandas as pd

from options_reconcile.analysis.frames import col_as_float, empty_frame, to_calendar_date
from options_reconcile.models import PRICE_COLUMNS, SOURCE_FILE_COLUMN


logger = logging.getLogger(__name__)

REGISTRY_COLUMNS = PRICE_COLUMNS + [SOURCE_FILE_COLUMN]


def build_stock_price_registry(*frames: pd.DataFrame | None) -> pd.DataFrame:
    """Underlying daily closes, unique per (underlying_id, date).

    Frames are stacked in the order given, so on a duplicate key the row from
    the earlier frame (then the earlier file, then the earlier line) wins.
    Dates are normalized before deduplicating; rows without an underlying id or
    a parseable date are dropped since they can never match an expiry.
    """
    parts = [f for f in frames if f is not None and not f.empty]
    raw = pd.concat(parts, ignore_index=True, sort=False) if parts else empty_frame(REGISTRY_COLUMNS)
    for col in REGISTRY_COLUMNS:
        if col not in raw.columns:
            raw[col] = None

    df = raw[REGISTRY_COLUMNS].copy()
    df["date"] = to_calendar_date(df["date"])
    df["close"] = col_as_float(df, "close")
    df["volume"] = col_as_float(df, "volume")

    unusable = df["underlying_id"].isna() | df["date"].isna()
    if unusable.any():
        logger.info("Stock prices: dropping %d rows without underlying id or date", int(unusable.sum()))
    df = df[~unusable]

    out = df.drop_duplicates(subset=["underlying_id", "date"], keep="first").reset_index(drop=True)
    logger.info("Stock price registry: raw_rows=%d rows=%d", len(raw), len(out))
    return out


__all__ = ["REGISTRY_COLUMNS", "build_stock_price_registry"]
