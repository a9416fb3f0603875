from __future__ import annotations

import logging

import numpy as np
import pandas as pd

from options_reconcile.analysis.frames import col_as_float
from options_reconcile.models import MONEYNESS_COLUMNS, STREAM_AGGREGATE_COLUMNS


logger = logging.getLogger(__name__)


def compute_moneyness_series(
    close: pd.Series,
    strike: pd.Series,
    contract_type: pd.Series,
) -> pd.Series:
    """Signed payoff at expiry per row; null for non Call/Put types or missing inputs."""
    is_call = contract_type.eq("Call")
    is_put = contract_type.eq("Put")
    values = np.select(
        [is_call.to_numpy(dtype=bool), is_put.to_numpy(dtype=bool)],
        [(close - strike).to_numpy(dtype="float64"), (strike - close).to_numpy(dtype="float64")],
        default=np.nan,
    )
    return pd.Series(values, index=close.index, dtype="float64")


def compute_moneyness(
    universe: pd.DataFrame,
    stock_prices: pd.DataFrame,
    stream_aggregate: pd.DataFrame,
) -> pd.DataFrame:
    """One row per contract with a close on its expiry date and a known type.

    1. inner-join the underlying close/volume on (underlying_id, expiry_date);
       contracts without a price on expiry are left out.
    2. left-join the stream aggregate; a missing aggregate means
       ``observation_count == 0`` and null means.
    3. moneyness = close - strike for a Call, strike - close for a Put;
       any other type is excluded.
    """
    contracts = universe[["id", "contract_type", "strike_price", "underlying_id", "expiry_date"]].rename(
        columns={"id": "contract_id"}
    )
    prices = stock_prices[["underlying_id", "date", "close", "volume"]].rename(
        columns={"date": "expiry_date", "close": "close_on_expiry", "volume": "volume_on_expiry"}
    )
    priced = contracts.merge(prices, on=["underlying_id", "expiry_date"], how="inner", validate="many_to_one")

    aggregate = stream_aggregate[STREAM_AGGREGATE_COLUMNS]
    out = priced.merge(aggregate, on="contract_id", how="left", validate="one_to_one")
    out["observation_count"] = out["observation_count"].fillna(0).astype("int64")

    known_type = out["contract_type"].isin(["Call", "Put"])
    if (~known_type).any():
        logger.info("Moneyness: excluding %d contracts with unrecognized type", int((~known_type).sum()))
    out = out[known_type].copy()

    out["moneyness"] = compute_moneyness_series(
        col_as_float(out, "close_on_expiry"),
        col_as_float(out, "strike_price"),
        out["contract_type"],
    )
    logger.info(
        "Moneyness: contracts=%d priced=%d output=%d",
        len(universe),
        len(priced),
        len(out),
    )
    return out[MONEYNESS_COLUMNS].reset_index(drop=True)


__all__ = ["compute_moneyness", "compute_moneyness_series"]
