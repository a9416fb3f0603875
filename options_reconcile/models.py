from __future__ import annotations

from typing import Literal

ContractType = Literal["Call", "Put"]
CONTRACT_TYPES: tuple[str, ...] = ("Call", "Put")

SOURCE_FILE_COLUMN = "source_file"

# Canonical contract (option space) fields, in output order.
CONTRACT_COLUMNS = [
    "id",
    "description",
    "exercise_style",
    "exchange_id",
    "expiry_date",
    "contract_type",
    "strike_price",
    "underlying_id",
]
# Fields a stream/snapshot row gains from the universe on a match.
CANONICAL_JOIN_COLUMNS = [c for c in CONTRACT_COLUMNS if c != "id"]

STREAM_COLUMNS = ["contract_id", "observed_at", "ask", "ask_size", "bid", "bid_size", "mid"]
SNAPSHOT_COLUMNS = ["contract_id", "mid_price", "asset_type"]
PRICE_COLUMNS = ["underlying_id", "date", "close", "volume"]

STREAM_AGGREGATE_COLUMNS = [
    "contract_id",
    "observation_count",
    "mean_ask_size",
    "mean_bid_size",
    "mean_ask",
    "mean_bid",
]
MONEYNESS_COLUMNS = [
    "contract_id",
    "contract_type",
    "strike_price",
    "underlying_id",
    "expiry_date",
    "close_on_expiry",
    "volume_on_expiry",
    "observation_count",
    "mean_ask_size",
    "mean_bid_size",
    "mean_ask",
    "mean_bid",
    "moneyness",
]
RANKED_COLUMNS = [
    "contract_id",
    "underlying_id",
    "contract_type",
    "expiry_date",
    "strike_price",
    "strike_rank",
    "expiry_rank",
]

_TYPE_ALIASES = {
    "call": "Call",
    "c": "Call",
    "put": "Put",
    "p": "Put",
}


def normalize_contract_type(value: object) -> object:
    """Map call/put spellings onto ``Call``/``Put``; other values pass through."""
    if value is None:
        return None
    if not isinstance(value, str):
        return value
    key = value.strip().lower()
    return _TYPE_ALIASES.get(key, value)
