"""Column contracts for the six raw extract categories.

File name patterns only route a file to a category. The row shape of a
category comes from the declaration here: vendor header names are mapped to
canonical snake_case columns, missing declared columns are filled with nulls,
and the category's key column must be present in every file.
"""
from __future__ import annotations

from dataclasses import dataclass, field

CATEGORY_STREAM = "stream"
CATEGORY_SNAPSHOT = "snapshot"
CATEGORY_OPTION_SPACE = "option_space"
CATEGORY_STOCK_PRICES = "stock_prices"
CATEGORY_STOCK_OPTIONS = "stock_options"
CATEGORY_MONEYNESS_PRICES = "moneyness_prices"

CATEGORY_NAMES: tuple[str, ...] = (
    CATEGORY_STREAM,
    CATEGORY_SNAPSHOT,
    CATEGORY_OPTION_SPACE,
    CATEGORY_STOCK_PRICES,
    CATEGORY_STOCK_OPTIONS,
    CATEGORY_MONEYNESS_PRICES,
)

DEFAULT_CATEGORY_PATTERNS: tuple[tuple[str, str], ...] = (
    (CATEGORY_STREAM, "*stream*.csv"),
    (CATEGORY_SNAPSHOT, "*snapshot*.csv"),
    (CATEGORY_OPTION_SPACE, "*option_space*.csv"),
    (CATEGORY_STOCK_PRICES, "*stock_price*.csv"),
    (CATEGORY_STOCK_OPTIONS, "*stock_option*.csv"),
    (CATEGORY_MONEYNESS_PRICES, "*moneyness*.csv"),
)


@dataclass(frozen=True)
class ExtractSchema:
    category: str
    key_column: str
    # canonical name -> accepted vendor header names
    columns: dict[str, tuple[str, ...]] = field(default_factory=dict)
    numeric_columns: tuple[str, ...] = ()
    # identifier columns used as join keys; whitespace is trimmed on load
    id_columns: tuple[str, ...] = ()

    @property
    def canonical_columns(self) -> list[str]:
        return list(self.columns.keys())

    def rename_map(self, header: list[str]) -> dict[str, str]:
        """Map the headers found in a file onto canonical column names.

        Exact matches win over case-insensitive ones; a canonical column that
        is already present by name is never overwritten by an alias.
        """
        present = set(header)
        lowered = {str(h).strip().lower(): h for h in header}
        out: dict[str, str] = {}
        for canonical, aliases in self.columns.items():
            if canonical in present:
                continue
            match = None
            for alias in aliases:
                if alias in present:
                    match = alias
                    break
            if match is None:
                for candidate in (canonical, *aliases):
                    found = lowered.get(candidate.lower())
                    if found is not None:
                        match = found
                        break
            if match is not None and match not in out:
                out[match] = canonical
        return out


_CONTRACT_FIELDS: dict[str, tuple[str, ...]] = {
    "id": ("optionId", "option_id", "contractId"),
    "description": ("desc",),
    "exercise_style": ("exerciseStyle",),
    "exchange_id": ("exchangeId",),
    "expiry_date": ("expiryDate", "expiry", "expiration"),
    "contract_type": ("type", "optionType", "option_type"),
    "strike_price": ("strikePrice", "strike"),
    "underlying_id": ("underlyingId", "stockId"),
}

_PRICE_FIELDS: dict[str, tuple[str, ...]] = {
    "underlying_id": ("stockId", "stock_id", "underlyingId"),
    "date": ("day", "priceDate"),
    "close": ("closePrice", "Close"),
    "volume": ("Volume",),
}

EXTRACT_SCHEMAS: dict[str, ExtractSchema] = {
    CATEGORY_STREAM: ExtractSchema(
        category=CATEGORY_STREAM,
        key_column="contract_id",
        columns={
            "contract_id": ("optionId", "option_id", "contractId"),
            "observed_at": ("timestamp", "time", "observedAt"),
            "ask": ("askPrice",),
            "ask_size": ("askSize",),
            "bid": ("bidPrice",),
            "bid_size": ("bidSize",),
            "mid": ("midPrice",),
        },
        numeric_columns=("ask", "ask_size", "bid", "bid_size", "mid"),
        id_columns=("contract_id",),
    ),
    CATEGORY_SNAPSHOT: ExtractSchema(
        category=CATEGORY_SNAPSHOT,
        key_column="contract_id",
        columns={
            "contract_id": ("optionId", "option_id", "contractId"),
            "mid_price": ("midPrice", "mid"),
            "asset_type": ("assetType",),
        },
        numeric_columns=("mid_price",),
        id_columns=("contract_id",),
    ),
    CATEGORY_OPTION_SPACE: ExtractSchema(
        category=CATEGORY_OPTION_SPACE,
        key_column="id",
        columns=dict(_CONTRACT_FIELDS),
        numeric_columns=("strike_price",),
        id_columns=("id", "underlying_id"),
    ),
    CATEGORY_STOCK_PRICES: ExtractSchema(
        category=CATEGORY_STOCK_PRICES,
        key_column="underlying_id",
        columns=dict(_PRICE_FIELDS),
        numeric_columns=("close", "volume"),
        id_columns=("underlying_id",),
    ),
    CATEGORY_STOCK_OPTIONS: ExtractSchema(
        category=CATEGORY_STOCK_OPTIONS,
        key_column="id",
        columns=dict(_CONTRACT_FIELDS),
        numeric_columns=("strike_price",),
        id_columns=("id", "underlying_id"),
    ),
    CATEGORY_MONEYNESS_PRICES: ExtractSchema(
        category=CATEGORY_MONEYNESS_PRICES,
        key_column="underlying_id",
        columns=dict(_PRICE_FIELDS),
        numeric_columns=("close", "volume"),
        id_columns=("underlying_id",),
    ),
}


def schema_for(category: str) -> ExtractSchema:
    try:
        return EXTRACT_SCHEMAS[category]
    except KeyError as exc:
        raise KeyError(f"Unknown extract category: {category}") from exc


__all__ = [
    "CATEGORY_MONEYNESS_PRICES",
    "CATEGORY_NAMES",
    "CATEGORY_OPTION_SPACE",
    "CATEGORY_SNAPSHOT",
    "CATEGORY_STOCK_OPTIONS",
    "CATEGORY_STOCK_PRICES",
    "CATEGORY_STREAM",
    "DEFAULT_CATEGORY_PATTERNS",
    "EXTRACT_SCHEMAS",
    "ExtractSchema",
    "schema_for",
]
