from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Iterable

import pandas as pd

from options_reconcile.analysis.frames import col_as_float, empty_frame, to_calendar_date
from options_reconcile.models import CONTRACT_COLUMNS, SOURCE_FILE_COLUMN, normalize_contract_type


logger = logging.getLogger(__name__)

UNIVERSE_COLUMNS = CONTRACT_COLUMNS + [SOURCE_FILE_COLUMN]


def dedupe_contracts(contracts: pd.DataFrame) -> pd.DataFrame:
    """One row per contract id; the first sighting in arrival order wins."""
    out = contracts[contracts["id"].notna()]
    return out.drop_duplicates(subset=["id"], keep="first").reset_index(drop=True)


def build_option_universe(option_space: pd.DataFrame) -> pd.DataFrame:
    """Canonical contract table from raw option-space rows.

    Expiry is normalized to a calendar date, contract type to ``Call``/``Put``
    where recognizable, and rows are deduplicated by ``id`` keeping the first
    occurrence. Later sightings of a contract are dropped even if they differ.
    """
    if option_space is None:
        option_space = empty_frame(UNIVERSE_COLUMNS)

    df = option_space.copy()
    for col in UNIVERSE_COLUMNS:
        if col not in df.columns:
            df[col] = None
    df["expiry_date"] = to_calendar_date(df["expiry_date"])
    df["strike_price"] = col_as_float(df, "strike_price")
    df["contract_type"] = df["contract_type"].map(normalize_contract_type)

    out = dedupe_contracts(df[UNIVERSE_COLUMNS])
    logger.info("Option universe: raw_rows=%d contracts=%d", len(option_space), len(out))
    return out


@dataclass(frozen=True)
class IdentityViolation:
    contract_id: str
    descriptions: tuple[str, ...]


@dataclass(frozen=True)
class IdentityReport:
    checked_ids: int
    violations: tuple[IdentityViolation, ...]

    @property
    def violation_count(self) -> int:
        return len(self.violations)

    @property
    def violating_ids(self) -> list[str]:
        return [v.contract_id for v in self.violations]

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            {
                "contract_id": [v.contract_id for v in self.violations],
                "description_count": [len(v.descriptions) for v in self.violations],
                "descriptions": [list(v.descriptions) for v in self.violations],
            }
        )


def check_contract_identity(frames: Iterable[pd.DataFrame | None]) -> IdentityReport:
    """Report contract ids whose description differs between raw observations.

    Runs over the raw (pre-dedup) rows of every frame given, in order. Null
    descriptions are ignored. Nothing is raised; the caller decides what a
    violation means.
    """
    parts = [
        f[["id", "description"]]
        for f in frames
        if f is not None and not f.empty and {"id", "description"}.issubset(f.columns)
    ]
    if not parts:
        return IdentityReport(checked_ids=0, violations=())

    raw = pd.concat(parts, ignore_index=True)
    seen: dict[str, dict[str, None]] = {}
    for contract_id, description in zip(raw["id"], raw["description"]):
        if pd.isna(contract_id):
            continue
        bucket = seen.setdefault(str(contract_id), {})
        if not pd.isna(description):
            bucket[str(description)] = None

    violations = tuple(
        IdentityViolation(contract_id=contract_id, descriptions=tuple(descriptions))
        for contract_id, descriptions in sorted(seen.items())
        if len(descriptions) > 1
    )
    if violations:
        logger.warning(
            "Contract identity drift: %d ids with more than one description (e.g. %s)",
            len(violations),
            ", ".join(v.contract_id for v in violations[:5]),
        )
    return IdentityReport(checked_ids=int(len(seen)), violations=violations)


__all__ = [
    "IdentityReport",
    "IdentityViolation",
    "UNIVERSE_COLUMNS",
    "build_option_universe",
    "check_contract_identity",
    "dedupe_contracts",
]
