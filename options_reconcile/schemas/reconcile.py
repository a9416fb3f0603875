from __future__ import annotations

from datetime import datetime

from pydantic import Field

from options_reconcile.schemas.common import ArtifactBase, utc_now


class CategoryLoadSummary(ArtifactBase):
    category: str
    pattern: str
    files: list[str] = Field(default_factory=list)
    rows: int = Field(default=0, ge=0)


class IdentityViolationRow(ArtifactBase):
    contract_id: str
    descriptions: list[str]


class ReconcileSummaryArtifact(ArtifactBase):
    schema_version: int = 1
    generated_at: datetime = Field(default_factory=utc_now)
    data_directory: str
    categories: list[CategoryLoadSummary] = Field(default_factory=list)
    universe_contracts: int = Field(ge=0)
    duplicate_option_rows: int = Field(ge=0)
    identity_checked_ids: int = Field(ge=0)
    identity_violations: list[IdentityViolationRow] = Field(default_factory=list)
    orphan_stream_rows: int = Field(ge=0)
    orphan_snapshot_rows: int = Field(ge=0)
    contracts_with_streams: int = Field(ge=0)
    contracts_without_expiry_price: int = Field(ge=0)
    contracts_with_unknown_type: int = Field(ge=0)
    moneyness_rows: int = Field(ge=0)
    ranked_rows: int = Field(ge=0)

    @property
    def identity_violation_count(self) -> int:
        return len(self.identity_violations)
