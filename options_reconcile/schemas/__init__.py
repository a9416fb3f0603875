from __future__ import annotations

from options_reconcile.schemas.common import ArtifactBase, utc_now
from options_reconcile.schemas.reconcile import (
    CategoryLoadSummary,
    IdentityViolationRow,
    ReconcileSummaryArtifact,
)

__all__ = [
    "ArtifactBase",
    "CategoryLoadSummary",
    "IdentityViolationRow",
    "ReconcileSummaryArtifact",
    "utc_now",
]
