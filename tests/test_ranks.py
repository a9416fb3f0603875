from __future__ import annotations

import pandas as pd

from options_reconcile.analysis.ranks import add_expiry_rank, add_strike_rank, rank_contracts
from options_reconcile.models import RANKED_COLUMNS
from tests.reconcile_fixtures import make_universe


def _contracts(
    strikes: list[float | None],
    *,
    contract_type: str = "Call",
    expiry: str = "2024-01-19",
    prefix: str | None = None,
) -> list[dict]:
    return [
        {
            "id": f"{prefix or contract_type[0]}{i}",
            "expiry_date": expiry,
            "contract_type": contract_type,
            "strike_price": strike,
        }
        for i, strike in enumerate(strikes)
    ]


def test_strike_rank_centers_on_median() -> None:
    universe = make_universe(_contracts([90, 100, 110, 120, 130]))

    out = add_strike_rank(universe)

    assert out["strike_rank"].tolist() == [-2, -1, 0, 1, 2]
    assert out.loc[out["strike_rank"] == 0, "strike_price"].tolist() == [110.0]


def test_strike_rank_independent_of_row_order() -> None:
    universe = make_universe(_contracts([110, 90, 130, 100, 120]))

    out = add_strike_rank(universe)

    assert out["strike_rank"].tolist() == [0, -2, 2, -1, 1]


def test_strike_rank_even_group_floors_median() -> None:
    universe = make_universe(_contracts([100, 110, 120, 130]))

    out = add_strike_rank(universe)

    # ranks 1..4, median 2.5 -> floor 2
    assert out["strike_rank"].tolist() == [-1, 0, 1, 2]


def test_strike_rank_ties_broken_by_first_appearance() -> None:
    universe = make_universe(_contracts([100, 100, 110]))

    out = add_strike_rank(universe)

    assert out["strike_rank"].tolist() == [-1, 0, 1]


def test_strike_rank_groups_by_type_and_expiry() -> None:
    universe = make_universe(
        _contracts([100, 110, 120])
        + _contracts([100], contract_type="Put")
        + [{"id": "L1", "expiry_date": "2024-02-16", "contract_type": "Call", "strike_price": 200}]
    )

    out = add_strike_rank(universe).set_index("id")

    assert out.loc[["C0", "C1", "C2"], "strike_rank"].tolist() == [-1, 0, 1]
    assert out.loc["P0", "strike_rank"] == 0
    assert out.loc["L1", "strike_rank"] == 0


def test_strike_rank_null_strike_is_null() -> None:
    universe = make_universe(_contracts([100, None, 110]))

    out = add_strike_rank(universe)

    assert pd.isna(out.loc[1, "strike_rank"])
    assert out.loc[0, "strike_rank"] == 0
    assert out.loc[2, "strike_rank"] == 1


def test_expiry_rank_centers_on_median() -> None:
    universe = make_universe(
        [
            {"id": "A", "expiry_date": "2024-03-15", "contract_type": "Call", "strike_price": 100},
            {"id": "B", "expiry_date": "2024-01-19", "contract_type": "Call", "strike_price": 100},
            {"id": "C", "expiry_date": "2024-02-16", "contract_type": "Call", "strike_price": 100},
            {"id": "D", "expiry_date": "2024-01-19", "contract_type": "Put", "strike_price": 100},
        ]
    )

    out = add_expiry_rank(universe).set_index("id")

    assert out.loc[["A", "B", "C"], "expiry_rank"].tolist() == [1, -1, 0]
    assert out.loc["D", "expiry_rank"] == 0


def test_rank_contracts_shape() -> None:
    universe = make_universe(_contracts([90, 100, 110]) + _contracts([100], expiry="2024-02-16", prefix="L"))

    out = rank_contracts(universe)

    assert out.columns.tolist() == RANKED_COLUMNS
    assert str(out["strike_rank"].dtype) == "Int64"
    assert str(out["expiry_rank"].dtype) == "Int64"
    assert out["contract_id"].tolist() == ["C0", "C1", "C2", "L0"]


def test_expiry_rank_shared_expiry_gets_distinct_positions() -> None:
    universe = make_universe(
        [
            {"id": "A", "expiry_date": "2024-01-19", "contract_type": "Call", "strike_price": 100},
            {"id": "B", "expiry_date": "2024-01-19", "contract_type": "Call", "strike_price": 110},
            {"id": "C", "expiry_date": "2024-02-16", "contract_type": "Call", "strike_price": 100},
        ]
    )

    out = add_expiry_rank(universe).set_index("id")

    assert out.loc[["A", "B", "C"], "expiry_rank"].tolist() == [-1, 0, 1]
