from __future__ import annotations

from pathlib import Path

import pandas as pd

from options_reconcile.analysis.universe import build_option_universe


def write_text(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def write_extract_dir(root: Path) -> Path:
    """A small AAPL market: four contracts, two stream files, one orphan stream id."""
    data_dir = root / "extracts"
    data_dir.mkdir(parents=True)
    write_text(
        data_dir / "option_space_1.csv",
        ",id,description,exerciseStyle,exchangeId,expiryDate,type,strikePrice,underlyingId\n"
        "0,C140,AAPL 2024-01-19 C140,American,XNAS,2024-01-19,Call,140,AAPL\n"
        "1,P140,AAPL 2024-01-19 P140,American,XNAS,2024-01-19,Put,140,AAPL\n"
        "2,C150,AAPL 2024-01-19 C150,American,XNAS,2024-01-19,Call,150,AAPL\n",
    )
    write_text(
        data_dir / "option_space_2.csv",
        ",id,description,exerciseStyle,exchangeId,expiryDate,type,strikePrice,underlyingId\n"
        "0,C140,AAPL JAN24 140 CALL,American,XNAS,2024-01-19,Call,140,AAPL\n"
        "1,C160,AAPL 2024-02-16 C160,American,XNAS,2024-02-16,Call,160,AAPL\n",
    )
    write_text(
        data_dir / "stock_options_1.csv",
        "id,description\n"
        "C150,AAPL 2024-01-19 C150\n",
    )
    write_text(
        data_dir / "stream_a.csv",
        "optionId,timestamp,ask,askSize,bid,bidSize,mid\n"
        "C140,2024-01-10T14:30:00Z,11.0,5,10.0,4,10.5\n"
        "C140,2024-01-10T14:30:05Z,,,,,\n"
        "ZZZ,2024-01-10T14:30:06Z,1.0,1,0.5,1,0.75\n",
    )
    write_text(
        data_dir / "stream_b.csv",
        "optionId,timestamp,ask,bid\n"
        "P140,2024-01-10T14:31:00Z,,\n"
        "C140,2024-01-10T14:31:05Z,12.0,10.0\n",
    )
    write_text(
        data_dir / "snapshot_1.csv",
        "optionId,midPrice,assetType\n"
        "C140,10.5,OPTION\n"
        "P140,1.2,OPTION\n",
    )
    write_text(
        data_dir / "moneyness_prices.csv",
        "stockId,date,close,volume\n"
        "AAPL,2024-01-19,150,1000000\n",
    )
    write_text(
        data_dir / "stock_prices_1.csv",
        "stockId,date,close,volume\n"
        "AAPL,2024-01-19,149,5\n"
        "AAPL,2024-01-18,148,10\n",
    )
    return data_dir


def make_universe(rows: list[dict]) -> pd.DataFrame:
    defaults = {
        "description": None,
        "exercise_style": "American",
        "exchange_id": "XNAS",
        "underlying_id": "AAPL",
        "source_file": "option_space.csv",
    }
    return build_option_universe(pd.DataFrame([{**defaults, **row} for row in rows]))
