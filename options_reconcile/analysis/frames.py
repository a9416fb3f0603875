from __future__ import annotations

import pandas as pd


def col_as_float(df: pd.DataFrame, name: str) -> pd.Series:
    if name not in df.columns:
        return pd.Series([float("nan")] * len(df), index=df.index, dtype="float64")
    return pd.to_numeric(df[name], errors="coerce")


def _wall_clock_day(value: object) -> pd.Timestamp:
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return pd.NaT
    try:
        ts = pd.Timestamp(value)
    except (TypeError, ValueError):
        return pd.NaT
    if pd.isna(ts):
        return pd.NaT
    # the offset is dropped, not applied: the day is the one written in the value
    if ts.tzinfo is not None:
        ts = ts.tz_localize(None)
    try:
        return ts.normalize().as_unit("ns")
    except ValueError:
        return pd.NaT


def to_calendar_date(series: pd.Series) -> pd.Series:
    """Parse to midnight-normalized naive timestamps; unparseable values become NaT.

    Values carrying a UTC offset keep their local calendar day, so
    ``2024-01-19T20:00:00-05:00`` is 2024-01-19.
    """
    days = series.map(_wall_clock_day)
    return pd.to_datetime(days, errors="coerce").astype("datetime64[ns]")


def empty_frame(columns: list[str]) -> pd.DataFrame:
    return pd.DataFrame({col: pd.Series(dtype="object") for col in columns})
