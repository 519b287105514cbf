from __future__ import annotations

from typing import Iterable

import pandas as pd

BLANK = ""


def is_blank(value: object) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def normalize_blank(value: object) -> object:
    """Collapse None / NaN / NA / "" into one blank; anything else is kept as-is."""
    return BLANK if is_blank(value) else value


def normalize_blank_frame(df: pd.DataFrame) -> pd.DataFrame:
    if df.empty:
        return df.astype(object)
    return df.astype(object).apply(lambda col: col.map(normalize_blank))


def text_of(value: object) -> str:
    if is_blank(value):
        return ""
    return str(value)


def casefold_series(series: pd.Series) -> pd.Series:
    return series.map(lambda v: text_of(v).lower())


def drop_blank_rows(df: pd.DataFrame, cols: Iterable[str]) -> pd.DataFrame:
    cols = [c for c in cols if c in df.columns]
    if df.empty or not cols:
        return df
    blank = df[cols].apply(lambda col: col.map(is_blank)).all(axis=1)
    return df[~blank]


def sort_by_name(df: pd.DataFrame, last_col: str = "last_name", first_col: str = "first_name") -> pd.DataFrame:
    """Ascending by last then first name, case-insensitive; equal names keep input order."""
    if df.empty:
        return df.reset_index(drop=True)
    keyed = df.assign(
        _last=casefold_series(df[last_col]),
        _first=casefold_series(df[first_col]),
        _order=range(len(df)),
    )
    keyed = keyed.sort_values(["_last", "_first", "_order"], kind="mergesort")
    return keyed.drop(columns=["_last", "_first", "_order"]).reset_index(drop=True)
