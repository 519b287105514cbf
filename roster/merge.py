"""Keyed merging shared by the seasonal dedupe and the combined back-fill.

Both transforms reduce rows to one per composite key. Dedupe keeps the
first row seen for a key; back-fill keeps, per column, the first non-blank
value seen for a key. Records come out in first-seen key order.
"""

from __future__ import annotations

from typing import Iterable

import pandas as pd

from roster.data import BLANK, is_blank, text_of

KEY_SEPARATOR = "|"


def composite_key(df: pd.DataFrame, cols: Iterable[str]) -> pd.Series:
    cols = list(cols)
    if df.empty:
        return pd.Series([], index=df.index, dtype=object)
    return df[cols].apply(lambda row: KEY_SEPARATOR.join(text_of(v) for v in row), axis=1)


def first_by_key(df: pd.DataFrame, key_cols: Iterable[str]) -> pd.DataFrame:
    if df.empty:
        return df.reset_index(drop=True)
    keys = composite_key(df, key_cols)
    return df[~keys.duplicated(keep="first")].reset_index(drop=True)


def fill_blank_by_key(df: pd.DataFrame, key_cols: Iterable[str], fill_cols: Iterable[str]) -> pd.DataFrame:
    key_cols = list(key_cols)
    fill_cols = list(fill_cols)
    out_cols = key_cols + [c for c in fill_cols if c not in key_cols]
    if df.empty:
        return pd.DataFrame(columns=out_cols)

    keyed = df[out_cols].copy()
    keyed["_key"] = composite_key(keyed, key_cols)
    for c in fill_cols:
        keyed[c] = keyed[c].map(lambda v: pd.NA if is_blank(v) else v)

    # GroupBy.first skips NA, which gives first non-blank per column.
    merged = keyed.groupby("_key", sort=False)[out_cols].first()
    merged = merged.astype(object).where(merged.notna(), BLANK)
    return merged.reset_index(drop=True)
