from __future__ import annotations

from typing import Any, Dict

import altair as alt
import pandas as pd

from roster.combined import combined_columns, score_column
from roster.config import RosterConfig
from roster.data import BLANK, is_blank
from roster.errors import TableNotFound
from roster.store import TableStore

alt.data_transformers.disable_max_rows()


def to_vega_spec(chart: alt.Chart) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def load_combined_frame(store: TableStore, config: RosterConfig) -> pd.DataFrame:
    grid = store.read_table(config.combined_sheet)
    cols = combined_columns(config)
    body = grid.iloc[1:].reindex(columns=range(len(cols)), fill_value=BLANK)
    body.columns = cols
    return body.reset_index(drop=True)


def compute_summary(df: pd.DataFrame, config: RosterConfig) -> Dict[str, Any]:
    if df.empty:
        empty_kpis = {"students": 0, "records": 0, "scored_by_season": {k: 0 for k in config.season_keys}}
        return {"kpis": empty_kpis, "by_subject": [], "charts": {}}

    scored = {}
    for season in config.seasons:
        col = score_column(season.key)
        scored[season.key] = int((~df[col].map(is_blank)).sum()) if col in df.columns else 0

    by_subject = df.groupby("subject", sort=True).size().reset_index(name="records")
    kpis = {
        "students": int(df["identifier"].nunique()),
        "records": int(len(df)),
        "scored_by_season": scored,
    }

    long_df = df.melt(
        id_vars=["subject"],
        value_vars=[score_column(s.key) for s in config.seasons],
        var_name="season",
        value_name="score",
    )
    long_df = long_df[~long_df["score"].map(is_blank)]
    titles = {score_column(s.key): s.title for s in config.seasons}
    long_df["season"] = long_df["season"].map(titles)
    counts = long_df.groupby(["season", "subject"]).size().reset_index(name="scored")

    charts: Dict[str, Any] = {}
    if not counts.empty:
        bars = (
            alt.Chart(counts)
            .mark_bar()
            .encode(
                x=alt.X("season:N", title="Season", sort=[s.title for s in config.seasons]),
                y=alt.Y("scored:Q", title="Scored records", axis=alt.Axis(format="d", gridDash=[4, 4])),
                color=alt.Color("subject:N", title="Subject"),
                xOffset="subject:N",
                tooltip=[
                    alt.Tooltip("season:N", title="Season"),
                    alt.Tooltip("subject:N", title="Subject"),
                    alt.Tooltip("scored:Q", title="Scored"),
                ],
            )
        )
        charts["scored_by_season"] = to_vega_spec(bars)

    return {
        "kpis": kpis,
        "by_subject": by_subject.to_dict(orient="records"),
        "charts": charts,
    }


def load_summary(store: TableStore, config: RosterConfig) -> Dict[str, Any]:
    try:
        df = load_combined_frame(store, config)
    except TableNotFound:
        df = pd.DataFrame()
    return compute_summary(df, config)
