import logging
from typing import List

import altair as alt
import pandas as pd
import streamlit as st

from roster.actions import Alert, rebuild_combined_table, refresh_all_seasons, refresh_season, show_help
from roster.config import load_config, workbook_path
from roster.errors import TableNotFound
from roster.store import ExcelTableStore
from roster.summary import load_summary

alt.data_transformers.disable_max_rows()
logging.basicConfig(level=logging.INFO)


def render_alerts(alerts: List[Alert]):
    for alert in alerts:
        text = f"**{alert.title}**: {alert.message}"
        if alert.level == "success":
            st.success(text)
        elif alert.level == "warning":
            st.warning(text)
        else:
            st.error(text)


def render_table(store: ExcelTableStore, name: str, limit: int = 200):
    try:
        grid = store.read_table(name)
    except TableNotFound:
        st.info(f"Sheet '{name}' does not exist yet.")
        return
    if len(grid) < 2:
        st.info(f"Sheet '{name}' has no data rows.")
        return
    df = grid.iloc[1:].copy()
    df.columns = [str(c) for c in grid.iloc[0].tolist()]
    st.caption(f"{len(df):,} rows")
    st.dataframe(df.head(limit), hide_index=True, use_container_width=True)
    st.download_button(
        "Export CSV",
        data=df.to_csv(index=False).encode("utf-8"),
        file_name=f"{name.replace(' ', '_').lower()}.csv",
        mime="text/csv",
        key=f"export_{name}",
    )


# ---------- UI setup ----------
st.set_page_config(page_title="Roster Builder", layout="wide")
st.title("Seasonal Roster Builder")

config = load_config()
path = workbook_path()
if not path.exists():
    st.error(f"Workbook not found: {path}. Set ROSTER_WORKBOOK or place roster.xlsx next to app.py.")
    st.stop()
store = ExcelTableStore(path)
st.caption(f"Workbook: {path.name}")

# ----- Sidebar: actions -----
with st.sidebar:
    st.markdown("### Seasons")
    season_titles = {s.title: s.key for s in config.seasons}
    picked = st.selectbox("Season", options=list(season_titles))
    if st.button(f"Refresh {picked}"):
        st.session_state["alerts"] = [refresh_season(store, config, season_titles[picked])]
    if st.button("Refresh all seasons"):
        st.session_state["alerts"] = refresh_all_seasons(store, config)

    st.markdown("---")
    st.markdown("### Combined")
    if st.button("Rebuild combined sheet"):
        st.session_state["alerts"] = [rebuild_combined_table(store, config)]

    st.markdown("---")
    show_help_panel = st.checkbox("Show help", value=False)

render_alerts(st.session_state.get("alerts", []))

if show_help_panel:
    st.markdown(show_help(config))

tab_names = [s.dest_sheet for s in config.seasons] + [config.combined_sheet, "Coverage"]
tabs = st.tabs(tab_names)
for tab, name in zip(tabs[:-1], tab_names[:-1]):
    with tab:
        render_table(store, name)

with tabs[-1]:
    summary = load_summary(store, config)
    kpis = summary["kpis"]
    cols = st.columns(2 + len(config.seasons))
    cols[0].metric("Students", f"{kpis['students']:,}")
    cols[1].metric("Student/subject records", f"{kpis['records']:,}")
    for col, season in zip(cols[2:], config.seasons):
        col.metric(f"{season.title} scored", f"{kpis['scored_by_season'].get(season.key, 0):,}")
    chart_spec = summary["charts"].get("scored_by_season")
    if chart_spec:
        st.vega_lite_chart(chart_spec, use_container_width=True)
    else:
        st.info("Rebuild the combined sheet to see coverage.")
    if summary["by_subject"]:
        st.dataframe(pd.DataFrame(summary["by_subject"]), hide_index=True, use_container_width=True)
