from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List

import pandas as pd

from roster.config import RosterConfig, SeasonConfig
from roster.data import BLANK, casefold_series, sort_by_name
from roster.errors import EmptyTable
from roster.merge import first_by_key
from roster.store import TableStore

logger = logging.getLogger(__name__)

OUTPUT_COLUMNS = ["identifier", "last_name", "first_name", "subject", "grade", "score"]
KEY_COLUMNS = ["identifier", "subject"]


@dataclass(frozen=True)
class BuildResult:
    table: str
    rows_written: int
    level: str
    message: str
    season: str | None = None
    warnings: List[str] = field(default_factory=list)


def season_header(season: SeasonConfig) -> List[str]:
    return ["Student ID", "Last Name", "First Name", "Subject", "Grade", season.score_label]


def source_span(grid: pd.DataFrame, config: RosterConfig) -> pd.DataFrame:
    """Header row through the last row, cut to the fixed span from the start column."""
    layout = config.layout
    start = layout.start_index
    span_cols = list(range(start, start + layout.span))
    body = grid.iloc[layout.header_row - 1 :]
    body = body.reindex(columns=span_cols, fill_value=BLANK)
    body.columns = range(layout.span)
    return body.reset_index(drop=True)


def filter_source_rows(grid: pd.DataFrame, config: RosterConfig) -> pd.DataFrame:
    """Span -> drop header -> category filter -> project -> dedupe -> sort."""
    span = source_span(grid, config)
    data = span.iloc[1:]
    if data.empty:
        return pd.DataFrame(columns=OUTPUT_COLUMNS)

    layout = config.layout
    needle = config.filter_substring.lower()
    matches = casefold_series(data[layout.category]).str.contains(needle, regex=False)
    kept = data[matches]

    projected = pd.DataFrame({name: kept[getattr(layout, name)] for name in OUTPUT_COLUMNS})
    deduped = first_by_key(projected, KEY_COLUMNS)
    dropped = len(projected) - len(deduped)
    if dropped:
        logger.warning("Dropped %s duplicate student/subject rows", dropped)
    return sort_by_name(deduped)


def build_season(store: TableStore, config: RosterConfig, season_key: str) -> BuildResult:
    season = config.season(season_key)
    grid = store.read_table(season.source_sheet)
    if len(grid) - (config.layout.header_row - 1) < 2:
        raise EmptyTable(season.source_sheet)

    rows = filter_source_rows(grid, config)
    written = store.write_table(season.dest_sheet, season_header(season), rows[OUTPUT_COLUMNS])
    logger.info("%s: %s rows from '%s' into '%s'", season.title, written, season.source_sheet, season.dest_sheet)

    if written == 0:
        return BuildResult(
            table=season.dest_sheet,
            rows_written=0,
            level="warning",
            message=f"No rows in '{season.source_sheet}' matched '{config.filter_substring}'. Only the header was written.",
            season=season.key,
        )
    return BuildResult(
        table=season.dest_sheet,
        rows_written=written,
        level="info",
        message=f"Wrote {written} rows to '{season.dest_sheet}'.",
        season=season.key,
    )
