from __future__ import annotations

import logging
from typing import Dict, List

import pandas as pd

from roster.config import RosterConfig
from roster.data import BLANK, drop_blank_rows, sort_by_name
from roster.errors import TableNotFound
from roster.merge import composite_key, fill_blank_by_key
from roster.seasonal import KEY_COLUMNS, OUTPUT_COLUMNS, BuildResult
from roster.store import TableStore

logger = logging.getLogger(__name__)

NAME_COLUMNS = ["identifier", "last_name", "first_name"]
BACKFILL_COLUMNS = ["last_name", "first_name", "grade"]


def score_column(season_key: str) -> str:
    return f"{season_key}_score"


def combined_columns(config: RosterConfig) -> List[str]:
    return ["first_name", "last_name", "identifier", "subject", "grade"] + [score_column(k) for k in config.season_keys]


def combined_header(config: RosterConfig) -> List[str]:
    return ["First Name", "Last Name", "Student ID", "Subject", "Grade"] + [s.combined_label for s in config.seasons]


def season_rows(grid: pd.DataFrame) -> pd.DataFrame:
    """Data rows of a seasonal table (header skipped) as named columns."""
    body = grid.iloc[1:].reindex(columns=range(len(OUTPUT_COLUMNS)), fill_value=BLANK)
    body.columns = OUTPUT_COLUMNS
    return drop_blank_rows(body, NAME_COLUMNS).reset_index(drop=True)


def merge_seasons(frames: Dict[str, pd.DataFrame], config: RosterConfig) -> pd.DataFrame:
    """
    One record per identifier|subject across all seasons, in season order.

    Each season's slot takes that season's score for the key (the later row
    wins inside a season); names and grade take the first non-blank value.
    """
    ordered = [(k, frames[k]) for k in config.season_keys if k in frames and not frames[k].empty]
    columns = combined_columns(config)
    if not ordered:
        return pd.DataFrame(columns=columns)

    stacked = pd.concat([df[OUTPUT_COLUMNS] for _, df in ordered], ignore_index=True)
    records = fill_blank_by_key(stacked, KEY_COLUMNS, BACKFILL_COLUMNS)
    record_keys = composite_key(records, KEY_COLUMNS)

    for key in config.season_keys:
        scores: Dict[str, object] = {}
        if key in frames and not frames[key].empty:
            df = frames[key]
            scores = dict(zip(composite_key(df, KEY_COLUMNS), df["score"]))
        records[score_column(key)] = record_keys.map(lambda k: scores.get(k, BLANK)).values

    return sort_by_name(records[columns])


def rebuild_combined(store: TableStore, config: RosterConfig) -> BuildResult:
    frames: Dict[str, pd.DataFrame] = {}
    warnings: List[str] = []
    for season in config.seasons:
        try:
            grid = store.read_table(season.dest_sheet)
        except TableNotFound:
            logger.warning("Seasonal sheet '%s' missing; %s contributes no scores", season.dest_sheet, season.title)
            warnings.append(f"Sheet '{season.dest_sheet}' not found. {season.title} scores are left blank.")
            continue
        frames[season.key] = season_rows(grid)
        logger.info("%s: read %s rows from '%s'", season.title, len(frames[season.key]), season.dest_sheet)

    records = merge_seasons(frames, config)
    written = store.write_table(config.combined_sheet, combined_header(config), records)

    if written == 0:
        return BuildResult(
            table=config.combined_sheet,
            rows_written=0,
            level="warning",
            message="No seasonal rows found. Only the header was written to "
            f"'{config.combined_sheet}'. Refresh the seasonal sheets first.",
            warnings=warnings,
        )
    return BuildResult(
        table=config.combined_sheet,
        rows_written=written,
        level="info",
        message=f"Combined {written} student/subject records into '{config.combined_sheet}'.",
        warnings=warnings,
    )
