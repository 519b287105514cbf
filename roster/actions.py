from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List

from roster.combined import rebuild_combined
from roster.config import RosterConfig
from roster.errors import EmptyTable, RosterError, TableNotFound
from roster.seasonal import BuildResult, build_season
from roster.store import TableStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Alert:
    level: str  # success | warning | error
    title: str
    message: str
    rows_written: int = 0
    table: str = ""


def _from_result(title: str, result: BuildResult) -> Alert:
    level = "success" if result.level == "info" else "warning"
    message = result.message
    if result.warnings:
        message = "\n".join([message] + result.warnings)
        level = "warning"
    return Alert(level=level, title=title, message=message, rows_written=result.rows_written, table=result.table)


def refresh_season(store: TableStore, config: RosterConfig, season: str) -> Alert:
    title = f"Refresh {season}"
    try:
        season_cfg = config.season(season)
        title = f"Refresh {season_cfg.title}"
        result = build_season(store, config, season_cfg.key)
    except TableNotFound as exc:
        logger.error("Source sheet missing: %s", exc.name)
        return Alert("error", title, f"Source sheet '{exc.name}' not found. Nothing was written.")
    except EmptyTable as exc:
        logger.error("Source sheet empty: %s", exc.name)
        return Alert("error", title, f"Source sheet '{exc.name}' has no data rows. Nothing was written.")
    except RosterError as exc:
        logger.error("%s failed: %s", title, exc)
        return Alert("error", title, str(exc))
    return _from_result(title, result)


def refresh_all_seasons(store: TableStore, config: RosterConfig) -> List[Alert]:
    return [refresh_season(store, config, key) for key in config.season_keys]


def rebuild_combined_table(store: TableStore, config: RosterConfig) -> Alert:
    title = "Rebuild combined"
    try:
        result = rebuild_combined(store, config)
    except RosterError as exc:
        logger.error("%s failed: %s", title, exc)
        return Alert("error", title, str(exc))
    return _from_result(title, result)


def show_help(config: RosterConfig) -> str:
    layout = config.layout
    season_lines = "\n".join(
        f"- **{s.title}**: '{s.source_sheet}' -> '{s.dest_sheet}' (score column '{s.score_label}')" for s in config.seasons
    )
    return f"""### Roster builder

**Refresh a season** reads the season's export sheet, keeps rows whose class name
contains "{config.filter_substring}" (any case), keeps one row per student and
subject (first listed wins), sorts by last then first name and overwrites the
season's sheet.

**Refresh all seasons** does the same for every season.

**Rebuild combined** merges the seasonal sheets into '{config.combined_sheet}':
one row per student and subject with a score column per season. Missing
seasonal sheets leave that season's column blank.

Seasons:
{season_lines}

Export sheets are read from column {layout.start_column}, header on row {layout.header_row},
{layout.span} columns wide.
"""
