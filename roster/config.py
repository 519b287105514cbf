from __future__ import annotations

import json
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from dotenv import load_dotenv
from openpyxl.utils import column_index_from_string

from roster.errors import ConfigError, UnknownSeason

load_dotenv()

PROJECT_DIR = Path(__file__).resolve().parents[1]
DEFAULT_WORKBOOK = PROJECT_DIR / "roster.xlsx"


@dataclass(frozen=True)
class SeasonConfig:
    key: str
    title: str
    source_sheet: str
    dest_sheet: str
    score_label: str

    @property
    def combined_label(self) -> str:
        return f"{self.title} Score"


@dataclass(frozen=True)
class SourceLayout:
    """Fixed offsets of the used fields inside the source span."""

    start_column: str = "A"
    header_row: int = 1
    span: int = 19
    category: int = 0
    subject: int = 1
    identifier: int = 10
    last_name: int = 11
    first_name: int = 12
    grade: int = 14
    score: int = 18

    @property
    def start_index(self) -> int:
        """0-based position of the start column."""
        return column_index_from_string(self.start_column) - 1

    def offsets(self) -> Dict[str, int]:
        return {name: getattr(self, name) for name in FIELD_OFFSETS}


FIELD_OFFSETS = ("category", "subject", "identifier", "last_name", "first_name", "grade", "score")


DEFAULT_SEASONS: Tuple[SeasonConfig, ...] = (
    SeasonConfig("fall", "Fall", "Fall Export", "Fall Math", "Fall Percentile"),
    SeasonConfig("winter", "Winter", "Winter Export", "Winter Math", "Winter Percentile"),
    SeasonConfig("spring", "Spring", "Spring Export", "Spring Math", "Spring Percentile"),
)


@dataclass(frozen=True)
class RosterConfig:
    seasons: Tuple[SeasonConfig, ...] = DEFAULT_SEASONS
    filter_substring: str = "MATH"
    combined_sheet: str = "Combined"
    layout: SourceLayout = field(default_factory=SourceLayout)

    @property
    def season_keys(self) -> List[str]:
        return [s.key for s in self.seasons]

    def season(self, key: str) -> SeasonConfig:
        wanted = (key or "").strip().lower()
        for s in self.seasons:
            if s.key == wanted:
                return s
        raise UnknownSeason(key)


DEFAULT_CONFIG = RosterConfig()


def _normalize_layout(raw: dict) -> SourceLayout:
    defaults = SourceLayout()
    values = {}
    for f in fields(SourceLayout):
        value = raw.get(f.name, getattr(defaults, f.name))
        if f.name == "start_column":
            value = str(value).strip().upper()
            try:
                column_index_from_string(value)
            except ValueError as exc:
                raise ConfigError(f"Invalid start column: {value!r}") from exc
        else:
            try:
                value = int(value)
            except (TypeError, ValueError) as exc:
                raise ConfigError(f"Layout field {f.name} must be an integer, got {value!r}") from exc
        values[f.name] = value

    layout = SourceLayout(**values)
    if layout.header_row < 1:
        raise ConfigError("header_row must be >= 1")
    for name, offset in layout.offsets().items():
        if not 0 <= offset < layout.span:
            raise ConfigError(f"Offset for {name} ({offset}) falls outside the {layout.span}-column span")
    return layout


def _normalize_seasons(raw: Optional[List[dict]]) -> Tuple[SeasonConfig, ...]:
    if not raw:
        return DEFAULT_SEASONS
    by_key = {s.key: s for s in DEFAULT_SEASONS}
    out: List[SeasonConfig] = []
    for item in raw:
        key = str(item.get("key") or "").strip().lower()
        if not key:
            raise ConfigError("Every season needs a key")
        base = by_key.get(key)
        title = str(item.get("title") or (base.title if base else key.title()))
        out.append(
            SeasonConfig(
                key=key,
                title=title,
                source_sheet=str(item.get("source_sheet") or (base.source_sheet if base else f"{title} Export")),
                dest_sheet=str(item.get("dest_sheet") or (base.dest_sheet if base else f"{title} Math")),
                score_label=str(item.get("score_label") or (base.score_label if base else f"{title} Percentile")),
            )
        )
    if len({s.key for s in out}) != len(out):
        raise ConfigError("Season keys must be unique")
    return tuple(out)


def normalize_config(raw: Optional[dict]) -> RosterConfig:
    raw = raw or {}
    filter_substring = str(raw.get("filter_substring") or DEFAULT_CONFIG.filter_substring).strip()
    if not filter_substring:
        raise ConfigError("filter_substring must not be blank")
    return RosterConfig(
        seasons=_normalize_seasons(raw.get("seasons")),
        filter_substring=filter_substring,
        combined_sheet=str(raw.get("combined_sheet") or DEFAULT_CONFIG.combined_sheet).strip(),
        layout=_normalize_layout(raw.get("layout") or {}),
    )


def load_config(path: Optional[str | Path] = None) -> RosterConfig:
    path = path or os.getenv("ROSTER_CONFIG")
    if not path:
        return DEFAULT_CONFIG
    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Cannot read config {path}: {exc}") from exc
    return normalize_config(raw)


def workbook_path(override: Optional[str | Path] = None) -> Path:
    value = override or os.getenv("ROSTER_WORKBOOK")
    return Path(value) if value else DEFAULT_WORKBOOK
