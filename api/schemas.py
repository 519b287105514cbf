from __future__ import annotations

from typing import Any, Dict, List

from pydantic import BaseModel, Field


class SeasonModel(BaseModel):
    key: str
    title: str
    source_sheet: str
    dest_sheet: str
    score_label: str


class MetaSeasonsResponse(BaseModel):
    seasons: List[SeasonModel]
    filter_substring: str
    combined_sheet: str


class AlertModel(BaseModel):
    level: str
    title: str
    message: str
    rows_written: int = 0
    table: str = ""


class AlertListResponse(BaseModel):
    alerts: List[AlertModel] = Field(default_factory=list)


class TablePreviewResponse(BaseModel):
    name: str
    header: List[Any]
    rows: List[List[Any]]
    total_rows: int


class SummaryResponse(BaseModel):
    kpis: Dict[str, Any]
    by_subject: List[Dict[str, Any]]
    charts: Dict[str, Any]
