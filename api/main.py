from __future__ import annotations

from dataclasses import asdict
import logging
import math
import os

import numpy as np
import pandas as pd
from fastapi import FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.responses import Response
from fastapi.encoders import jsonable_encoder

from api.schemas import AlertListResponse, AlertModel, MetaSeasonsResponse, SeasonModel, SummaryResponse, TablePreviewResponse
from roster.actions import rebuild_combined_table, refresh_all_seasons, refresh_season, show_help
from roster.config import RosterConfig, load_config, workbook_path
from roster.errors import TableNotFound
from roster.store import ExcelTableStore, TableStore
from roster.summary import load_summary


app = FastAPI(title="Roster Builder API", version="0.1.0")
logger = logging.getLogger(__name__)


def cors_origins() -> list[str]:
    """Browser origins allowed to call the API, from comma-separated ROSTER_CORS_ORIGINS."""
    raw = os.getenv("ROSTER_CORS_ORIGINS", "")
    return [o.strip() for o in raw.split(",") if o.strip()]


if cors_origins():
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


def get_store() -> TableStore:
    return ExcelTableStore(workbook_path())


def get_config() -> RosterConfig:
    return load_config()


def _json(data: object) -> JSONResponse:
    """Return JSON with safe encoding for pandas/numpy objects."""

    def _safe_float(value: object) -> float | None:
        try:
            out = float(value)  # type: ignore[arg-type]
        except Exception:
            return None
        if math.isnan(out) or math.isinf(out):
            return None
        return out

    return JSONResponse(
        content=jsonable_encoder(
            data,
            custom_encoder={
                type(pd.NA): lambda _: None,
                np.integer: int,
                float: _safe_float,
                np.floating: _safe_float,
                np.bool_: bool,
                np.ndarray: lambda arr: arr.tolist(),
                pd.Timestamp: lambda ts: ts.isoformat(),
            },
        )
    )


def _error(exc: Exception, status_code: int = 500) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": str(exc), "type": type(exc).__name__})


@app.get("/meta/seasons")
def meta_seasons():
    try:
        config = get_config()
        payload = MetaSeasonsResponse(
            seasons=[SeasonModel(**asdict(s)) for s in config.seasons],
            filter_substring=config.filter_substring,
            combined_sheet=config.combined_sheet,
        )
        return _json(payload.model_dump())
    except Exception as exc:
        logger.exception("meta_seasons failed")
        return _error(exc)


@app.get("/help")
def help_text():
    try:
        return _json({"help": show_help(get_config())})
    except Exception as exc:
        logger.exception("help failed")
        return _error(exc)


@app.post("/seasons/refresh")
def refresh_all():
    try:
        alerts = refresh_all_seasons(get_store(), get_config())
        payload = AlertListResponse(alerts=[AlertModel(**asdict(a)) for a in alerts])
        return _json(payload.model_dump())
    except Exception as exc:
        logger.exception("refresh_all failed")
        return _error(exc)


@app.post("/seasons/{season}/refresh")
def refresh_one(season: str):
    try:
        alert = refresh_season(get_store(), get_config(), season)
        return _json(AlertModel(**asdict(alert)).model_dump())
    except Exception as exc:
        logger.exception("refresh_one failed")
        return _error(exc)


@app.post("/combined/rebuild")
def rebuild():
    try:
        alert = rebuild_combined_table(get_store(), get_config())
        return _json(AlertModel(**asdict(alert)).model_dump())
    except Exception as exc:
        logger.exception("rebuild failed")
        return _error(exc)


@app.get("/tables/{name}")
def table_preview(name: str, limit: int = Query(default=100, ge=1, le=5000)):
    try:
        grid = get_store().read_table(name)
        header = grid.iloc[0].tolist() if not grid.empty else []
        body = grid.iloc[1:]
        payload = TablePreviewResponse(
            name=name,
            header=header,
            rows=body.head(limit).values.tolist(),
            total_rows=int(len(body)),
        )
        return _json(payload.model_dump())
    except TableNotFound as exc:
        return _error(exc, status_code=404)
    except Exception as exc:
        logger.exception("table_preview failed")
        return _error(exc)


@app.get("/summary")
def summary():
    try:
        payload = SummaryResponse(**load_summary(get_store(), get_config()))
        return _json(payload.model_dump())
    except Exception as exc:
        logger.exception("summary failed")
        return _error(exc)


@app.get("/export/{name}")
def export_table(name: str):
    try:
        grid = get_store().read_table(name)
    except TableNotFound as exc:
        return _error(exc, status_code=404)
    if grid.empty:
        export_df = pd.DataFrame()
    else:
        export_df = grid.iloc[1:].copy()
        export_df.columns = [str(c) for c in grid.iloc[0].tolist()]
    csv_bytes = export_df.to_csv(index=False).encode("utf-8")
    filename = f"{name.replace(' ', '_').lower()}.csv"
    return Response(content=csv_bytes, media_type="text/csv", headers={"Content-Disposition": f"attachment; filename={filename}"})
