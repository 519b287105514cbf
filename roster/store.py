from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Sequence

import pandas as pd
from openpyxl import Workbook, load_workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from roster.data import is_blank, normalize_blank_frame
from roster.errors import FormulaCellsPresent, TableNotFound

logger = logging.getLogger(__name__)

MAX_COLUMN_WIDTH = 60


def _as_grid(header: Sequence[str], rows: object) -> pd.DataFrame:
    width = len(header)
    if isinstance(rows, pd.DataFrame):
        body = rows.astype(object).values.tolist()
    else:
        body = [list(r) for r in (rows or [])]
    for r in body:
        if len(r) != width:
            raise ValueError(f"Row width {len(r)} does not match header width {width}")
    return pd.DataFrame([list(header)] + body, columns=range(width), dtype=object)


class TableStore(ABC):
    """Named tables of cells. Row 0 of a read grid is the header row."""

    @abstractmethod
    def table_names(self) -> List[str]:
        ...

    def has_table(self, name: str) -> bool:
        return name in self.table_names()

    @abstractmethod
    def read_table(self, name: str) -> pd.DataFrame:
        """
        Return the raw grid with integer column labels and blanks normalized.
        Raises TableNotFound when the table does not exist.
        """
        ...

    @abstractmethod
    def write_table(self, name: str, header: Sequence[str], rows: object) -> int:
        """
        Clear (or create) the table, write header and rows in one pass, and
        drop any column beyond the header width. Returns data rows written.
        """
        ...


class MemoryTableStore(TableStore):
    def __init__(self, tables: Dict[str, object] | None = None) -> None:
        self._tables: Dict[str, pd.DataFrame] = {}
        for name, grid in (tables or {}).items():
            self.put_grid(name, grid)

    def put_grid(self, name: str, grid: object) -> None:
        df = grid.copy() if isinstance(grid, pd.DataFrame) else pd.DataFrame(list(grid or []), dtype=object)
        df.columns = range(df.shape[1])
        self._tables[name] = normalize_blank_frame(df.reset_index(drop=True))

    def table_names(self) -> List[str]:
        return list(self._tables)

    def read_table(self, name: str) -> pd.DataFrame:
        if name not in self._tables:
            raise TableNotFound(name)
        return self._tables[name].copy()

    def write_table(self, name: str, header: Sequence[str], rows: object) -> int:
        grid = _as_grid(header, rows)
        self._tables[name] = normalize_blank_frame(grid)
        return len(grid) - 1


class ExcelTableStore(TableStore):
    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def table_names(self) -> List[str]:
        if not self.path.exists():
            return []
        with pd.ExcelFile(self.path, engine="openpyxl") as xls:
            return list(xls.sheet_names)

    def read_table(self, name: str) -> pd.DataFrame:
        if not self.has_table(name):
            raise TableNotFound(name)
        raw = pd.read_excel(self.path, sheet_name=name, header=None, dtype=object, engine="openpyxl")
        raw.columns = range(raw.shape[1])
        return normalize_blank_frame(raw)

    def _open(self) -> Workbook:
        if self.path.exists():
            return load_workbook(self.path)
        wb = Workbook()
        # A fresh workbook carries a default sheet; it is dropped once ours exists.
        wb.active.title = "_placeholder"
        return wb

    def write_table(self, name: str, header: Sequence[str], rows: object) -> int:
        grid = _as_grid(header, rows)
        wb = self._open()
        formula_sheets = _sheets_with_formulas(wb, skip=name)
        if formula_sheets:
            logger.warning("Refusing to save %s: formula cells in %s", self.path.name, formula_sheets)
            raise FormulaCellsPresent(formula_sheets)

        if name in wb.sheetnames:
            position = wb.sheetnames.index(name)
            wb.remove(wb[name])
            ws = wb.create_sheet(name, position)
        else:
            ws = wb.create_sheet(name)
        if "_placeholder" in wb.sheetnames and len(wb.sheetnames) > 1:
            wb.remove(wb["_placeholder"])

        width = len(header)
        for row in grid.values.tolist():
            ws.append([None if is_blank(v) else v for v in row])
        for cell in ws[1]:
            cell.font = Font(bold=True)
        ws.freeze_panes = "A2"

        if ws.max_column > width:
            ws.delete_cols(width + 1, ws.max_column - width)
        _autosize_columns(ws, width)

        self.path.parent.mkdir(parents=True, exist_ok=True)
        wb.save(self.path)
        written = len(grid) - 1
        logger.info("Wrote %s rows to sheet '%s' in %s", written, name, self.path.name)
        return written


def _autosize_columns(ws, width: int) -> None:
    for col_idx in range(1, width + 1):
        letter = get_column_letter(col_idx)
        longest = max((len(str(c.value)) for c in ws[letter] if c.value is not None), default=0)
        ws.column_dimensions[letter].width = min(MAX_COLUMN_WIDTH, longest + 2)


def _sheets_with_formulas(wb: Workbook, skip: str) -> List[str]:
    """Sheets other than `skip` holding formulas; openpyxl drops their cached results on save."""
    found = []
    for ws in wb.worksheets:
        if ws.title == skip:
            continue
        if any(cell.data_type == "f" for row in ws.iter_rows() for cell in row):
            found.append(ws.title)
    return found
