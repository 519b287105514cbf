"""Core (UI-agnostic) roster logic.

This package contains:
- configuration (season/sheet mapping, source column layout)
- table stores (XLSX workbook via openpyxl, in-memory)
- the seasonal filter-builder and the three-season consolidator
- user-facing actions that turn results into alerts
- the coverage summary (Altair -> Vega-Lite spec dict)
"""
