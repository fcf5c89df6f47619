"""Spreadsheet export of ledger entries."""

from finvue.services.export.excel import (
    EXPORT_COLUMNS,
    SHEET_TITLE,
    ExportResult,
    export_transactions,
    report_filename,
)

__all__ = [
    "EXPORT_COLUMNS",
    "SHEET_TITLE",
    "ExportResult",
    "export_transactions",
    "report_filename",
]
