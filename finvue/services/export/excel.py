"""
Spreadsheet Export

Builds an .xlsx report of ledger entries with openpyxl. The caller
decides which entries go in; the export never filters.
"""

from dataclasses import dataclass
from datetime import date
from io import BytesIO
from pathlib import Path
from typing import Iterable, Optional

from openpyxl import Workbook
from openpyxl.styles import Font

from finvue.models.ledger import Transaction


SHEET_TITLE = "Transactions"

# (header, column width)
EXPORT_COLUMNS: tuple[tuple[str, int], ...] = (
    ("Date", 15),
    ("Type", 10),
    ("Category", 20),
    ("Amount", 12),
    ("Note", 30),
)


@dataclass(frozen=True)
class ExportResult:
    filename: str
    content: bytes
    row_count: int


def report_filename(on: Optional[date] = None) -> str:
    on = on or date.today()
    return f"FinVue_Report_{on.isoformat()}.xlsx"


def build_workbook(transactions: Iterable[Transaction]) -> tuple[Workbook, int]:
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = SHEET_TITLE

    sheet.append([header for header, _ in EXPORT_COLUMNS])
    for cell in sheet[1]:
        cell.font = Font(bold=True)
    for index, (_, width) in enumerate(EXPORT_COLUMNS):
        sheet.column_dimensions[chr(ord("A") + index)].width = width

    rows = 0
    for t in transactions:
        sheet.append([
            t.occurred_on.isoformat(),
            t.type.value,
            t.category,
            t.amount,
            t.note,
        ])
        rows += 1
    return workbook, rows


def export_transactions(
    transactions: Iterable[Transaction],
    directory: Optional[Path] = None,
    on: Optional[date] = None,
) -> ExportResult:
    """
    Render `transactions` to an .xlsx file.

    The bytes are always returned; with `directory` they are also
    written there under the report file name.
    """
    workbook, rows = build_workbook(transactions)
    buffer = BytesIO()
    workbook.save(buffer)
    result = ExportResult(
        filename=report_filename(on),
        content=buffer.getvalue(),
        row_count=rows,
    )

    if directory is not None:
        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)
        (directory / result.filename).write_bytes(result.content)

    return result
