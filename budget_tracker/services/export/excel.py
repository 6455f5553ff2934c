"""
Spreadsheet Export

Turns the transaction list into a two-column workbook:

    | Description | Amount    |
    | salary      | R5000.00  |
    | rent        | -R1500.00 |

Amounts are written as display strings (not numbers) so the sheet shows
exactly what the app shows.
"""

from io import BytesIO
from pathlib import Path
from typing import Optional, Sequence, Union

from openpyxl import Workbook

from budget_tracker.config import ExportSettings
from budget_tracker.formatting import DEFAULT_CURRENCY_SYMBOL
from budget_tracker.models.transaction import Transaction


EXPORT_HEADER = ["Description", "Amount"]

XLSX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


class ExportError(Exception):
    """Base exception for export operations."""
    pass


class EmptyExportError(ExportError):
    """There is nothing to export."""

    def __init__(self, message: str = "No transactions to export!"):
        super().__init__(message)


def build_export_rows(
    transactions: Sequence[Transaction],
    currency_symbol: str = DEFAULT_CURRENCY_SYMBOL,
) -> list[list[str]]:
    """Header row plus one [description, formatted amount] row per transaction."""
    rows = [list(EXPORT_HEADER)]
    for tx in transactions:
        rows.append([tx.description, tx.display_amount(currency_symbol)])
    return rows


def export_to_excel(
    transactions: Sequence[Transaction],
    settings: Optional[ExportSettings] = None,
    currency_symbol: str = DEFAULT_CURRENCY_SYMBOL,
) -> bytes:
    """
    Build the .xlsx workbook in memory.

    Raises:
        EmptyExportError: If there are no transactions
    """
    if not transactions:
        raise EmptyExportError()

    settings = settings or ExportSettings()

    wb = Workbook()
    ws = wb.active
    ws.title = settings.sheet_name

    for row in build_export_rows(transactions, currency_symbol):
        ws.append(row)

    ws.column_dimensions["A"].width = settings.description_width
    ws.column_dimensions["B"].width = settings.amount_width

    bio = BytesIO()
    wb.save(bio)
    return bio.getvalue()


def write_export(
    transactions: Sequence[Transaction],
    directory: Union[str, Path],
    settings: Optional[ExportSettings] = None,
    currency_symbol: str = DEFAULT_CURRENCY_SYMBOL,
) -> Path:
    """
    Write the workbook under the configured file name.

    Returns:
        Path of the written file
    """
    settings = settings or ExportSettings()
    content = export_to_excel(transactions, settings, currency_symbol)

    path = Path(directory) / settings.filename
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)
    return path
