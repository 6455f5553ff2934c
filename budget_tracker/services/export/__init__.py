"""Spreadsheet export package."""

from budget_tracker.services.export.excel import (
    EXPORT_HEADER,
    XLSX_MIME_TYPE,
    EmptyExportError,
    ExportError,
    build_export_rows,
    export_to_excel,
    write_export,
)

__all__ = [
    "EXPORT_HEADER",
    "XLSX_MIME_TYPE",
    "EmptyExportError",
    "ExportError",
    "build_export_rows",
    "export_to_excel",
    "write_export",
]
