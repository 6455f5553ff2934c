"""Services package."""

from budget_tracker.services.export import (
    EmptyExportError,
    ExportError,
    build_export_rows,
    export_to_excel,
    write_export,
)
from budget_tracker.services.storage import (
    ConnectionError,
    GoogleSheetsClient,
    GoogleSheetsKeyValueStorage,
    InMemoryKeyValueStorage,
    JsonFileKeyValueStorage,
    KeyValueStorageInterface,
    PersistenceWriteError,
    StorageError,
)

__all__ = [
    # Export
    "EmptyExportError",
    "ExportError",
    "build_export_rows",
    "export_to_excel",
    "write_export",
    # Storage services
    "ConnectionError",
    "GoogleSheetsClient",
    "GoogleSheetsKeyValueStorage",
    "InMemoryKeyValueStorage",
    "JsonFileKeyValueStorage",
    "KeyValueStorageInterface",
    "PersistenceWriteError",
    "StorageError",
]
