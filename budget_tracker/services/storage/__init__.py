"""
Storage Services Package

Provides the abstract key-value interface and its implementations:
in-memory, local JSON file, and Google Sheets.
"""

from budget_tracker.services.storage.interface import (
    ConnectionError,
    InMemoryKeyValueStorage,
    KeyValueStorageInterface,
    PersistenceWriteError,
    StorageError,
)
from budget_tracker.services.storage.local_file import JsonFileKeyValueStorage
from budget_tracker.services.storage.google_sheets import (
    GoogleSheetsClient,
    GoogleSheetsKeyValueStorage,
)

__all__ = [
    # Interface
    "KeyValueStorageInterface",
    # Exceptions
    "ConnectionError",
    "PersistenceWriteError",
    "StorageError",
    # Implementations
    "GoogleSheetsClient",
    "GoogleSheetsKeyValueStorage",
    "InMemoryKeyValueStorage",
    "JsonFileKeyValueStorage",
]
