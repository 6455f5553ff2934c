"""
Abstract Storage Interface

DESIGN DECISION: The ledger only needs a key-value text store.
It keeps the entire serialized ledger under one key and replaces it as
a unit on every change. This allows us to:
1. Swap the local JSON file for Google Sheets (or anything else)
2. Use in-memory storage for testing
3. Keep the ledger decoupled from where its bytes live

The interface is intentionally tiny: get and set.
No partial updates, no transaction log, no compaction. A personal
ledger is small enough to rewrite whole every time.
"""

from abc import ABC, abstractmethod
from typing import Optional


class KeyValueStorageInterface(ABC):
    """
    Abstract interface for the ledger's persistence medium.

    Both operations are synchronous.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """
        Read the value stored under a key.

        Args:
            key: Storage key

        Returns:
            The stored text, or None if the key is absent

        Raises:
            StorageError: If the medium itself cannot be read
        """
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """
        Replace the value stored under a key.

        Args:
            key: Storage key
            value: Text to store

        Raises:
            PersistenceWriteError: If the medium rejects the write
        """
        pass


class InMemoryKeyValueStorage(KeyValueStorageInterface):
    """
    Dict-backed storage.

    Lives as long as the object does. Used by tests and by the
    'memory' backend for throwaway sessions.
    """

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def __contains__(self, key: str) -> bool:
        return key in self._data


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class PersistenceWriteError(StorageError):
    """The medium rejected a write (quota, permissions, API failure)."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
