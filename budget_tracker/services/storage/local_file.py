"""
Local JSON File Storage

The local-profile equivalent of a browser's localStorage: a single JSON
object file mapping string keys to string values. Several keys can share
the file; writing one key preserves the others.

DESIGN DECISION: Writes go to a temporary file in the same directory and
are moved into place with os.replace. A crash mid-write leaves the
previous file intact instead of a truncated one.

A file that can't be read or parsed is never silently discarded: before
it is replaced it is moved aside to "<name>.corrupt" and a warning is
logged.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Optional, Union

import structlog

from budget_tracker.services.storage.interface import (
    KeyValueStorageInterface,
    PersistenceWriteError,
    StorageError,
)


logger = structlog.get_logger(__name__)


class JsonFileKeyValueStorage(KeyValueStorageInterface):
    """
    Key-value storage backed by one JSON file.

    A missing file is an empty store.
    """

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _read_all(self) -> dict[str, str]:
        """Read the whole file. Missing file reads as empty."""
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as e:
            raise StorageError(f"Failed to read {self._path}: {e}")

        if not raw.strip():
            return {}

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageError(f"Storage file {self._path} is not valid JSON: {e}")

        if not isinstance(data, dict):
            raise StorageError(f"Storage file {self._path} does not hold a JSON object")

        return data

    def get(self, key: str) -> Optional[str]:
        value = self._read_all().get(key)
        if value is not None and not isinstance(value, str):
            raise StorageError(f"Value under {key!r} is not text")
        return value

    def _move_aside(self, reason: StorageError) -> None:
        """Keep an unreadable file as <name>.corrupt before it is replaced."""
        backup = self._path.with_name(f"{self._path.name}.corrupt")
        try:
            os.replace(self._path, backup)
        except OSError as e:
            raise PersistenceWriteError(
                f"Failed to move unreadable {self._path} aside: {e}"
            )
        logger.warning(
            "storage_file_moved_aside",
            path=str(self._path),
            backup=str(backup),
            reason=str(reason),
        )

    def set(self, key: str, value: str) -> None:
        try:
            data = self._read_all()
        except StorageError as e:
            self._move_aside(e)
            data = {}
        data[key] = value

        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self._path.name}.",
                suffix=".tmp",
                dir=self._path.parent,
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    json.dump(data, handle, ensure_ascii=False, indent=2)
                os.replace(tmp_name, self._path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except OSError as e:
            raise PersistenceWriteError(f"Failed to write {self._path}: {e}")
