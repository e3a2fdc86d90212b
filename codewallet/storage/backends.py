# storage/backends.py
# -*- coding: utf-8 -*-
"""
RU: Бэкенды хранения записей: в памяти и JSON-файл с атомарной записью.

EN: Record storage backends: in-memory and a JSON file with atomic writes.

Design:
- A backend persists the whole collection at once: ``read_all()`` / ``write_all()``.
  One ``write_all`` call is one transaction; the store never writes partial state.
- On-disk format: {"schema_version": "1.0", "records": {"<id>": {record fields}}}.
- Atomic writes via a temp file in the target directory + Path.replace,
  guarded by a re-entrant lock.
- Read failures raise StorageReadError, write failures PersistenceError.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, Final, Optional, Protocol, Union, runtime_checkable

from codewallet.exceptions import PersistenceError, StorageReadError

_LOGGER: Final = logging.getLogger(__name__)

SCHEMA_VERSION: Final[str] = "1.0"

# id -> record dict (BarcodeRecord.to_dict() without schema_version)
RecordMap = Dict[str, Dict[str, Any]]


@runtime_checkable
class StorageBackend(Protocol):
    """Whole-collection persistence contract used by RecordStore."""

    def read_all(self) -> RecordMap: ...

    def write_all(self, records: RecordMap) -> None: ...


class InMemoryBackend:
    """
    Dict-backed storage for tests and previews.

    Args:
        initial: Optional starting records (copied).
    """

    def __init__(self, initial: Optional[RecordMap] = None) -> None:
        self._records: RecordMap = deepcopy(initial) if initial else {}
        self._lock = threading.RLock()
        self.write_count = 0

    def read_all(self) -> RecordMap:
        with self._lock:
            return deepcopy(self._records)

    def write_all(self, records: RecordMap) -> None:
        with self._lock:
            self._records = deepcopy(records)
            self.write_count += 1


class JsonFileBackend:
    """
    JSON file storage.

    The file is created on the first write. A missing file reads as an empty
    collection.

    Args:
        filepath: Target JSON file.

    Raises:
        PersistenceError: On invalid initialization parameters.
    """

    __slots__ = ("_filepath", "_lock")

    def __init__(self, filepath: Union[str, Path]) -> None:
        if not filepath:
            raise PersistenceError("Invalid storage path")
        self._filepath: Path = Path(filepath).resolve()
        self._lock = threading.RLock()

    @property
    def path(self) -> Path:
        return self._filepath

    def read_all(self) -> RecordMap:
        """
        Read every record.

        Raises:
            StorageReadError: If the file cannot be read or is not a valid store.
        """
        with self._lock:
            if not self._filepath.exists():
                return {}

            try:
                with self._filepath.open("r", encoding="utf-8") as f:
                    content = f.read()
            except Exception as exc:
                _LOGGER.error("Store read error: %s", exc.__class__.__name__)
                raise StorageReadError("Failed to read store file") from exc

            try:
                obj = json.loads(content)
                if not isinstance(obj, dict):
                    raise ValueError("Root must be a JSON object")
                version = obj.get("schema_version")
                if version is not None and version != SCHEMA_VERSION:
                    _LOGGER.warning(
                        "Store schema version %s differs from %s", version, SCHEMA_VERSION
                    )
                records = obj.get("records", {})
                if not isinstance(records, dict):
                    raise ValueError("'records' must be a JSON object")

                result: RecordMap = {}
                for k, v in records.items():
                    if not isinstance(k, str) or not isinstance(v, dict):
                        raise ValueError("Invalid record entry")
                    result[k] = v
                return result
            except Exception as exc:
                _LOGGER.error("Store parse error: %s", exc.__class__.__name__)
                raise StorageReadError("Invalid store format") from exc

    def write_all(self, records: RecordMap) -> None:
        """
        Replace the stored collection.

        Raises:
            PersistenceError: When the write fails; the previous file is left intact.
        """
        with self._lock:
            try:
                self._atomically_write({"schema_version": SCHEMA_VERSION, "records": records})
            except Exception as exc:
                _LOGGER.error("Store write failed: %s", exc.__class__.__name__)
                raise PersistenceError("Write operation failed") from exc
            _LOGGER.debug("Store written: %d record(s) to %s", len(records), self._filepath)

    def _atomically_write(self, document: Dict[str, Any]) -> None:
        """Write JSON to a temp file and atomically replace the target file."""
        data = json.dumps(document, ensure_ascii=False, sort_keys=True, indent=2)

        self._filepath.parent.mkdir(parents=True, exist_ok=True)

        fd: Optional[int] = None
        tmp_path: Optional[str] = None
        try:
            fd, tmp_path = tempfile.mkstemp(
                prefix=".codewallet-",
                suffix=".tmp",
                dir=str(self._filepath.parent),
                text=True,
            )
            with os.fdopen(fd, "w", encoding="utf-8") as tmp_f:
                fd = None  # fd now managed by file object
                tmp_f.write(data)
                tmp_f.flush()
                os.fsync(tmp_f.fileno())

            Path(tmp_path).replace(self._filepath)
        except Exception:
            if fd is not None:
                try:
                    os.close(fd)
                except OSError:
                    pass
            if tmp_path and Path(tmp_path).exists():
                try:
                    Path(tmp_path).unlink()
                except OSError:
                    pass
            raise


__all__ = [
    "StorageBackend",
    "InMemoryBackend",
    "JsonFileBackend",
    "RecordMap",
    "SCHEMA_VERSION",
]
