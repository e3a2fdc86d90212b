"""
storage

Record persistence.

Public API:
    - RecordStore: create/list/delete barcode records with change notification
    - RecordListView: auto-refreshing read-only listing
    - StorageBackend: whole-collection persistence protocol
    - InMemoryBackend, JsonFileBackend: backend implementations
"""

from codewallet.storage.backends import (
    InMemoryBackend,
    JsonFileBackend,
    StorageBackend,
)
from codewallet.storage.record_store import RecordListView, RecordStore

__all__ = [
    "InMemoryBackend",
    "JsonFileBackend",
    "StorageBackend",
    "RecordListView",
    "RecordStore",
]
