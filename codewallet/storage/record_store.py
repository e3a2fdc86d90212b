"""RU: Хранилище записей штрихкодов с сортировкой по значению и push-уведомлениями.

EN: Barcode record store. The store exclusively owns the persisted collection;
callers read it through sorted snapshots or an auto-refreshing RecordListView.

Every mutation is one whole-collection write to the backend. The in-memory
state is replaced only after the backend write succeeds, so a failed
create/delete leaves both the store and the caller's draft untouched.
"""

from __future__ import annotations

import logging
import threading
from typing import (
    Callable,
    Dict,
    Iterable,
    Iterator,
    List,
    Optional,
    Union,
    overload,
)

from codewallet.exceptions import PersistenceError, StorageReadError
from codewallet.model.draft import DraftRecord
from codewallet.model.record import BarcodeRecord
from codewallet.storage.backends import RecordMap, StorageBackend

logger = logging.getLogger(__name__)

Listener = Callable[[List[BarcodeRecord]], None]


def _sorted(records: Iterable[BarcodeRecord]) -> List[BarcodeRecord]:
    return sorted(records, key=BarcodeRecord.sort_key)


class RecordStore:
    """
    Create, list and delete barcode records.

    Args:
        backend: Persistence backend (InMemoryBackend, JsonFileBackend, ...).

    Raises:
        StorageReadError: If the backend content cannot be loaded.

    Example:
        >>> store = RecordStore(InMemoryBackend())
        >>> rid = store.create("Gate 12", "012345678905", "org.gs1.EAN-13")
        >>> store.get(rid).name
        'Gate 12'
    """

    def __init__(self, backend: StorageBackend) -> None:
        self._backend = backend
        self._lock = threading.RLock()
        self._listeners: List[Listener] = []
        self._records: Dict[str, BarcodeRecord] = self._load()
        logger.info("Record store opened with %d record(s)", len(self._records))

    @property
    def backend(self) -> StorageBackend:
        return self._backend

    # --- reading

    def list(self) -> List[BarcodeRecord]:
        """Snapshot of all records, ascending by payload."""
        with self._lock:
            return _sorted(self._records.values())

    def get(self, record_id: str) -> Optional[BarcodeRecord]:
        with self._lock:
            return self._records.get(record_id)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def __contains__(self, record_id: object) -> bool:
        with self._lock:
            return record_id in self._records

    # --- writing

    @overload
    def create(self, name: DraftRecord) -> str: ...

    @overload
    def create(
        self, name: str, payload: str = "", symbology_id: Optional[str] = None
    ) -> str: ...

    def create(
        self,
        name: Union[str, DraftRecord],
        payload: str = "",
        symbology_id: Optional[str] = None,
    ) -> str:
        """
        Persist a new record and return its id.

        Accepts either the three fields or a complete DraftRecord.

        Raises:
            PersistenceError: If the backend write fails. Nothing is changed.
        """
        if isinstance(name, DraftRecord):
            draft = name
            name, payload, symbology_id = draft.name, draft.payload, draft.symbology_id

        record = BarcodeRecord(name=name or "", payload=payload or "", symbology_id=symbology_id)
        if not record.payload:
            logger.warning("Saving record %s with an empty payload", record.id)
        if symbology_id is not None and record.symbology is None:
            logger.warning("Saving record %s with unknown symbology %r", record.id, symbology_id)

        with self._lock:
            updated = dict(self._records)
            updated[record.id] = record
            self._commit(updated)
        logger.info("Record %s created (type=%s)", record.id, symbology_id)
        self._notify()
        return record.id

    def delete(self, ids: Iterable[str]) -> int:
        """
        Remove every record whose id is in ``ids`` in one write.

        Unknown ids are ignored; when nothing matches no write happens.

        Returns:
            Number of records removed.

        Raises:
            PersistenceError: If the backend write fails. Nothing is changed.
        """
        wanted = set(ids)
        with self._lock:
            matched = wanted & self._records.keys()
            if not matched:
                logger.debug("Delete: none of %d id(s) found", len(wanted))
                return 0
            updated = {rid: rec for rid, rec in self._records.items() if rid not in matched}
            try:
                self._commit(updated)
            except PersistenceError:
                logger.error("Delete of %d record(s) failed; store unchanged", len(matched))
                raise
        logger.info("Deleted %d record(s)", len(matched))
        self._notify()
        return len(matched)

    def delete_at(self, offsets: Iterable[int]) -> int:
        """Delete by positions in the current sorted listing (swipe-to-delete)."""
        with self._lock:
            listing = self.list()
            ids = []
            for offset in offsets:
                if not 0 <= offset < len(listing):
                    raise IndexError(f"Record offset {offset} out of range")
                ids.append(listing[offset].id)
            return self.delete(ids)

    def reload(self) -> None:
        """Re-read the backend and notify subscribers."""
        with self._lock:
            self._records = self._load()
        self._notify()

    # --- change notification

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register ``listener`` for the sorted listing after every committed change.

        Returns:
            A callable that removes the listener.
        """
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        with self._lock:
            listeners = list(self._listeners)
            snapshot = self.list()
        for listener in listeners:
            try:
                listener(list(snapshot))
            except Exception:
                logger.exception("Record store listener %r failed", listener)

    # --- internals

    def _load(self) -> Dict[str, BarcodeRecord]:
        raw = self._backend.read_all()
        records: Dict[str, BarcodeRecord] = {}
        for key, data in raw.items():
            try:
                record = BarcodeRecord.from_dict({**data, "id": key})
            except (TypeError, ValueError) as exc:
                raise StorageReadError(f"Malformed record {key!r}") from exc
            records[record.id] = record
        return records

    def _commit(self, records: Dict[str, BarcodeRecord]) -> None:
        payload: RecordMap = {}
        for rid, record in records.items():
            data = record.to_dict()
            data.pop("schema_version", None)
            payload[rid] = data
        self._backend.write_all(payload)
        self._records = records


class RecordListView:
    """
    Read-only view over a RecordStore that refreshes itself on every change.

    Args:
        store: The store to observe.
        on_change: Optional callback invoked after each refresh.

    Example:
        >>> view = RecordListView(store)
        >>> store.create("Locker", "A100", "org.iso.Code128")
        >>> [r.payload for r in view]
        ['A100']
        >>> view.close()
    """

    def __init__(
        self,
        store: RecordStore,
        on_change: Optional[Listener] = None,
    ) -> None:
        self._store = store
        self._on_change = on_change
        self._records: List[BarcodeRecord] = store.list()
        self._unsubscribe: Optional[Callable[[], None]] = store.subscribe(self._refresh)

    def _refresh(self, records: List[BarcodeRecord]) -> None:
        self._records = records
        if self._on_change is not None:
            self._on_change(list(records))

    @property
    def records(self) -> List[BarcodeRecord]:
        return list(self._records)

    @property
    def closed(self) -> bool:
        return self._unsubscribe is None

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[BarcodeRecord]:
        return iter(list(self._records))

    def __getitem__(self, index: int) -> BarcodeRecord:
        return self._records[index]

    def __enter__(self) -> "RecordListView":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


__all__ = ["RecordStore", "RecordListView"]
