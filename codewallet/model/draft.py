"""
RU: Черновик записи и конечный автомат «новая запись»: имя -> сканирование -> сохранение/отмена.

EN: Draft record value type and the new-record flow state machine.

States::

    IDLE -> EDITING -> SCANNING -> CAPTURED -> SAVED -> IDLE
                ^          |           |
                +-cancel---+           +-> DISCARDED -> IDLE

- The name stays editable in EDITING and CAPTURED.
- A captured payload cannot be re-scanned; the flow must be discarded first.
- The draft is cleared only after the store confirms the write.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, replace
from enum import Enum
from typing import TYPE_CHECKING, List, Optional, Protocol

from codewallet.exceptions import InvalidTransitionError
from codewallet.scanning.session import ScanDecoder, ScanResult, ScanSession

if TYPE_CHECKING:
    from codewallet.model.enums import Symbology

logger = logging.getLogger(__name__)

__all__ = ["DraftRecord", "DraftState", "NewRecordFlow", "RecordCreator"]


@dataclass(frozen=True)
class DraftRecord:
    """Not-yet-persisted name/payload/symbology triple."""

    name: str = ""
    payload: str = ""
    symbology_id: Optional[str] = None

    def with_name(self, name: str) -> "DraftRecord":
        return replace(self, name=name or "")

    def with_capture(self, payload: str, symbology_id: Optional[str]) -> "DraftRecord":
        return replace(self, payload=payload, symbology_id=symbology_id)

    def without_capture(self) -> "DraftRecord":
        return replace(self, payload="", symbology_id=None)

    def cleared(self) -> "DraftRecord":
        return DraftRecord()

    @property
    def symbology(self) -> Optional["Symbology"]:
        from codewallet.model.enums import symbology_for

        return symbology_for(self.symbology_id)

    @property
    def has_capture(self) -> bool:
        return bool(self.payload)


class DraftState(str, Enum):
    IDLE = "idle"
    EDITING = "editing"
    SCANNING = "scanning"
    CAPTURED = "captured"
    SAVED = "saved"
    DISCARDED = "discarded"


class RecordCreator(Protocol):
    def create(self, name: DraftRecord) -> str: ...


class NewRecordFlow:
    """
    Drives one "new barcode" sheet.

    Example:
        >>> flow = NewRecordFlow()
        >>> flow.begin()
        >>> flow.set_name("Gym")
        >>> flow.start_scan(SimulatedScanner("A100"))
        >>> flow.state
        <DraftState.CAPTURED: 'captured'>
        >>> record_id = flow.save(store)
        >>> flow.state
        <DraftState.IDLE: 'idle'>
    """

    def __init__(self) -> None:
        self._state = DraftState.IDLE
        self._draft = DraftRecord()
        self._session: Optional[ScanSession] = None
        # scan callbacks may arrive on the capture pipeline's thread
        self._lock = threading.RLock()
        self.history: List[DraftState] = [DraftState.IDLE]
        self.last_saved_id: Optional[str] = None

    @property
    def state(self) -> DraftState:
        return self._state

    @property
    def draft(self) -> DraftRecord:
        return self._draft

    @property
    def session(self) -> Optional[ScanSession]:
        return self._session

    def _require(self, action: str, *allowed: DraftState) -> None:
        if self._state not in allowed:
            raise InvalidTransitionError(
                f"Cannot {action} while {self._state.value} "
                f"(allowed: {', '.join(s.value for s in allowed)})"
            )

    def _enter(self, state: DraftState) -> None:
        logger.debug("Draft flow: %s -> %s", self._state.value, state.value)
        self._state = state
        self.history.append(state)

    def _reset(self) -> None:
        self._draft = self._draft.cleared()
        self._session = None
        self._enter(DraftState.IDLE)

    # --- transitions

    def begin(self) -> None:
        with self._lock:
            self._require("begin", DraftState.IDLE)
            self._enter(DraftState.EDITING)

    def set_name(self, name: str) -> None:
        with self._lock:
            self._require("edit the name", DraftState.EDITING, DraftState.CAPTURED)
            self._draft = self._draft.with_name(name)

    def start_scan(self, decoder: Optional[ScanDecoder] = None) -> ScanSession:
        """
        Open a scan session bound to this flow.

        When ``decoder`` is given it is started right away; otherwise the
        caller hands the returned session to its capture pipeline. The
        session may be completed from any thread.
        """
        with self._lock:
            self._require("start a scan", DraftState.EDITING)
            session = ScanSession(
                on_result=lambda result: self._on_scan_result(session, result),
                on_cancel=lambda: self._on_scan_cancel(session),
            )
            self._session = session
            self._enter(DraftState.SCANNING)
        if decoder is not None:
            decoder.start(session)
        return session

    def _on_scan_result(self, session: ScanSession, result: ScanResult) -> None:
        with self._lock:
            if self._state is not DraftState.SCANNING or session is not self._session:
                logger.warning("Scan result arrived while %s; ignored", self._state.value)
                return
            self._draft = self._draft.with_capture(result.payload, result.symbology_id)
            self._enter(DraftState.CAPTURED)

    def _on_scan_cancel(self, session: ScanSession) -> None:
        with self._lock:
            if self._state is not DraftState.SCANNING or session is not self._session:
                return
            self._draft = self._draft.without_capture()
            self._session = None
            self._enter(DraftState.EDITING)

    def save(self, store: RecordCreator) -> str:
        """
        Persist the draft and return the new record id.

        On failure the state and the draft are kept so the user can retry.

        Raises:
            PersistenceError: Propagated from the store.
        """
        with self._lock:
            self._require("save", DraftState.EDITING, DraftState.CAPTURED)
            if not self._draft.payload:
                logger.warning("Saving a draft without a scanned payload")
            record_id = store.create(self._draft)
            self.last_saved_id = record_id
            self._enter(DraftState.SAVED)
            self._reset()
            return record_id

    def discard(self) -> None:
        with self._lock:
            self._require(
                "discard", DraftState.EDITING, DraftState.SCANNING, DraftState.CAPTURED
            )
            # a pending session may still deliver later; its callbacks ignore stale sessions
            self._enter(DraftState.DISCARDED)
            self._reset()
