# -*- coding: utf-8 -*-
"""
RU: Контракт сканера: одноразовая сессия, которая получает ровно один результат или отмену.
EN: Scanner contract: a one-shot session that accepts exactly one result or one cancellation.

Decoding itself is done by an external capture pipeline (camera framework,
zbar, ...). The pipeline is handed a ScanSession and calls ``complete()`` or
``cancel()`` on it once, from whatever thread it runs on. There is no timeout:
a session may stay pending indefinitely.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Protocol, runtime_checkable

from codewallet.model.enums import Symbology, identifier_for, symbology_for

logger = logging.getLogger(__name__)

__all__ = [
    "ScanResult",
    "ScanState",
    "ScanSession",
    "ScanDecoder",
    "SimulatedScanner",
]


@dataclass(frozen=True)
class ScanResult:
    """Decoded payload plus the identifier of the detected symbology."""

    payload: str
    symbology_id: Optional[str]

    @property
    def symbology(self) -> Optional[Symbology]:
        return symbology_for(self.symbology_id)


class ScanState(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ScanSession:
    """
    One scan sheet: pending until the capture pipeline reports back once.

    Args:
        on_result: Called once with the ScanResult on success.
        on_cancel: Called once when the scan is dismissed without a result.

    Late or duplicate deliveries are ignored (logged at WARNING) so a
    pipeline that fires twice cannot overwrite the first capture.
    """

    def __init__(
        self,
        on_result: Optional[Callable[[ScanResult], None]] = None,
        on_cancel: Optional[Callable[[], None]] = None,
    ) -> None:
        self._on_result = on_result
        self._on_cancel = on_cancel
        self._state = ScanState.PENDING
        self._result: Optional[ScanResult] = None
        self._lock = threading.Lock()

    @property
    def state(self) -> ScanState:
        return self._state

    @property
    def result(self) -> Optional[ScanResult]:
        return self._result

    @property
    def is_pending(self) -> bool:
        return self._state is ScanState.PENDING

    def complete(self, payload: str, symbology_id: Optional[str]) -> bool:
        """Deliver the decoded value. Returns False if the session was already closed."""
        with self._lock:
            if self._state is not ScanState.PENDING:
                logger.warning("Scan result ignored: session already %s", self._state.value)
                return False
            self._result = ScanResult(payload=payload, symbology_id=symbology_id)
            self._state = ScanState.COMPLETED
        logger.info("Scan completed: type=%s, %d chars", symbology_id, len(payload))
        if self._on_result is not None:
            self._on_result(self._result)
        return True

    def cancel(self) -> bool:
        """Dismiss the scan without a result. Returns False if already closed."""
        with self._lock:
            if self._state is not ScanState.PENDING:
                logger.warning("Scan cancel ignored: session already %s", self._state.value)
                return False
            self._state = ScanState.CANCELLED
        logger.info("Scan cancelled")
        if self._on_cancel is not None:
            self._on_cancel()
        return True


@runtime_checkable
class ScanDecoder(Protocol):
    """Anything that can drive a ScanSession to completion or cancellation."""

    def start(self, session: ScanSession) -> None: ...


class SimulatedScanner:
    """
    Delivers a fixed value immediately.

    Used where no camera is available (tests, previews, simulators).

    Example:
        >>> scanner = SimulatedScanner("A100", Symbology.CODE128)
        >>> session = ScanSession()
        >>> scanner.start(session)
        >>> session.result.payload
        'A100'
    """

    name = "simulated"

    def __init__(
        self,
        payload: str,
        symbology: Optional[Symbology] = Symbology.CODE128,
        cancel: bool = False,
    ) -> None:
        self.payload = payload
        self.symbology_id = identifier_for(symbology) if symbology is not None else None
        self.cancel = cancel

    def start(self, session: ScanSession) -> None:
        if self.cancel:
            session.cancel()
        else:
            session.complete(self.payload, self.symbology_id)
