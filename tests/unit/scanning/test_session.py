import threading
from unittest.mock import Mock

from codewallet.model.enums import Symbology
from codewallet.scanning import ScanDecoder, ScanResult, ScanSession, ScanState, SimulatedScanner


def test_complete_once() -> None:
    on_result = Mock()
    on_cancel = Mock()
    session = ScanSession(on_result=on_result, on_cancel=on_cancel)
    assert session.is_pending

    assert session.complete("A100", "org.iso.Code128") is True
    assert session.state is ScanState.COMPLETED
    assert session.result == ScanResult("A100", "org.iso.Code128")
    on_result.assert_called_once_with(ScanResult("A100", "org.iso.Code128"))
    on_cancel.assert_not_called()


def test_duplicate_deliveries_ignored() -> None:
    on_result = Mock()
    session = ScanSession(on_result=on_result)
    session.complete("FIRST", "org.iso.QRCode")
    assert session.complete("SECOND", "org.iso.QRCode") is False
    assert session.cancel() is False
    assert session.result is not None and session.result.payload == "FIRST"
    assert on_result.call_count == 1


def test_cancel() -> None:
    on_cancel = Mock()
    session = ScanSession(on_cancel=on_cancel)
    assert session.cancel() is True
    assert session.state is ScanState.CANCELLED
    assert session.result is None
    assert session.complete("LATE", None) is False
    on_cancel.assert_called_once_with()


def test_result_symbology_lookup() -> None:
    assert ScanResult("x", "org.iso.PDF417").symbology is Symbology.PDF417
    assert ScanResult("x", "org.iso.DataMatrix").symbology is None
    assert ScanResult("x", None).symbology is None


def test_only_one_thread_wins() -> None:
    on_result = Mock()
    session = ScanSession(on_result=on_result)
    threads = [
        threading.Thread(target=session.complete, args=(f"P{i}", "org.iso.Code128"))
        for i in range(8)
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert on_result.call_count == 1
    assert session.state is ScanState.COMPLETED


def test_simulated_scanner() -> None:
    scanner = SimulatedScanner("012345678905", Symbology.EAN13)
    assert isinstance(scanner, ScanDecoder)
    session = ScanSession()
    scanner.start(session)
    assert session.result == ScanResult("012345678905", "org.gs1.EAN-13")


def test_simulated_scanner_without_symbology() -> None:
    session = ScanSession()
    SimulatedScanner("X", symbology=None).start(session)
    assert session.result == ScanResult("X", None)


def test_simulated_cancel() -> None:
    session = ScanSession()
    SimulatedScanner("A100", cancel=True).start(session)
    assert session.state is ScanState.CANCELLED
