"""
scanning

Scan decoder contract consumed by the draft flow.

Public API:
    - ScanSession: one-shot session completed or cancelled by a decoder
    - ScanResult: decoded payload + symbology identifier
    - ScanDecoder: protocol for decoders driving a session
    - SimulatedScanner: fixed-value decoder for non-interactive contexts
    - ZBarImageDecoder: still-image decoder (pyzbar)
"""

from codewallet.scanning.session import (
    ScanDecoder,
    ScanResult,
    ScanSession,
    ScanState,
    SimulatedScanner,
)
from codewallet.scanning.zbar_decoder import ZBarImageDecoder

__all__ = [
    "ScanDecoder",
    "ScanResult",
    "ScanSession",
    "ScanState",
    "SimulatedScanner",
    "ZBarImageDecoder",
]
