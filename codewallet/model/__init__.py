"""Domain model: symbology registry, stored records and the draft flow."""

from codewallet.model.enums import (
    Symbology,
    SymbologySpec,
    backend_for,
    identifier_for,
    spec_for,
    supported_symbologies,
    symbology_for,
)
from codewallet.model.record import BarcodeRecord
from codewallet.model.draft import DraftRecord, DraftState, NewRecordFlow

__all__ = [
    "Symbology",
    "SymbologySpec",
    "backend_for",
    "identifier_for",
    "spec_for",
    "supported_symbologies",
    "symbology_for",
    "BarcodeRecord",
    "DraftRecord",
    "DraftState",
    "NewRecordFlow",
]
