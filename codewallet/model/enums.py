"""
model/enums.py

RU: Реестр поддерживаемых символик штрихкодов и их стабильных идентификаторов.

EN: Registry of the supported barcode symbologies.

Each symbology has:
- a stable identifier string, persisted next to the payload and kept bit-exact
  so that existing stored data stays readable;
- a generator backend selector used by codewallet.barcodegen;
- display names.

Adding a symbology is one enum member plus one _REGISTRY entry.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Final, List, Literal, Mapping, Optional

_logger: Final[logging.Logger] = logging.getLogger(__name__)


class Symbology(str, Enum):
    CODE128 = "org.iso.Code128"
    QR = "org.iso.QRCode"
    PDF417 = "org.iso.PDF417"
    AZTEC = "org.iso.Aztec"
    EAN13 = "org.gs1.EAN-13"
    EAN8 = "org.iso.EAN8"

    @property
    def identifier(self) -> str:
        return self.value

    @property
    def backend(self) -> str:
        return _REGISTRY[self].backend

    @property
    def is_matrix(self) -> bool:
        """True for 2D symbologies (QR, PDF417, Aztec)."""
        return _REGISTRY[self].is_matrix

    def localized_name(self, lang: Literal["ru", "en"] = "ru") -> str:
        spec = _REGISTRY[self]
        return spec.name_ru if lang == "ru" else spec.name_en


@dataclass(frozen=True)
class SymbologySpec:
    """Lookup-table row for one symbology."""

    identifier: str
    backend: str
    is_matrix: bool
    name_en: str
    name_ru: str


_REGISTRY: Final[Mapping[Symbology, SymbologySpec]] = {
    Symbology.CODE128: SymbologySpec(
        "org.iso.Code128", "code128", False, "Code 128", "Code 128"
    ),
    Symbology.QR: SymbologySpec("org.iso.QRCode", "qrcode", True, "QR code", "QR код"),
    Symbology.PDF417: SymbologySpec("org.iso.PDF417", "pdf417", True, "PDF417", "PDF417"),
    Symbology.AZTEC: SymbologySpec(
        "org.iso.Aztec", "azteccode", True, "Aztec", "Ацтекский код"
    ),
    Symbology.EAN13: SymbologySpec("org.gs1.EAN-13", "ean13", False, "EAN-13", "EAN-13"),
    Symbology.EAN8: SymbologySpec("org.iso.EAN8", "ean8", False, "EAN-8", "EAN-8"),
}

_BY_IDENTIFIER: Final[Mapping[str, Symbology]] = {
    spec.identifier: symbology for symbology, spec in _REGISTRY.items()
}


def identifier_for(symbology: Symbology) -> str:
    """Stable persistence identifier for a symbology."""
    if not isinstance(symbology, Symbology):
        raise TypeError(f"symbology must be Symbology enum, got {type(symbology)!r}")
    return _REGISTRY[symbology].identifier


def symbology_for(identifier: Optional[str]) -> Optional[Symbology]:
    """
    Parse a stored identifier back to a Symbology.

    The match is case-exact. Unknown, empty or non-string input yields None
    and is never an error.

    Examples:
        >>> symbology_for("org.iso.QRCode")
        <Symbology.QR: 'org.iso.QRCode'>
        >>> symbology_for("org.iso.qrcode") is None
        True
    """
    if not isinstance(identifier, str):
        return None
    symbology = _BY_IDENTIFIER.get(identifier)
    if symbology is None and identifier:
        _logger.debug("Unknown symbology identifier %r", identifier)
    return symbology


def backend_for(symbology: Symbology) -> str:
    """Generator backend selector (one-to-one with the symbology)."""
    return _REGISTRY[symbology].backend


def spec_for(symbology: Symbology) -> SymbologySpec:
    return _REGISTRY[symbology]


def supported_symbologies() -> List[Symbology]:
    return list(Symbology)


__all__ = [
    "Symbology",
    "SymbologySpec",
    "identifier_for",
    "symbology_for",
    "backend_for",
    "spec_for",
    "supported_symbologies",
]
