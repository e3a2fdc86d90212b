from typing import Any

import pytest

from codewallet.model.enums import (
    Symbology,
    backend_for,
    identifier_for,
    spec_for,
    supported_symbologies,
    symbology_for,
)


EXPECTED_IDENTIFIERS = {
    Symbology.CODE128: "org.iso.Code128",
    Symbology.QR: "org.iso.QRCode",
    Symbology.PDF417: "org.iso.PDF417",
    Symbology.AZTEC: "org.iso.Aztec",
    Symbology.EAN13: "org.gs1.EAN-13",
    Symbology.EAN8: "org.iso.EAN8",
}


def test_exactly_six_symbologies() -> None:
    assert len(list(Symbology)) == 6
    assert supported_symbologies() == list(Symbology)


@pytest.mark.parametrize("symbology", list(Symbology))
def test_identifier_round_trip(symbology: Symbology) -> None:
    assert symbology_for(identifier_for(symbology)) is symbology


@pytest.mark.parametrize("symbology,identifier", list(EXPECTED_IDENTIFIERS.items()))
def test_identifiers_are_bit_exact(symbology: Symbology, identifier: str) -> None:
    assert identifier_for(symbology) == identifier
    assert symbology.identifier == identifier
    assert spec_for(symbology).identifier == identifier


@pytest.mark.parametrize(
    "identifier",
    [
        "",
        "org.iso.qrcode",
        "ORG.ISO.QRCODE",
        " org.iso.QRCode",
        "org.iso.QRCode ",
        "org.iso.DataMatrix",
        "org.gs1.EAN-8",
        "QR",
        "qrcode",
    ],
)
def test_unknown_identifier_yields_none(identifier: str) -> None:
    assert symbology_for(identifier) is None


@pytest.mark.parametrize("value", [None, 42, b"org.iso.QRCode", ["org.iso.QRCode"]])
def test_non_string_identifier_yields_none(value: Any) -> None:
    assert symbology_for(value) is None


def test_backend_selectors_are_unique() -> None:
    backends = [backend_for(s) for s in Symbology]
    assert len(set(backends)) == len(backends)
    assert backend_for(Symbology.QR) == "qrcode"
    assert backend_for(Symbology.AZTEC) == "azteccode"
    assert Symbology.EAN13.backend == "ean13"


def test_matrix_flag() -> None:
    assert {s for s in Symbology if s.is_matrix} == {
        Symbology.QR,
        Symbology.PDF417,
        Symbology.AZTEC,
    }


def test_identifier_for_rejects_non_enum() -> None:
    with pytest.raises(TypeError):
        identifier_for("org.iso.QRCode")  # type: ignore[arg-type]


def test_localized_names() -> None:
    assert Symbology.QR.localized_name("ru") == "QR код"
    assert Symbology.QR.localized_name("en") == "QR code"
    assert Symbology.EAN13.localized_name("en") == "EAN-13"


def test_symbology_is_str_enum() -> None:
    assert Symbology("org.iso.Aztec") is Symbology.AZTEC
    assert Symbology.CODE128 == "org.iso.Code128"
