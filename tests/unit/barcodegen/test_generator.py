from io import BytesIO
from unittest.mock import patch

import barcode
import pytest
import qrcode
from PIL import Image
from qrcode.constants import ERROR_CORRECT_M

from codewallet.barcodegen.generator import (
    LINEAR_BAR_HEIGHT,
    LINEAR_QUIET_ZONE,
    BarcodeImageGenerator,
    RenderResult,
)
from codewallet.barcodegen.placeholder import is_placeholder
from codewallet.config import RenderConfig
from codewallet.exceptions import GenerationError
from codewallet.model.enums import Symbology
from codewallet.model.record import BarcodeRecord


@pytest.fixture
def gen() -> BarcodeImageGenerator:
    return BarcodeImageGenerator()


@pytest.mark.parametrize(
    "symbology,payload",
    [
        (Symbology.CODE128, "A100"),
        (Symbology.QR, "https://example.com/ticket/42"),
        (Symbology.PDF417, "PDF417 boarding pass"),
        (Symbology.EAN13, "012345678905"),
        (Symbology.EAN8, "1234567"),
    ],
)
def test_render_supported(gen: BarcodeImageGenerator, symbology: Symbology, payload: str) -> None:
    result = gen.render(payload, symbology)
    assert isinstance(result, RenderResult)
    assert result.available, result.error
    assert result.error is None
    assert result.symbology is symbology
    assert result.image.mode == "RGB"
    assert result.image.width > 0 and result.image.height > 0


def test_qr_size_reflects_upscale_factor(gen: BarcodeImageGenerator) -> None:
    base = gen.render_base("123", Symbology.QR)
    result = gen.render("123", Symbology.QR)
    assert result.available
    assert result.scale == 10
    assert result.size == (base.width * 10, base.height * 10)


def test_configured_scale_is_applied() -> None:
    gen3 = BarcodeImageGenerator(RenderConfig(upscale_factor=3))
    base = gen3.render_base("A100", Symbology.CODE128)
    result = gen3.render("A100", Symbology.CODE128)
    assert result.scale == 3
    assert result.size == (base.width * 3, base.height * 3)


def test_qr_base_is_one_pixel_per_module(gen: BarcodeImageGenerator) -> None:
    # "123" fits QR version 1: 21 modules + 2 * 4 border
    base = gen.render_base("123", Symbology.QR)
    assert base.size == (29, 29)


@pytest.mark.parametrize(
    "symbology,payload",
    [
        (Symbology.CODE128, "A100"),
        (Symbology.EAN13, "012345678905"),
        (Symbology.EAN8, "1234567"),
    ],
)
def test_linear_base_is_one_pixel_per_module(
    gen: BarcodeImageGenerator, symbology: Symbology, payload: str
) -> None:
    modules = "".join(barcode.get_barcode_class(symbology.backend)(payload).build())
    base = gen.render_base(payload, symbology)
    assert base.size == (len(modules) + 2 * LINEAR_QUIET_ZONE, LINEAR_BAR_HEIGHT)

    row = [base.getpixel((x, 0)) for x in range(base.width)]
    painted = "".join("1" if px == (0, 0, 0) else "0" for px in row)
    quiet = "0" * LINEAR_QUIET_ZONE
    assert painted == quiet + modules + quiet


def test_ean13_record_renders_bars(gen: BarcodeImageGenerator) -> None:
    rec = BarcodeRecord(name="Gate 12", payload="012345678905", symbology_id="org.gs1.EAN-13")
    result = gen.render_record(rec)
    assert result.available, result.error
    assert not is_placeholder(result.image)
    base = gen.render_base("012345678905", Symbology.EAN13)
    assert result.size == (base.width * 10, base.height * 10)


def test_qr_uses_error_correction_m(gen: BarcodeImageGenerator) -> None:
    with patch.object(qrcode, "QRCode", wraps=qrcode.QRCode) as spy:
        result = gen.render("123", Symbology.QR)
    assert result.available
    assert spy.call_args.kwargs["error_correction"] == ERROR_CORRECT_M


def test_upscaled_image_keeps_hard_edges(gen: BarcodeImageGenerator) -> None:
    img = gen.render_image("123", Symbology.QR)
    colors = {c for _, c in img.getcolors(maxcolors=16) or []}
    assert colors <= {(0, 0, 0), (255, 255, 255)}


@pytest.mark.parametrize("symbology", list(Symbology))
@pytest.mark.parametrize("payload", ["", "Grüße", "日本語", "naïve"])
def test_invalid_payload_gives_placeholder(
    gen: BarcodeImageGenerator, symbology: Symbology, payload: str
) -> None:
    result = gen.render(payload, symbology)
    assert not result.available
    assert result.error
    assert is_placeholder(result.image)


def test_non_ascii_reports_encoding_failure(gen: BarcodeImageGenerator) -> None:
    result = gen.render("Grüße", Symbology.CODE128)
    assert result.error is not None and "ASCII" in result.error
    with pytest.raises(GenerationError, match="ASCII"):
        gen.render_base("Grüße", Symbology.CODE128)


def test_render_base_rejects_empty(gen: BarcodeImageGenerator) -> None:
    with pytest.raises(GenerationError, match="non-empty"):
        gen.render_base("", Symbology.QR)


def test_invalid_data_for_symbology_gives_placeholder(gen: BarcodeImageGenerator) -> None:
    # EAN-13 needs digits only
    result = gen.render("ABCDEFGHIJKL", Symbology.EAN13)
    assert not result.available
    assert is_placeholder(result.image)


@pytest.mark.parametrize("symbology", [None, "org.iso.QRCode", 3])
def test_non_symbology_gives_placeholder(gen: BarcodeImageGenerator, symbology: object) -> None:
    result = gen.render("123", symbology)  # type: ignore[arg-type]
    assert not result.available
    assert result.symbology is None
    assert is_placeholder(result.image)


def test_backend_exception_is_contained(gen: BarcodeImageGenerator) -> None:
    with patch("codewallet.barcodegen.generator.pdf417gen.encode", side_effect=RuntimeError("boom")):
        result = gen.render("data", Symbology.PDF417)
    assert not result.available
    assert "boom" in (result.error or "")


def test_rasterization_failure_is_contained(gen: BarcodeImageGenerator) -> None:
    with patch.object(Image.Image, "resize", side_effect=Exception("fail")):
        result = gen.render("123", Symbology.QR)
    assert not result.available
    assert "rasterization" in (result.error or "")
    assert is_placeholder(result.image)


def test_aztec_never_raises(gen: BarcodeImageGenerator) -> None:
    # needs Ghostscript at runtime; without it the placeholder comes back
    result = gen.render("AZTEC-123", Symbology.AZTEC)
    assert isinstance(result.image, Image.Image)
    if not result.available:
        assert is_placeholder(result.image)


def test_aztec_without_treepoem(gen: BarcodeImageGenerator, monkeypatch: pytest.MonkeyPatch) -> None:
    import sys

    monkeypatch.setitem(sys.modules, "treepoem", None)
    result = gen.render("AZTEC-123", Symbology.AZTEC)
    assert not result.available
    assert "treepoem" in (result.error or "")


def test_render_record(gen: BarcodeImageGenerator) -> None:
    rec = BarcodeRecord(name="Gate 12", payload="012345678905", symbology_id="org.gs1.EAN-13")
    assert gen.render_record(rec).available


@pytest.mark.parametrize("symbology_id", [None, "", "org.iso.DataMatrix", "org.iso.qrcode"])
def test_render_record_unknown_symbology(gen: BarcodeImageGenerator, symbology_id: object) -> None:
    rec = BarcodeRecord(name="legacy", payload="123", symbology_id=symbology_id)  # type: ignore[arg-type]
    result = gen.render_record(rec)
    assert not result.available
    assert result.error == "unknown symbology"


def test_render_bytes_png(gen: BarcodeImageGenerator) -> None:
    data = gen.render_bytes("123", Symbology.QR)
    assert data.startswith(b"\x89PNG")
    img = Image.open(BytesIO(data))
    assert img.size == gen.render_image("123", Symbology.QR).size


def test_placeholder_is_fresh_copy(gen: BarcodeImageGenerator) -> None:
    a = gen.render("", Symbology.QR).image
    a.putpixel((0, 0), (1, 2, 3))
    b = gen.render("", Symbology.QR).image
    assert is_placeholder(b)


def test_supported_symbologies() -> None:
    assert set(BarcodeImageGenerator.supported_symbologies()) == set(Symbology)


def test_render_is_not_cached(gen: BarcodeImageGenerator) -> None:
    a = gen.render_image("123", Symbology.QR)
    b = gen.render_image("123", Symbology.QR)
    assert a is not b
    assert a.tobytes() == b.tobytes()


def test_aztec_failure_logged_once_as_warning(
    gen: BarcodeImageGenerator,
    monkeypatch: pytest.MonkeyPatch,
    caplog: pytest.LogCaptureFixture,
) -> None:
    import logging
    import sys
    from types import SimpleNamespace

    def no_ghostscript(**kwargs: object) -> None:
        raise FileNotFoundError("gs")

    monkeypatch.setitem(sys.modules, "treepoem", SimpleNamespace(generate_barcode=no_ghostscript))
    monkeypatch.setattr(logging.getLogger("codewallet"), "propagate", True)
    with caplog.at_level(logging.DEBUG, logger="codewallet.barcodegen.generator"):
        result = gen.render("AZTEC-123", Symbology.AZTEC)
    assert not result.available
    assert "Aztec generation failed" in (result.error or "")
    levels = [r.levelno for r in caplog.records if r.name == "codewallet.barcodegen.generator"]
    assert levels == [logging.WARNING]
