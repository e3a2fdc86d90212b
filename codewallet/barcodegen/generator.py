"""
RU: Генерация изображений штрихкодов для записей кошелька (Code128, EAN-13, EAN-8, QR, PDF417, Aztec).
EN: Barcode image generation for wallet records (Code128, EAN-13, EAN-8, QR, PDF417, Aztec).

Pipeline:
- payload -> ASCII bytes (non-ASCII is a generation failure)
- backend chosen by the registry selector of the symbology
- raw image at one pixel per module (linear codes: the python-barcode
  module string painted as bars)
- integer nearest-neighbour upscale (RenderConfig.upscale_factor)
- RGB rasterization

render() never raises: every failure is logged and answered with the
"unavailable" placeholder. Nothing is cached; each call renders again.

Requirements: Pillow, python-barcode, qrcode, pdf417gen, treepoem (Aztec, needs Ghostscript)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from io import BytesIO
from itertools import groupby
from typing import Callable, Dict, Final, List, Optional

import barcode as pybarcode
import pdf417gen
import qrcode
import qrcode.image.pil
from barcode.errors import BarcodeNotFoundError
from PIL import Image, ImageDraw
from qrcode.constants import (
    ERROR_CORRECT_H,
    ERROR_CORRECT_L,
    ERROR_CORRECT_M,
    ERROR_CORRECT_Q,
)

from codewallet.barcodegen.placeholder import unavailable_image
from codewallet.config import RenderConfig
from codewallet.exceptions import GenerationError
from codewallet.model.enums import Symbology, backend_for, symbology_for
from codewallet.model.record import BarcodeRecord

logger = logging.getLogger(__name__)

__all__ = [
    "BarcodeImageGenerator",
    "RenderResult",
    "LINEAR_QUIET_ZONE",
    "LINEAR_BAR_HEIGHT",
]

MAX_IMAGE_WIDTH: Final[int] = 10000
MAX_IMAGE_HEIGHT: Final[int] = 10000

# linear codes are painted from the module string: one pixel per module
LINEAR_QUIET_ZONE: Final[int] = 10  # modules on each side
LINEAR_BAR_HEIGHT: Final[int] = 50  # pixels

QR_BORDER: Final[int] = 4
PDF417_COLUMNS: Final[int] = 6
PDF417_SECURITY_LEVEL: Final[int] = 2

_QR_LEVELS: Final[Dict[str, int]] = {
    "L": ERROR_CORRECT_L,
    "M": ERROR_CORRECT_M,
    "Q": ERROR_CORRECT_Q,
    "H": ERROR_CORRECT_H,
}

UNKNOWN_SYMBOLOGY: Final[str] = "unknown symbology"


@dataclass(frozen=True)
class RenderResult:
    """
    Outcome of a render call.

    ``image`` is always a usable RGB image: the barcode when ``available``,
    otherwise the placeholder, with the failure described in ``error``.
    """

    image: Image.Image
    available: bool
    symbology: Optional[Symbology]
    scale: int
    error: Optional[str] = None

    @property
    def size(self) -> tuple[int, int]:
        return self.image.size


class BarcodeImageGenerator:
    """
    Render barcode images for the six wallet symbologies.

    Args:
        config: Rendering parameters; defaults to RenderConfig().

    Examples:
        >>> gen = BarcodeImageGenerator()
        >>> result = gen.render("123", Symbology.QR)
        >>> result.available, result.scale
        (True, 10)
        >>> gen.render("Grüße", Symbology.CODE128).available
        False
    """

    # backend selector -> method name
    _backends: Dict[str, str] = {
        "code128": "_render_linear",
        "ean13": "_render_linear",
        "ean8": "_render_linear",
        "qrcode": "_render_qr",
        "pdf417": "_render_pdf417",
        "azteccode": "_render_aztec",
    }

    def __init__(self, config: Optional[RenderConfig] = None) -> None:
        self.config = config or RenderConfig()

    # --- public API

    def render(self, payload: Optional[str], symbology: Optional[Symbology]) -> RenderResult:
        """Render ``payload``; never raises."""
        scale = self.config.upscale_factor
        if not isinstance(symbology, Symbology):
            logger.warning("No renderable symbology (%r); returning placeholder", symbology)
            return self._unavailable(None, UNKNOWN_SYMBOLOGY)
        try:
            base = self.render_base(payload, symbology)
            img = self._upscale(base, scale)
        except GenerationError as e:
            logger.warning("Barcode generation failed for %s: %s; returning placeholder", symbology.name, e)
            return self._unavailable(symbology, str(e))
        except Exception as e:
            logger.warning(
                "Barcode image generation failed: %s (%r); returning placeholder",
                symbology.name,
                e,
            )
            return self._unavailable(symbology, f"rasterization failed: {e}")
        logger.debug("Barcode rendered: %s %dx%d", symbology.name, img.width, img.height)
        return RenderResult(image=img, available=True, symbology=symbology, scale=scale)

    def render_image(self, payload: Optional[str], symbology: Optional[Symbology]) -> Image.Image:
        return self.render(payload, symbology).image

    def render_bytes(
        self,
        payload: Optional[str],
        symbology: Optional[Symbology],
        output_format: str = "PNG",
    ) -> bytes:
        img = self.render_image(payload, symbology)
        buf = BytesIO()
        img.save(buf, format=output_format.upper())
        buf.seek(0)
        logger.debug("Output rendered as %s (%d bytes)", output_format, buf.getbuffer().nbytes)
        return buf.read()

    def render_record(self, record: BarcodeRecord) -> RenderResult:
        """Render a stored record; an unknown symbology_id gives the placeholder."""
        symbology = symbology_for(record.symbology_id)
        if symbology is None:
            logger.info(
                "Record %s has no renderable symbology (%r)", record.id, record.symbology_id
            )
            return self._unavailable(None, UNKNOWN_SYMBOLOGY)
        return self.render(record.payload, symbology)

    def render_base(self, payload: Optional[str], symbology: Symbology) -> Image.Image:
        """
        Raw image at one pixel per module, before upscaling.

        Raises:
            GenerationError: On empty/non-ASCII payload or backend failure.
        """
        data = self._ascii_payload(payload)
        backend = backend_for(symbology)
        method_name = self._backends.get(backend)
        if method_name is None:
            raise GenerationError(f"No generator backend {backend!r} for {symbology.name}")
        render_fn: Callable[[str, str], Image.Image] = getattr(self, method_name)
        img = render_fn(backend, data)
        if not isinstance(img, Image.Image):
            raise GenerationError("Backend output is not an Image.Image object")
        return img

    def placeholder(self) -> Image.Image:
        return unavailable_image(self.config.placeholder_size).copy()

    @classmethod
    def supported_symbologies(cls) -> List[Symbology]:
        return [s for s in Symbology if backend_for(s) in cls._backends]

    # --- steps

    @staticmethod
    def _ascii_payload(payload: Optional[str]) -> str:
        if not isinstance(payload, str) or not payload:
            raise GenerationError("Barcode data must be non-empty string")
        try:
            return payload.encode("ascii").decode("ascii")
        except UnicodeEncodeError as e:
            raise GenerationError("Barcode data must be ASCII") from e

    def _upscale(self, img: Image.Image, scale: int) -> Image.Image:
        width, height = img.width * scale, img.height * scale
        if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
            raise GenerationError(
                f"Scaled image {width}x{height} exceeds maximum {MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT}px"
            )
        scaled = img.convert("RGB").resize((width, height), resample=Image.Resampling.NEAREST)
        scaled.load()
        return scaled

    def _unavailable(self, symbology: Optional[Symbology], error: str) -> RenderResult:
        return RenderResult(
            image=self.placeholder(),
            available=False,
            symbology=symbology,
            scale=self.config.upscale_factor,
            error=error,
        )

    # --- backends

    def _render_linear(self, backend: str, data: str) -> Image.Image:
        try:
            bclass = pybarcode.get_barcode_class(backend)
            modules = "".join(bclass(data).build())
        except BarcodeNotFoundError as e:
            raise GenerationError(f"Barcode class not found: {backend}") from e
        except Exception as e:
            raise GenerationError(f"{backend} generation failed: {e}") from e
        if not modules:
            raise GenerationError(f"{backend} produced no modules")
        return self._paint_modules(modules)

    @staticmethod
    def _paint_modules(modules: str) -> Image.Image:
        """Paint a 0/1 module string as bars, one pixel column per module."""
        width = len(modules) + 2 * LINEAR_QUIET_ZONE
        img = Image.new("RGB", (width, LINEAR_BAR_HEIGHT), "white")
        draw = ImageDraw.Draw(img)
        x = LINEAR_QUIET_ZONE
        for bit, run in groupby(modules):
            n = len(list(run))
            if bit == "1":
                draw.rectangle((x, 0, x + n - 1, LINEAR_BAR_HEIGHT - 1), fill="black")
            x += n
        return img

    def _render_qr(self, backend: str, data: str) -> Image.Image:
        qr = qrcode.QRCode(
            version=None,
            error_correction=_QR_LEVELS[self.config.qr_error_correction],
            box_size=1,
            border=QR_BORDER,
        )
        try:
            qr.add_data(data)
            qr.make(fit=True)
            qr_img = qr.make_image(
                fill_color="black",
                back_color="white",
                image_factory=qrcode.image.pil.PilImage,
            )
        except Exception as e:
            raise GenerationError(f"QR generation failed: {e}") from e
        if hasattr(qr_img, "get_image"):
            qr_img = qr_img.get_image()
        return qr_img

    def _render_pdf417(self, backend: str, data: str) -> Image.Image:
        try:
            codes = pdf417gen.encode(
                data.encode("ascii"),
                columns=PDF417_COLUMNS,
                security_level=PDF417_SECURITY_LEVEL,
            )
            return pdf417gen.render_image(codes, scale=1, ratio=3, padding=2)
        except Exception as e:
            raise GenerationError(f"PDF417 generation failed: {e}") from e

    def _render_aztec(self, backend: str, data: str) -> Image.Image:
        try:
            import treepoem
        except ImportError as e:
            raise GenerationError("treepoem not installed (pip install treepoem)") from e

        try:
            aztec_img = treepoem.generate_barcode(
                barcode_type=backend,
                data=data,
                scale=1,
            )
        except Exception as e:
            raise GenerationError(f"Aztec generation failed: {e}") from e
        if not isinstance(aztec_img, Image.Image):
            raise GenerationError("Aztec generation failed")
        return aztec_img
