"""
Still-image barcode decoder backed by zbar (pyzbar).

zbar reads Code128, QR, PDF417, EAN-13 and EAN-8 out of the six wallet
symbologies; it has no Aztec reader. Results of any other zbar type are
dropped.
"""

from __future__ import annotations

import logging
from io import BytesIO
from pathlib import Path
from typing import Any, Callable, Iterable, List, Optional, Set, Union

from PIL import Image

from codewallet.exceptions import ScanError
from codewallet.model.enums import Symbology, identifier_for
from codewallet.scanning.session import ScanResult, ScanSession

logger = logging.getLogger(__name__)

__all__ = ["ZBarImageDecoder", "ZBAR_TYPES"]

ZBAR_TYPES = {
    "CODE128": Symbology.CODE128,
    "QRCODE": Symbology.QR,
    "PDF417": Symbology.PDF417,
    "EAN13": Symbology.EAN13,
    "EAN8": Symbology.EAN8,
}

ImageSource = Union[Image.Image, bytes, str, Path]


class ZBarImageDecoder:
    """
    Decode barcodes from a still image.

    Args:
        allowed: Symbologies to accept; all zbar-readable ones when None.
        decode_fn: Replacement for ``pyzbar.pyzbar.decode`` (same call shape).
    """

    name = "zbar"

    def __init__(
        self,
        allowed: Optional[Iterable[Symbology]] = None,
        decode_fn: Optional[Callable[[Image.Image], List[Any]]] = None,
    ) -> None:
        self.allowed: Set[Symbology] = (
            set(allowed) if allowed is not None else set(ZBAR_TYPES.values())
        )
        self._decode_fn = decode_fn

    def _decoder(self) -> Callable[[Image.Image], List[Any]]:
        if self._decode_fn is not None:
            return self._decode_fn
        try:
            from pyzbar.pyzbar import decode as zbar_decode
        except ImportError as e:
            logger.error("pyzbar (or the zbar shared library) is not available")
            raise ScanError("pyzbar not installed (pip install pyzbar)") from e
        return zbar_decode

    @staticmethod
    def _load(source: ImageSource) -> Image.Image:
        if isinstance(source, Image.Image):
            return source
        try:
            if isinstance(source, bytes):
                return Image.open(BytesIO(source))
            return Image.open(source)
        except Exception as e:
            logger.error("Cannot open image for decoding: %r", e)
            raise ScanError(f"Cannot open image: {e}") from e

    def decode(self, source: ImageSource) -> List[ScanResult]:
        """Return every accepted barcode found in the image, in zbar order."""
        image = self._load(source)
        decode = self._decoder()
        out: List[ScanResult] = []
        for r in decode(image):
            symbology = ZBAR_TYPES.get(str(r.type))
            if symbology is None or symbology not in self.allowed:
                logger.debug("Skipping zbar symbol of type %s", r.type)
                continue
            raw = r.data
            data = raw.decode("utf-8", errors="replace") if isinstance(raw, bytes) else str(raw)
            out.append(ScanResult(payload=data, symbology_id=identifier_for(symbology)))
        logger.info("zbar decoded %d accepted symbol(s)", len(out))
        return out

    def start(self, session: ScanSession, source: ImageSource) -> None:
        """Complete the session with the first result, or cancel it if none was found."""
        results = self.decode(source)
        if results:
            first = results[0]
            session.complete(first.payload, first.symbology_id)
        else:
            session.cancel()
