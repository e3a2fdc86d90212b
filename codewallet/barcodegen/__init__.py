"""
barcodegen

Barcode image generation for stored wallet records.

- Linear codes (Code128, EAN-13, EAN-8) via python-barcode
- QR via qrcode (error correction M), PDF417 via pdf417gen, Aztec via treepoem
- Fixed integer upscale, "unavailable" placeholder on any failure

Public API:
    - BarcodeImageGenerator: render(payload, symbology) -> RenderResult
    - RenderResult: image + availability + error
    - unavailable_image / is_placeholder: the fallback bitmap

Examples:
    >>> from codewallet.barcodegen import BarcodeImageGenerator
    >>> from codewallet.model.enums import Symbology
    >>> img = BarcodeImageGenerator().render_image("4012345678901", Symbology.EAN13)

Dependencies:
    Pillow, python-barcode, qrcode, pdf417gen, treepoem
"""

from codewallet.barcodegen.generator import BarcodeImageGenerator, RenderResult
from codewallet.barcodegen.placeholder import is_placeholder, unavailable_image

__all__ = [
    "BarcodeImageGenerator",
    "RenderResult",
    "is_placeholder",
    "unavailable_image",
]
