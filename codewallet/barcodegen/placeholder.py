"""The fixed "image unavailable" bitmap: a grey circle with an x mark on white."""

from __future__ import annotations

from functools import lru_cache

from PIL import Image, ImageDraw

PLACEHOLDER_BACKGROUND = (255, 255, 255)
PLACEHOLDER_FOREGROUND = (142, 142, 147)


@lru_cache(maxsize=8)
def unavailable_image(size: int = 64) -> Image.Image:
    """
    Build the placeholder once per size.

    Callers must copy() the result before handing it out; the cached image is shared.
    """
    img = Image.new("RGB", (size, size), PLACEHOLDER_BACKGROUND)
    draw = ImageDraw.Draw(img)
    margin = max(1, size // 8)
    stroke = max(1, size // 16)
    draw.ellipse(
        (margin, margin, size - 1 - margin, size - 1 - margin),
        outline=PLACEHOLDER_FOREGROUND,
        width=stroke,
    )
    inner = size // 3
    draw.line((inner, inner, size - 1 - inner, size - 1 - inner), fill=PLACEHOLDER_FOREGROUND, width=stroke)
    draw.line((inner, size - 1 - inner, size - 1 - inner, inner), fill=PLACEHOLDER_FOREGROUND, width=stroke)
    return img


def is_placeholder(img: Image.Image, size: int = 64) -> bool:
    """True if ``img`` is pixel-identical to the placeholder of ``size``."""
    ref = unavailable_image(size)
    if img.size != ref.size or img.mode != ref.mode:
        return False
    return img.tobytes() == ref.tobytes()
