"""
Typed signatures: literal text in a handwriting-style display font.

The font name only affects on-screen previews.  Burn-in always sets the
text in Helvetica, so the signed document does not depend on fonts
installed on the signing machine.
"""

from __future__ import annotations

__all__ = [
    "DEFAULT_SIGNATURE_FONT",
    "SIGNATURE_FONTS",
    "render_typed_preview",
    "typed_signature",
]

import logging
from typing import TYPE_CHECKING

from ..models import TypedSignature

if TYPE_CHECKING:
    from PIL import Image, ImageFont

_logger = logging.getLogger(__name__)

SIGNATURE_FONTS = (
    "Dancing Script",
    "Great Vibes",
    "Allura",
    "Alex Brush",
    "Pacifico",
    "Satisfy",
)
DEFAULT_SIGNATURE_FONT = SIGNATURE_FONTS[0]

_PREVIEW_PADDING = 6


def typed_signature(text: str, font: str = DEFAULT_SIGNATURE_FONT) -> TypedSignature:
    """Build a typed payload.

    Raises:
        ValueError: Blank text or unknown font.
    """
    text = text.strip()
    if not text:
        raise ValueError("Signature text is empty")
    if font not in SIGNATURE_FONTS:
        raise ValueError(f"Unknown signature font {font!r}. Available: {', '.join(SIGNATURE_FONTS)}")
    return TypedSignature(text=text, font=font, label=f"Text: {text}")


def _load_font(name: str, size: int) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    from PIL import ImageFont

    candidates = (name, name.replace(" ", "") + ".ttf", name.replace(" ", "") + "-Regular.ttf")
    for candidate in candidates:
        try:
            return ImageFont.truetype(candidate, size)
        except OSError:
            continue
    _logger.debug("Font %r not installed; using Pillow's default font", name)
    return ImageFont.load_default(size=size)


def render_typed_preview(payload: TypedSignature, size: int = 32) -> Image.Image:
    """Render the text in its display font onto a transparent image."""
    from PIL import Image, ImageDraw

    font = _load_font(payload.font, size)
    left, top, right, bottom = font.getbbox(payload.text)
    width = max(1, int(right - left) + 2 * _PREVIEW_PADDING)
    height = max(1, int(bottom - top) + 2 * _PREVIEW_PADDING)
    img = Image.new("RGBA", (width, height), (0, 0, 0, 0))
    ImageDraw.Draw(img).text(
        (_PREVIEW_PADDING - left, _PREVIEW_PADDING - top),
        payload.text,
        font=font,
        fill=(0, 0, 0, 255),
    )
    return img
