"""Rasterize freehand pointer strokes into a drawn-signature payload."""

from __future__ import annotations

__all__ = ["Stroke", "drawn_signature", "render_strokes"]

from datetime import datetime
from typing import TYPE_CHECKING

from ..models import DrawnSignature
from .image import to_png

if TYPE_CHECKING:
    from collections.abc import Sequence

# A stroke is the pointer path between one press and release, in pad pixels
Stroke = list[tuple[float, float]]

_INK = (0, 0, 0, 255)
_LINE_WIDTH = 2
_CROP_PADDING = 4


def render_strokes(
    strokes: Sequence[Stroke],
    width: int,
    height: int,
    *,
    line_width: int = _LINE_WIDTH,
    crop: bool = True,
) -> bytes:
    """Draw strokes onto a transparent canvas and return PNG bytes.

    Args:
        strokes: Point lists captured on a ``width x height`` drawing pad.
        width: Pad width in pixels.
        height: Pad height in pixels.
        line_width: Pen width in pixels.
        crop: Trim transparent margins (keeping a small padding).

    Raises:
        ValueError: No stroke contains any point.
    """
    from PIL import Image, ImageDraw

    if not any(strokes):
        raise ValueError("Nothing drawn")

    canvas = Image.new("RGBA", (width, height), (0, 0, 0, 0))
    draw = ImageDraw.Draw(canvas)
    for stroke in strokes:
        if len(stroke) == 1:
            x, y = stroke[0]
            r = line_width / 2
            draw.ellipse((x - r, y - r, x + r, y + r), fill=_INK)
        elif stroke:
            draw.line(stroke, fill=_INK, width=line_width, joint="curve")

    if crop:
        bbox = canvas.getbbox()
        if bbox is not None:
            left, top, right, bottom = bbox
            canvas = canvas.crop(
                (
                    max(0, left - _CROP_PADDING),
                    max(0, top - _CROP_PADDING),
                    min(width, right + _CROP_PADDING),
                    min(height, bottom + _CROP_PADDING),
                )
            )
    return to_png(canvas)


def drawn_signature(strokes: Sequence[Stroke], width: int, height: int) -> DrawnSignature:
    label = f"Drawn Signature {datetime.now():%Y-%m-%d %H:%M:%S}"
    return DrawnSignature(png=render_strokes(strokes, width, height), label=label)
