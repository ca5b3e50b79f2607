"""
Page boxes and the flip from top-left field space into PDF user space.

Fields are stored with the origin at the top-left of the visible page box
and y growing downward.  PDF user space has its origin at the bottom-left,
so every rectangle is flipped: ``pdf_y = box_y0 + page_h - y - h``.

``/Rotate`` is ignored: rectangles are placed in the unrotated box, the
same box the rasterizer reports as the page size.
"""

from __future__ import annotations

__all__ = ["get_page_box", "to_pdf_rect"]

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import pikepdf

    from ..models import Rect


def get_page_box(page: pikepdf.Page) -> tuple[float, float, float, float]:
    """Visible page box (x0, y0, x1, y1), CropBox over MediaBox, unrotated."""
    crop_box = page.get("/CropBox")
    box = crop_box if crop_box is not None else page.mediabox
    x0, y0, x1, y1 = float(box[0]), float(box[1]), float(box[2]), float(box[3])
    return min(x0, x1), min(y0, y1), max(x0, x1), max(y0, y1)


def to_pdf_rect(
    rect: Rect,
    box: tuple[float, float, float, float],
) -> tuple[float, float, float, float]:
    """Flip a top-left-origin rectangle into PDF user space.

    Returns:
        (x, y, width, height) with (x, y) the bottom-left corner.
    """
    x0, y0, _x1, y1 = box
    page_h = y1 - y0
    return (
        x0 + rect.x,
        y0 + page_h - rect.y - rect.height,
        rect.width,
        rect.height,
    )
