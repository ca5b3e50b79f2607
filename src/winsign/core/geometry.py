"""
Coordinate transforms between pointer space, backing-store space, and PDF space.

Three spaces are involved and never conflated:

* **Pointer space** -- event coordinates relative to the page surface's
  measured on-screen box.
* **Backing-store space** -- the page bitmap's pixel buffer.  Roughly
  ``pointer * device_pixel_ratio``, but always derived from the measured
  box-to-buffer ratio because the displayed size may differ from the
  nominal one.
* **PDF space** -- points on the original page, independent of zoom and
  display density.  This is the only space stored on a Field.

Every function takes a :class:`SurfaceGeometry` describing the surface as
it is *now*.  Ratios are recomputed on each call; a zero-sized surface
(not yet laid out) yields ``None`` instead of raising.
"""

from __future__ import annotations

__all__ = [
    "RESIZE_HANDLES",
    "ScreenRect",
    "SurfaceGeometry",
    "drag_offset",
    "drag_position",
    "pdf_to_pointer",
    "placement_rect",
    "pointer_to_pdf",
    "project_rect",
    "resize_dimensions",
]

from dataclasses import dataclass

from ..constants import (
    DEFAULT_FIELD_HEIGHT,
    DEFAULT_FIELD_WIDTH,
    MIN_FIELD_HEIGHT,
    MIN_FIELD_WIDTH,
)
from .models import Rect

RESIZE_HANDLES = frozenset(
    (
        "top-left",
        "top-right",
        "bottom-left",
        "bottom-right",
        "left",
        "right",
        "top",
        "bottom",
    )
)


@dataclass(frozen=True, slots=True)
class SurfaceGeometry:
    """Live measurements of one rendered page surface.

    Attributes:
        bbox_width: Measured on-screen width of the surface (pointer space).
        bbox_height: Measured on-screen height of the surface.
        backing_width: Pixel width of the surface's bitmap.
        backing_height: Pixel height of the surface's bitmap.
        device_pixel_ratio: Display density used when the bitmap was rendered.
        scale: Zoom factor used when the bitmap was rendered.
    """

    bbox_width: float
    bbox_height: float
    backing_width: int
    backing_height: int
    device_pixel_ratio: float
    scale: float

    @property
    def ready(self) -> bool:
        return (
            self.bbox_width > 0
            and self.bbox_height > 0
            and self.backing_width > 0
            and self.backing_height > 0
            and self.device_pixel_ratio > 0
            and self.scale > 0
        )

    def ratios(self) -> tuple[float, float] | None:
        """Screen pixels per PDF point along x and y, or None if not laid out."""
        if not self.ready:
            return None
        logical_w = self.backing_width / self.device_pixel_ratio
        logical_h = self.backing_height / self.device_pixel_ratio
        return (
            self.bbox_width / logical_w * self.scale,
            self.bbox_height / logical_h * self.scale,
        )


@dataclass(frozen=True, slots=True)
class ScreenRect:
    """A field's projection onto the page surface, in pointer space."""

    left: float
    top: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height

    @property
    def center(self) -> tuple[float, float]:
        return self.left + self.width / 2.0, self.top + self.height / 2.0

    def contains(self, px: float, py: float) -> bool:
        return self.left <= px <= self.right and self.top <= py <= self.bottom


# ── Forward / reverse point transforms ───────────────────────────────


def pointer_to_pdf(px: float, py: float, geom: SurfaceGeometry) -> tuple[float, float] | None:
    """Convert a pointer position to PDF points (top-left origin).

    ``pdf = ((pointer / bbox) * backing / device_pixel_ratio) / scale``
    """
    if not geom.ready:
        return None
    dpr = geom.device_pixel_ratio
    canvas_x = (px / geom.bbox_width) * geom.backing_width / dpr
    canvas_y = (py / geom.bbox_height) * geom.backing_height / dpr
    return canvas_x / geom.scale, canvas_y / geom.scale


def pdf_to_pointer(x: float, y: float, geom: SurfaceGeometry) -> tuple[float, float] | None:
    """Inverse of :func:`pointer_to_pdf`."""
    ratios = geom.ratios()
    if ratios is None:
        return None
    sx, sy = ratios
    return x * sx, y * sy


# ── Field rectangles ─────────────────────────────────────────────────


def placement_rect(
    px: float,
    py: float,
    geom: SurfaceGeometry,
    width: float = DEFAULT_FIELD_WIDTH,
    height: float = DEFAULT_FIELD_HEIGHT,
) -> Rect | None:
    """Default-sized field rectangle centred on a placement click."""
    point = pointer_to_pdf(px, py, geom)
    if point is None:
        return None
    x, y = point
    return Rect(x - width / 2.0, y - height / 2.0, width, height)


def project_rect(rect: Rect, geom: SurfaceGeometry) -> ScreenRect | None:
    """Project a stored rectangle onto the surface for drawing and hit-testing."""
    ratios = geom.ratios()
    if ratios is None:
        return None
    sx, sy = ratios
    return ScreenRect(rect.x * sx, rect.y * sy, rect.width * sx, rect.height * sy)


def drag_offset(rect: Rect, px: float, py: float, geom: SurfaceGeometry) -> tuple[float, float] | None:
    """Pointer-to-field-origin offset in screen space, captured on pointer-down."""
    ratios = geom.ratios()
    if ratios is None:
        return None
    sx, sy = ratios
    return px - rect.x * sx, py - rect.y * sy


def drag_position(
    offset: tuple[float, float],
    px: float,
    py: float,
    geom: SurfaceGeometry,
) -> tuple[float, float] | None:
    """New stored origin for a dragged field, clamped at the page's top-left.

    There is no clamp against the right or bottom page edge.
    """
    ratios = geom.ratios()
    if ratios is None:
        return None
    sx, sy = ratios
    x = (px - offset[0]) / sx
    y = (py - offset[1]) / sy
    return max(0.0, x), max(0.0, y)


def resize_dimensions(
    start: Rect,
    handle: str,
    dx: float,
    dy: float,
    geom: SurfaceGeometry,
) -> tuple[float, float] | None:
    """New stored (width, height) after dragging a resize handle.

    Args:
        start: Field rectangle captured when the handle was pressed.
        handle: One of :data:`RESIZE_HANDLES`.  ``left``/``top`` invert the
            delta; corner handles affect both dimensions.
        dx: Pointer delta since pointer-down, screen pixels.
        dy: Pointer delta since pointer-down, screen pixels.
        geom: Surface geometry captured with ``start``.

    Returns:
        (width, height) floored at the minimum field size, or None if the
        surface is not laid out.

    Raises:
        ValueError: If ``handle`` is not a known handle name.
    """
    if handle not in RESIZE_HANDLES:
        raise ValueError(f"Unknown resize handle {handle!r}")
    ratios = geom.ratios()
    if ratios is None:
        return None
    sx, sy = ratios
    delta_w = dx / sx
    delta_h = dy / sy

    width = start.width
    height = start.height
    if "right" in handle:
        width = max(MIN_FIELD_WIDTH, start.width + delta_w)
    if "left" in handle:
        width = max(MIN_FIELD_WIDTH, start.width - delta_w)
    if "bottom" in handle:
        height = max(MIN_FIELD_HEIGHT, start.height + delta_h)
    if "top" in handle:
        height = max(MIN_FIELD_HEIGHT, start.height - delta_h)
    return width, height
