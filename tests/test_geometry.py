"""Tests for winsign.core.geometry -- pointer / backing-store / PDF transforms."""

from __future__ import annotations

import math

import pytest

from winsign.core.geometry import (
    RESIZE_HANDLES,
    ScreenRect,
    SurfaceGeometry,
    drag_offset,
    drag_position,
    pdf_to_pointer,
    placement_rect,
    pointer_to_pdf,
    project_rect,
    resize_dimensions,
)
from winsign.core.models import Rect


def surface(scale: float, dpr: float = 1.0, page=(612.0, 792.0), bbox_factor: float = 1.0):
    """Geometry of a page rendered at ``scale`` and displayed at its nominal size."""
    backing_w = math.floor(page[0] * scale * dpr)
    backing_h = math.floor(page[1] * scale * dpr)
    return SurfaceGeometry(
        bbox_width=backing_w / dpr * bbox_factor,
        bbox_height=backing_h / dpr * bbox_factor,
        backing_width=backing_w,
        backing_height=backing_h,
        device_pixel_ratio=dpr,
        scale=scale,
    )


NOT_READY = SurfaceGeometry(0, 0, 0, 0, 1.0, 1.0)


# ── SurfaceGeometry ───────────────────────────────────────────────


def test_ready_requires_all_dimensions():
    assert surface(1.0).ready
    assert not NOT_READY.ready
    assert not SurfaceGeometry(100, 0, 100, 100, 1.0, 1.0).ready
    assert not SurfaceGeometry(100, 100, 100, 0, 1.0, 1.0).ready


def test_ratios_at_nominal_display_equal_scale():
    sx, sy = surface(0.75).ratios()
    assert sx == pytest.approx(0.75)
    assert sy == pytest.approx(0.75)


def test_ratios_follow_measured_box():
    """A CSS-shrunk surface reports smaller ratios, recomputed per call."""
    sx, _ = surface(1.0, bbox_factor=0.5).ratios()
    assert sx == pytest.approx(0.5)


def test_ratios_none_when_not_ready():
    assert NOT_READY.ratios() is None


# ── Point transforms ──────────────────────────────────────────────


@pytest.mark.parametrize("scale", [0.25, 0.75, 1.0, 1.5, 2.5])
@pytest.mark.parametrize("dpr", [1.0, 1.5, 2.0])
def test_pointer_pdf_inverse(scale, dpr):
    geom = surface(scale, dpr)
    x, y = pointer_to_pdf(123.0, 456.0, geom)
    px, py = pdf_to_pointer(x, y, geom)
    assert px == pytest.approx(123.0)
    assert py == pytest.approx(456.0)


def test_pointer_to_pdf_formula():
    geom = SurfaceGeometry(400, 500, 800, 1000, 2.0, 0.5)
    # ((200 / 400) * 800 / 2) / 0.5 = 400
    assert pointer_to_pdf(200, 250, geom) == pytest.approx((400.0, 500.0))


def test_same_pdf_point_lands_under_pointer_at_every_scale():
    """A stored point projects to the spot it was clicked at, whatever the zoom."""
    clicked = surface(0.75)
    point = pointer_to_pdf(100, 100, clicked)
    for scale in (0.25, 0.5, 1.0, 2.5):
        geom = surface(scale, 2.0)
        px, py = pdf_to_pointer(*point, geom)
        assert px == pytest.approx(point[0] * geom.ratios()[0])
        back = pointer_to_pdf(px, py, geom)
        assert back == pytest.approx(point)


def test_transforms_return_none_when_not_ready():
    assert pointer_to_pdf(10, 10, NOT_READY) is None
    assert pdf_to_pointer(10, 10, NOT_READY) is None
    assert placement_rect(10, 10, NOT_READY) is None
    assert project_rect(Rect(0, 0, 10, 10), NOT_READY) is None
    assert drag_offset(Rect(0, 0, 10, 10), 5, 5, NOT_READY) is None
    assert drag_position((0, 0), 5, 5, NOT_READY) is None
    assert resize_dimensions(Rect(0, 0, 100, 50), "right", 5, 5, NOT_READY) is None


# ── Placement and projection ──────────────────────────────────────


def test_placement_rect_centred_on_pointer():
    geom = surface(0.75)
    rect = placement_rect(100, 100, geom)
    assert rect.width == 150
    assert rect.height == 60
    cx, cy = rect.center
    assert cx == pytest.approx(100 / 0.75)
    assert cy == pytest.approx(100 / 0.75)


def test_project_rect_scales_every_component():
    screen = project_rect(Rect(100, 200, 150, 60), surface(2.0))
    assert (screen.left, screen.top, screen.width, screen.height) == pytest.approx(
        (200, 400, 300, 120)
    )


def test_screen_rect_contains_edges():
    screen = ScreenRect(10, 10, 20, 20)
    assert screen.contains(10, 10)
    assert screen.contains(30, 30)
    assert not screen.contains(31, 15)


# ── Drag ──────────────────────────────────────────────────────────


def test_drag_keeps_grab_offset():
    geom = surface(1.0)
    rect = Rect(100, 100, 150, 60)
    offset = drag_offset(rect, 120, 110, geom)
    assert offset == pytest.approx((20, 10))
    assert drag_position(offset, 220, 310, geom) == pytest.approx((200, 300))


def test_drag_clamped_at_top_left_only():
    geom = surface(1.0)
    offset = drag_offset(Rect(10, 10, 150, 60), 20, 20, geom)
    assert drag_position(offset, 0, 0, geom) == (0.0, 0.0)
    x, y = drag_position(offset, 5000, 5000, geom)
    assert x > 612
    assert y > 792


def test_drag_divides_by_scale():
    geom = surface(0.5)
    offset = drag_offset(Rect(100, 100, 150, 60), 50, 50, geom)
    assert offset == pytest.approx((0, 0))
    assert drag_position(offset, 100, 75, geom) == pytest.approx((200, 150))


# ── Resize ────────────────────────────────────────────────────────


def test_resize_bottom_right_converts_delta_to_points():
    start = Rect(0, 0, 150, 60)
    w, h = resize_dimensions(start, "bottom-right", 40, 20, surface(0.75))
    assert w == pytest.approx(150 + 40 / 0.75)
    assert h == pytest.approx(60 + 20 / 0.75)


def test_resize_left_and_top_invert_delta():
    start = Rect(0, 0, 150, 60)
    geom = surface(1.0)
    assert resize_dimensions(start, "left", -10, 0, geom) == pytest.approx((160, 60))
    assert resize_dimensions(start, "top", 0, -10, geom) == pytest.approx((150, 70))
    assert resize_dimensions(start, "top-left", 10, 10, geom) == pytest.approx((140, 50))


def test_resize_edge_handles_touch_one_dimension():
    start = Rect(0, 0, 150, 60)
    geom = surface(1.0)
    assert resize_dimensions(start, "right", 30, 30, geom) == pytest.approx((180, 60))
    assert resize_dimensions(start, "bottom", 30, 30, geom) == pytest.approx((150, 90))


@pytest.mark.parametrize("handle", sorted(RESIZE_HANDLES))
def test_resize_floor(handle):
    start = Rect(0, 0, 150, 60)
    sign = -1 if handle in ("right", "bottom", "bottom-right") else 1
    if handle in ("top-right",):
        dx, dy = -10_000, 10_000
    elif handle in ("bottom-left",):
        dx, dy = 10_000, -10_000
    else:
        dx = dy = sign * 10_000
    w, h = resize_dimensions(start, handle, dx, dy, surface(1.0))
    assert w >= 50
    assert h >= 30
    if "left" in handle or "right" in handle:
        assert w == 50
    if "top" in handle or "bottom" in handle:
        assert h == 30


def test_resize_unknown_handle():
    with pytest.raises(ValueError, match="Unknown resize handle"):
        resize_dimensions(Rect(0, 0, 150, 60), "middle", 1, 1, surface(1.0))
