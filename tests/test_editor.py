"""Tests for winsign.core.editor -- field lifecycle and gestures."""

from __future__ import annotations

import pytest

from winsign.core.editor import FieldEditor, FieldState, PendingPlacement
from winsign.core.geometry import SurfaceGeometry
from winsign.core.models import Field, Rect, TypedSignature

PAYLOAD = TypedSignature(text="Jane Doe", font="Dancing Script", label="Text: Jane Doe")


def geom(scale: float = 1.0) -> SurfaceGeometry:
    w, h = int(612 * scale), int(792 * scale)
    return SurfaceGeometry(w, h, w, h, 1.0, scale)


NOT_READY = SurfaceGeometry(0, 0, 0, 0, 1.0, 1.0)


@pytest.fixture
def editor():
    return FieldEditor("doc-1")


def place(editor: FieldEditor, px: float = 200, py: float = 200, page: int = 1, g=None) -> Field:
    editor.enter_placement_mode()
    pending = editor.click(page, px, py, g or geom())
    return editor.add_field(pending, PAYLOAD)


# ── Placement ─────────────────────────────────────────────────────


def test_click_in_placement_mode_returns_pending(editor):
    editor.enter_placement_mode()
    pending = editor.click(1, 200, 100, geom())
    assert isinstance(pending, PendingPlacement)
    assert pending.page_number == 1
    assert pending.rect == Rect(125, 70, 150, 60)
    assert not editor.placing


def test_click_not_ready_stays_in_placement_mode(editor):
    editor.enter_placement_mode()
    assert editor.click(1, 200, 100, NOT_READY) is None
    assert editor.placing


def test_cancel_placement(editor):
    editor.enter_placement_mode()
    editor.cancel_placement()
    assert editor.click(1, 10, 10, geom()) is None
    assert editor.fields == ()


def test_add_field_selects_it(editor):
    f = place(editor)
    assert editor.selected == f
    assert editor.state_of(f.id) == FieldState.SELECTED
    assert f.document_id == "doc-1"
    assert f.payload == PAYLOAD


def test_click_outside_placement_deselects(editor):
    f = place(editor)
    assert editor.click(1, 500, 700, geom()) is None
    assert editor.selected is None
    assert editor.state_of(f.id) == FieldState.PLACED


def test_fields_on_page(editor):
    a = place(editor, page=1)
    b = place(editor, page=2)
    assert editor.fields_on_page(1) == (a,)
    assert editor.fields_on_page(2) == (b,)


# ── Selection and deletion ────────────────────────────────────────


def test_delete_removes_and_clears_selection(editor):
    f = place(editor)
    editor.delete(f.id)
    assert editor.fields == ()
    assert editor.selected is None


def test_delete_unknown_field(editor):
    with pytest.raises(KeyError):
        editor.delete("signature-missing")


def test_get_and_state_of_unknown(editor):
    with pytest.raises(KeyError):
        editor.get("nope")


def test_hit_test_topmost(editor):
    a = place(editor, 200, 200)
    b = place(editor, 210, 210)
    assert editor.hit_test(1, 205, 205, geom()) == b
    assert editor.hit_test(1, 140, 175, geom()) == a
    assert editor.hit_test(2, 205, 205, geom()) is None


# ── Drag ──────────────────────────────────────────────────────────


def test_drag_moves_field_in_pdf_units(editor):
    g = geom(0.5)
    f = place(editor, 100, 100, g=g)
    start = f.rect
    assert editor.begin_drag(f.id, 100, 100, g)
    assert editor.state_of(f.id) == FieldState.DRAGGING
    moved = editor.pointer_move(150, 125, g)
    assert moved.rect.x == pytest.approx(start.x + 100)
    assert moved.rect.y == pytest.approx(start.y + 50)
    assert moved.rect.width == start.width
    editor.pointer_up()
    assert editor.state_of(f.id) == FieldState.SELECTED


def test_drag_clamps_at_origin(editor):
    f = place(editor, 100, 100)
    editor.begin_drag(f.id, 100, 100, geom())
    moved = editor.pointer_move(-500, -500)
    assert (moved.rect.x, moved.rect.y) == (0.0, 0.0)


def test_begin_drag_not_ready(editor):
    f = place(editor)
    assert not editor.begin_drag(f.id, 10, 10, NOT_READY)
    assert not editor.gesture_active


# ── Resize ────────────────────────────────────────────────────────


def test_resize_from_handle(editor):
    g = geom(0.75)
    f = place(editor, 100, 100, g=g)
    assert editor.begin_resize(f.id, "bottom-right", 150, 130, g)
    assert editor.state_of(f.id) == FieldState.RESIZING
    resized = editor.pointer_move(190, 150)
    assert resized.rect.width == pytest.approx(150 + 40 / 0.75)
    assert resized.rect.height == pytest.approx(60 + 20 / 0.75)
    assert (resized.rect.x, resized.rect.y) == (f.rect.x, f.rect.y)


def test_resize_measures_from_gesture_start(editor):
    """Successive moves are relative to pointer-down, not cumulative."""
    f = place(editor)
    editor.begin_resize(f.id, "right", 0, 0, geom())
    editor.pointer_move(10, 0)
    editor.pointer_move(20, 0)
    assert editor.get(f.id).rect.width == pytest.approx(170)


def test_resize_unknown_handle(editor):
    f = place(editor)
    with pytest.raises(ValueError):
        editor.begin_resize(f.id, "center", 0, 0, geom())


def test_resize_not_ready(editor):
    f = place(editor)
    assert not editor.begin_resize(f.id, "right", 0, 0, NOT_READY)


# ── Gesture exclusivity ───────────────────────────────────────────


def test_new_gesture_ends_previous(editor):
    a = place(editor, 100, 100)
    b = place(editor, 400, 400)
    editor.begin_drag(a.id, 100, 100, geom())
    editor.begin_resize(b.id, "right", 0, 0, geom())
    assert editor.state_of(a.id) == FieldState.PLACED
    assert editor.state_of(b.id) == FieldState.RESIZING


def test_pointer_up_always_clears(editor):
    assert editor.pointer_up() is None
    f = place(editor)
    editor.begin_drag(f.id, 200, 200, geom())
    assert editor.pointer_up() == editor.get(f.id)
    assert not editor.gesture_active
    assert editor.pointer_move(300, 300) is None


def test_delete_during_drag_ends_gesture(editor):
    f = place(editor)
    editor.begin_drag(f.id, 200, 200, geom())
    editor.delete(f.id)
    assert not editor.gesture_active
    assert editor.pointer_move(250, 250) is None


# ── Snapshot and reload ───────────────────────────────────────────


def test_snapshot_is_immutable_copy(editor):
    f = place(editor)
    snap = editor.snapshot()
    editor.begin_drag(f.id, 200, 200, geom())
    editor.pointer_move(300, 300)
    assert snap[0].rect == f.rect
    assert editor.get(f.id).rect != f.rect


def test_load_fields_replaces_state(editor):
    place(editor)
    restored = Field.create("doc-1", 2, Rect(10, 20, 150, 60), PAYLOAD)
    editor.load_fields([restored])
    assert editor.fields == (restored,)
    assert editor.selected is None


def test_load_fields_rejects_other_document(editor):
    other = Field.create("doc-2", 1, Rect(0, 0, 150, 60), PAYLOAD)
    with pytest.raises(ValueError):
        editor.load_fields([other])
