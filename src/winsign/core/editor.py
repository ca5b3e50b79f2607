"""
Field lifecycle for one open document.

:class:`FieldEditor` owns the placed fields, the current selection, the
placement-mode flag, and at most one active pointer gesture (drag or
resize).  It never touches widgets: the GUI feeds it pointer positions
plus a :class:`~winsign.core.geometry.SurfaceGeometry` measured at event
time, and redraws from :meth:`FieldEditor.project`.

Lifecycle of a field::

    placement mode --click--> PendingPlacement --add_field--> SELECTED
    SELECTED --begin_drag--> DRAGGING --pointer_up--> SELECTED
    SELECTED --begin_resize--> RESIZING --pointer_up--> SELECTED
    any --deselect / click elsewhere--> PLACED
    any --delete--> (gone)
"""

from __future__ import annotations

__all__ = [
    "FieldEditor",
    "FieldState",
    "PendingPlacement",
]

import enum
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .geometry import (
    RESIZE_HANDLES,
    ScreenRect,
    SurfaceGeometry,
    drag_offset,
    drag_position,
    placement_rect,
    project_rect,
    resize_dimensions,
)
from .models import Field, Rect

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .models import SignaturePayload

_logger = logging.getLogger(__name__)


class FieldState(enum.Enum):
    PLACED = "placed"
    SELECTED = "selected"
    DRAGGING = "dragging"
    RESIZING = "resizing"


@dataclass(frozen=True, slots=True)
class PendingPlacement:
    """A placement click awaiting a signature choice."""

    page_number: int
    rect: Rect


@dataclass(frozen=True, slots=True)
class _Gesture:
    field_id: str
    state: FieldState
    geom: SurfaceGeometry
    start_rect: Rect
    start_x: float
    start_y: float
    offset: tuple[float, float] | None = None
    handle: str | None = None


class FieldEditor:
    """Placement, selection, drag, resize, and deletion of signature fields."""

    def __init__(self, document_id: str) -> None:
        self.document_id = document_id
        self._fields: dict[str, Field] = {}
        self._selected: str | None = None
        self._placing = False
        self._gesture: _Gesture | None = None

    # ── Queries ──────────────────────────────────────────────────────

    @property
    def fields(self) -> tuple[Field, ...]:
        return tuple(self._fields.values())

    @property
    def selected(self) -> Field | None:
        return self._fields.get(self._selected) if self._selected else None

    @property
    def placing(self) -> bool:
        return self._placing

    @property
    def gesture_active(self) -> bool:
        return self._gesture is not None

    def get(self, field_id: str) -> Field:
        try:
            return self._fields[field_id]
        except KeyError:
            raise KeyError(f"No field {field_id!r}") from None

    def fields_on_page(self, page_number: int) -> tuple[Field, ...]:
        return tuple(f for f in self._fields.values() if f.page_number == page_number)

    def state_of(self, field_id: str) -> FieldState:
        self.get(field_id)
        if self._gesture is not None and self._gesture.field_id == field_id:
            return self._gesture.state
        if field_id == self._selected:
            return FieldState.SELECTED
        return FieldState.PLACED

    def project(self, field_id: str, geom: SurfaceGeometry) -> ScreenRect | None:
        return project_rect(self.get(field_id).rect, geom)

    def hit_test(self, page_number: int, px: float, py: float, geom: SurfaceGeometry) -> Field | None:
        """Topmost field on ``page_number`` under the pointer, if any."""
        for f in reversed(self.fields_on_page(page_number)):
            screen = project_rect(f.rect, geom)
            if screen is not None and screen.contains(px, py):
                return f
        return None

    def snapshot(self) -> tuple[Field, ...]:
        """Immutable copy of the current fields, in placement order."""
        return self.fields

    # ── Placement ────────────────────────────────────────────────────

    def enter_placement_mode(self) -> None:
        self._placing = True

    def cancel_placement(self) -> None:
        self._placing = False

    def click(
        self,
        page_number: int,
        px: float,
        py: float,
        geom: SurfaceGeometry,
    ) -> PendingPlacement | None:
        """Handle a click on empty page area.

        In placement mode, returns the default-sized rectangle centred on
        the click and leaves placement mode.  If the surface is not laid
        out yet, placement mode stays on and nothing is returned.  Outside
        placement mode the click clears the selection.
        """
        if not self._placing:
            self.deselect()
            return None
        rect = placement_rect(px, py, geom)
        if rect is None:
            _logger.debug("Placement click on page %d ignored: surface not laid out", page_number)
            return None
        self._placing = False
        return PendingPlacement(page_number, rect)

    def add_field(self, pending: PendingPlacement, payload: SignaturePayload) -> Field:
        """Create a field from a pending placement and select it."""
        new = Field.create(self.document_id, pending.page_number, pending.rect, payload)
        self._fields[new.id] = new
        self._end_gesture()
        self._selected = new.id
        return new

    def load_fields(self, fields: Iterable[Field]) -> None:
        """Replace all fields, e.g. when re-opening a signed document."""
        loaded = {}
        for f in fields:
            if f.document_id != self.document_id:
                raise ValueError(f"Field {f.id} belongs to document {f.document_id}")
            loaded[f.id] = f
        self._end_gesture()
        self._fields = loaded
        self._selected = None
        self._placing = False

    # ── Selection and deletion ───────────────────────────────────────

    def select(self, field_id: str) -> Field:
        f = self.get(field_id)
        if self._gesture is not None and self._gesture.field_id != field_id:
            self._end_gesture()
        self._selected = field_id
        return f

    def deselect(self) -> None:
        self._end_gesture()
        self._selected = None

    def delete(self, field_id: str) -> Field:
        removed = self._fields.pop(field_id, None)
        if removed is None:
            raise KeyError(f"No field {field_id!r}")
        if self._gesture is not None and self._gesture.field_id == field_id:
            self._end_gesture()
        if self._selected == field_id:
            self._selected = None
        return removed

    # ── Gestures ─────────────────────────────────────────────────────

    def begin_drag(self, field_id: str, px: float, py: float, geom: SurfaceGeometry) -> bool:
        """Start moving a field.  Returns False if the surface is not laid out."""
        f = self.get(field_id)
        offset = drag_offset(f.rect, px, py, geom)
        if offset is None:
            return False
        self._end_gesture()
        self._selected = field_id
        self._gesture = _Gesture(
            field_id=field_id,
            state=FieldState.DRAGGING,
            geom=geom,
            start_rect=f.rect,
            start_x=px,
            start_y=py,
            offset=offset,
        )
        return True

    def begin_resize(
        self,
        field_id: str,
        handle: str,
        px: float,
        py: float,
        geom: SurfaceGeometry,
    ) -> bool:
        """Start resizing a field from ``handle``.

        Raises:
            ValueError: Unknown handle name.
        """
        if handle not in RESIZE_HANDLES:
            raise ValueError(f"Unknown resize handle {handle!r}")
        f = self.get(field_id)
        if not geom.ready:
            return False
        self._end_gesture()
        self._selected = field_id
        self._gesture = _Gesture(
            field_id=field_id,
            state=FieldState.RESIZING,
            geom=geom,
            start_rect=f.rect,
            start_x=px,
            start_y=py,
            handle=handle,
        )
        return True

    def pointer_move(self, px: float, py: float, geom: SurfaceGeometry | None = None) -> Field | None:
        """Apply a pointer move to the active gesture.

        Args:
            px: Pointer x relative to the surface.
            py: Pointer y relative to the surface.
            geom: Surface geometry measured for this event; defaults to the
                one captured when the gesture started.

        Returns:
            The updated field, or None if no gesture is active or the
            surface is not laid out.
        """
        gesture = self._gesture
        if gesture is None:
            return None
        current = self._fields.get(gesture.field_id)
        if current is None:
            self._end_gesture()
            return None
        geom = geom or gesture.geom

        if gesture.offset is not None:
            pos = drag_position(gesture.offset, px, py, geom)
            if pos is None:
                return None
            updated = current.with_rect(current.rect.moved_to(*pos))
        elif gesture.handle is not None:
            size = resize_dimensions(
                gesture.start_rect,
                gesture.handle,
                px - gesture.start_x,
                py - gesture.start_y,
                geom,
            )
            if size is None:
                return None
            updated = current.with_rect(current.rect.resized(*size))
        else:
            return None

        self._fields[updated.id] = updated
        return updated

    def pointer_up(self) -> Field | None:
        """End the active gesture, if any.  Always leaves no gesture active."""
        gesture = self._gesture
        self._end_gesture()
        if gesture is None:
            return None
        return self._fields.get(gesture.field_id)

    def _end_gesture(self) -> None:
        self._gesture = None
