"""Pointer capture and hover timing for the editor canvas.

Both classes only need a widget's ``bind``/``unbind`` or
``after``/``after_cancel`` methods, so they work with any Tk widget and
with test doubles.
"""

from __future__ import annotations

__all__ = ["HoverTimer", "PointerCapture"]

import logging
from typing import TYPE_CHECKING, Any

from ...constants import HOVER_HIDE_DELAY_MS, HOVER_SHOW_DELAY_MS

if TYPE_CHECKING:
    from collections.abc import Callable

_logger = logging.getLogger(__name__)

MOVE_SEQUENCE = "<B1-Motion>"
UP_SEQUENCE = "<ButtonRelease-1>"


class PointerCapture:
    """Scoped registration of a move/up handler pair for one gesture.

    The pair is bound on construction.  The up handler is wrapped so that
    :meth:`release` runs in a ``finally`` block even if the handler raises;
    :meth:`release` may also be called directly (window teardown) and is
    idempotent.
    """

    def __init__(
        self,
        widget: Any,
        on_move: Callable[[Any], object],
        on_up: Callable[[Any], object],
    ) -> None:
        self._widget = widget
        self._on_up = on_up
        self._bindings: list[tuple[str, str]] = []
        self._bindings.append((MOVE_SEQUENCE, widget.bind(MOVE_SEQUENCE, on_move, "+")))
        self._bindings.append((UP_SEQUENCE, widget.bind(UP_SEQUENCE, self._handle_up, "+")))

    @property
    def active(self) -> bool:
        return bool(self._bindings)

    def _handle_up(self, event: Any) -> object:
        try:
            return self._on_up(event)
        finally:
            self.release()

    def release(self) -> None:
        import tkinter as tk

        bindings, self._bindings = self._bindings, []
        for sequence, funcid in bindings:
            try:
                self._widget.unbind(sequence, funcid)
            except tk.TclError as e:  # widget already destroyed
                _logger.debug("Unbind %s failed: %s", sequence, e)


class HoverTimer:
    """Show controls after a dwell delay, hide them shortly after leaving."""

    def __init__(
        self,
        widget: Any,
        on_show: Callable[[], None],
        on_hide: Callable[[], None],
        *,
        show_delay_ms: int = HOVER_SHOW_DELAY_MS,
        hide_delay_ms: int = HOVER_HIDE_DELAY_MS,
    ) -> None:
        self._widget = widget
        self._on_show = on_show
        self._on_hide = on_hide
        self.show_delay_ms = show_delay_ms
        self.hide_delay_ms = hide_delay_ms
        self._pending: str | None = None
        self.visible = False

    def enter(self) -> None:
        """Pointer entered the hover area."""
        self._cancel_pending()
        if not self.visible:
            self._pending = self._widget.after(self.show_delay_ms, self._fire_show)

    def leave(self) -> None:
        """Pointer left the hover area."""
        self._cancel_pending()
        if self.visible:
            self._pending = self._widget.after(self.hide_delay_ms, self._fire_hide)

    def cancel(self) -> None:
        """Drop any pending transition without changing visibility."""
        self._cancel_pending()

    def reset(self) -> None:
        """Forget the hover entirely (the hovered item went away)."""
        self._cancel_pending()
        self.visible = False

    def _cancel_pending(self) -> None:
        if self._pending is not None:
            self._widget.after_cancel(self._pending)
            self._pending = None

    def _fire_show(self) -> None:
        self._pending = None
        self.visible = True
        self._on_show()

    def _fire_hide(self) -> None:
        self._pending = None
        self.visible = False
        self._on_hide()
