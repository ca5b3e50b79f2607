# pyright: reportUnknownMemberType=false, reportUnknownArgumentType=false
"""
Signature editor window: zoomable page canvas with field overlays.

Pages are rendered one per event-loop turn by stepping a
:class:`~winsign.core.renderer.RenderBatch` from ``after()``.  Zooming or
closing the window supersedes the batch through the renderer's token.

All field state lives in :class:`~winsign.core.editor.FieldEditor`; this
module only converts Tk events into canvas-local pointer positions and
redraws overlays from the editor's projections.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import tkinter as tk
    from collections.abc import Callable, Sequence

    from ...core.appearance import SignaturePalette
    from ...core.backend import SaveResult, SigningBackend, SigningResult
    from ...core.geometry import ScreenRect
    from ...core.models import Document, Field, SignaturePayload
    from ...core.renderer import PageGeometry, PageSurface, RenderBatch

from ...constants import (
    DEFAULT_SCALE,
    MAX_SCALE,
    MIN_SCALE,
    PREVIEW_DEFAULT_SCALE,
    PREVIEW_MIN_SCALE,
    SCALE_STEP,
)
from ...core.editor import FieldEditor, FieldState
from ...core.geometry import SurfaceGeometry
from ...core.models import TypedSignature
from ...core.renderer import PageRenderer, backing_size, clamp_scale, zoom_in, zoom_out
from ...errors import DecodeError, RenderError
from .interaction import HoverTimer, PointerCapture
from .sign_worker import describe_save_result, describe_signing_result, start_saving, start_signing
from .utils import device_pixel_ratio

_logger = logging.getLogger(__name__)

_TITLE = "WinSign"
PAGE_GAP = 16
PAGE_MARGIN = 24
HANDLE_RADIUS = 5

_FIELD_OUTLINE = "#2563EB"
_FIELD_OUTLINE_ACTIVE = "#DC2626"
_DELETE_TAG = "delete-"


# ── Layout helpers (no Tk) ───────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class PageSlot:
    """Where a page's bitmap sits on the canvas."""

    page_number: int
    left: int
    top: int
    width: int
    height: int

    def contains(self, cx: float, cy: float) -> bool:
        return self.left <= cx < self.left + self.width and self.top <= cy < self.top + self.height


def layout_pages(
    geometries: Sequence[PageGeometry],
    scale: float,
    dpr: float,
    *,
    gap: int = PAGE_GAP,
    margin: int = PAGE_MARGIN,
) -> list[PageSlot]:
    """Stack pages vertically, centred on the widest one."""
    sizes = [backing_size(g, scale, dpr) for g in geometries]
    widest = max((w for w, _ in sizes), default=0)
    slots = []
    top = margin
    for number, (w, h) in enumerate(sizes, start=1):
        slots.append(PageSlot(number, margin + (widest - w) // 2, top, w, h))
        top += h + gap
    return slots


def handle_positions(screen: ScreenRect) -> dict[str, tuple[float, float]]:
    """Centres of the eight resize handles of a projected field."""
    cx, cy = screen.center
    return {
        "top-left": (screen.left, screen.top),
        "top": (cx, screen.top),
        "top-right": (screen.right, screen.top),
        "right": (screen.right, cy),
        "bottom-right": (screen.right, screen.bottom),
        "bottom": (cx, screen.bottom),
        "bottom-left": (screen.left, screen.bottom),
        "left": (screen.left, cy),
    }


def handle_at(screen: ScreenRect, px: float, py: float, radius: float = HANDLE_RADIUS) -> str | None:
    """Name of the resize handle under the pointer, if any."""
    for name, (hx, hy) in handle_positions(screen).items():
        if abs(px - hx) <= radius and abs(py - hy) <= radius:
            return name
    return None


# ── Window ───────────────────────────────────────────────────────────


class EditorWindow:
    """Editor (or read-only preview) for one workspace document.

    Args:
        parent: Owning window.
        document: Document to open.
        backend: Persistence for reading, signing, and saving.
        palette: Shared signature palette.
        on_signed: Called with the document, the result, and the signed
            fields after a successful sign.
        preview: Read-only mode with the preview zoom limits.
        fields: Fields from an earlier signing session to continue editing.
    """

    def __init__(
        self,
        parent: tk.Misc,
        document: Document,
        backend: SigningBackend,
        palette: SignaturePalette,
        *,
        on_signed: Callable[[Document, SigningResult, tuple[Field, ...]], None] | None = None,
        preview: bool = False,
        initial_scale: float | None = None,
        fields: Sequence[Field] = (),
    ) -> None:
        import tkinter as tk
        from tkinter import ttk

        self.document = document
        self._backend = backend
        self._palette = palette
        self._on_signed = on_signed
        self.preview = preview
        self._min_scale = PREVIEW_MIN_SCALE if preview else MIN_SCALE
        default = PREVIEW_DEFAULT_SCALE if preview else DEFAULT_SCALE
        self.scale = clamp_scale(initial_scale or default, self._min_scale, MAX_SCALE)

        self.renderer = PageRenderer()
        self.editor = FieldEditor(document.id)
        if fields:
            self.editor.load_fields(fields)
        self._batch: RenderBatch | None = None
        self._slots: list[PageSlot] = []
        self._photos: dict[int, object] = {}
        self._overlay_photos: list[object] = []
        self._capture: PointerCapture | None = None
        self._gesture_page: int | None = None
        self._hovered: str | None = None
        self._pointer_over: str | None = None
        self._signed_path: Path | None = None
        self._signing = False
        self._actionable = False
        self._closed = False

        self.win = tk.Toplevel(parent)
        self.win.title(f"{document.name} - {_TITLE}")
        self.win.protocol("WM_DELETE_WINDOW", self.close)
        self.win.columnconfigure(0, weight=1)
        self.win.rowconfigure(1, weight=1)

        self.status_text = tk.StringVar(value="Loading...")
        self._zoom_text = tk.StringVar()
        self._build_toolbar()

        body = ttk.Frame(self.win)
        body.grid(row=1, column=0, sticky="nsew")
        body.columnconfigure(0, weight=1)
        body.rowconfigure(0, weight=1)
        self.canvas = tk.Canvas(body, background="#6B7280", highlightthickness=0)
        vbar = ttk.Scrollbar(body, orient="vertical", command=self.canvas.yview)
        hbar = ttk.Scrollbar(body, orient="horizontal", command=self.canvas.xview)
        self.canvas.configure(yscrollcommand=vbar.set, xscrollcommand=hbar.set)
        self.canvas.grid(row=0, column=0, sticky="nsew")
        vbar.grid(row=0, column=1, sticky="ns")
        hbar.grid(row=1, column=0, sticky="ew")

        ttk.Label(self.win, textvariable=self.status_text, padding=(8, 4)).grid(
            row=2, column=0, sticky="ew"
        )

        self._dpr = device_pixel_ratio(self.win)
        self._hover = HoverTimer(self.canvas, self._show_hover_controls, self._hide_hover_controls)

        self.canvas.bind("<ButtonPress-1>", self._on_press)
        self.canvas.bind("<Motion>", self._on_motion)
        self.canvas.bind("<MouseWheel>", self._on_wheel)
        self.win.bind("<Delete>", lambda _e: self.delete_selected())
        self.win.bind("<BackSpace>", lambda _e: self.delete_selected())
        self.win.bind("<Escape>", lambda _e: self._cancel_placement())
        self.win.bind("<Control-plus>", lambda _e: self._zoom_in())
        self.win.bind("<Control-equal>", lambda _e: self._zoom_in())
        self.win.bind("<Control-minus>", lambda _e: self._zoom_out())

        self.win.geometry("900x760")
        self.win.after(0, self._load)

    # ── UI construction ──────────────────────────────────────────

    def _build_toolbar(self) -> None:
        from tkinter import ttk

        bar = ttk.Frame(self.win, padding=(8, 6))
        bar.grid(row=0, column=0, sticky="ew")

        ttk.Button(bar, text="−", width=3, command=self._zoom_out).grid(row=0, column=0)
        ttk.Label(bar, textvariable=self._zoom_text, width=6, anchor="center").grid(row=0, column=1)
        ttk.Button(bar, text="+", width=3, command=self._zoom_in).grid(row=0, column=2)

        self._place_btn = ttk.Button(bar, text="Add signature", command=self.start_placement)
        self._delete_btn = ttk.Button(bar, text="Delete", command=self.delete_selected)
        self._sign_btn = ttk.Button(bar, text="Sign", command=self.sign)
        self._save_btn = ttk.Button(bar, text="Save as...", command=self.save_as, state="disabled")
        if not self.preview:
            self._place_btn.grid(row=0, column=3, padx=(16, 0))
            self._delete_btn.grid(row=0, column=4, padx=(4, 0))
            self._sign_btn.grid(row=0, column=5, padx=(16, 0))
            self._save_btn.grid(row=0, column=6, padx=(4, 0))
        ttk.Button(bar, text="Close", command=self.close).grid(row=0, column=7, padx=(16, 0))
        bar.columnconfigure(7, weight=1)
        self._update_zoom_label()

    def _update_zoom_label(self) -> None:
        self._zoom_text.set(f"{round(self.scale * 100)}%")

    # ── Loading and rendering ────────────────────────────────────

    def _load(self) -> None:
        from tkinter import messagebox

        try:
            pdf_bytes = self._backend.read(self.document.path)
            self.renderer.begin_load(pdf_bytes)
        except (OSError, DecodeError) as e:
            _logger.warning("Cannot open %s: %s", self.document.path, e)
            messagebox.showerror(_TITLE, f"Unable to open document:\n{e}", parent=self.win)
            self.close()
            return
        self._start_render()

    def _start_render(self) -> None:
        self._slots = layout_pages(self.renderer.page_geometries, self.scale, self._dpr)
        self._photos.clear()
        self.canvas.delete("all")
        for slot in self._slots:
            self.canvas.create_rectangle(
                slot.left,
                slot.top,
                slot.left + slot.width,
                slot.top + slot.height,
                fill="white",
                outline="",
                tags=("page-bg", f"page-bg-{slot.page_number}"),
            )
        if self._slots:
            last = self._slots[-1]
            width = max(s.left + s.width for s in self._slots) + PAGE_MARGIN
            self.canvas.configure(scrollregion=(0, 0, width, last.top + last.height + PAGE_MARGIN))

        self._set_actionable(False)
        self._batch = self.renderer.start_batch(self.scale, self._dpr, on_page=self._on_page_rendered)
        self.status_text.set(f"Rendering {self.renderer.page_count} page(s)...")
        self.win.after(0, self._pump, self._batch)

    def _pump(self, batch: RenderBatch) -> None:
        from tkinter import messagebox

        if self._closed:
            return
        try:
            more = batch.step()
        except RenderError as e:
            self._render_failed()
            messagebox.showerror(_TITLE, str(e), parent=self.win)
            return
        if more:
            self.win.after(1, self._pump, batch)
        elif not batch.stale:
            self._set_actionable(True)
            self.status_text.set(self._ready_message())

    def _render_failed(self) -> None:
        """Hide every page and overlay; the renderer has dropped its surfaces."""
        self._end_capture()
        self.editor.cancel_placement()
        self.canvas.delete("page", "overlay")
        self.canvas.configure(cursor="")
        self._photos.clear()
        self._overlay_photos.clear()
        self._set_actionable(False)
        self.status_text.set("Rendering failed")

    def _set_actionable(self, enabled: bool) -> None:
        self._actionable = enabled
        state = "normal" if enabled else "disabled"
        self._place_btn.configure(state=state)
        self._delete_btn.configure(state=state)
        self._sign_btn.configure(state="disabled" if self._signing else state)

    def _on_page_rendered(self, surface: PageSurface) -> None:
        from PIL import ImageTk

        slot = self._slots[surface.page_number - 1]
        photo = ImageTk.PhotoImage(surface.image)
        self._photos[surface.page_number] = photo
        self.canvas.create_image(
            slot.left,
            slot.top,
            image=photo,
            anchor="nw",
            tags=("page", f"page-{surface.page_number}"),
        )
        self._redraw_overlays()

    def _ready_message(self) -> str:
        count = len(self.editor.fields)
        if self.preview:
            return f"{self.renderer.page_count} page(s)"
        return f"{self.renderer.page_count} page(s), {count} signature(s) placed"

    # ── Zoom ─────────────────────────────────────────────────────

    def _zoom_in(self) -> None:
        self.zoom(zoom_in(self.scale, SCALE_STEP))

    def _zoom_out(self) -> None:
        self.zoom(zoom_out(self.scale, SCALE_STEP, self._min_scale))

    def zoom(self, scale: float) -> None:
        """Re-render at a new scale; fields keep their PDF positions."""
        scale = clamp_scale(scale, self._min_scale, MAX_SCALE)
        if scale == self.scale or not self.renderer.loaded:
            return
        self._end_capture()
        self.scale = scale
        self._update_zoom_label()
        self._start_render()

    def _on_wheel(self, event: tk.Event[tk.Canvas]) -> None:
        if event.state & 0x0004:  # Control held
            if event.delta > 0:
                self._zoom_in()
            else:
                self._zoom_out()
            return
        self.canvas.yview_scroll(-1 if event.delta > 0 else 1, "units")

    # ── Geometry ─────────────────────────────────────────────────

    def _canvas_point(self, event: tk.Event[tk.Canvas]) -> tuple[float, float]:
        return self.canvas.canvasx(event.x), self.canvas.canvasy(event.y)

    def _slot_at(self, cx: float, cy: float) -> PageSlot | None:
        for slot in self._slots:
            if slot.contains(cx, cy):
                return slot
        return None

    def surface_geometry(self, page_number: int) -> SurfaceGeometry:
        """Measure the page's on-screen box now; zero-sized until rendered."""
        surface = self.renderer.surface(page_number)
        bbox = self.canvas.bbox(f"page-{page_number}")
        if surface is None or not bbox:
            return SurfaceGeometry(0, 0, 0, 0, self._dpr, self.scale)
        x1, y1, x2, y2 = bbox
        return surface.surface_geometry(x2 - x1, y2 - y1)

    def _local(self, page_number: int, cx: float, cy: float) -> tuple[float, float]:
        slot = self._slots[page_number - 1]
        return cx - slot.left, cy - slot.top

    # ── Placement ────────────────────────────────────────────────

    def start_placement(self) -> None:
        """Pick a signature (if none is selected) and enter placement mode."""
        if self._palette.selected is None:
            self._choose_signature(then_place=True)
            return
        self.editor.enter_placement_mode()
        self.canvas.configure(cursor="crosshair")
        self.status_text.set("Click on a page to place the signature (Esc to cancel)")

    def _choose_signature(self, *, then_place: bool) -> None:
        from .signature_dialog import SignatureDialog

        def _chosen(_payload: SignaturePayload) -> None:
            if then_place:
                self.start_placement()

        SignatureDialog(self.win, self._palette, _chosen)

    def _cancel_placement(self) -> None:
        self.editor.cancel_placement()
        self.canvas.configure(cursor="")
        self.status_text.set(self._ready_message())

    # ── Pointer handling ─────────────────────────────────────────

    def _on_press(self, event: tk.Event[tk.Canvas]) -> None:
        if self.preview or not self._actionable:
            return
        for tag in self.canvas.gettags("current"):
            if tag.startswith(_DELETE_TAG):
                self.delete_field(tag.removeprefix(_DELETE_TAG))
                return
        cx, cy = self._canvas_point(event)
        slot = self._slot_at(cx, cy)
        if slot is None:
            self.editor.deselect()
            self._redraw_overlays()
            return

        page = slot.page_number
        geom = self.surface_geometry(page)
        px, py = self._local(page, cx, cy)

        if not self.editor.placing and self._begin_gesture(page, px, py, geom):
            return

        pending = self.editor.click(page, px, py, geom)
        if pending is not None:
            entry = self._palette.selected
            if entry is not None:
                self.editor.add_field(pending, entry.payload)
            self.canvas.configure(cursor="")
            self.status_text.set(self._ready_message())
        self._redraw_overlays()

    def _begin_gesture(self, page: int, px: float, py: float, geom: SurfaceGeometry) -> bool:
        """Start a resize or drag under the pointer.  False if nothing was hit."""
        selected = self.editor.selected
        if selected is not None and selected.page_number == page:
            screen = self.editor.project(selected.id, geom)
            handle = handle_at(screen, px, py) if screen is not None else None
            if handle is not None and self.editor.begin_resize(selected.id, handle, px, py, geom):
                self._begin_capture(page)
                return True

        hit = self.editor.hit_test(page, px, py, geom)
        if hit is None:
            return False
        if self.editor.begin_drag(hit.id, px, py, geom):
            self._begin_capture(page)
        self._redraw_overlays()
        return True

    def _begin_capture(self, page_number: int) -> None:
        """Route move/up events to the gesture the editor just started."""
        self._release_capture()
        self._gesture_page = page_number
        self._capture = PointerCapture(self.canvas, self._on_drag, self._on_release)
        self._redraw_overlays()

    def _release_capture(self) -> None:
        capture, self._capture = self._capture, None
        if capture is not None:
            capture.release()

    def _end_capture(self) -> None:
        self._release_capture()
        self.editor.pointer_up()
        self._gesture_page = None

    def _on_drag(self, event: tk.Event[tk.Canvas]) -> None:
        if self._gesture_page is None:
            return
        cx, cy = self._canvas_point(event)
        px, py = self._local(self._gesture_page, cx, cy)
        if self.editor.pointer_move(px, py, self.surface_geometry(self._gesture_page)) is not None:
            self._redraw_overlays()

    def _on_release(self, _event: tk.Event[tk.Canvas]) -> None:
        self.editor.pointer_up()
        self._capture = None
        self._gesture_page = None
        self._redraw_overlays()

    def _on_motion(self, event: tk.Event[tk.Canvas]) -> None:
        cx, cy = self._canvas_point(event)
        slot = self._slot_at(cx, cy)
        hovered = None
        if slot is not None and not self.preview:
            px, py = self._local(slot.page_number, cx, cy)
            hit = self.editor.hit_test(slot.page_number, px, py, self.surface_geometry(slot.page_number))
            hovered = hit.id if hit is not None else None
        if hovered == self._pointer_over:
            return
        self._pointer_over = hovered
        if hovered is None:
            self._hover.leave()
            return
        moved = self._hovered != hovered
        self._hovered = hovered
        self._hover.enter()
        if moved and self._hover.visible:
            self._redraw_overlays()

    def _show_hover_controls(self) -> None:
        self._redraw_overlays()

    def _hide_hover_controls(self) -> None:
        self._hovered = None
        self._redraw_overlays()

    # ── Editing ──────────────────────────────────────────────────

    def delete_selected(self) -> None:
        selected = self.editor.selected
        if selected is None or self.editor.gesture_active:
            return
        self.delete_field(selected.id)

    def delete_field(self, field_id: str) -> None:
        self.editor.delete(field_id)
        if self._hovered == field_id:
            self._hover.reset()
            self._hovered = None
            self._pointer_over = None
        self._redraw_overlays()
        self.status_text.set(self._ready_message())

    # ── Overlays ─────────────────────────────────────────────────

    def _redraw_overlays(self) -> None:
        self.canvas.delete("overlay")
        self._overlay_photos.clear()
        for f in self.editor.fields:
            geom = self.surface_geometry(f.page_number)
            screen = self.editor.project(f.id, geom)
            if screen is None:
                continue
            slot = self._slots[f.page_number - 1]
            self._draw_field(f, screen, slot)

    def _draw_field(self, f: Field, screen: ScreenRect, slot: PageSlot) -> None:
        left, top = slot.left + screen.left, slot.top + screen.top
        right, bottom = left + screen.width, top + screen.height
        state = self.editor.state_of(f.id)
        outline = _FIELD_OUTLINE if state == FieldState.PLACED else _FIELD_OUTLINE_ACTIVE

        self._draw_payload(f, left, top, screen)
        self.canvas.create_rectangle(
            left, top, right, bottom, outline=outline, width=2, dash=(4, 2), tags=("overlay",)
        )

        if state != FieldState.PLACED:
            for hx, hy in handle_positions(screen).values():
                x, y = slot.left + hx, slot.top + hy
                self.canvas.create_rectangle(
                    x - HANDLE_RADIUS,
                    y - HANDLE_RADIUS,
                    x + HANDLE_RADIUS,
                    y + HANDLE_RADIUS,
                    fill="white",
                    outline=outline,
                    tags=("overlay",),
                )

        if self._hover.visible and self._hovered == f.id:
            tag = f"{_DELETE_TAG}{f.id}"
            self.canvas.create_oval(
                right - 9, top - 9, right + 9, top + 9, fill=_FIELD_OUTLINE_ACTIVE,
                outline="", tags=("overlay", tag),
            )
            self.canvas.create_text(
                right, top, text="×", fill="white", tags=("overlay", tag)
            )

    def _draw_payload(self, f: Field, left: float, top: float, screen: ScreenRect) -> None:
        from PIL import Image, ImageTk

        payload = f.payload
        width, height = max(1, int(screen.width)), max(1, int(screen.height))
        if isinstance(payload, TypedSignature):
            # Same point size the burn-in uses, converted to screen pixels
            points = min(f.rect.height / 2, 20)
            size = max(6, round(points * screen.height / f.rect.height))
            self.canvas.create_text(
                left + 5,
                top + height / 2,
                text=payload.text,
                anchor="w",
                font=(payload.font, -size),
                tags=("overlay",),
            )
            return
        try:
            img = Image.open(io.BytesIO(payload.png)).convert("RGBA")
        except (OSError, ValueError) as e:
            _logger.debug("Overlay image unavailable: %s", e)
            self.canvas.create_text(
                left + 5, top + height / 2, text="Signature", anchor="w", tags=("overlay",)
            )
            return
        img = img.resize((width, height), Image.Resampling.LANCZOS)
        photo = ImageTk.PhotoImage(img)
        self._overlay_photos.append(photo)
        self.canvas.create_image(left, top, image=photo, anchor="nw", tags=("overlay",))

    # ── Sign and save ────────────────────────────────────────────

    def sign(self) -> None:
        """Burn the current fields in a background thread."""
        if self._signing or not self._actionable:
            return
        self._end_capture()
        snapshot = self.editor.snapshot()
        started = start_signing(
            self.win,
            self._backend,
            self.document.path,
            snapshot,
            on_done=lambda result: self._on_sign_done(result, snapshot),
        )
        if started:
            self._signing = True
            self._sign_btn.configure(state="disabled")
            self.status_text.set("Signing...")

    def _on_sign_done(self, result: SigningResult, fields: tuple[Field, ...] = ()) -> None:
        from tkinter import messagebox

        if self._closed:
            return
        self._signing = False
        self._set_actionable(self._actionable)
        ok, message = describe_signing_result(result)
        if not ok:
            self.status_text.set("Signing failed")
            messagebox.showerror(_TITLE, message, parent=self.win)
            return
        self._signed_path = result.signed_path
        self._save_btn.configure(state="normal")
        self.status_text.set(message)
        if self._on_signed is not None:
            self._on_signed(self.document, result, fields)

    def save_as(self) -> None:
        """Copy the signed document to a user-chosen location."""
        from tkinter import filedialog

        if self._signed_path is None:
            return
        chosen = filedialog.asksaveasfilename(
            parent=self.win,
            title="Save signed PDF",
            initialfile=self._signed_path.name,
            defaultextension=".pdf",
            filetypes=[("PDF files", "*.pdf")],
        )
        start_saving(
            self.win,
            self._backend,
            self._signed_path,
            chosen or None,
            on_done=self._on_save_done,
        )

    def _on_save_done(self, result: SaveResult) -> None:
        from tkinter import messagebox

        outcome = describe_save_result(result)
        if outcome is None:
            self.status_text.set("Save cancelled")
            return
        ok, message = outcome
        self.status_text.set(message)
        if not ok:
            messagebox.showerror(_TITLE, message, parent=self.win)

    # ── Teardown ─────────────────────────────────────────────────

    def close(self) -> None:
        """Stop rendering, free the document, and destroy the window."""
        if self._closed:
            return
        self._closed = True
        self._end_capture()
        self._hover.cancel()
        self.renderer.cancel_in_flight()
        self.renderer.release()
        self._photos.clear()
        self._overlay_photos.clear()
        self.win.destroy()
