# pyright: reportUnknownMemberType=false, reportUnknownArgumentType=false
"""Signature dialog -- draw, type, or upload a signature and keep a palette.

Every signature created here is added to the shared
:class:`~winsign.core.appearance.SignaturePalette`.  Choosing a palette
entry hands its payload to the caller by value.
"""

from __future__ import annotations

import io
import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import tkinter as tk
    from collections.abc import Callable
    from tkinter import ttk

    from ...core.appearance import PaletteEntry, SignaturePalette, Stroke
    from ...core.models import SignaturePayload

from ...core.appearance import (
    DEFAULT_SIGNATURE_FONT,
    SIGNATURE_FONTS,
    drawn_signature,
    image_signature,
    render_typed_preview,
    typed_signature,
)
from ...core.models import TypedSignature

_logger = logging.getLogger(__name__)

_TITLE = "Signature"
_PAD_WIDTH = 420
_PAD_HEIGHT = 160
_THUMB_SIZE = (160, 60)


class SignatureDialog:
    """Modal palette manager.  Calls ``on_choose`` with the picked payload."""

    def __init__(
        self,
        parent: tk.Misc,
        palette: SignaturePalette,
        on_choose: Callable[[SignaturePayload], None],
    ) -> None:
        import tkinter as tk
        from tkinter import ttk

        self._palette = palette
        self._on_choose = on_choose
        self._strokes: list[Stroke] = []
        self._thumb = None
        self._typed_preview = None

        self.dlg = tk.Toplevel(parent)
        self.dlg.withdraw()
        self.dlg.title(_TITLE)
        self.dlg.resizable(False, False)
        self.dlg.transient(parent.winfo_toplevel())
        self.dlg.grab_set()

        frame = ttk.Frame(self.dlg, padding=12)
        frame.grid(sticky="nsew")

        # ── Palette ─────────────────────────────────────────────
        side = ttk.LabelFrame(frame, text="Saved signatures", padding=8)
        side.grid(row=0, column=0, sticky="ns", padx=(0, 12))

        self._listbox = tk.Listbox(side, width=28, height=10, exportselection=False)
        self._listbox.grid(row=0, column=0, columnspan=2, sticky="nsew")
        self._listbox.bind("<<ListboxSelect>>", self._on_list_select)
        self._listbox.bind("<Double-Button-1>", lambda _e: self._use_selected())

        self._thumb_label = ttk.Label(side)
        self._thumb_label.grid(row=1, column=0, columnspan=2, pady=(8, 8))

        ttk.Button(side, text="Use", command=self._use_selected).grid(row=2, column=0, sticky="ew")
        ttk.Button(side, text="Remove", command=self._remove_selected).grid(
            row=2, column=1, sticky="ew", padx=(4, 0)
        )

        # ── Creation tabs ───────────────────────────────────────
        notebook = ttk.Notebook(frame)
        notebook.grid(row=0, column=1, sticky="nsew")
        notebook.add(self._build_draw_tab(notebook), text="Draw")
        notebook.add(self._build_type_tab(notebook), text="Type")
        notebook.add(self._build_image_tab(notebook), text="Image")

        ttk.Button(frame, text="Close", command=self.dlg.destroy).grid(
            row=1, column=1, sticky="e", pady=(12, 0)
        )

        self._refresh_list()

        from . import center_on_parent

        center_on_parent(self.dlg, parent.winfo_toplevel())

    # ── Tabs ─────────────────────────────────────────────────────

    def _build_draw_tab(self, notebook: ttk.Notebook) -> tk.Widget:
        import tkinter as tk
        from tkinter import ttk

        tab = ttk.Frame(notebook, padding=8)
        self._pad = tk.Canvas(
            tab, width=_PAD_WIDTH, height=_PAD_HEIGHT, background="white", cursor="pencil"
        )
        self._pad.grid(row=0, column=0, columnspan=2)
        self._pad.bind("<ButtonPress-1>", self._pad_press)
        self._pad.bind("<B1-Motion>", self._pad_drag)

        ttk.Button(tab, text="Clear", command=self._pad_clear).grid(
            row=1, column=0, sticky="w", pady=(8, 0)
        )
        ttk.Button(tab, text="Save signature", command=self._add_drawn).grid(
            row=1, column=1, sticky="e", pady=(8, 0)
        )
        return tab

    def _build_type_tab(self, notebook: ttk.Notebook) -> tk.Widget:
        import tkinter as tk
        from tkinter import ttk

        tab = ttk.Frame(notebook, padding=8)
        self._text_var = tk.StringVar()
        self._font_var = tk.StringVar(value=DEFAULT_SIGNATURE_FONT)

        ttk.Label(tab, text="Name:").grid(row=0, column=0, sticky="e", padx=(0, 8))
        entry = ttk.Entry(tab, textvariable=self._text_var, width=36)
        entry.grid(row=0, column=1, sticky="w")
        ttk.Label(tab, text="Font:").grid(row=1, column=0, sticky="e", padx=(0, 8), pady=(8, 0))
        ttk.Combobox(
            tab,
            textvariable=self._font_var,
            values=SIGNATURE_FONTS,
            state="readonly",
            width=20,
        ).grid(row=1, column=1, sticky="w", pady=(8, 0))

        self._typed_label = ttk.Label(tab)
        self._typed_label.grid(row=2, column=0, columnspan=2, pady=(12, 0))
        self._text_var.trace_add("write", lambda *_: self._update_typed_preview())
        self._font_var.trace_add("write", lambda *_: self._update_typed_preview())

        ttk.Button(tab, text="Save signature", command=self._add_typed).grid(
            row=3, column=1, sticky="e", pady=(12, 0)
        )
        return tab

    def _build_image_tab(self, notebook: ttk.Notebook) -> tk.Widget:
        from tkinter import ttk

        tab = ttk.Frame(notebook, padding=8)
        ttk.Label(
            tab,
            text="Pick a photo or scan of your signature.\nLight paper is made transparent.",
            justify="left",
        ).grid(row=0, column=0, sticky="w")
        ttk.Button(tab, text="Browse...", command=self._add_image).grid(
            row=1, column=0, sticky="w", pady=(12, 0)
        )
        return tab

    # ── Draw pad ─────────────────────────────────────────────────

    def _pad_press(self, event: tk.Event[tk.Canvas]) -> None:
        self._strokes.append([(float(event.x), float(event.y))])

    def _pad_drag(self, event: tk.Event[tk.Canvas]) -> None:
        if not self._strokes:
            return
        stroke = self._strokes[-1]
        x0, y0 = stroke[-1]
        stroke.append((float(event.x), float(event.y)))
        self._pad.create_line(x0, y0, event.x, event.y, width=2, capstyle="round", smooth=True)

    def _pad_clear(self) -> None:
        self._strokes.clear()
        self._pad.delete("all")

    # ── Creation ─────────────────────────────────────────────────

    def _add_drawn(self) -> None:
        from tkinter import messagebox

        try:
            payload = drawn_signature(self._strokes, _PAD_WIDTH, _PAD_HEIGHT)
        except ValueError as e:
            messagebox.showwarning(_TITLE, str(e), parent=self.dlg)
            return
        self._pad_clear()
        self._palette.add(payload)
        self._refresh_list()

    def _add_typed(self) -> None:
        from tkinter import messagebox

        try:
            payload = typed_signature(self._text_var.get(), self._font_var.get())
        except ValueError as e:
            messagebox.showwarning(_TITLE, str(e), parent=self.dlg)
            return
        self._palette.add(payload)
        self._refresh_list()

    def _add_image(self) -> None:
        from tkinter import filedialog, messagebox

        path = filedialog.askopenfilename(
            parent=self.dlg,
            title="Signature image",
            filetypes=[("Images", "*.png *.jpg *.jpeg *.gif *.bmp"), ("All files", "*.*")],
        )
        if not path:
            return
        try:
            payload = image_signature(path)
        except (OSError, ValueError) as e:
            messagebox.showerror(_TITLE, f"Cannot use image:\n{e}", parent=self.dlg)
            return
        self._palette.add(payload)
        self._refresh_list()

    def _update_typed_preview(self) -> None:
        from PIL import ImageTk

        text = self._text_var.get().strip()
        if not text:
            self._typed_label.configure(image="")
            self._typed_preview = None
            return
        preview = TypedSignature(text=text, font=self._font_var.get(), label=text)
        self._typed_preview = ImageTk.PhotoImage(render_typed_preview(preview))
        self._typed_label.configure(image=self._typed_preview)

    # ── Palette ──────────────────────────────────────────────────

    def _refresh_list(self) -> None:
        self._listbox.delete(0, "end")
        selected = self._palette.selected
        for index, entry in enumerate(self._palette):
            self._listbox.insert("end", entry.payload.label)
            if selected is not None and entry.id == selected.id:
                self._listbox.selection_set(index)
        self._update_thumb()

    def _entry_at_selection(self) -> PaletteEntry | None:
        picked = self._listbox.curselection()
        if not picked:
            return None
        entries = list(self._palette)
        index = picked[0]
        return entries[index] if index < len(entries) else None

    def _on_list_select(self, _event: object) -> None:
        entry = self._entry_at_selection()
        if entry is not None:
            self._palette.select(entry.id)
        self._update_thumb()

    def _update_thumb(self) -> None:
        from PIL import Image, ImageTk

        entry = self._palette.selected
        if entry is None:
            self._thumb_label.configure(image="")
            self._thumb = None
            return
        payload = entry.payload
        if isinstance(payload, TypedSignature):
            img = render_typed_preview(payload, size=24)
        else:
            img = Image.open(io.BytesIO(payload.png))
        img.thumbnail(_THUMB_SIZE)
        self._thumb = ImageTk.PhotoImage(img)
        self._thumb_label.configure(image=self._thumb)

    def _remove_selected(self) -> None:
        entry = self._entry_at_selection()
        if entry is None:
            return
        self._palette.remove(entry.id)
        self._refresh_list()

    def _use_selected(self) -> None:
        from tkinter import messagebox

        entry = self._entry_at_selection() or self._palette.selected
        if entry is None:
            messagebox.showinfo(_TITLE, "Create or pick a signature first.", parent=self.dlg)
            return
        self._palette.select(entry.id)
        _logger.debug("Signature chosen: %s", entry.payload.label)
        self.dlg.destroy()
        self._on_choose(entry.payload)
