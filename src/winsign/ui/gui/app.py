# pyright: reportUnknownMemberType=false, reportUnknownArgumentType=false
"""
Desktop GUI for WinSign: document dashboard plus editor windows.

Launch:
    winsign gui
    winsign-gui
    python -m winsign gui
"""

from __future__ import annotations

import datetime
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import tkinter as tk

    from ...core.backend import SigningBackend, SigningResult
    from ...core.models import Document, Field

from ...config import get_default_scale
from ...constants import BYTES_PER_MB, PDF_WARN_SIZE, __version__
from ...core.appearance import SignaturePalette
from ...core.workspace import Workspace
from ..helpers import default_output_path, format_size_kb, metadata_path_for
from ..workflows import LocalSigningBackend
from .dialogs import about_footer, identity_dialog
from .utils import check_tkinter, enable_dpi_awareness, reveal_file

_logger = logging.getLogger(__name__)

_TITLE = "WinSign"


def verification_target(document: Document) -> Path:
    """The file whose sidecar describes ``document``'s signature."""
    path = Path(document.path)
    if metadata_path_for(path).exists():
        return path
    return default_output_path(path)


class WinSignApp:
    """Main window -- workspace list with open, preview, sign, and verify."""

    def __init__(self, root: tk.Tk, backend: SigningBackend | None = None) -> None:
        import tkinter as tk
        from tkinter import ttk

        self.root = root
        self.root.title(f"WinSign v{__version__}")
        self.root.columnconfigure(0, weight=1)
        self.root.rowconfigure(0, weight=1)

        self.backend = backend or LocalSigningBackend()
        self.workspace = Workspace()
        self.palette = SignaturePalette()
        # Fields last signed per document id, reloaded when it is edited again
        self._fields: dict[str, tuple[Field, ...]] = {}
        self.status_text = tk.StringVar(value="Open PDF documents to get started")

        frame = ttk.Frame(root, padding=12)
        frame.grid(sticky="nsew")
        frame.columnconfigure(0, weight=1)
        frame.rowconfigure(1, weight=1)

        bar = ttk.Frame(frame)
        bar.grid(row=0, column=0, sticky="ew", pady=(0, 8))
        ttk.Button(bar, text="Open...", command=self.open_files).grid(row=0, column=0)
        ttk.Button(bar, text="Preview", command=self.preview_selected).grid(row=0, column=1, padx=(8, 0))
        ttk.Button(bar, text="Sign...", command=self.edit_selected).grid(row=0, column=2, padx=(8, 0))
        ttk.Button(bar, text="Verify", command=self.verify_selected).grid(row=0, column=3, padx=(8, 0))
        ttk.Button(bar, text="Remove", command=self.remove_selected).grid(row=0, column=4, padx=(8, 0))
        ttk.Button(bar, text="Identity...", command=lambda: identity_dialog(self.root)).grid(
            row=0, column=5, padx=(24, 0)
        )

        columns = ("size", "modified", "status")
        self.tree = ttk.Treeview(frame, columns=columns, selectmode="browse", height=12)
        self.tree.heading("#0", text="Document")
        self.tree.heading("size", text="Size")
        self.tree.heading("modified", text="Modified")
        self.tree.heading("status", text="Status")
        self.tree.column("#0", width=280)
        self.tree.column("size", width=80, anchor="e")
        self.tree.column("modified", width=150)
        self.tree.column("status", width=90)
        self.tree.grid(row=1, column=0, sticky="nsew")
        self.tree.bind("<Double-Button-1>", lambda _e: self.edit_selected())

        ttk.Label(frame, textvariable=self.status_text).grid(row=2, column=0, sticky="w", pady=(8, 0))
        about_footer(frame, root, row=3)

        self.root.update_idletasks()
        self.root.minsize(self.root.winfo_reqwidth(), self.root.winfo_reqheight())

        from . import center_on_screen

        center_on_screen(self.root)

    # ── Workspace ────────────────────────────────────────────────

    def open_files(self) -> None:
        from tkinter import filedialog

        paths = filedialog.askopenfilenames(
            parent=self.root,
            title="Open PDF documents",
            filetypes=[("PDF files", "*.pdf"), ("All files", "*.*")],
        )
        if paths:
            self.add_paths(paths)

    def add_paths(self, paths: list[str] | tuple[str, ...]) -> None:
        """Merge picked files into the workspace and select the preview."""
        from tkinter import messagebox

        docs = self.backend.open_documents(paths)
        pdfs = [d for d in docs if d.is_pdf]
        skipped = len(docs) - len(pdfs)
        large = [d.name for d in pdfs if d.size > PDF_WARN_SIZE]
        if large and not messagebox.askyesno(
            _TITLE,
            f"{', '.join(large)} exceed{'s' if len(large) == 1 else ''} "
            f"{PDF_WARN_SIZE // BYTES_PER_MB} MB and may render slowly.\n\nContinue?",
        ):
            return

        result = self.workspace.merge(pdfs)
        self._refresh_tree()
        if result.preview is not None:
            self.tree.selection_set(result.preview.id)
            self.tree.see(result.preview.id)
        message = f"Added {result.added_count} document(s)"
        if skipped:
            message += f", skipped {skipped} non-PDF file(s)"
        self.status_text.set(message)

    def _refresh_tree(self) -> None:
        self.tree.delete(*self.tree.get_children())
        for doc in self.workspace:
            modified = datetime.datetime.fromtimestamp(doc.last_modified / 1000.0)
            stamp = modified.strftime("%Y-%m-%d %H:%M")
            self.tree.insert(
                "",
                "end",
                iid=doc.id,
                text=doc.name,
                values=(format_size_kb(doc.size), stamp, "Signed" if doc.signed else "Unsigned"),
            )

    def _selected_document(self) -> Document | None:
        from tkinter import messagebox

        picked = self.tree.selection()
        if not picked:
            messagebox.showinfo(_TITLE, "Select a document first.")
            return None
        return self.workspace.get(picked[0])

    def remove_selected(self) -> None:
        doc = self._selected_document()
        if doc is None:
            return
        self.workspace.remove(doc.id)
        self._fields.pop(doc.id, None)
        self._refresh_tree()
        self.status_text.set(f"Removed {doc.name}")

    # ── Editor windows ───────────────────────────────────────────

    def preview_selected(self) -> None:
        from .editor import EditorWindow

        doc = self._selected_document()
        if doc is not None:
            EditorWindow(self.root, doc, self.backend, self.palette, preview=True)

    def edit_selected(self) -> None:
        from .editor import EditorWindow

        doc = self._selected_document()
        if doc is not None:
            EditorWindow(
                self.root,
                doc,
                self.backend,
                self.palette,
                on_signed=self._on_signed,
                initial_scale=get_default_scale(),
                fields=self._fields.get(doc.id, ()),
            )

    def _on_signed(
        self, document: Document, result: SigningResult, fields: tuple[Field, ...]
    ) -> None:
        self._fields[document.id] = fields
        if document.id in self.workspace:
            self.workspace.mark_signed(document.id)
        if result.signed_path is not None:
            self.workspace.merge(self.backend.open_documents([result.signed_path]))
            reveal_file(result.signed_path)
        self._refresh_tree()
        self.status_text.set(f"Signed {document.name}")

    # ── Verification ─────────────────────────────────────────────

    def verify_selected(self) -> None:
        from tkinter import messagebox

        doc = self._selected_document()
        if doc is None:
            return
        target = verification_target(doc)
        result = self.backend.verify(target)
        if not result.is_valid:
            messagebox.showwarning(_TITLE, f"{target.name}\n\nNot verified: {result.reason}")
            return
        info = result.info
        fields = info.get("signatureFields", [])
        messagebox.showinfo(
            _TITLE,
            f"{target.name}\n\n"
            f"Signer: {info.get('signer', 'Unknown')}\n"
            f"Signed: {info.get('signatureDate', '')}\n"
            f"Fields: {len(fields)}\n\n"
            f"Checked {result.verification_date}",
        )


def main() -> None:
    """Launch the WinSign GUI."""
    ok, err = check_tkinter()
    if not ok:
        print(f"ERROR: {err}", file=sys.stderr)
        sys.exit(1)

    # Windows: must be called before tk.Tk() so the OS reports real DPI
    enable_dpi_awareness()

    import tkinter as tk
    from tkinter import ttk

    root = tk.Tk()
    root.withdraw()

    style = ttk.Style(root)
    available = style.theme_names()
    for preferred in ("aqua", "vista", "clam", "default"):
        if preferred in available:
            style.theme_use(preferred)
            break

    _app = WinSignApp(root)  # must stay alive during mainloop

    root.mainloop()


if __name__ == "__main__":
    main()
