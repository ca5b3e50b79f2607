"""Modal dialogs -- About information and signer identity."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import tkinter as tk

from ...config import get_signer_identity, save_signer_identity
from ...constants import __version__
from ...errors import ConfigError

_TITLE = "WinSign"


def about_footer(parent: tk.Widget, root: tk.Misc, row: int) -> None:
    """Add a small 'About' link at the bottom of a frame."""
    from tkinter import ttk

    link = ttk.Label(parent, text="About WinSign", foreground="gray", cursor="hand2")
    link.grid(row=row, column=0, columnspan=3, pady=(8, 0))
    link.bind("<Button-1>", lambda _e: show_about(root))


def show_about(root: tk.Misc) -> None:
    """Show an About dialog with the version."""
    import tkinter as tk
    from tkinter import ttk

    dlg = tk.Toplevel(root)
    dlg.withdraw()
    dlg.title("About WinSign")
    dlg.resizable(False, False)
    dlg.transient(root.winfo_toplevel())
    dlg.grab_set()

    frame = ttk.Frame(dlg, padding=24)
    frame.grid(sticky="nsew")

    ttk.Label(frame, text="WinSign", font=("", 16, "bold")).grid(row=0, column=0, pady=(0, 4))
    ttk.Label(frame, text=f"Version {__version__}").grid(row=1, column=0, pady=(0, 12))
    ttk.Label(
        frame,
        text="Place drawn, typed, or scanned signatures\non PDF pages and burn them in.",
        justify="center",
    ).grid(row=2, column=0, pady=(0, 12))
    ttk.Button(frame, text="OK", command=dlg.destroy).grid(row=3, column=0)

    from . import center_on_parent

    center_on_parent(dlg, root.winfo_toplevel())


def identity_dialog(root: tk.Misc) -> bool:
    """Edit the signer identity recorded in signature metadata.

    Returns:
        True if the identity was saved, False if cancelled.
    """
    import tkinter as tk
    from tkinter import messagebox, ttk

    identity = get_signer_identity()

    dlg = tk.Toplevel(root)
    dlg.withdraw()
    dlg.title("Signer identity")
    dlg.resizable(False, False)
    dlg.transient(root.winfo_toplevel())
    dlg.grab_set()

    frame = ttk.Frame(dlg, padding=16)
    frame.grid(sticky="nsew")

    signer_var = tk.StringVar(value=identity.signer)
    reason_var = tk.StringVar(value=identity.reason)
    location_var = tk.StringVar(value=identity.location)
    saved = [False]

    for row, (label, var) in enumerate(
        (("Signer:", signer_var), ("Reason:", reason_var), ("Location:", location_var))
    ):
        ttk.Label(frame, text=label).grid(row=row, column=0, sticky="e", padx=(0, 8), pady=4)
        ttk.Entry(frame, textvariable=var, width=34).grid(row=row, column=1, sticky="w", pady=4)

    def _on_save() -> None:
        try:
            save_signer_identity(signer_var.get(), reason_var.get(), location_var.get())
        except ConfigError as e:
            messagebox.showerror(_TITLE, str(e), parent=dlg)
            return
        saved[0] = True
        dlg.destroy()

    buttons = ttk.Frame(frame)
    buttons.grid(row=3, column=0, columnspan=2, sticky="e", pady=(12, 0))
    ttk.Button(buttons, text="Cancel", command=dlg.destroy).grid(row=0, column=0, padx=(0, 8))
    ttk.Button(buttons, text="Save", command=_on_save).grid(row=0, column=1)
    dlg.bind("<Return>", lambda _e: _on_save())
    dlg.bind("<Escape>", lambda _e: dlg.destroy())

    from . import center_on_parent

    center_on_parent(dlg, root.winfo_toplevel())
    dlg.wait_window()
    return saved[0]
