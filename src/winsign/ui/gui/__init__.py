"""WinSign GUI -- tkinter-based document dashboard and signature editor."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import tkinter as tk

from .app import main

__all__ = ["main"]


def center_on_screen(window: tk.Tk | tk.Toplevel) -> None:
    """Center a window on screen and reveal it.

    Call ``window.withdraw()`` before building the UI, then call this
    function once layout is ready.
    """
    window.update_idletasks()
    w = window.winfo_width()
    h = window.winfo_height()
    x = (window.winfo_screenwidth() - w) // 2
    y = (window.winfo_screenheight() - h) // 2
    window.geometry(f"+{x}+{y}")
    window.deiconify()


def center_on_parent(window: tk.Toplevel, parent: tk.Misc) -> None:
    """Center a child window over its parent and reveal it."""
    window.update_idletasks()
    x = parent.winfo_x() + (parent.winfo_width() - window.winfo_reqwidth()) // 2
    y = parent.winfo_y() + (parent.winfo_height() - window.winfo_reqheight()) // 2
    window.geometry(f"+{max(0, x)}+{max(0, y)}")
    window.deiconify()
