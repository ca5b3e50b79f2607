"""GUI utility functions for WinSign.

Platform helpers, display-density detection, and tkinter availability
checks.  Kept apart from the windows so they stay importable without a
display.
"""

from __future__ import annotations

import logging
import platform
import subprocess
import sys
import threading
from pathlib import Path
from typing import TYPE_CHECKING, TypeVar

if TYPE_CHECKING:
    import tkinter as tk
    from collections.abc import Callable

_T = TypeVar("_T")
_logger = logging.getLogger(__name__)

# Tk reports pixels per inch; 96 is the density at which one pixel is one
# CSS-style device-independent pixel.
_BASELINE_DPI = 96.0


def enable_dpi_awareness() -> None:
    """Enable system DPI awareness (call BEFORE creating tk.Tk).

    Without it Windows reports 96 DPI for every monitor and stretches the
    window bitmap, which blurs rendered pages.  No-op on other platforms.
    """
    if platform.system() != "Windows":
        return
    try:
        import ctypes

        ctypes.windll.shcore.SetProcessDpiAwareness(1)  # pyright: ignore[reportAttributeAccessIssue,reportUnknownMemberType]
    except (AttributeError, OSError):
        try:
            import ctypes

            ctypes.windll.user32.SetProcessDPIAware()  # pyright: ignore[reportAttributeAccessIssue,reportUnknownMemberType]
        except (AttributeError, OSError):
            _logger.debug("DPI awareness unavailable")


def device_pixel_ratio(widget: tk.Misc) -> float:
    """Physical pixels per logical pixel for the screen ``widget`` is on."""
    import tkinter as tk

    try:
        ratio = float(widget.winfo_fpixels("1i")) / _BASELINE_DPI
    except (tk.TclError, ValueError):
        return 1.0
    # Sub-baseline densities render at 1x; a page bitmap never shrinks
    # below its logical size.
    return max(1.0, round(ratio, 2))


def check_tkinter() -> tuple[bool, str]:
    """Check if tkinter is available; return (ok, error_message)."""
    try:
        __import__("tkinter")
        __import__("PIL.ImageTk")
    except ImportError:
        pass
    else:
        return True, ""

    system = platform.system()
    py_ver = f"{sys.version_info.major}.{sys.version_info.minor}"

    if system == "Darwin":
        hint = f"brew install python-tk@{py_ver}"
    elif system == "Linux":
        distro = ""
        try:
            distro = Path("/etc/os-release").read_text(encoding="utf-8").lower()
        except OSError:
            pass
        if "ubuntu" in distro or "debian" in distro:
            hint = f"sudo apt install python{py_ver}-tk"
        elif "fedora" in distro or "rhel" in distro:
            hint = "sudo dnf install python3-tkinter"
        elif "arch" in distro:
            hint = "sudo pacman -S tk"
        else:
            hint = f"Install the python{py_ver}-tk package for your distribution"
    else:
        hint = "Reinstall Python with Tk/Tcl support enabled"

    msg = (
        "tkinter (with Pillow's ImageTk) is not available in this Python installation.\n\n"
        f"To fix, run:\n  {hint}\n\n"
        f"Python: {sys.executable}\n"
        f"Version: {py_ver} ({system})"
    )
    return False, msg


def run_in_thread(
    root: tk.Misc,
    task_fn: Callable[[], _T],
    on_success: Callable[[_T], None],
    on_error: Callable[[Exception], None],
) -> None:
    """Run task_fn in a daemon thread, dispatch result to main thread."""

    def _worker():
        try:
            result = task_fn()
            root.after(0, lambda r=result: on_success(r))
        except Exception as e:
            _logger.debug("Background task failed: %s", e, exc_info=True)
            root.after(0, lambda err=e: on_error(err))

    threading.Thread(target=_worker, daemon=True).start()


def reveal_file(path: str | Path) -> None:
    """Open the file's parent folder and select it in the OS file manager."""
    p = Path(path)
    if not p.is_file():
        return
    system = platform.system()
    if system == "Darwin":
        cmd = ["open", "-R", str(p)]
    elif system == "Windows":
        cmd = ["explorer", "/select,", str(p.resolve())]
    else:
        cmd = ["xdg-open", str(p.parent)]
    try:
        subprocess.run(cmd, timeout=10, capture_output=True)
    except (OSError, subprocess.TimeoutExpired) as e:
        _logger.debug("Cannot reveal %s: %s", p, e)
