"""Signing and saving workflow -- validation and background execution."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import tkinter as tk
    from collections.abc import Callable, Sequence

    from ...core.backend import SigningBackend
    from ...core.models import Field

from ...core.backend import SaveResult, SigningResult
from ..helpers import format_size_kb
from .utils import run_in_thread

_logger = logging.getLogger(__name__)

_TITLE = "WinSign"


def start_signing(
    root: tk.Misc,
    backend: SigningBackend,
    pdf_path: str | Path,
    fields: Sequence[Field],
    *,
    on_done: Callable[[SigningResult], None],
    unit_scale: float = 1.0,
) -> bool:
    """Validate inputs and sign in a background thread.

    ``fields`` must be a snapshot; the worker never reads editor state.

    Returns:
        False if validation failed and nothing was started.
    """
    from tkinter import messagebox

    if not fields:
        messagebox.showwarning(_TITLE, "Place at least one signature before signing.")
        return False
    if not Path(pdf_path).is_file():
        messagebox.showerror(_TITLE, f"File not found:\n{pdf_path}")
        return False

    snapshot = tuple(fields)
    _logger.info("Signing %s with %d field(s)", Path(pdf_path).name, len(snapshot))

    def _on_error(e: Exception) -> None:
        _logger.error("Signing worker failed: %s", e)
        on_done(SigningResult(ok=False, error_message=str(e)))

    run_in_thread(
        root,
        lambda: backend.sign(pdf_path, snapshot, unit_scale=unit_scale),
        on_done,
        _on_error,
    )
    return True


def start_saving(
    root: tk.Misc,
    backend: SigningBackend,
    source: str | Path,
    destination: str | Path | None,
    *,
    on_done: Callable[[SaveResult], None],
) -> None:
    """Copy a signed document in a background thread.

    A ``None`` destination (picker dismissed) completes immediately as a
    cancellation.
    """
    if destination is None:
        on_done(backend.save(source, None))
        return

    def _on_error(e: Exception) -> None:
        on_done(SaveResult(ok=False, error_message=str(e)))

    run_in_thread(root, lambda: backend.save(source, destination), on_done, _on_error)


def describe_signing_result(result: SigningResult) -> tuple[bool, str]:
    """Map a SigningResult to (success, user-facing message)."""
    if result.ok and result.signed_path is not None:
        return True, f"Signed! -> {result.signed_path.name} ({format_size_kb(result.output_size)})"
    message = result.error_message or "Signing failed"
    if "Permission denied" in message:
        return False, f"{message}\n\nTry moving the document to a writable folder."
    return False, f"Error: {message}"


def describe_save_result(result: SaveResult) -> tuple[bool, str] | None:
    """Map a SaveResult to (success, message); None for a silent cancellation."""
    if result.cancelled:
        return None
    if result.ok and result.saved_path is not None:
        return True, f"Saved to {result.saved_path}"
    return False, f"Error: {result.error_message or 'Save failed'}"
