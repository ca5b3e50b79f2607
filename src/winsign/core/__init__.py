"""Core rendering, placement, and burn-in operations."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..errors import WinSignError

if TYPE_CHECKING:
    import types

__all__: list[str] = []


def require_pikepdf() -> types.ModuleType:
    """Lazily import pikepdf to avoid loading the C extension at startup.

    pikepdf is a required dependency; this defers the import for
    startup performance, not optionality.
    """
    try:
        import pikepdf
    except ImportError as exc:
        raise WinSignError(
            "pikepdf is required for this operation.\nInstall with: pip install pikepdf"
        ) from exc
    else:
        return pikepdf


def require_pymupdf() -> types.ModuleType:
    """Lazily import PyMuPDF, the page rasterizer."""
    try:
        import pymupdf
    except ImportError as exc:
        raise WinSignError(
            "PyMuPDF is required to render pages.\nInstall with: pip install PyMuPDF"
        ) from exc
    else:
        return pymupdf
