"""
Common CLI and GUI helper functions for WinSign.
"""

from __future__ import annotations

import os
import sys
import tempfile
from pathlib import Path

from ..constants import METADATA_SUFFIX, SIGNED_SUFFIX

__all__ = [
    "atomic_write",
    "confirm_choice",
    "default_output_path",
    "format_size_kb",
    "metadata_path_for",
    "parse_field_spec",
    "safe_input",
    "safe_read_file",
]

_BYTES_PER_KB = 1024


def format_size_kb(size_bytes: int) -> str:
    """Format a byte count as a human-readable KB string (e.g. '123.4 KB')."""
    return f"{size_bytes / _BYTES_PER_KB:.1f} KB"


def default_output_path(pdf_path: Path) -> Path:
    """Compute default output path for a signed PDF: '<stem>_signed<ext>'."""
    suffix = pdf_path.suffix or ".pdf"
    return pdf_path.with_name(f"{pdf_path.stem}{SIGNED_SUFFIX}{suffix}")


def metadata_path_for(signed_path: Path) -> Path:
    """Sidecar metadata path: '<stem>_signature_metadata.json'."""
    return signed_path.with_name(f"{signed_path.stem}{METADATA_SUFFIX}")


def parse_field_spec(spec: str) -> tuple[int, float, float, float, float]:
    """Parse a ``PAGE,X,Y,W,H`` field specifier.

    Coordinates are PDF points from the page's top-left corner.

    Raises:
        ValueError: Wrong number of parts, non-numeric values, page < 1,
            or non-positive size.
    """
    parts = [p.strip() for p in spec.split(",")]
    if len(parts) != 5:
        raise ValueError(f"Expected PAGE,X,Y,W,H, got {spec!r}")
    try:
        page = int(parts[0])
        x, y, w, h = (float(p) for p in parts[1:])
    except ValueError as exc:
        raise ValueError(f"Invalid field {spec!r}: {exc}") from exc
    if page < 1:
        raise ValueError(f"Page number must be 1 or greater, got {page}")
    if w <= 0 or h <= 0:
        raise ValueError(f"Field size must be positive, got {w}x{h}")
    return page, x, y, w, h


def safe_input(prompt: str) -> str | None:
    """Prompt user for input, returning None on EOF/KeyboardInterrupt."""
    try:
        return input(prompt).strip()
    except (EOFError, KeyboardInterrupt):
        print()
        return None


def confirm_choice(message: str, default_yes: bool = True) -> bool:
    """
    Prompt user for yes/no confirmation.

    Args:
        message: Question to ask the user (without the [Y/n] suffix).
        default_yes: If True, empty input defaults to yes. If False, defaults to no.

    Returns:
        True if the user confirmed, False otherwise.
    """
    suffix = "[Y/n]" if default_yes else "[y/N]"
    try:
        answer = input(f"{message} {suffix} ").strip().lower()
    except (EOFError, KeyboardInterrupt):
        print()
        return False

    if default_yes:
        return answer in ("", "y", "yes")
    else:
        return answer in ("y", "yes")


def safe_read_file(path: Path, kind: str = "file") -> bytes | None:
    """
    Read a file with uniform error handling.

    Returns:
        File contents as bytes, or None if the file doesn't exist or can't be read.
    """
    if not path.exists():
        print(f"Error: {kind} not found: {path}", file=sys.stderr)
        return None

    try:
        return path.read_bytes()
    except OSError as e:
        print(f"Error reading {kind}: {e}", file=sys.stderr)
        return None


def atomic_write(path: Path, data: bytes) -> None:
    """Write data to a file atomically using temp file + rename.

    Prevents partial writes from leaving corrupt output files if
    the process is interrupted mid-write (e.g., disk full, Ctrl-C).
    """
    fd, tmp_path = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
    tmp = Path(tmp_path)
    try:
        os.write(fd, data)
        os.fsync(fd)
        os.close(fd)
        fd = -1
        tmp.replace(path)
    except Exception:
        if fd >= 0:
            os.close(fd)
        tmp.unlink(missing_ok=True)
        raise
