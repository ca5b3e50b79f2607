"""Low-level PDF object construction for burned-in signatures.

Content-stream operators, the standard Helvetica font dictionary, and
image XObjects with soft masks.  Placement and the page walk live in
compositor.py; page boxes in position.py.
"""

from __future__ import annotations

__all__ = [
    "draw_image_ops",
    "draw_text_ops",
    "fmt_num",
    "make_helvetica",
    "make_image_xobject",
    "pdf_string",
]

import logging
from typing import TYPE_CHECKING

from .. import require_pikepdf as _require_pikepdf

if TYPE_CHECKING:
    import pikepdf

    from ..appearance.image import SignatureImageData

_logger = logging.getLogger(__name__)

# Text is set with the standard 14 Helvetica in WinAnsiEncoding
_TEXT_ENCODING = "cp1252"


# ── PDF string/number helpers ────────────────────────────────────────


def pdf_string(text: str) -> str:
    """Escape text for a PDF literal string in WinAnsiEncoding.

    Handles backslash, parentheses, and control characters.  Characters
    outside Windows-1252 are replaced with '?'.

    Logs a warning if any characters are replaced, as this indicates
    data loss in the PDF output.
    """
    result: list[str] = []
    replaced_count = 0
    for char in text:
        code = ord(char)
        if char == "\\":
            result.append("\\\\")
        elif char == "(":
            result.append("\\(")
        elif char == ")":
            result.append("\\)")
        elif char == "\n":
            result.append("\\n")
        elif char == "\r":
            result.append("\\r")
        elif char == "\t":
            result.append("\\t")
        elif code < 0x20 or code == 0x7F:
            result.append(f"\\{code:03o}")
        else:
            try:
                char.encode(_TEXT_ENCODING)
            except UnicodeEncodeError:
                result.append("?")
                replaced_count += 1
            else:
                result.append(char)
    if replaced_count > 0:
        _logger.warning(
            "pdf_string: %d character(s) outside WinAnsi replaced with '?' in: %r",
            replaced_count,
            text,
        )
    return "".join(result)


def fmt_num(value: float) -> str:
    """Format a number for a content stream (no exponent, trimmed zeros)."""
    text = f"{value:.4f}".rstrip("0").rstrip(".")
    return "0" if text in ("", "-0") else text


# ── Content-stream fragments ─────────────────────────────────────────


def draw_image_ops(name: str, x: float, y: float, w: float, h: float) -> bytes:
    """Paint image XObject ``name`` into the rectangle via a ``cm`` matrix."""
    return (
        f"q\n{fmt_num(w)} 0 0 {fmt_num(h)} {fmt_num(x)} {fmt_num(y)} cm\n{name} Do\nQ\n"
    ).encode("ascii")


def draw_text_ops(font_name: str, size: float, x: float, y: float, text: str) -> bytes:
    """Set one line of black text with its baseline origin at (x, y)."""
    return (
        f"q\nBT\n0 g\n{font_name} {fmt_num(size)} Tf\n"
        f"{fmt_num(x)} {fmt_num(y)} Td\n({pdf_string(text)}) Tj\nET\nQ\n"
    ).encode(_TEXT_ENCODING)


# ── Objects ──────────────────────────────────────────────────────────


def make_helvetica(pdf: pikepdf.Pdf) -> pikepdf.Object:
    """Indirect Type1 Helvetica font dictionary."""
    pikepdf = _require_pikepdf()
    return pdf.make_indirect(
        pikepdf.Dictionary(
            {
                "/Type": pikepdf.Name("/Font"),
                "/Subtype": pikepdf.Name("/Type1"),
                "/BaseFont": pikepdf.Name("/Helvetica"),
                "/Encoding": pikepdf.Name("/WinAnsiEncoding"),
            }
        )
    )


def _flate_stream(pdf: pikepdf.Pdf, compressed: bytes, entries: dict[str, object]) -> pikepdf.Stream:
    pikepdf = _require_pikepdf()
    stream = pikepdf.Stream(pdf, b"")
    stream.write(compressed, filter=pikepdf.Name("/FlateDecode"))
    for key, value in entries.items():
        stream[key] = value
    return stream


def make_image_xobject(pdf: pikepdf.Pdf, data: SignatureImageData) -> pikepdf.Stream:
    """Image XObject (DeviceRGB) with an optional DeviceGray soft mask."""
    pikepdf = _require_pikepdf()
    common = {
        "/Type": pikepdf.Name("/XObject"),
        "/Subtype": pikepdf.Name("/Image"),
        "/Width": data["width"],
        "/Height": data["height"],
        "/BitsPerComponent": data["bpc"],
    }
    image = _flate_stream(
        pdf,
        data["samples"],
        {**common, "/ColorSpace": pikepdf.Name("/DeviceRGB")},
    )
    if data["smask"] is not None:
        image["/SMask"] = _flate_stream(
            pdf,
            data["smask"],
            {**common, "/ColorSpace": pikepdf.Name("/DeviceGray")},
        )
    return image
