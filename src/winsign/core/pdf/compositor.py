"""
Burn-in compositor: paint signature imagery onto PDF pages.

Input is the original PDF bytes plus a frozen snapshot of fields; output
is new PDF bytes.  Nothing here reads or writes files.

Each field's stored rectangle (top-left origin, PDF points) is divided by
``unit_scale`` and flipped into bottom-left PDF space before drawing.
Drawn and uploaded signatures are embedded as image XObjects with an
alpha soft mask; typed signatures are set in Helvetica.  A field whose
imagery cannot be embedded gets a text placeholder instead, so one bad
payload never aborts the whole document.
"""

from __future__ import annotations

__all__ = ["PLACEHOLDER_TEXT", "burn_in"]

import io
import logging
from collections import defaultdict
from typing import TYPE_CHECKING

from ...errors import PDFError
from .. import require_pikepdf
from ..appearance.image import prepare_for_pdf
from ..models import DrawnSignature, ImageSignature, TypedSignature, payload_kind
from .objects import draw_image_ops, draw_text_ops, make_helvetica, make_image_xobject
from .position import get_page_box, to_pdf_rect

if TYPE_CHECKING:
    from collections.abc import Iterable

    import pikepdf

    from ..models import Field

_logger = logging.getLogger(__name__)

PLACEHOLDER_TEXT = "Signature"

# Typed text: size min(h / 2, 20), inset 5 pt from the left edge
_TEXT_MAX_SIZE = 20.0
_TEXT_INSET = 5.0

# Placeholder text: size min(h / 3, 16)
_PLACEHOLDER_MAX_SIZE = 16.0


class _PageCanvas:
    """Accumulates drawing operators and resources for one page."""

    def __init__(self, pdf: pikepdf.Pdf, page: pikepdf.Page) -> None:
        self.pdf = pdf
        self.page = page
        self.ops: list[bytes] = []
        self._font_name: str | None = None

    def font(self) -> str:
        if self._font_name is None:
            pikepdf = require_pikepdf()
            name = self.page.add_resource(
                make_helvetica(self.pdf), pikepdf.Name("/Font"), prefix="WSFont"
            )
            self._font_name = str(name)
        return self._font_name

    def image(self, xobject: pikepdf.Stream) -> str:
        pikepdf = require_pikepdf()
        return str(self.page.add_resource(xobject, pikepdf.Name("/XObject"), prefix="WSImg"))

    def flush(self) -> None:
        """Append the accumulated operators after the page's own content."""
        if not self.ops:
            return
        # Isolate the existing content's graphics state from ours
        self.page.contents_add(b"q\n", prepend=True)
        self.page.contents_add(b"\nQ\n" + b"".join(self.ops))


def _draw_placeholder(canvas: _PageCanvas, rect: tuple[float, float, float, float], text: str) -> None:
    x, y, _w, h = rect
    size = min(h / 3.0, _PLACEHOLDER_MAX_SIZE)
    canvas.ops.append(draw_text_ops(canvas.font(), size, x + _TEXT_INSET, y + h / 2.0, text))


def _draw_field(canvas: _PageCanvas, field: Field, rect: tuple[float, float, float, float]) -> None:
    x, y, w, h = rect
    payload = field.payload

    if isinstance(payload, (DrawnSignature, ImageSignature)):
        try:
            data = prepare_for_pdf(payload.png)
        except ValueError as exc:
            _logger.warning(
                "Field %s: cannot embed %s image (%s); using placeholder",
                field.id,
                payload.kind,
                exc,
            )
            _draw_placeholder(canvas, rect, PLACEHOLDER_TEXT)
            return
        name = canvas.image(make_image_xobject(canvas.pdf, data))
        canvas.ops.append(draw_image_ops(name, x, y, w, h))
        return

    if isinstance(payload, TypedSignature):
        size = min(h / 2.0, _TEXT_MAX_SIZE)
        baseline = y + h / 2.0 - size / 2.0
        canvas.ops.append(draw_text_ops(canvas.font(), size, x + _TEXT_INSET, baseline, payload.text))
        return

    _logger.warning(
        "Field %s: unsupported payload %r; using placeholder", field.id, payload_kind(payload)
    )
    _draw_placeholder(canvas, rect, PLACEHOLDER_TEXT)


def burn_in(pdf_bytes: bytes, fields: Iterable[Field], *, unit_scale: float = 1.0) -> bytes:
    """Composite every field onto its page and return the new PDF.

    Args:
        pdf_bytes: The unsigned document.
        fields: Field snapshot.  Rectangles are top-left origin.
        unit_scale: Divisor applied to every stored rectangle.  1.0 when
            fields carry PDF points; 0.75 reproduces callers that stored
            canvas units rendered at a fixed 0.75 zoom.

    Returns:
        The signed document's bytes.  The input is never modified.

    Raises:
        PDFError: ``pdf_bytes`` is not a readable PDF.
        ValueError: ``unit_scale`` is not positive.
    """
    if unit_scale <= 0:
        raise ValueError(f"unit_scale must be positive, got {unit_scale}")

    pikepdf = require_pikepdf()
    by_page: dict[int, list[Field]] = defaultdict(list)
    for f in fields:
        by_page[f.page_number].append(f)

    try:
        pdf = pikepdf.open(io.BytesIO(pdf_bytes))
    except pikepdf.PdfError as exc:
        raise PDFError(f"Cannot open PDF: {exc}") from exc

    with pdf:
        page_count = len(pdf.pages)
        for page_number in sorted(by_page):
            if not 1 <= page_number <= page_count:
                _logger.warning(
                    "Skipping %d field(s) on page %d: document has %d page(s)",
                    len(by_page[page_number]),
                    page_number,
                    page_count,
                )
                continue
            page = pdf.pages[page_number - 1]
            box = get_page_box(page)
            canvas = _PageCanvas(pdf, page)
            for f in by_page[page_number]:
                _draw_field(canvas, f, to_pdf_rect(f.rect.divided(unit_scale), box))
            canvas.flush()

        out = io.BytesIO()
        pdf.save(out)
        return out.getvalue()
