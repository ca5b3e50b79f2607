"""PDF burn-in, page boxes, and low-level object construction."""

from .compositor import PLACEHOLDER_TEXT, burn_in
from .objects import fmt_num, pdf_string
from .position import get_page_box, to_pdf_rect

__all__ = [
    "PLACEHOLDER_TEXT",
    "burn_in",
    "fmt_num",
    "get_page_box",
    "pdf_string",
    "to_pdf_rect",
]
