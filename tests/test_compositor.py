"""Tests for winsign.core.pdf -- burn-in compositor and page boxes."""

from __future__ import annotations

import io

import pikepdf
import pytest

from winsign.core.models import DrawnSignature, Field, ImageSignature, Rect, TypedSignature
from winsign.core.pdf import PLACEHOLDER_TEXT, burn_in, fmt_num, pdf_string
from winsign.core.pdf.position import get_page_box, to_pdf_rect
from winsign.errors import PDFError


def _ops(pdf: pikepdf.Pdf, page_index: int = 0) -> list[tuple[str, list]]:
    page = pdf.pages[page_index]
    return [
        (str(operator), list(operands))
        for operands, operator in pikepdf.parse_content_stream(page)
    ]


def _cm_matrices(pdf: pikepdf.Pdf, page_index: int = 0) -> list[tuple[float, ...]]:
    return [tuple(float(v) for v in operands) for op, operands in _ops(pdf, page_index) if op == "cm"]


def _shown_text(pdf: pikepdf.Pdf, page_index: int = 0) -> list[str]:
    return [bytes(operands[0]).decode("cp1252") for op, operands in _ops(pdf, page_index) if op == "Tj"]


def _open(data: bytes) -> pikepdf.Pdf:
    return pikepdf.open(io.BytesIO(data))


@pytest.fixture
def image_payload(signature_png):
    return ImageSignature(png=signature_png, label="Image Signature")


# ── Vertical flip ─────────────────────────────────────────────────


def test_image_drawn_at_flipped_rect(valid_pdf_bytes, image_payload):
    field = Field.create("doc", 1, Rect(100, 200, 150, 60), image_payload)
    with _open(burn_in(valid_pdf_bytes, [field])) as pdf:
        # 792 - 200 - 60 = 532
        assert _cm_matrices(pdf) == [pytest.approx((150, 0, 0, 60, 100, 532))]
        xobjects = pdf.pages[0].obj.Resources.XObject
        (name,) = list(xobjects.keys())
        image = xobjects[name]
        assert image.Subtype == "/Image"
        assert "/SMask" in image


def test_field_at_top_left_lands_at_page_top(valid_pdf_bytes, image_payload):
    field = Field.create("doc", 1, Rect(0, 0, 150, 60), image_payload)
    with _open(burn_in(valid_pdf_bytes, [field])) as pdf:
        (matrix,) = _cm_matrices(pdf)
        assert matrix[4:] == pytest.approx((0, 732))


def test_flip_respects_cropbox_origin(pdf_factory, image_payload):
    src = pikepdf.open(io.BytesIO(pdf_factory((612, 792))))
    src.pages[0].obj["/CropBox"] = pikepdf.Array([50, 100, 550, 700])
    buf = io.BytesIO()
    src.save(buf)
    field = Field.create("doc", 1, Rect(10, 20, 100, 50), image_payload)
    with _open(burn_in(buf.getvalue(), [field])) as pdf:
        (matrix,) = _cm_matrices(pdf)
        # x = 50 + 10; y = 100 + 600 - 20 - 50
        assert matrix[4:] == pytest.approx((60, 630))


def test_unit_scale_divides_stored_rect(valid_pdf_bytes, image_payload):
    """Legacy canvas-unit rectangles diverge from point rectangles by 1/0.75."""
    field = Field.create("doc", 1, Rect(75, 150, 150, 60), image_payload)
    with _open(burn_in(valid_pdf_bytes, [field], unit_scale=0.75)) as pdf:
        (legacy,) = _cm_matrices(pdf)
    with _open(burn_in(valid_pdf_bytes, [field])) as pdf:
        (points,) = _cm_matrices(pdf)
    assert legacy == pytest.approx((200, 0, 0, 80, 100, 792 - 200 - 80))
    assert points == pytest.approx((150, 0, 0, 60, 75, 792 - 150 - 60))


def test_unit_scale_must_be_positive(valid_pdf_bytes):
    with pytest.raises(ValueError):
        burn_in(valid_pdf_bytes, [], unit_scale=0)


# ── Payload kinds ─────────────────────────────────────────────────


def test_drawn_signature_embedded_as_image(valid_pdf_bytes, signature_png):
    field = Field.create("doc", 1, Rect(10, 10, 150, 60), DrawnSignature(signature_png, "Drawn"))
    with _open(burn_in(valid_pdf_bytes, [field])) as pdf:
        assert len(_cm_matrices(pdf)) == 1


def test_typed_signature_uses_helvetica(valid_pdf_bytes):
    payload = TypedSignature(text="Jane Doe", font="Great Vibes", label="Text: Jane Doe")
    field = Field.create("doc", 1, Rect(100, 100, 150, 60), payload)
    with _open(burn_in(valid_pdf_bytes, [field])) as pdf:
        assert _shown_text(pdf) == ["Jane Doe"]
        ops = _ops(pdf)
        (tf,) = [operands for op, operands in ops if op == "Tf"]
        assert float(tf[1]) == 20  # min(60 / 2, 20)
        (td,) = [operands for op, operands in ops if op == "Td"]
        # x + 5, y + h/2 - size/2 with y = 792 - 100 - 60
        assert (float(td[0]), float(td[1])) == pytest.approx((105, 632 + 30 - 10))
        fonts = pdf.pages[0].obj.Resources.Font
        (font,) = [fonts[k] for k in fonts.keys()]
        assert font.BaseFont == "/Helvetica"


def test_small_typed_field_shrinks_text(valid_pdf_bytes):
    payload = TypedSignature(text="J", font="Allura", label="Text: J")
    field = Field.create("doc", 1, Rect(0, 0, 100, 30), payload)
    with _open(burn_in(valid_pdf_bytes, [field])) as pdf:
        (tf,) = [operands for op, operands in _ops(pdf) if op == "Tf"]
        assert float(tf[1]) == 15


def test_undecodable_image_gets_placeholder(valid_pdf_bytes):
    bad = ImageSignature(png=b"not an image", label="broken")
    good = TypedSignature(text="OK", font="Satisfy", label="Text: OK")
    fields = [
        Field.create("doc", 1, Rect(0, 0, 150, 60), bad),
        Field.create("doc", 1, Rect(0, 100, 150, 60), good),
    ]
    with _open(burn_in(valid_pdf_bytes, fields)) as pdf:
        assert _shown_text(pdf) == [PLACEHOLDER_TEXT, "OK"]
        assert _cm_matrices(pdf) == []


def test_fields_on_missing_page_are_skipped(valid_pdf_bytes, image_payload):
    fields = [
        Field.create("doc", 1, Rect(0, 0, 150, 60), image_payload),
        Field.create("doc", 5, Rect(0, 0, 150, 60), image_payload),
    ]
    with _open(burn_in(valid_pdf_bytes, fields)) as pdf:
        assert len(pdf.pages) == 1
        assert len(_cm_matrices(pdf)) == 1


def test_fields_go_to_their_own_page(two_page_pdf_bytes, image_payload):
    field = Field.create("doc", 2, Rect(0, 0, 150, 60), image_payload)
    with _open(burn_in(two_page_pdf_bytes, [field])) as pdf:
        assert _cm_matrices(pdf, 0) == []
        assert len(_cm_matrices(pdf, 1)) == 1


def test_original_content_is_preserved(valid_pdf_bytes, image_payload):
    field = Field.create("doc", 1, Rect(0, 0, 150, 60), image_payload)
    out = burn_in(valid_pdf_bytes, [field])
    assert out != valid_pdf_bytes
    with _open(valid_pdf_bytes) as original:
        assert _cm_matrices(original) == []


def test_invalid_pdf_raises():
    with pytest.raises(PDFError):
        burn_in(b"%PDF-1.4 garbage", [])


# ── Helpers ───────────────────────────────────────────────────────


def test_to_pdf_rect_flip():
    assert to_pdf_rect(Rect(10, 20, 100, 50), (0, 0, 612, 792)) == pytest.approx((10, 722, 100, 50))


def test_get_page_box_prefers_cropbox(pdf_factory):
    with _open(pdf_factory((612, 792))) as pdf:
        assert get_page_box(pdf.pages[0]) == pytest.approx((0, 0, 612, 792))
        pdf.pages[0].obj["/CropBox"] = pikepdf.Array([10, 20, 300, 400])
        assert get_page_box(pdf.pages[0]) == pytest.approx((10, 20, 300, 400))


def test_fmt_num_and_pdf_string():
    assert fmt_num(1.0) == "1"
    assert fmt_num(0.12345) == "0.1235"
    assert fmt_num(-0.0) == "0"
    assert pdf_string("a(b)\\") == "a\\(b\\)\\\\"
    assert pdf_string("日本") == "??"
