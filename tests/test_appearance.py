"""Tests for winsign.core.appearance -- payload construction and image prep."""

from __future__ import annotations

import io
import zlib

import pytest
from PIL import Image

from winsign.core.appearance import (
    DEFAULT_SIGNATURE_FONT,
    SIGNATURE_FONTS,
    SignaturePalette,
    drawn_signature,
    image_signature,
    load_signature_image,
    prepare_for_pdf,
    remove_background,
    render_strokes,
    render_typed_preview,
    typed_signature,
)
from winsign.core.models import DrawnSignature, ImageSignature, TypedSignature, payload_kind


def _decode(png: bytes) -> Image.Image:
    return Image.open(io.BytesIO(png))


# ── Background removal ────────────────────────────────────────────


@pytest.mark.parametrize(
    ("color", "transparent"),
    [
        ((255, 255, 255), True),  # paper white
        ((210, 205, 215), True),  # near-white, small colour cast
        ((185, 170, 190), True),  # light gray: every channel above 160
        ((230, 150, 150), False),  # bright but tinted
        ((120, 120, 120), False),  # mid gray
        ((10, 10, 10), False),  # ink
    ],
)
def test_remove_background_thresholds(color, transparent):
    out = remove_background(Image.new("RGB", (2, 2), color))
    assert out.mode == "RGBA"
    assert (out.getpixel((0, 0))[3] == 0) is transparent


def test_remove_background_darkens_ink():
    out = remove_background(Image.new("RGB", (1, 1), (50, 60, 10)))
    assert out.getpixel((0, 0)) == (30, 40, 0, 255)


def test_remove_background_keeps_mid_tones():
    out = remove_background(Image.new("RGB", (1, 1), (120, 120, 120)))
    assert out.getpixel((0, 0)) == (120, 120, 120, 255)


def test_remove_background_leaves_input_untouched():
    src = Image.new("RGB", (1, 1), (255, 255, 255))
    remove_background(src)
    assert src.getpixel((0, 0)) == (255, 255, 255)


# ── Uploaded images ───────────────────────────────────────────────


def test_load_signature_image_strips_paper(tmp_path):
    img = Image.new("RGB", (20, 10), (255, 255, 255))
    img.putpixel((5, 5), (0, 0, 0))
    path = tmp_path / "scan.png"
    img.save(path, format="PNG")
    result = _decode(load_signature_image(path))
    assert result.format == "PNG"
    assert result.getpixel((0, 0))[3] == 0
    assert result.getpixel((5, 5))[3] == 255


def test_load_signature_image_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_signature_image(tmp_path / "nope.png")


def test_load_signature_image_empty(tmp_path):
    path = tmp_path / "empty.png"
    path.write_bytes(b"")
    with pytest.raises(ValueError, match="empty"):
        load_signature_image(path)


def test_load_signature_image_not_an_image(tmp_path):
    path = tmp_path / "notes.png"
    path.write_text("hello")
    with pytest.raises(ValueError, match="Cannot load image"):
        load_signature_image(path)


def test_image_signature_label(tmp_path, signature_png):
    path = tmp_path / "sig.png"
    path.write_bytes(signature_png)
    payload = image_signature(path)
    assert isinstance(payload, ImageSignature)
    assert payload.label.startswith("Image Signature ")
    assert payload_kind(payload) == "image"


# ── PDF preparation ───────────────────────────────────────────────


def test_prepare_for_pdf_splits_alpha(png_factory):
    data = prepare_for_pdf(png_factory(30, 10, color=(0, 0, 0, 128)))
    assert (data["width"], data["height"], data["bpc"]) == (30, 10, 8)
    assert len(zlib.decompress(data["samples"])) == 30 * 10 * 3
    assert set(zlib.decompress(data["smask"])) == {128}


def test_prepare_for_pdf_opaque_has_no_mask():
    buf = io.BytesIO()
    Image.new("RGB", (8, 8), (10, 20, 30)).save(buf, format="PNG")
    assert prepare_for_pdf(buf.getvalue())["smask"] is None


def test_prepare_for_pdf_downscales(png_factory):
    data = prepare_for_pdf(png_factory(1200, 300), max_px=600)
    assert (data["width"], data["height"]) == (600, 150)


def test_prepare_for_pdf_rejects_garbage():
    with pytest.raises(ValueError):
        prepare_for_pdf(b"\x89PNG not really")
    with pytest.raises(ValueError, match="empty"):
        prepare_for_pdf(b"")


# ── Drawn signatures ──────────────────────────────────────────────


def test_render_strokes_crops_to_ink():
    png = render_strokes([[(50, 50), (100, 60)]], 400, 160)
    img = _decode(png)
    assert img.mode == "RGBA"
    assert img.width < 400
    assert img.height < 160
    assert img.getbbox() is not None


def test_render_strokes_uncropped_keeps_pad_size():
    img = _decode(render_strokes([[(10, 10)]], 40, 20, crop=False))
    assert img.size == (40, 20)
    assert img.getpixel((10, 10))[3] == 255


def test_render_strokes_nothing_drawn():
    with pytest.raises(ValueError, match="Nothing drawn"):
        render_strokes([], 100, 100)
    with pytest.raises(ValueError, match="Nothing drawn"):
        render_strokes([[], []], 100, 100)


def test_drawn_signature_payload():
    payload = drawn_signature([[(1, 1), (30, 20)]], 100, 50)
    assert isinstance(payload, DrawnSignature)
    assert payload.label.startswith("Drawn Signature ")
    assert payload.kind == "draw"


# ── Typed signatures ──────────────────────────────────────────────


def test_typed_signature_defaults():
    payload = typed_signature("  Jane Doe ")
    assert payload == TypedSignature(
        text="Jane Doe", font=DEFAULT_SIGNATURE_FONT, label="Text: Jane Doe"
    )


def test_typed_signature_rejects_blank_and_unknown_font():
    with pytest.raises(ValueError, match="empty"):
        typed_signature("   ")
    with pytest.raises(ValueError, match="Unknown signature font"):
        typed_signature("Jane", "Comic Sans")


def test_typed_preview_renders_without_installed_font():
    img = render_typed_preview(typed_signature("Jane", SIGNATURE_FONTS[-1]))
    assert img.mode == "RGBA"
    assert img.getbbox() is not None


# ── Palette ───────────────────────────────────────────────────────


def test_palette_add_selects_by_default():
    palette = SignaturePalette()
    first = palette.add(typed_signature("A"))
    second = palette.add(typed_signature("B"), select=False)
    assert len(palette) == 2
    assert palette.selected == first
    assert [e.id for e in palette] == [first.id, second.id]


def test_palette_remove_clears_selection():
    palette = SignaturePalette()
    entry = palette.add(typed_signature("A"))
    palette.remove(entry.id)
    assert palette.selected is None
    assert len(palette) == 0
    with pytest.raises(KeyError):
        palette.remove(entry.id)


def test_palette_select_unknown():
    palette = SignaturePalette()
    with pytest.raises(KeyError):
        palette.select("missing")
    entry = palette.add(typed_signature("A"), select=False)
    assert palette.select(entry.id) == entry
    palette.clear_selection()
    assert palette.selected is None
