"""Signature imagery: drawn, typed, and uploaded payloads plus the saved palette."""

from .drawn import Stroke, drawn_signature, render_strokes
from .image import (
    SignatureImageData,
    image_signature,
    load_signature_image,
    prepare_for_pdf,
    remove_background,
)
from .palette import PaletteEntry, SignaturePalette
from .typed import DEFAULT_SIGNATURE_FONT, SIGNATURE_FONTS, render_typed_preview, typed_signature

__all__ = [
    "DEFAULT_SIGNATURE_FONT",
    "SIGNATURE_FONTS",
    "PaletteEntry",
    "SignatureImageData",
    "SignaturePalette",
    "Stroke",
    "drawn_signature",
    "image_signature",
    "load_signature_image",
    "prepare_for_pdf",
    "remove_background",
    "render_strokes",
    "render_typed_preview",
    "typed_signature",
]
