# pyright: reportUnknownMemberType=false
"""
Image loading and preparation for signature payloads.

Uploaded pictures of a handwritten signature usually sit on white or
light-gray paper.  :func:`remove_background` makes that paper transparent
and darkens the ink slightly, and :func:`load_signature_image` turns an
uploaded file into the PNG carried by an ``ImageSignature``.

At burn-in time :func:`prepare_for_pdf` decodes a payload PNG, downscales
it, and returns deflate-compressed RGB samples plus a separate alpha
channel ready for a PDF image XObject with a soft mask.
"""

from __future__ import annotations

__all__ = [
    "SignatureImageData",
    "image_signature",
    "load_signature_image",
    "open_image",
    "prepare_for_pdf",
    "remove_background",
    "to_png",
]

import io
import zlib
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, TypedDict

from ..models import ImageSignature

if TYPE_CHECKING:
    from PIL import Image


class SignatureImageData(TypedDict):
    """Data returned by prepare_for_pdf."""

    samples: bytes  # Deflate-compressed RGB pixel data
    smask: bytes | None  # Deflate-compressed alpha channel, or None if opaque
    width: int  # Pixel width
    height: int  # Pixel height
    bpc: int  # Bits per component (always 8)


# Maximum embedded image dimension in pixels.  Fields can be resized to
# several hundred points, so keep enough resolution for print.
_MAX_IMAGE_PX = 600

# Maximum input file size (5 MB).
_MAX_FILE_SIZE = 5 * 1024 * 1024

# Allowed image formats (Pillow format names).
_ALLOWED_FORMATS = {"PNG", "JPEG", "GIF", "BMP", "TIFF", "WEBP"}

# Maximum pixel count to prevent decompression bombs (CWE-400).
_MAX_IMAGE_PIXELS = 4000 * 4000

# Background removal thresholds (0-255 channel values)
_PAPER_BRIGHTNESS = 200  # near-white with little colour cast
_PAPER_MAX_CHANNEL_DIFF = 30
_LIGHT_GRAY_BRIGHTNESS = 180  # light gray paper, all channels high
_LIGHT_GRAY_MIN_CHANNEL = 160
_INK_BRIGHTNESS = 100  # below this, ink is darkened
_INK_DARKEN = 20


def open_image(data: bytes) -> Image.Image:
    """Decode image bytes, rejecting oversized or unsupported input.

    Raises:
        ValueError: Empty data, unknown format, or too many pixels.
    """
    if not data:
        raise ValueError("Signature image is empty")

    from PIL import Image

    try:
        img = Image.open(io.BytesIO(data))
    except OSError as exc:
        # UnidentifiedImageError is an OSError subclass
        raise ValueError(f"Cannot load image: {exc}") from exc

    # Image.open() is lazy: check header dimensions before decompression
    pixel_count = img.width * img.height
    if pixel_count > _MAX_IMAGE_PIXELS:
        img.close()
        raise ValueError(
            f"Image too large: {img.width}x{img.height} ({pixel_count:,} pixels). "
            f"Maximum: {_MAX_IMAGE_PIXELS:,} pixels."
        )
    if not img.format or img.format not in _ALLOWED_FORMATS:
        actual = img.format or "unknown"
        img.close()
        raise ValueError(
            f"Unsupported image format: {actual}. "
            f"Supported: {', '.join(sorted(_ALLOWED_FORMATS))}"
        )
    return img


def remove_background(img: Image.Image) -> Image.Image:
    """Make paper-coloured pixels transparent and darken the ink.

    A pixel becomes fully transparent when it is bright (average above
    200) with channels within 30 of each other, or when it is light gray
    (average above 180 and every channel above 160).  Remaining pixels
    darker than an average of 100 have each channel reduced by 20.

    Returns:
        A new RGBA image; the input is not modified.
    """
    from PIL import Image

    rgba = img.convert("RGBA")
    out = bytearray(rgba.tobytes())
    for i in range(0, len(out), 4):
        r, g, b = out[i], out[i + 1], out[i + 2]
        brightness = (r + g + b) / 3
        near_white = (
            brightness > _PAPER_BRIGHTNESS
            and abs(r - g) < _PAPER_MAX_CHANNEL_DIFF
            and abs(g - b) < _PAPER_MAX_CHANNEL_DIFF
            and abs(r - b) < _PAPER_MAX_CHANNEL_DIFF
        )
        light_gray = (
            brightness > _LIGHT_GRAY_BRIGHTNESS
            and r > _LIGHT_GRAY_MIN_CHANNEL
            and g > _LIGHT_GRAY_MIN_CHANNEL
            and b > _LIGHT_GRAY_MIN_CHANNEL
        )
        if near_white or light_gray:
            out[i + 3] = 0
        elif brightness < _INK_BRIGHTNESS:
            out[i] = max(0, r - _INK_DARKEN)
            out[i + 1] = max(0, g - _INK_DARKEN)
            out[i + 2] = max(0, b - _INK_DARKEN)
    return Image.frombytes("RGBA", rgba.size, bytes(out))


def to_png(img: Image.Image) -> bytes:
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def load_signature_image(image_path: str | Path, *, strip_background: bool = True) -> bytes:
    """Load an uploaded signature picture and return it as a transparent PNG.

    Args:
        image_path: Path to a PNG, JPEG, or other supported bitmap.
        strip_background: Apply :func:`remove_background`.

    Returns:
        PNG bytes suitable for an ``ImageSignature`` payload.

    Raises:
        FileNotFoundError: if image_path does not exist.
        ValueError: if the file is empty, too large, or not a supported image.
    """
    path = Path(image_path).resolve()
    if not path.exists():
        msg = f"Signature image not found: {path}"
        raise FileNotFoundError(msg)

    file_size = path.stat().st_size
    if file_size > _MAX_FILE_SIZE:
        msg = (
            f"Signature image too large: {file_size / 1024 / 1024:.1f} MB "
            f"(max {_MAX_FILE_SIZE / 1024 / 1024:.0f} MB)"
        )
        raise ValueError(msg)
    if file_size == 0:
        raise ValueError("Signature image file is empty")

    img = open_image(path.read_bytes())
    try:
        prepared = remove_background(img) if strip_background else img.convert("RGBA")
        return to_png(prepared)
    finally:
        img.close()


def prepare_for_pdf(png: bytes, max_px: int = _MAX_IMAGE_PX) -> SignatureImageData:
    """Decode a payload image into PDF-ready samples.

    Images larger than ``max_px`` on any side are downscaled.  An alpha
    channel, if present, is returned separately for use as a soft mask.

    Raises:
        ValueError: The bytes are not a supported image.
    """
    from PIL import Image

    img = open_image(png)
    try:
        if img.mode == "P" and "transparency" in img.info:
            img = img.convert("RGBA")

        max_dim = max(img.width, img.height)
        if max_dim > max_px:
            scale = max_px / max_dim
            new_w = max(1, int(img.width * scale))
            new_h = max(1, int(img.height * scale))
            img = img.resize((new_w, new_h), Image.Resampling.LANCZOS)

        smask_data = None
        if img.mode in ("RGBA", "LA", "PA"):
            alpha = img.split()[-1]
            smask_data = zlib.compress(alpha.tobytes())
            img = img.convert("RGB")
        elif img.mode != "RGB":
            img = img.convert("RGB")

        rgb_data = zlib.compress(img.tobytes())

        return {
            "samples": rgb_data,
            "smask": smask_data,
            "width": img.width,
            "height": img.height,
            "bpc": 8,
        }
    finally:
        img.close()


def image_signature(image_path: str | Path) -> ImageSignature:
    """Build an image payload from an uploaded file, background removed."""
    label = f"Image Signature {datetime.now():%Y-%m-%d %H:%M:%S}"
    return ImageSignature(png=load_signature_image(image_path), label=label)
