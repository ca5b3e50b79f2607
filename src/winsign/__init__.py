"""
winsign: Place hand-drawn, typed, or image signatures on PDF pages.

Renders pages for an interactive editor, maps pointer positions to PDF
points, burns signatures into the page content, and records a sidecar
metadata file next to each signed document.
"""

from __future__ import annotations

from .api import sign, verify
from .config.config import get_signer_identity
from .constants import __version__
from .core.appearance import drawn_signature, image_signature, typed_signature
from .core.models import DrawnSignature, Field, ImageSignature, Rect, TypedSignature
from .core.pdf import burn_in
from .core.signing import SignerIdentity, sign_document
from .errors import (
    CertificateError,
    ConfigError,
    DecodeError,
    PDFError,
    RenderError,
    SaveError,
    SigningError,
    WinSignError,
)

__all__ = [
    "CertificateError",
    "ConfigError",
    "DecodeError",
    "DrawnSignature",
    "Field",
    "ImageSignature",
    "PDFError",
    "Rect",
    "RenderError",
    "SaveError",
    "SignerIdentity",
    "SigningError",
    "TypedSignature",
    "WinSignError",
    "__version__",
    "burn_in",
    "drawn_signature",
    "get_signer_identity",
    "image_signature",
    "sign",
    "sign_document",
    "typed_signature",
    "verify",
]
