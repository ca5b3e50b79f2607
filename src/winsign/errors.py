"""WinSign error types."""

from __future__ import annotations

__all__ = [
    "CertificateError",
    "ConfigError",
    "DecodeError",
    "PDFError",
    "RenderError",
    "SaveError",
    "SigningError",
    "WinSignError",
]


class WinSignError(Exception):
    """Base error for WinSign operations."""


class PDFError(WinSignError):
    """PDF structure, parsing, or building error."""


class DecodeError(PDFError):
    """The document could not be decoded (corrupt or unsupported file)."""


class RenderError(WinSignError):
    """A page failed to rasterize after the document decoded successfully."""


class SigningError(WinSignError):
    """Burn-in or signature packaging failed."""


class SaveError(WinSignError):
    """Copying a signed document to its destination failed."""


class ConfigError(WinSignError):
    """Configuration validation error."""


class CertificateError(WinSignError):
    """Certificate generation or parsing error."""
