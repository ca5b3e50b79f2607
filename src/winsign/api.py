"""High-level convenience API for PDF signing.

Provides :func:`sign` and :func:`verify` that resolve the signer identity
from saved configuration and build fields from plain rectangles.

For lower-level control, use :func:`~winsign.core.signing.sign_document`
with :class:`~winsign.core.models.Field` objects directly.
"""

from __future__ import annotations

__all__ = ["FieldSpec", "sign", "verify", "verify_metadata"]

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from .config import get_signer_identity
from .constants import DEFAULT_LOCATION, DEFAULT_REASON
from .core.models import Field, Rect
from .core.signing import SignerIdentity, check_metadata, sign_document
from .errors import SigningError
from .ui.workflows import LocalSigningBackend

if TYPE_CHECKING:
    import datetime
    from collections.abc import Iterable

    from .core.backend import VerifyResult
    from .core.models import SignaturePayload

_logger = logging.getLogger(__name__)

FieldSpec = tuple[int, float, float, float, float]
"""(page_number, x, y, width, height) in PDF points from the top-left corner."""


def _resolve_identity(
    signer: str | None,
    reason: str | None,
    location: str | None,
) -> SignerIdentity:
    saved = get_signer_identity()
    return SignerIdentity(
        signer=signer if signer is not None else saved.signer,
        reason=reason if reason is not None else (saved.reason or DEFAULT_REASON),
        location=location if location is not None else (saved.location or DEFAULT_LOCATION),
    )


def sign(
    pdf_bytes: bytes,
    payload: SignaturePayload,
    fields: Iterable[FieldSpec],
    *,
    signer: str | None = None,
    reason: str | None = None,
    location: str | None = None,
    unit_scale: float = 1.0,
    document_id: str = "api",
    now: datetime.datetime | None = None,
) -> tuple[bytes, dict[str, Any]]:
    """Burn one signature into several rectangles of a PDF.

    Args:
        pdf_bytes: Raw PDF file content.
        payload: Signature appearance shared by every field.
        fields: ``(page, x, y, width, height)`` tuples; pages are 1-based,
            coordinates are PDF points measured from the top-left corner.
        signer: Signer name. Auto-resolved from config if ``None``.
        reason: Signing reason. Auto-resolved from config if ``None``.
        location: Signing location. Auto-resolved from config if ``None``.
        unit_scale: Divide coordinates by this factor before drawing.
        document_id: Identifier stamped on the generated fields.
        now: Signing timestamp (defaults to the current time).

    Returns:
        ``(signed_pdf_bytes, metadata)``.

    Raises:
        PDFError: If the input is not a valid PDF.
        SigningError: If no fields were given.
        ValueError: If a page number is below 1.
    """
    built = [
        Field.create(document_id, page, Rect(x, y, w, h), payload)
        for page, x, y, w, h in fields
    ]
    if not built:
        raise SigningError("Place at least one signature before signing")

    identity = _resolve_identity(signer, reason, location)
    package = sign_document(pdf_bytes, built, identity, unit_scale=unit_scale, now=now)
    _logger.debug("API sign: %d field(s) for %s", len(built), identity.signer)
    return package.pdf, package.metadata


def verify(signed_path: str | Path) -> VerifyResult:
    """Check the sidecar metadata written next to a signed PDF."""
    return LocalSigningBackend().verify(Path(signed_path))


def verify_metadata(metadata: object) -> bool:
    """Return True when an in-memory metadata record is well formed."""
    return check_metadata(metadata) is None
