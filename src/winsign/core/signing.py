"""
Core signing functions: burn-in plus the sidecar metadata record.

Nothing here touches the filesystem.  The local backend in
``winsign.ui.workflows`` reads the source, calls :func:`sign_document`,
and writes both outputs.

Metadata layout (JSON, camelCase keys)::

    {
      "signer": "...", "reason": "...", "location": "...",
      "signatureDate": "2026-01-01T12:00:00.000Z",
      "certificateInfo": {"subject", "issuer", "validFrom", "validTo"},
      "signatureFields": [
        {"pageNumber": 1, "coordinates": {"x", "y"}, "dimensions": {"width", "height"}}
      ]
    }
"""

from __future__ import annotations

__all__ = [
    "SignaturePackage",
    "SignerIdentity",
    "build_metadata",
    "check_metadata",
    "sign_document",
]

import datetime
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ..constants import DEFAULT_LOCATION, DEFAULT_REASON, DEFAULT_SIGNER, PDF_MAGIC
from ..errors import PDFError, SigningError
from .cert_info import describe_certificate
from .certificate import generate_self_signed
from .pdf import burn_in

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .cert_info import CertificateInfo
    from .models import Field

_logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SignerIdentity:
    """Who signed, why, and where (recorded in metadata only)."""

    signer: str = DEFAULT_SIGNER
    reason: str = DEFAULT_REASON
    location: str = DEFAULT_LOCATION


@dataclass(frozen=True, slots=True)
class SignaturePackage:
    """Outputs of one signing operation."""

    pdf: bytes
    metadata: dict[str, Any]


def _iso_millis(when: datetime.datetime) -> str:
    when = when.astimezone(datetime.timezone.utc)
    return when.strftime("%Y-%m-%dT%H:%M:%S.") + f"{when.microsecond // 1000:03d}Z"


def build_metadata(
    fields: Sequence[Field],
    identity: SignerIdentity,
    certificate: CertificateInfo,
    signed_at: datetime.datetime,
) -> dict[str, Any]:
    """Assemble the sidecar metadata record."""
    return {
        "signer": identity.signer,
        "reason": identity.reason,
        "location": identity.location,
        "signatureDate": _iso_millis(signed_at),
        "certificateInfo": dict(certificate),
        "signatureFields": [
            {
                "pageNumber": f.page_number,
                "coordinates": {"x": f.rect.x, "y": f.rect.y},
                "dimensions": {"width": f.rect.width, "height": f.rect.height},
            }
            for f in fields
        ],
    }


def check_metadata(metadata: object) -> str | None:
    """Validate the shape of a metadata record.

    Returns:
        None when the record describes at least one signature field,
        otherwise a human-readable reason.
    """
    if not isinstance(metadata, dict):
        return "Signature metadata is not a JSON object"
    fields = metadata.get("signatureFields")
    if not isinstance(fields, list) or not fields:
        return "No signature fields recorded"
    return None


def sign_document(
    pdf_bytes: bytes,
    fields: Sequence[Field],
    identity: SignerIdentity | None = None,
    *,
    unit_scale: float = 1.0,
    now: datetime.datetime | None = None,
) -> SignaturePackage:
    """Burn the fields into the document and describe the signature.

    A fresh self-signed certificate is issued for every call.

    Args:
        pdf_bytes: The unsigned document.
        fields: Field snapshot to composite.
        identity: Signer details for the metadata.
        unit_scale: Passed through to :func:`~winsign.core.pdf.burn_in`.
        now: Signing timestamp (defaults to the current UTC time).

    Returns:
        SignaturePackage with the signed PDF bytes and metadata dict.

    Raises:
        PDFError: The input is not a PDF or cannot be parsed.
        SigningError: No fields were given.
        CertificateError: Certificate generation failed.
    """
    if not pdf_bytes or not pdf_bytes.startswith(PDF_MAGIC):
        raise PDFError("Input is not a PDF file")
    if not fields:
        raise SigningError("Place at least one signature before signing")

    identity = identity or SignerIdentity()
    now = now or datetime.datetime.now(datetime.timezone.utc)

    cert = generate_self_signed(now=now)
    cert_info = describe_certificate(cert.der)
    signed = burn_in(pdf_bytes, fields, unit_scale=unit_scale)
    _logger.info(
        "Burned %d field(s) into document (%d -> %d bytes)",
        len(fields),
        len(pdf_bytes),
        len(signed),
    )
    return SignaturePackage(pdf=signed, metadata=build_metadata(fields, identity, cert_info, now))
