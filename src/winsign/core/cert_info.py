# pyright: reportUnknownMemberType=false, reportUnknownVariableType=false, reportUnknownArgumentType=false
"""
Certificate information extraction from DER-encoded X.509 certificates.

Produces the ``certificateInfo`` block of the sidecar metadata and the
certificate line printed by ``winsign verify``.
"""

from __future__ import annotations

__all__ = [
    "CertificateInfo",
    "describe_certificate",
]

import datetime
from typing import TypedDict

from asn1crypto import x509 as asn1_x509

from ..errors import CertificateError

# Common Name
_OID_CN = "2.5.4.3"


class CertificateInfo(TypedDict):
    """The ``certificateInfo`` block of signature metadata."""

    subject: str
    issuer: str
    validFrom: str  # ISO 8601, UTC
    validTo: str  # ISO 8601, UTC


def _load(cert_der: bytes) -> asn1_x509.Certificate:
    try:
        cert = asn1_x509.Certificate.load(cert_der)
    except (ValueError, TypeError, KeyError, OSError) as e:
        raise CertificateError(f"Failed to parse X.509 certificate: {e}") from e
    return cert


def _common_name(name: asn1_x509.Name) -> str:
    """CN of a distinguished name, or the full name if it has none."""
    for rdn in name.chosen:
        for attr in rdn:
            if attr["type"].dotted == _OID_CN:
                return str(attr["value"].native)
    return name.human_friendly


def _iso(value: datetime.datetime) -> str:
    return value.astimezone(datetime.timezone.utc).isoformat().replace("+00:00", "Z")


def describe_certificate(cert_der: bytes) -> CertificateInfo:
    """Summarize a certificate for the sidecar metadata.

    Raises:
        CertificateError: The bytes are not a parseable certificate.
    """
    cert = _load(cert_der)
    try:
        return {
            "subject": _common_name(cert.subject),
            "issuer": _common_name(cert.issuer),
            "validFrom": _iso(cert.not_valid_before),
            "validTo": _iso(cert.not_valid_after),
        }
    except (ValueError, TypeError, KeyError) as e:
        raise CertificateError(f"Failed to describe certificate: {e}") from e
