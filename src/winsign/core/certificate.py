"""
Self-signed certificate issued for every signing operation.

The certificate is descriptive only: it is recorded in the sidecar
metadata and is not used to sign document bytes.
"""

from __future__ import annotations

__all__ = ["SIGNER_SUBJECT", "GeneratedCertificate", "generate_self_signed"]

import datetime
import logging
from dataclasses import dataclass, field

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import NameOID

from ..constants import CERT_VALIDITY_DAYS
from ..errors import CertificateError

_logger = logging.getLogger(__name__)

_KEY_SIZE = 2048
_PUBLIC_EXPONENT = 65537

SIGNER_SUBJECT = (
    (NameOID.COMMON_NAME, "WinSign Document Signer"),
    (NameOID.COUNTRY_NAME, "US"),
    (NameOID.STATE_OR_PROVINCE_NAME, "California"),
    (NameOID.LOCALITY_NAME, "San Francisco"),
    (NameOID.ORGANIZATION_NAME, "WinSign Inc."),
    (NameOID.ORGANIZATIONAL_UNIT_NAME, "Digital Signatures"),
)


@dataclass(frozen=True, slots=True)
class GeneratedCertificate:
    """A freshly issued certificate and its private key (PEM, unencrypted)."""

    der: bytes
    key_pem: bytes = field(repr=False)

    @property
    def pem(self) -> bytes:
        cert = x509.load_der_x509_certificate(self.der)
        return cert.public_bytes(serialization.Encoding.PEM)


def generate_self_signed(
    *,
    validity_days: int = CERT_VALIDITY_DAYS,
    now: datetime.datetime | None = None,
) -> GeneratedCertificate:
    """Issue an RSA-2048 self-signed certificate for the fixed signer subject.

    Subject and issuer are identical.  The certificate carries
    basicConstraints CA=true and a keyUsage of digitalSignature,
    nonRepudiation, keyEncipherment, dataEncipherment and keyCertSign.

    Raises:
        CertificateError: Key generation or signing failed.
    """
    now = now or datetime.datetime.now(datetime.timezone.utc)
    try:
        key = rsa.generate_private_key(public_exponent=_PUBLIC_EXPONENT, key_size=_KEY_SIZE)
        name = x509.Name([x509.NameAttribute(oid, value) for oid, value in SIGNER_SUBJECT])
        cert = (
            x509.CertificateBuilder()
            .subject_name(name)
            .issuer_name(name)
            .public_key(key.public_key())
            .serial_number(x509.random_serial_number())
            .not_valid_before(now)
            .not_valid_after(now + datetime.timedelta(days=validity_days))
            .add_extension(x509.BasicConstraints(ca=True, path_length=None), critical=True)
            .add_extension(
                x509.KeyUsage(
                    digital_signature=True,
                    content_commitment=True,
                    key_encipherment=True,
                    data_encipherment=True,
                    key_agreement=False,
                    key_cert_sign=True,
                    crl_sign=False,
                    encipher_only=False,
                    decipher_only=False,
                ),
                critical=True,
            )
            .sign(key, hashes.SHA256())
        )
    except (ValueError, TypeError) as exc:
        raise CertificateError(f"Failed to generate signing certificate: {exc}") from exc

    _logger.debug("Issued self-signed certificate serial %x", cert.serial_number)
    return GeneratedCertificate(
        der=cert.public_bytes(serialization.Encoding.DER),
        key_pem=key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        ),
    )
