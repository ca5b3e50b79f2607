"""Tests for the high-level winsign.api functions."""

from __future__ import annotations

import datetime
import json

import pytest

import winsign
from winsign.api import verify_metadata
from winsign.errors import PDFError, SigningError

NOW = datetime.datetime(2026, 1, 2, 3, 4, 5, tzinfo=datetime.timezone.utc)

pytestmark = pytest.mark.usefixtures("clean_env", "config_dir")


def test_sign_explicit_identity(valid_pdf_bytes):
    payload = winsign.typed_signature("Jane Doe")
    pdf, metadata = winsign.sign(
        valid_pdf_bytes,
        payload,
        [(1, 10, 10, 150, 60), (1, 10, 200, 150, 60)],
        signer="Jane Doe",
        reason="Approval",
        location="Berlin",
        now=NOW,
    )
    assert pdf.startswith(b"%PDF-")
    assert metadata["signer"] == "Jane Doe"
    assert metadata["signatureDate"] == "2026-01-02T03:04:05.000Z"
    assert len(metadata["signatureFields"]) == 2
    assert verify_metadata(metadata)


def test_sign_resolves_identity_from_config(valid_pdf_bytes, clean_env):
    winsign.config.save_signer_identity("Saved Signer", "Saved reason")
    clean_env.setenv("WINSIGN_LOCATION", "Env City")
    _, metadata = winsign.sign(valid_pdf_bytes, winsign.typed_signature("J"), [(1, 0, 0, 150, 60)])
    assert (metadata["signer"], metadata["reason"], metadata["location"]) == (
        "Saved Signer",
        "Saved reason",
        "Env City",
    )


def test_sign_explicit_values_override_config(valid_pdf_bytes):
    winsign.config.save_signer_identity("Saved Signer")
    _, metadata = winsign.sign(
        valid_pdf_bytes, winsign.typed_signature("J"), [(1, 0, 0, 150, 60)], signer="Other"
    )
    assert metadata["signer"] == "Other"


def test_sign_requires_fields(valid_pdf_bytes):
    with pytest.raises(SigningError):
        winsign.sign(valid_pdf_bytes, winsign.typed_signature("J"), [])


def test_sign_rejects_bad_page(valid_pdf_bytes):
    with pytest.raises(ValueError, match="1-based"):
        winsign.sign(valid_pdf_bytes, winsign.typed_signature("J"), [(0, 0, 0, 150, 60)])


def test_sign_rejects_non_pdf():
    with pytest.raises(PDFError):
        winsign.sign(b"hello", winsign.typed_signature("J"), [(1, 0, 0, 150, 60)])


def test_verify_written_output(tmp_path, valid_pdf_bytes):
    pdf, metadata = winsign.sign(
        valid_pdf_bytes, winsign.typed_signature("J"), [(1, 0, 0, 150, 60)]
    )
    signed = tmp_path / "doc_signed.pdf"
    signed.write_bytes(pdf)
    (tmp_path / "doc_signed_signature_metadata.json").write_text(json.dumps(metadata))
    result = winsign.verify(signed)
    assert result.is_valid
    assert result.info["signatureFields"] == metadata["signatureFields"]


def test_verify_metadata_rejects_malformed():
    assert not verify_metadata(None)
    assert not verify_metadata({"signatureFields": []})
