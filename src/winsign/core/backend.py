"""
Persistence abstraction for the editor and dashboard.

The GUI and CLI depend on this protocol, not on the local-filesystem
implementation (``winsign.ui.workflows.LocalSigningBackend``), so the
signing pipeline can be driven against a fake in tests.
"""

from __future__ import annotations

__all__ = [
    "SaveResult",
    "SigningBackend",
    "SigningResult",
    "VerifyResult",
]

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from pathlib import Path

    from .models import Document, Field


# ── Result types ──────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class SigningResult:
    """Result of a burn-in and sidecar write."""

    ok: bool
    error_message: str | None = None
    signed_path: Path | None = None
    metadata_path: Path | None = None
    signature_info: dict[str, Any] = field(default_factory=dict)
    output_size: int = 0


@dataclass(frozen=True, slots=True)
class SaveResult:
    """Result of copying a signed document to a user-chosen location.

    ``cancelled`` is set when the user dismissed the destination picker;
    it is not an error.
    """

    ok: bool
    cancelled: bool = False
    error_message: str | None = None
    saved_path: Path | None = None


@dataclass(frozen=True, slots=True)
class VerifyResult:
    """Outcome of checking a signed document's sidecar metadata."""

    is_valid: bool
    info: dict[str, Any] = field(default_factory=dict)
    verification_date: str | None = None
    reason: str | None = None


class SigningBackend(Protocol):
    """Document intake, signing, saving, and verification.

    Implementations never raise on business errors; failures are reported
    through the result objects.
    """

    def open_documents(self, paths: Iterable[str | Path]) -> list[Document]:
        """Build workspace records for picked or dropped files."""
        ...

    def read(self, path: str | Path) -> bytes:
        """Return the raw bytes of a document.

        Raises:
            OSError: The file cannot be read.
        """
        ...

    def sign(
        self,
        path: str | Path,
        fields: Sequence[Field],
        *,
        unit_scale: float = 1.0,
    ) -> SigningResult:
        """Write ``<stem>_signed.pdf`` and its metadata next to ``path``.

        The source is never modified; repeated calls overwrite the same
        outputs.
        """
        ...

    def save(self, source: str | Path, destination: str | Path | None) -> SaveResult:
        """Copy a signed document; ``destination=None`` means cancelled."""
        ...

    def verify(self, signed_path: str | Path) -> VerifyResult:
        """Check the sidecar metadata of a signed document."""
        ...
