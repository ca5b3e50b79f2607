"""Shared signing, saving, and verification workflows.

UI-agnostic orchestration over the local filesystem.  CLI and GUI are
thin wrappers around :class:`LocalSigningBackend`.

Constraints:
- No stdout/stderr output (no print)
- No sys.exit()
- No tkinter imports
- No argparse imports
- No threading (caller's responsibility)
- Returns structured results, never raises on business errors
"""

from __future__ import annotations

__all__ = [
    "LocalSigningBackend",
    "SaveResult",
    "SigningResult",
    "VerifyResult",
]

import datetime
import json
import logging
import shutil
from pathlib import Path
from typing import TYPE_CHECKING

from ..config import get_signer_identity
from ..core.backend import SaveResult, SigningResult, VerifyResult
from ..core.models import Document
from ..core.signing import check_metadata
from ..errors import SaveError, WinSignError
from .helpers import atomic_write, default_output_path, metadata_path_for

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from ..core.models import Field
    from ..core.signing import SignerIdentity

_logger = logging.getLogger(__name__)


# ── Error classification ──────────────────────────────────────────


def _classify_error(error: Exception) -> SigningResult:
    """Convert a caught exception into a SigningResult."""
    if isinstance(error, (WinSignError, ValueError)):
        return SigningResult(ok=False, error_message=str(error))

    if isinstance(error, PermissionError):
        return SigningResult(ok=False, error_message=f"Permission denied: {error.filename}")

    if isinstance(error, OSError):
        return SigningResult(ok=False, error_message=f"Cannot access file: {error}")

    _logger.exception("Unexpected error during signing")
    return SigningResult(
        ok=False,
        error_message="An unexpected error occurred. Check logs for details.",
    )


def _now_iso() -> str:
    now = datetime.datetime.now(datetime.timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


# ── Local backend ─────────────────────────────────────────────────


class LocalSigningBackend:
    """:class:`~winsign.core.backend.SigningBackend` over the local filesystem.

    Args:
        identity: Signer details for metadata.  Resolved from config and
            environment on each call when omitted.
    """

    def __init__(self, identity: SignerIdentity | None = None) -> None:
        self._identity = identity

    @property
    def identity(self) -> SignerIdentity:
        return self._identity or get_signer_identity()

    def open_documents(self, paths: Iterable[str | Path]) -> list[Document]:
        docs: list[Document] = []
        for path in paths:
            try:
                docs.append(Document.from_path(path))
            except OSError as e:
                _logger.warning("Skipping %s: %s", path, e)
        return docs

    def read(self, path: str | Path) -> bytes:
        return Path(path).read_bytes()

    def sign(
        self,
        path: str | Path,
        fields: Sequence[Field],
        *,
        unit_scale: float = 1.0,
    ) -> SigningResult:
        """Burn fields in and write ``<stem>_signed.pdf`` plus its metadata.

        Never raises on business errors -- all captured in the result.
        """
        source = Path(path)
        signed_path = default_output_path(source)
        metadata_path = metadata_path_for(signed_path)

        try:
            from ..core.signing import sign_document

            package = sign_document(
                self.read(source),
                tuple(fields),
                self.identity,
                unit_scale=unit_scale,
            )
            atomic_write(signed_path, package.pdf)
            metadata_json = json.dumps(package.metadata, indent=2, ensure_ascii=False) + "\n"
            atomic_write(metadata_path, metadata_json.encode("utf-8"))
        except Exception as e:
            return _classify_error(e)

        _logger.info("Signed %s -> %s", source.name, signed_path)
        return SigningResult(
            ok=True,
            signed_path=signed_path,
            metadata_path=metadata_path,
            signature_info=package.metadata,
            output_size=len(package.pdf),
        )

    def save(self, source: str | Path, destination: str | Path | None) -> SaveResult:
        """Copy a signed document to a user-chosen destination."""
        if destination is None:
            return SaveResult(ok=False, cancelled=True)
        src = Path(source)
        dest = Path(destination)
        try:
            if src.resolve() == dest.resolve():
                return SaveResult(ok=True, saved_path=dest)
            if not src.exists():
                raise SaveError(f"Signed document not found: {src}")
            shutil.copyfile(src, dest)
        except PermissionError:
            return SaveResult(ok=False, error_message=f"Permission denied: {dest}")
        except (SaveError, OSError) as e:
            return SaveResult(ok=False, error_message=str(e))
        return SaveResult(ok=True, saved_path=dest)

    def verify(self, signed_path: str | Path) -> VerifyResult:
        """Check the sidecar metadata next to a signed document."""
        metadata_path = metadata_path_for(Path(signed_path))
        if not metadata_path.exists():
            return VerifyResult(is_valid=False, reason="No signature metadata found")
        try:
            metadata = json.loads(metadata_path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            return VerifyResult(is_valid=False, reason=f"Verification failed: {e}")

        problem = check_metadata(metadata)
        if problem is not None:
            info = metadata if isinstance(metadata, dict) else {}
            return VerifyResult(
                is_valid=False, info=info, verification_date=_now_iso(), reason=problem
            )
        return VerifyResult(is_valid=True, info=metadata, verification_date=_now_iso())
