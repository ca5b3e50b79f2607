"""
Domain records shared by the renderer, the field editor, and the compositor.

Every record here is frozen.  A Field is never edited in place: moves and
resizes produce a replaced copy, so the tuple handed to the compositor at
sign time is an immutable snapshot.

Field rectangles are stored in PDF points with the origin at the page's
top-left corner (y grows downward).  The compositor performs the flip into
bottom-left-origin PDF space.
"""

from __future__ import annotations

__all__ = [
    "Document",
    "DrawnSignature",
    "Field",
    "ImageSignature",
    "Rect",
    "SignaturePayload",
    "TypedSignature",
    "payload_kind",
]

import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from pathlib import Path
from typing import ClassVar, Union


@dataclass(frozen=True, slots=True)
class Document:
    """A source file in the workspace.

    Attributes:
        id: Unique identifier (random UUID).
        name: Display name (file name with extension).
        path: Filesystem path; treated as an opaque handle by the core.
        size: Size in bytes at intake time.
        last_modified: Modification time in milliseconds since the epoch.
        extension: Lower-case extension without the dot ("pdf").
        signed: True once a burn-in succeeded.
        signed_at: UTC timestamp of the last successful burn-in.
    """

    id: str
    name: str
    path: str
    size: int
    last_modified: float
    extension: str
    signed: bool = False
    signed_at: datetime | None = None

    @classmethod
    def from_path(cls, path: str | Path) -> Document:
        """Build a workspace record from a file on disk."""
        p = Path(path)
        stats = p.stat()
        return cls(
            id=str(uuid.uuid4()),
            name=p.name,
            path=str(p),
            size=stats.st_size,
            last_modified=stats.st_mtime * 1000.0,
            extension=p.suffix.lstrip(".").lower(),
        )

    @property
    def is_pdf(self) -> bool:
        return self.extension == "pdf"

    def mark_signed(self, when: datetime | None = None) -> Document:
        """Return a copy flagged as signed."""
        return replace(self, signed=True, signed_at=when or datetime.now(timezone.utc))


@dataclass(frozen=True, slots=True)
class Rect:
    """Axis-aligned rectangle, top-left origin."""

    x: float
    y: float
    width: float
    height: float

    @property
    def center(self) -> tuple[float, float]:
        return self.x + self.width / 2.0, self.y + self.height / 2.0

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def moved_to(self, x: float, y: float) -> Rect:
        return Rect(x, y, self.width, self.height)

    def resized(self, width: float, height: float) -> Rect:
        return Rect(self.x, self.y, width, height)

    def divided(self, factor: float) -> Rect:
        """Scale every component by 1/factor (unit conversion)."""
        return Rect(self.x / factor, self.y / factor, self.width / factor, self.height / factor)


# ── Signature payloads ────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class DrawnSignature:
    """Freehand strokes rasterized to a transparent PNG."""

    kind: ClassVar[str] = "draw"

    png: bytes
    label: str


@dataclass(frozen=True, slots=True)
class TypedSignature:
    """Literal text plus a display font identifier."""

    kind: ClassVar[str] = "type"

    text: str
    font: str
    label: str


@dataclass(frozen=True, slots=True)
class ImageSignature:
    """Uploaded bitmap after background removal, stored as PNG."""

    kind: ClassVar[str] = "image"

    png: bytes
    label: str


SignaturePayload = Union[DrawnSignature, TypedSignature, ImageSignature]


def payload_kind(payload: object) -> str:
    """Return the kind tag of a payload, or "unknown"."""
    if isinstance(payload, (DrawnSignature, TypedSignature, ImageSignature)):
        return payload.kind
    return "unknown"


# ── Fields ────────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class Field:
    """A placed signature: one rectangle on one page of one document."""

    id: str
    document_id: str
    page_number: int
    rect: Rect
    payload: SignaturePayload

    @classmethod
    def create(
        cls,
        document_id: str,
        page_number: int,
        rect: Rect,
        payload: SignaturePayload,
    ) -> Field:
        if page_number < 1:
            raise ValueError(f"Page numbers are 1-based, got {page_number}")
        return cls(
            id=f"signature-{uuid.uuid4().hex}",
            document_id=document_id,
            page_number=page_number,
            rect=rect,
            payload=payload,
        )

    def with_rect(self, rect: Rect) -> Field:
        return replace(self, rect=rect)
