"""Ordered collection of documents the user has added."""

from __future__ import annotations

__all__ = ["MergeResult", "Workspace"]

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from .models import Document


@dataclass(frozen=True, slots=True)
class MergeResult:
    """Outcome of adding documents to the workspace.

    Attributes:
        added: Documents that were not already present (by path).
        preview: The document to show next: the first newly added one,
            or the existing record for the first path if nothing was new.
    """

    added: tuple[Document, ...]
    preview: Document | None

    @property
    def added_count(self) -> int:
        return len(self.added)


class Workspace:
    """Documents in insertion order, de-duplicated by path."""

    def __init__(self) -> None:
        self._docs: dict[str, Document] = {}

    def __len__(self) -> int:
        return len(self._docs)

    def __iter__(self) -> Iterator[Document]:
        return iter(tuple(self._docs.values()))

    def __contains__(self, document_id: object) -> bool:
        return document_id in self._docs

    def merge(self, documents: Iterable[Document]) -> MergeResult:
        known_paths = {d.path: d for d in self._docs.values()}
        added: list[Document] = []
        first_existing: Document | None = None
        for doc in documents:
            existing = known_paths.get(doc.path)
            if existing is not None:
                first_existing = first_existing or existing
                continue
            self._docs[doc.id] = doc
            known_paths[doc.path] = doc
            added.append(doc)
        preview = added[0] if added else first_existing
        return MergeResult(tuple(added), preview)

    def get(self, document_id: str) -> Document:
        try:
            return self._docs[document_id]
        except KeyError:
            raise KeyError(f"No document {document_id!r}") from None

    def find_by_path(self, path: str) -> Document | None:
        for doc in self._docs.values():
            if doc.path == path:
                return doc
        return None

    def mark_signed(self, document_id: str) -> Document:
        """Flag a document as signed and return the updated record."""
        updated = self.get(document_id).mark_signed()
        self._docs[document_id] = updated
        return updated

    def remove(self, document_id: str) -> str:
        """Drop a document.  Returns its id so the caller can drop its fields."""
        self.get(document_id)
        del self._docs[document_id]
        return document_id
