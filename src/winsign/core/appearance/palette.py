"""Saved signatures the user can pick from when placing a field."""

from __future__ import annotations

__all__ = ["PaletteEntry", "SignaturePalette"]

import uuid
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator

    from ..models import SignaturePayload


@dataclass(frozen=True, slots=True)
class PaletteEntry:
    id: str
    payload: SignaturePayload


class SignaturePalette:
    """Ordered list of saved signatures with an optional selection.

    Entries hold payloads by value; fields created from an entry keep
    their own copy, so removing an entry never affects placed fields.
    """

    def __init__(self) -> None:
        self._entries: list[PaletteEntry] = []
        self._selected: str | None = None

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[PaletteEntry]:
        return iter(tuple(self._entries))

    def add(self, payload: SignaturePayload, *, select: bool = True) -> PaletteEntry:
        entry = PaletteEntry(id=uuid.uuid4().hex, payload=payload)
        self._entries.append(entry)
        if select:
            self._selected = entry.id
        return entry

    def remove(self, entry_id: str) -> None:
        before = len(self._entries)
        self._entries = [e for e in self._entries if e.id != entry_id]
        if len(self._entries) == before:
            raise KeyError(f"No saved signature {entry_id!r}")
        if self._selected == entry_id:
            self._selected = None

    def select(self, entry_id: str) -> PaletteEntry:
        for entry in self._entries:
            if entry.id == entry_id:
                self._selected = entry_id
                return entry
        raise KeyError(f"No saved signature {entry_id!r}")

    def clear_selection(self) -> None:
        self._selected = None

    @property
    def selected(self) -> PaletteEntry | None:
        for entry in self._entries:
            if entry.id == self._selected:
                return entry
        return None
