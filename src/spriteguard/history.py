"""Append-only lineage of sprite states across successive forges."""

from __future__ import annotations

from collections.abc import Iterator

from spriteguard.models import PixelData
from spriteguard.pixels import clone


class LineageArchive:
    """In-memory evolution history of a character sprite.

    Every archived state is a private copy, so later in-place stages on
    the caller's buffer never rewrite history.
    """

    def __init__(self) -> None:
        self._states: list[PixelData] = []

    def archive(self, img: PixelData) -> int:
        """Store a copy of *img* and return its generation index."""
        self._states.append(clone(img))
        return len(self._states) - 1

    def latest(self) -> PixelData | None:
        """Return a copy of the most recent state, or None when empty."""
        if not self._states:
            return None
        return clone(self._states[-1])

    def __getitem__(self, index: int) -> PixelData:
        return clone(self._states[index])

    def __len__(self) -> int:
        return len(self._states)

    def __iter__(self) -> Iterator[PixelData]:
        return (clone(s) for s in self._states)
