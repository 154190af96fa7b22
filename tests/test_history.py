"""Tests for spriteguard.history — the sprite lineage archive."""

from __future__ import annotations

import pytest

from spriteguard.history import LineageArchive
from spriteguard.models import PixelData


class TestLineageArchive:
    """Tests for append-only sprite history."""

    def test_empty(self) -> None:
        archive = LineageArchive()
        assert len(archive) == 0
        assert archive.latest() is None

    def test_archive_returns_generation(self, sprite: PixelData) -> None:
        archive = LineageArchive()
        assert archive.archive(sprite) == 0
        assert archive.archive(PixelData.blank(2, 2)) == 1
        assert len(archive) == 2
        assert archive.latest() == PixelData.blank(2, 2)
        assert archive[0] == sprite

    def test_archived_state_is_a_copy(self, sprite: PixelData) -> None:
        archive = LineageArchive()
        archive.archive(sprite)
        before = bytes(sprite.data)
        sprite.set_pixel(0, 0, (1, 2, 3, 4))
        assert bytes(archive[0].data) == before

    def test_reads_are_copies(self, sprite: PixelData) -> None:
        archive = LineageArchive()
        archive.archive(sprite)
        archive.latest().set_pixel(0, 0, (1, 2, 3, 4))
        for state in archive:
            state.set_pixel(1, 0, (1, 2, 3, 4))
        assert archive[0] == sprite

    def test_iteration_order(self) -> None:
        archive = LineageArchive()
        for width in (1, 2, 3):
            archive.archive(PixelData.blank(width, 1))
        assert [s.width for s in archive] == [1, 2, 3]

    def test_out_of_range(self) -> None:
        with pytest.raises(IndexError):
            LineageArchive()[0]
