"""Shared fixtures for spriteguard tests."""

from __future__ import annotations

import pytest
from sprite_factory import TRANSPARENT, make_sprite

from spriteguard.models import PixelData

# ---------------------------------------------------------------------------
# Sprite fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sprite() -> PixelData:
    """A 32×32 red body (x 10–21, y 2–29) on technical magenta."""
    return make_sprite()


@pytest.fixture()
def transparent_sprite() -> PixelData:
    """The same body on a fully transparent background."""
    return make_sprite(background=TRANSPARENT)
