"""Tests for spriteguard.errors — error hierarchy."""

from __future__ import annotations

import pytest

from spriteguard.errors import (
    AssemblyError,
    ConfigError,
    DimensionMismatchError,
    ExecutorError,
    IdentityDriftError,
    PixelDataError,
    SpriteGuardError,
)
from spriteguard.models import IntegrityVerdict

ALL_ERRORS = (
    AssemblyError,
    ConfigError,
    DimensionMismatchError,
    ExecutorError,
    IdentityDriftError,
    PixelDataError,
)


class TestErrorHierarchy:
    """Verify the SpriteGuard error inheritance tree."""

    @pytest.mark.parametrize("cls", ALL_ERRORS)
    def test_inherits_base(self, cls: type[Exception]) -> None:
        assert issubclass(cls, SpriteGuardError)
        with pytest.raises(SpriteGuardError):
            raise cls("boom")

    def test_dimension_mismatch_is_pixel_error(self) -> None:
        assert issubclass(DimensionMismatchError, PixelDataError)

    def test_drift_is_not_a_pixel_error(self) -> None:
        assert not issubclass(IdentityDriftError, PixelDataError)
        assert not issubclass(AssemblyError, ConfigError)

    def test_message_preserved(self) -> None:
        assert str(AssemblyError("No poses provided")) == "No poses provided"


class TestIdentityDriftError:
    """Tests for the drift rejection error."""

    def test_code_prefixes_message(self) -> None:
        err = IdentityDriftError("3 pixel(s) changed outside the silhouette")
        assert err.code == "IDENTITY_DRIFT"
        assert str(err) == "IDENTITY_DRIFT: 3 pixel(s) changed outside the silhouette"

    def test_bare_code(self) -> None:
        assert str(IdentityDriftError()) == "IDENTITY_DRIFT"

    def test_carries_verdict(self) -> None:
        verdict = IntegrityVerdict(
            passed=False,
            drift_ok=False,
            pose_ok=True,
            violations=3,
            drift_score=0.9,
            feedback="3 pixel(s) changed outside the silhouette",
        )
        err = IdentityDriftError(verdict.feedback, verdict=verdict)
        assert err.verdict is verdict
        assert IdentityDriftError("x").verdict is None
