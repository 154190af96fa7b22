"""SpriteGuard error hierarchy.

All custom exceptions inherit from SpriteGuardError, enabling callers
to catch the base class for blanket error handling or specific
subclasses for targeted recovery.
"""

from __future__ import annotations

from typing import Any


class SpriteGuardError(Exception):
    """Base exception for all SpriteGuard errors."""


class ConfigError(SpriteGuardError):
    """Raised when settings loading or validation fails."""


class PixelDataError(SpriteGuardError):
    """Raised when a pixel buffer violates its declared dimensions."""


class DimensionMismatchError(PixelDataError):
    """Raised when two buffers that must share a size do not."""


class AssemblyError(SpriteGuardError):
    """Raised when pose assembly preconditions fail (empty input, bad heights)."""


class ExecutorError(SpriteGuardError):
    """Raised by the bundled synthesis executor adapters."""


class IdentityDriftError(SpriteGuardError):
    """Raised when a synthesized sprite drifted outside its silhouette or pose.

    Attributes:
        code: Stable machine-readable condition name.
        verdict: The integrity verdict that triggered the rejection, if any.
    """

    code = "IDENTITY_DRIFT"

    def __init__(self, message: str = "", verdict: Any | None = None) -> None:
        self.verdict = verdict
        text = f"{self.code}: {message}" if message else self.code
        super().__init__(text)
