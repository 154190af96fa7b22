"""Adapter turning a plain async function into a ``SynthesisExecutor``."""

from __future__ import annotations

from collections.abc import Awaitable, Callable

from spriteguard.executors._base import SynthesisExecutor
from spriteguard.models import PixelData

SynthesisFn = Callable[[str, PixelData, bytearray], Awaitable[PixelData]]


class CallableExecutor(SynthesisExecutor):
    """Wrap an ``async (directive, image, mask) -> PixelData`` function."""

    def __init__(self, fn: SynthesisFn, name: str | None = None) -> None:
        self._fn = fn
        self.name = name or getattr(fn, "__name__", "callable")

    async def synthesize(
        self,
        directive: str,
        base_image: PixelData,
        mask: bytearray,
    ) -> PixelData:
        return await self._fn(directive, base_image, mask)


def as_executor(executor: SynthesisExecutor | SynthesisFn) -> SynthesisExecutor:
    """Return *executor* unchanged or wrapped in a ``CallableExecutor``."""
    if isinstance(executor, SynthesisExecutor):
        return executor
    if not callable(executor):
        raise TypeError(
            f"Expected a SynthesisExecutor or async callable, got {type(executor).__name__}"
        )
    return CallableExecutor(executor)
