"""Base class for external synthesis executors."""

from __future__ import annotations

from abc import ABC, abstractmethod

from spriteguard.models import PixelData


class SynthesisExecutor(ABC):
    """Abstract base for the external image-synthesis collaborator.

    The pipeline awaits exactly one ``synthesize`` call per forge and
    makes no assumption about model identity, retries or latency.
    Whatever an implementation raises reaches the caller unchanged.
    """

    name: str = "external"

    @abstractmethod
    async def synthesize(
        self,
        directive: str,
        base_image: PixelData,
        mask: bytearray,
    ) -> PixelData:
        """Repaint *base_image* inside *mask* according to *directive*.

        Args:
            directive: Positive and negative directive text, newline-joined.
            base_image: The cleaned base sprite.  Implementations must not
                mutate it.
            mask: Strict 0/255 silhouette mask, one byte per pixel.

        Returns:
            The synthesized sprite.
        """

    async def close(self) -> None:
        """Release executor resources.  The default does nothing."""

    async def __aenter__(self) -> SynthesisExecutor:
        return self

    async def __aexit__(self, *_exc: object) -> None:
        await self.close()
