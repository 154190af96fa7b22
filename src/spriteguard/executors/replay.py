"""Replay executor returning a previously synthesized image from disk.

Lets the integrity pipeline validate and post-process output that was
produced outside this process (e.g. downloaded from an image service).
"""

from __future__ import annotations

from pathlib import Path

from spriteguard.errors import ExecutorError, PixelDataError
from spriteguard.executors._base import SynthesisExecutor
from spriteguard.logging import get_logger
from spriteguard.models import PixelData
from spriteguard.pixels import load_pixel_data

logger = get_logger("executors")


class ImageFileExecutor(SynthesisExecutor):
    """Serve a stored PNG as the synthesis result.

    The directive and mask are recorded on the instance for inspection
    but otherwise ignored.

    The file is read synchronously inside ``synthesize``, blocking the
    event loop for the duration of the load.  This adapter is meant for
    one-shot CLI replay, not for running many forges concurrently on a
    shared loop.  Each call re-reads the file and returns a fresh buffer.
    """

    def __init__(self, path: str | Path, name: str = "replay") -> None:
        self._path = Path(path)
        self.name = name
        self.last_directive: str | None = None
        self.last_mask: bytearray | None = None

    async def synthesize(
        self,
        directive: str,
        base_image: PixelData,
        mask: bytearray,
    ) -> PixelData:
        self.last_directive = directive
        self.last_mask = mask
        try:
            result = load_pixel_data(self._path)
        except (FileNotFoundError, PixelDataError) as exc:
            raise ExecutorError(f"Cannot replay synthesis from {self._path}: {exc}") from exc
        logger.debug(
            "Replayed %dx%d candidate from %s for %dx%d base",
            result.width,
            result.height,
            self._path,
            base_image.width,
            base_image.height,
        )
        return result
