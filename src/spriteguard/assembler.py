"""Multi-pose generation and sprite-sheet composition."""

from __future__ import annotations

from collections.abc import Sequence

from PIL import Image

from spriteguard.errors import AssemblyError
from spriteguard.logging import get_logger
from spriteguard.models import Joint, PixelData, Skeleton
from spriteguard.pixels import from_image, to_image

logger = get_logger("assembler")


def mirror_horizontal(img: PixelData) -> PixelData:
    """Return a new buffer with columns ``x`` and ``width - 1 - x`` swapped."""
    return from_image(to_image(img).transpose(Image.Transpose.FLIP_LEFT_RIGHT))


def generate_poses(
    img: PixelData,
    skeleton: Skeleton,
    rigging: Sequence[Joint] | None = None,
) -> list[PixelData]:
    """Produce the pose set for a sprite sheet.

    Currently the base pose plus its horizontal mirror.  *skeleton* and
    *rigging* are accepted so warp-based poses can be added without
    changing callers; neither affects the output yet.

    Returns:
        ``[img, mirrored_img]``.  The first element is *img* itself.
    """
    logger.debug(
        "Generating poses (head at %s, %d rigging joints)",
        skeleton.head,
        len(rigging or ()),
    )
    return [img, mirror_horizontal(img)]


def compose_sprite_sheet(poses: Sequence[PixelData]) -> PixelData:
    """Concatenate poses left-to-right into a single sheet.

    Args:
        poses: One or more images, all of the same height.

    Returns:
        A new image whose width is the sum of the pose widths.

    Raises:
        AssemblyError: If *poses* is empty or the heights differ.
    """
    if not poses:
        raise AssemblyError("No poses provided")

    height = poses[0].height
    for index, pose in enumerate(poses):
        if pose.height != height:
            raise AssemblyError(
                f"Pose {index} height {pose.height}px does not match "
                f"sheet height {height}px"
            )

    sheet_width = sum(p.width for p in poses)
    sheet = Image.new("RGBA", (sheet_width, height), (0, 0, 0, 0))
    x_offset = 0
    for pose in poses:
        # No mask: alpha is copied as-is, not composited.
        sheet.paste(to_image(pose), (x_offset, 0))
        x_offset += pose.width

    logger.debug("Composed %d poses into %dx%d sheet", len(poses), sheet_width, height)
    return from_image(sheet)
