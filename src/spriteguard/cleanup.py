"""Deterministic cleanup: alpha thresholding and background isolation.

Both stages mutate the buffer they are given and return it.
"""

from __future__ import annotations

from spriteguard.models import RGB, PixelData

# Canonical technical magenta used by sprite generators as a key color.
TECHNICAL_MAGENTA: RGB = (255, 0, 255)


def alpha_clean(img: PixelData, threshold: int = 30) -> PixelData:
    """Zero every pixel whose alpha is below *threshold*.

    Args:
        img: Buffer to clean (consumed).
        threshold: Alpha values strictly below this become fully
            transparent, with RGB cleared as well.

    Returns:
        The same buffer.
    """
    data = img.data
    for i in range(0, len(data), 4):
        if data[i + 3] < threshold:
            data[i : i + 4] = b"\x00\x00\x00\x00"
    return img


def _near(r: int, g: int, b: int, ref: RGB, tolerance: int) -> bool:
    return (
        abs(r - ref[0]) < tolerance
        and abs(g - ref[1]) < tolerance
        and abs(b - ref[2]) < tolerance
    )


def isolate_background(img: PixelData, tolerance: int = 45) -> PixelData:
    """Make background pixels transparent.

    Two references are used: the color of the top-left pixel and
    technical magenta.  A pixel whose RGB is within *tolerance* of either
    on every channel gets alpha 0; its RGB is left as is.

    Args:
        img: Buffer to process (consumed).
        tolerance: Exclusive per-channel distance bound.

    Returns:
        The same buffer.
    """
    data = img.data
    corner: RGB = (data[0], data[1], data[2])
    for i in range(0, len(data), 4):
        r, g, b = data[i], data[i + 1], data[i + 2]
        if _near(r, g, b, TECHNICAL_MAGENTA, tolerance) or _near(
            r, g, b, corner, tolerance
        ):
            data[i + 3] = 0
    return img
