"""Game-ready post-processing chain.

Runs after the integrity audit passes, in this fixed order:
palette harmonization, pixel snapping, noise cleaning, transparency
purification and outline unification.  Every stage mutates the buffer
it is given and returns it.
"""

from __future__ import annotations

from collections.abc import Sequence

from spriteguard.extraction import extract_palette
from spriteguard.models import RGB, PixelData

_NEIGHBOURS = ((-1, 0), (1, 0), (0, -1), (0, 1))


def _nearest(r: int, g: int, b: int, palette: Sequence[RGB]) -> RGB:
    best = palette[0]
    best_dist = -1
    for color in palette:
        dist = (r - color[0]) ** 2 + (g - color[1]) ** 2 + (b - color[2]) ** 2
        if best_dist < 0 or dist < best_dist:
            best, best_dist = color, dist
    return best


def palette_normalize(img: PixelData, palette: Sequence[Sequence[int]]) -> PixelData:
    """Snap every non-transparent pixel to its nearest palette color.

    Distance is squared Euclidean RGB; ties go to the color listed first.
    An empty palette leaves the image unchanged.
    """
    if not palette:
        return img
    colors: list[RGB] = [(int(c[0]), int(c[1]), int(c[2])) for c in palette]
    lookup: dict[RGB, RGB] = {}
    data = img.data
    for i in range(0, len(data), 4):
        if data[i + 3] > 0:
            key = (data[i], data[i + 1], data[i + 2])
            match = lookup.get(key)
            if match is None:
                match = lookup[key] = _nearest(*key, colors)
            data[i : i + 3] = bytes(match)
    return img


def harmonize_palette(
    base: PixelData,
    generated: PixelData,
    target_palette: Sequence[Sequence[int]] | None = None,
) -> PixelData:
    """Force *generated* onto *target_palette*, or onto the palette of *base*."""
    palette = target_palette if target_palette else extract_palette(base)
    return palette_normalize(generated, palette)


def _snap(value: int, step: int) -> int:
    # floor(value / step + 1/2): halves round up.
    return min(255, (2 * value + step) // (2 * step) * step)


def snap_pixels(img: PixelData, step: int = 5) -> PixelData:
    """Quantize RGB to multiples of *step* and push alpha toward 0/255.

    Alpha above 128 becomes 255 and alpha below 50 becomes 0; values in
    between are left for the transparency purifier.
    """
    table = bytes(_snap(v, step) for v in range(256))
    data = img.data
    for i in range(0, len(data), 4):
        data[i] = table[data[i]]
        data[i + 1] = table[data[i + 1]]
        data[i + 2] = table[data[i + 2]]
        a = data[i + 3]
        if a > 128:
            data[i + 3] = 255
        elif a < 50:
            data[i + 3] = 0
    return img


def clean_noise(img: PixelData) -> PixelData:
    """Drop isolated opaque pixels that have no opaque 4-neighbour.

    The outermost row and column on each side are not scanned.
    Neighbour tests read the alpha values from before the pass.
    """
    width, height, data = img.width, img.height, img.data
    alpha = bytes(data[3::4])
    for y in range(1, height - 1):
        for x in range(1, width - 1):
            p = y * width + x
            if alpha[p] == 0:
                continue
            if not any(alpha[p + dy * width + dx] for dx, dy in _NEIGHBOURS):
                data[p * 4 + 3] = 0
    return img


def transparency_purifier(img: PixelData, threshold: int = 128) -> PixelData:
    """Binarize alpha: values at or above *threshold* become 255, else 0."""
    data = img.data
    for i in range(3, len(data), 4):
        data[i] = 255 if data[i] >= threshold else 0
    return img


def outline_unifier(
    img: PixelData, outline_color: Sequence[int] = (0, 0, 0)
) -> PixelData:
    """Recolor silhouette border pixels to a single opaque outline color.

    An opaque pixel is on the border when one of its 4-neighbours is
    transparent or lies off-canvas.  Tests read the alpha values from
    before the pass.
    """
    width, height, data = img.width, img.height, img.data
    alpha = bytes(data[3::4])
    outline = bytes((outline_color[0], outline_color[1], outline_color[2], 255))
    for y in range(height):
        for x in range(width):
            p = y * width + x
            if alpha[p] == 0:
                continue
            edge = False
            for dx, dy in _NEIGHBOURS:
                nx, ny = x + dx, y + dy
                if not (0 <= nx < width and 0 <= ny < height) or alpha[ny * width + nx] == 0:
                    edge = True
                    break
            if edge:
                data[p * 4 : p * 4 + 4] = outline
    return img
