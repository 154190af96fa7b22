"""Feature extraction: palette, silhouette, skeleton, identity hash, ratios.

All functions here are read-only with respect to their input buffer.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

from spriteguard.models import JOINT_FRACTIONS, RGB, PixelData, RatioMetrics, Skeleton

HASH_GRID = 8

# (start, end) height fractions of the anatomical bands.
HEAD_BAND = (0.0, 0.20)
BUST_BAND = (0.30, 0.45)
HIP_BAND = (0.50, 0.65)


def extract_palette(img: PixelData) -> list[RGB]:
    """Return the unique RGB colors of all non-transparent pixels.

    Colors are listed in row-major first-seen order; that order decides
    ties during nearest-color matching.
    """
    data = img.data
    seen: dict[RGB, None] = {}
    for i in range(0, len(data), 4):
        if data[i + 3] > 0:
            seen.setdefault((data[i], data[i + 1], data[i + 2]), None)
    return list(seen)


def build_silhouette_mask(img: PixelData) -> bytearray:
    """Return one byte per pixel: 255 where alpha > 0, else 0."""
    alpha = img.data[3::4]
    return bytearray(255 if a > 0 else 0 for a in alpha)


def project_mask(mask: Sequence[int]) -> bytearray:
    """Normalize any mask-like buffer to strict 0/255 values.

    Returns a new buffer; *mask* is not modified.
    """
    return bytearray(255 if v > 0 else 0 for v in mask)


def _row_center(img: PixelData, y: int) -> float:
    data = img.data
    base = y * img.width * 4
    xs = [x for x in range(img.width) if data[base + x * 4 + 3] > 0]
    if not xs:
        return img.width / 2
    return sum(xs) / len(xs)


def detect_skeleton(img: PixelData) -> Skeleton:
    """Estimate a five-joint skeleton from fixed scanlines.

    For each joint the scanline ``y = floor(height * fraction)`` is
    scanned and ``x`` is the mean column of its opaque pixels, or
    ``width / 2`` when the scanline is empty.  This is only good enough
    for coarse pose-drift checks.
    """
    joints: dict[str, tuple[float, int]] = {}
    for name, fraction in JOINT_FRACTIONS:
        y = math.floor(img.height * fraction)
        joints[name] = (_row_center(img, y), y)
    return Skeleton(**joints)


def build_identity_hash(img: PixelData) -> str:
    """Compute a perceptual identity hash.

    The image is split into an 8×8 grid of ``floor(width/8)`` ×
    ``floor(height/8)`` cells.  Each cell's mean Rec. 601 luminance is
    compared with the mean of all 64 cell means; cell *i* (row-major)
    contributes the *i*-th most significant bit, set when it is
    brighter than the mean.

    Returns:
        ``"{width}x{height}-{hex}"`` with lowercase, unpadded hex.
    """
    width, height, data = img.width, img.height, img.data
    block_w = width // HASH_GRID
    block_h = height // HASH_GRID

    cell_means: list[float] = []
    for gy in range(HASH_GRID):
        for gx in range(HASH_GRID):
            total = 0.0
            count = 0
            for y in range(gy * block_h, (gy + 1) * block_h):
                row = y * width
                for x in range(gx * block_w, (gx + 1) * block_w):
                    i = (row + x) * 4
                    total += data[i] * 0.299 + data[i + 1] * 0.587 + data[i + 2] * 0.114
                    count += 1
            cell_means.append(total / count if count else 0.0)

    mean = sum(cell_means) / (HASH_GRID * HASH_GRID)
    value = 0
    for cell in cell_means:
        value = (value << 1) | (1 if cell > mean else 0)
    return f"{width}x{height}-{value:x}"


def _count_alpha(img: PixelData, start: float, end: float) -> int:
    y0 = math.floor(img.height * start)
    y1 = math.floor(img.height * end)
    stride = img.width * 4
    alpha = img.data[y0 * stride + 3 : y1 * stride : 4]
    return sum(1 for a in alpha if a > 0)


def _band_ratio(img: PixelData, band: tuple[float, float]) -> float:
    total = _count_alpha(img, 0.0, 1.0)
    if total == 0:
        return 0.0
    return _count_alpha(img, *band) / total


def head_ratio(img: PixelData) -> float:
    """Share of opaque pixels in the top 20% of the canvas."""
    return _band_ratio(img, HEAD_BAND)


def bust_ratio(img: PixelData) -> float:
    """Share of opaque pixels between 30% and 45% of the height."""
    return _band_ratio(img, BUST_BAND)


def hip_ratio(img: PixelData) -> float:
    """Share of opaque pixels between 50% and 65% of the height."""
    return _band_ratio(img, HIP_BAND)


def ratio_metrics(img: PixelData) -> RatioMetrics:
    return RatioMetrics(head=head_ratio(img), bust=bust_ratio(img), hip=hip_ratio(img))


def build_edge_map(img: PixelData, threshold: int = 20) -> bytearray:
    """Mark interior pixels where alpha jumps against the right or lower neighbour.

    Border rows and columns are never marked.
    """
    width, height, data = img.width, img.height, img.data
    edges = bytearray(width * height)
    for y in range(1, height - 1):
        for x in range(1, width - 1):
            i = (y * width + x) * 4
            alpha = data[i + 3]
            right = data[i + 7]
            down = data[i + width * 4 + 3]
            if abs(alpha - right) > threshold or abs(alpha - down) > threshold:
                edges[y * width + x] = 255
    return edges
