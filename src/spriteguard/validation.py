"""Post-synthesis integrity checks.

Combines a pixel delta map, a fail-closed silhouette drift check and a
skeleton pose lock into a single ``IntegrityVerdict``.  The pipeline
only proceeds when the verdict passes.
"""

from __future__ import annotations

from collections.abc import Sequence

from spriteguard.errors import DimensionMismatchError
from spriteguard.logging import get_logger
from spriteguard.models import IntegrityVerdict, PixelData, Skeleton

logger = get_logger("validation")

DELTA_THRESHOLD = 60
POSE_TOLERANCE = 3


def ensure_same_dimensions(a: PixelData, b: PixelData) -> None:
    """Raise ``DimensionMismatchError`` unless *a* and *b* share a size."""
    if a.size != b.size:
        raise DimensionMismatchError(
            f"Expected {a.width}x{a.height} image, got {b.width}x{b.height}"
        )


def delta_map(a: PixelData, b: PixelData, threshold: int = DELTA_THRESHOLD) -> bytearray:
    """Mark pixels whose RGB changed between *a* and *b*.

    Entry *i* is 255 when ``|ΔR| + |ΔG| + |ΔB|`` exceeds *threshold*,
    else 0.  Alpha is ignored.

    Raises:
        DimensionMismatchError: If the images differ in size.
    """
    ensure_same_dimensions(a, b)
    da, db = a.data, b.data
    delta = bytearray(a.pixel_count)
    for p in range(a.pixel_count):
        i = p * 4
        diff = (
            abs(da[i] - db[i])
            + abs(da[i + 1] - db[i + 1])
            + abs(da[i + 2] - db[i + 2])
        )
        if diff > threshold:
            delta[p] = 255
    return delta


def count_drift_violations(delta: Sequence[int], mask: Sequence[int]) -> int:
    """Count changed pixels that lie outside the silhouette mask."""
    if len(delta) != len(mask):
        raise DimensionMismatchError(
            f"Delta map has {len(delta)} entries but mask has {len(mask)}"
        )
    return sum(1 for d, m in zip(delta, mask) if d != 0 and m == 0)


def validate_drift(delta: Sequence[int], mask: Sequence[int]) -> bool:
    """Fail-closed silhouette check.

    Returns False as soon as one pixel changed where the mask is 0.
    """
    if len(delta) != len(mask):
        raise DimensionMismatchError(
            f"Delta map has {len(delta)} entries but mask has {len(mask)}"
        )
    for d, m in zip(delta, mask):
        if d != 0 and m == 0:
            return False
    return True


def lock_pose(
    base_skeleton: Skeleton,
    new_skeleton: Skeleton,
    tolerance: float = POSE_TOLERANCE,
) -> bool:
    """Return True if every joint moved at most *tolerance* on both axes."""
    for name, (bx, by) in base_skeleton.joints():
        nx, ny = getattr(new_skeleton, name)
        if abs(bx - nx) > tolerance or abs(by - ny) > tolerance:
            logger.debug(
                "Pose lock broken at %s: (%.2f, %d) -> (%.2f, %d)",
                name,
                bx,
                by,
                nx,
                ny,
            )
            return False
    return True


def calculate_drift_score(delta: Sequence[int]) -> float:
    """Fraction of pixels left unchanged: 1.0 identical, 0.0 fully different."""
    if len(delta) == 0:
        raise ValueError("Delta map is empty")
    changed = sum(1 for d in delta if d != 0)
    return 1 - changed / len(delta)


def audit_integrity(
    base: PixelData,
    generated: PixelData,
    mask: Sequence[int],
    base_skeleton: Skeleton,
    new_skeleton: Skeleton,
    delta_threshold: int = DELTA_THRESHOLD,
    pose_tolerance: float = POSE_TOLERANCE,
) -> IntegrityVerdict:
    """Run every integrity check and summarize the outcome.

    Args:
        base: The cleaned pre-synthesis image.
        generated: The executor's output.
        mask: Silhouette mask of *base*.
        base_skeleton: Skeleton of *base*.
        new_skeleton: Skeleton of *generated*.
        delta_threshold: Changed-pixel threshold for the delta map.
        pose_tolerance: Per-axis joint tolerance for the pose lock.

    Returns:
        An ``IntegrityVerdict``; ``passed`` is True only if both the
        drift and pose checks pass.

    Raises:
        DimensionMismatchError: If *generated* differs in size from *base*.
    """
    delta = delta_map(base, generated, delta_threshold)
    violations = count_drift_violations(delta, mask)
    drift_ok = violations == 0
    pose_ok = lock_pose(base_skeleton, new_skeleton, pose_tolerance)
    score = calculate_drift_score(delta)

    problems: list[str] = []
    if not drift_ok:
        problems.append(f"{violations} pixel(s) changed outside the silhouette")
    if not pose_ok:
        problems.append(f"skeleton moved beyond tolerance {pose_tolerance}")
    feedback = "; ".join(problems) if problems else "Silhouette and pose preserved."

    return IntegrityVerdict(
        passed=drift_ok and pose_ok,
        drift_ok=drift_ok,
        pose_ok=pose_ok,
        violations=violations,
        drift_score=score,
        feedback=feedback,
    )
