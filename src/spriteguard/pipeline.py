"""Pipeline orchestrator: the sprite-integrity forge.

Wraps one call to an external synthesis executor in deterministic
stages, strictly in this order::

    Clean → Extract → BuildDirective → Synthesize (await) → Validate
      → Harmonize → Snap → Denoise → Purify → Outline → [Assemble] → Return

Validation is fail-closed: a drifted silhouette or broken pose raises
``IdentityDriftError`` and no post-processing runs.  There are no
retries and no partial results; retry policy belongs to the caller.
"""

from __future__ import annotations

from collections.abc import Sequence

from spriteguard.assembler import compose_sprite_sheet, generate_poses
from spriteguard.cleanup import alpha_clean, isolate_background
from spriteguard.config import DEFAULT_SETTINGS, ForgeSettings
from spriteguard.errors import IdentityDriftError
from spriteguard.executors import SynthesisExecutor, SynthesisFn, as_executor
from spriteguard.extraction import (
    build_edge_map,
    build_identity_hash,
    build_silhouette_mask,
    detect_skeleton,
    extract_palette,
    project_mask,
    ratio_metrics,
)
from spriteguard.logging import get_logger, log_forge_event
from spriteguard.models import (
    ForgeMetadata,
    ForgeResult,
    IdentityReport,
    Joint,
    PixelData,
)
from spriteguard.observability import ForgeMetricsCollector
from spriteguard.pixels import clone
from spriteguard.postprocess import (
    clean_noise,
    harmonize_palette,
    outline_unifier,
    palette_normalize,
    snap_pixels,
    transparency_purifier,
)
from spriteguard.prompts import build_directive
from spriteguard.validation import audit_integrity, ensure_same_dimensions

logger = get_logger("pipeline")


async def _run_forge(
    base_image: PixelData,
    directive: str,
    executor: SynthesisExecutor,
    sheet_mode: bool,
    rigging: Sequence[Joint] | None,
    settings: ForgeSettings,
) -> ForgeResult:
    logger.debug("Stage clean (%dx%d)", base_image.width, base_image.height)
    img = clone(base_image)
    img = alpha_clean(img, settings.alpha_threshold)
    img = isolate_background(img, settings.background_tolerance)

    logger.debug("Stage extract")
    palette = extract_palette(img)
    mask = build_silhouette_mask(img)
    skeleton = detect_skeleton(img)
    identity = build_identity_hash(img)

    logger.debug("Stage synthesize via %s", executor.name)
    synthesized = await executor.synthesize(directive, clone(img), project_mask(mask))
    ensure_same_dimensions(img, synthesized)
    generated = clone(synthesized)

    logger.debug("Stage validate")
    verdict = audit_integrity(
        img,
        generated,
        mask,
        skeleton,
        detect_skeleton(generated),
        delta_threshold=settings.delta_threshold,
        pose_tolerance=settings.pose_tolerance,
    )
    if not verdict.passed:
        raise IdentityDriftError(verdict.feedback, verdict=verdict)

    logger.debug("Stage post-process (%d palette colors)", len(palette))
    final = harmonize_palette(img, generated, palette)
    final = snap_pixels(final, settings.snap_step)
    final = clean_noise(final)
    final = transparency_purifier(final, settings.purify_threshold)
    final = outline_unifier(final, settings.outline_color)

    frame_count = 1
    if sheet_mode:
        logger.debug("Stage assemble")
        poses = generate_poses(final, skeleton, rigging)
        frame_count = len(poses)
        final = compose_sprite_sheet(poses)

    metadata = ForgeMetadata(
        directive=directive,
        engine=executor.name,
        integrity_score=verdict.drift_score,
        sheet_mode=sheet_mode,
        frame_count=frame_count,
    )
    return ForgeResult(
        image=final,
        identity=identity,
        drift=verdict.drift_score,
        metadata=metadata,
    )


async def forge_sprite(
    base_image: PixelData,
    outfit: str,
    class_type: str,
    theme: str,
    executor: SynthesisExecutor | SynthesisFn,
    sheet_mode: bool = False,
    rigging: Sequence[Joint] | None = None,
    settings: ForgeSettings | None = None,
    metrics: ForgeMetricsCollector | None = None,
) -> ForgeResult:
    """Re-equip a sprite through the external executor, guarding its identity.

    The caller's *base_image* is never mutated.  Each call is
    independent, so several forges may run concurrently.

    Args:
        base_image: The character sprite to evolve.
        outfit: Outfit the executor should paint.
        class_type: RPG class of the character.
        theme: Atmospheric theme.
        executor: A ``SynthesisExecutor`` or an async
            ``(directive, image, mask) -> PixelData`` function.
        sheet_mode: Also assemble a multi-pose sprite sheet.
        rigging: Optional rigging joints passed to the pose generator.
        settings: Stage thresholds; defaults apply when omitted.
        metrics: Optional collector that records the outcome.

    Returns:
        The validated, post-processed ``ForgeResult``.

    Raises:
        IdentityDriftError: If the synthesis changed pixels outside the
            silhouette or moved the skeleton beyond tolerance.
        DimensionMismatchError: If the executor returned a different size.
        Exception: Whatever the executor raised, unchanged.
    """
    settings = settings or DEFAULT_SETTINGS
    runner = as_executor(executor)
    directive = build_directive(outfit, class_type, theme)

    try:
        result = await _run_forge(
            base_image, directive, runner, sheet_mode, rigging, settings
        )
    except IdentityDriftError as exc:
        logger.warning("Forge rejected: %s", exc)
        if metrics is not None and exc.verdict is not None:
            metrics.record_rejection(exc.verdict.drift_score, exc.verdict.feedback)
        log_forge_event(settings.requester, directive, "FAILURE")
        raise
    except Exception as exc:
        logger.error("Forge failed: %s: %s", type(exc).__name__, exc)
        if metrics is not None:
            metrics.record_failure(exc)
        log_forge_event(settings.requester, directive, "FAILURE")
        raise

    if metrics is not None:
        metrics.record_success(result.drift)
    log_forge_event(settings.requester, directive, "SUCCESS")
    logger.info(
        "Forged %dx%d sprite (identity %s, drift score %.4f)",
        result.image.width,
        result.image.height,
        result.identity,
        result.drift,
    )
    return result


def analyze_identity(
    img: PixelData, settings: ForgeSettings | None = None
) -> IdentityReport:
    """Inspect a sprite without modifying it."""
    settings = settings or DEFAULT_SETTINGS
    edges = build_edge_map(img, settings.edge_threshold)
    return IdentityReport(
        hash=build_identity_hash(img),
        skeleton=detect_skeleton(img),
        ratios=ratio_metrics(img),
        edge_pixels=sum(1 for e in edges if e),
    )


def process_game_ready(
    img: PixelData,
    target_palette: Sequence[Sequence[int]] | None = None,
    settings: ForgeSettings | None = None,
) -> PixelData:
    """Cleanup-only chain for assets produced outside the forge flow.

    Background isolation, alpha cleaning, transparency purification and
    pixel snapping, followed by palette normalization when
    *target_palette* is given.  Works on a copy of *img*.
    """
    settings = settings or DEFAULT_SETTINGS
    result = clone(img)
    result = isolate_background(result, settings.background_tolerance)
    result = alpha_clean(result, settings.alpha_threshold)
    result = transparency_purifier(result, settings.purify_threshold)
    result = snap_pixels(result, settings.snap_step)
    if target_palette:
        result = palette_normalize(result, target_palette)
    return result
