"""SpriteGuard — deterministic sprite-integrity pipeline for AI-forged RPG sprites."""

from spriteguard.assembler import compose_sprite_sheet, generate_poses, mirror_horizontal
from spriteguard.cleanup import alpha_clean, isolate_background
from spriteguard.config import DEFAULT_SETTINGS, ForgeSettings, load_settings
from spriteguard.errors import (
    AssemblyError,
    ConfigError,
    DimensionMismatchError,
    ExecutorError,
    IdentityDriftError,
    PixelDataError,
    SpriteGuardError,
)
from spriteguard.executors import (
    CallableExecutor,
    ImageFileExecutor,
    SynthesisExecutor,
)
from spriteguard.extraction import (
    build_edge_map,
    build_identity_hash,
    build_silhouette_mask,
    bust_ratio,
    detect_skeleton,
    extract_palette,
    head_ratio,
    hip_ratio,
    project_mask,
)
from spriteguard.history import LineageArchive
from spriteguard.logging import get_logger, setup_logging
from spriteguard.models import (
    ForgeMetadata,
    ForgeResult,
    IdentityReport,
    IntegrityVerdict,
    Joint,
    PixelData,
    RatioMetrics,
    RiggingData,
    Skeleton,
)
from spriteguard.observability import ForgeMetricsCollector
from spriteguard.pipeline import analyze_identity, forge_sprite, process_game_ready
from spriteguard.pixels import clone, load_pixel_data, save_pixel_data
from spriteguard.postprocess import (
    clean_noise,
    harmonize_palette,
    outline_unifier,
    palette_normalize,
    snap_pixels,
    transparency_purifier,
)
from spriteguard.prompts import build_directive, build_negative_prompt, build_prompt
from spriteguard.validation import (
    audit_integrity,
    calculate_drift_score,
    delta_map,
    lock_pose,
    validate_drift,
)

__all__ = [
    "AssemblyError",
    "CallableExecutor",
    "ConfigError",
    "DEFAULT_SETTINGS",
    "DimensionMismatchError",
    "ExecutorError",
    "ForgeMetadata",
    "ForgeMetricsCollector",
    "ForgeResult",
    "ForgeSettings",
    "IdentityDriftError",
    "IdentityReport",
    "ImageFileExecutor",
    "IntegrityVerdict",
    "Joint",
    "LineageArchive",
    "PixelData",
    "PixelDataError",
    "RatioMetrics",
    "RiggingData",
    "Skeleton",
    "SpriteGuardError",
    "SynthesisExecutor",
    "alpha_clean",
    "analyze_identity",
    "audit_integrity",
    "build_directive",
    "build_edge_map",
    "build_identity_hash",
    "build_negative_prompt",
    "build_prompt",
    "build_silhouette_mask",
    "bust_ratio",
    "calculate_drift_score",
    "clean_noise",
    "clone",
    "compose_sprite_sheet",
    "delta_map",
    "detect_skeleton",
    "extract_palette",
    "forge_sprite",
    "generate_poses",
    "get_logger",
    "harmonize_palette",
    "head_ratio",
    "hip_ratio",
    "isolate_background",
    "load_pixel_data",
    "load_settings",
    "lock_pose",
    "mirror_horizontal",
    "outline_unifier",
    "palette_normalize",
    "process_game_ready",
    "project_mask",
    "save_pixel_data",
    "setup_logging",
    "snap_pixels",
    "transparency_purifier",
    "validate_drift",
]
