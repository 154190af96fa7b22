"""YAML settings loading and validation for the sprite-integrity pipeline."""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from spriteguard.errors import ConfigError
from spriteguard.logging import get_logger

logger = get_logger("config")


class ForgeSettings(BaseModel):
    """Tunable thresholds for every pipeline stage.

    Attributes:
        alpha_threshold: Pixels with alpha below this are zeroed by the
            alpha cleaner.
        background_tolerance: Per-channel tolerance for background
            isolation against the corner color and technical magenta.
        delta_threshold: Summed per-channel RGB difference above which a
            pixel counts as changed.
        pose_tolerance: Maximum per-axis joint offset still accepted by
            the pose lock.
        snap_step: Channel quantization step used by the pixel snapper.
        purify_threshold: Alpha at or above this becomes 255, else 0.
        outline_color: RGB applied to silhouette border pixels.
        edge_threshold: Alpha difference that marks a pixel as an edge in
            the diagnostics edge map.
        requester: Identifier written to the forge audit trail.
    """

    alpha_threshold: int = Field(default=30, ge=0, le=256)
    background_tolerance: int = Field(default=45, ge=0, le=256)
    delta_threshold: int = Field(default=60, ge=0, le=765)
    pose_tolerance: float = Field(default=3, ge=0)
    snap_step: int = Field(default=5, ge=1, le=255)
    purify_threshold: int = Field(default=128, ge=0, le=256)
    outline_color: tuple[int, int, int] = (0, 0, 0)
    edge_threshold: int = Field(default=20, ge=0, le=255)
    requester: str = "anonymous"

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("outline_color")
    @classmethod
    def _channels_in_range(cls, v: tuple[int, int, int]) -> tuple[int, int, int]:
        if any(c < 0 or c > 255 for c in v):
            raise ValueError(f"outline_color channels must be 0-255, got {v}")
        return v


DEFAULT_SETTINGS = ForgeSettings()


def _parse_yaml(path: Path) -> dict:
    """Read and parse a YAML file into a mapping.

    Raises:
        ConfigError: If the YAML is malformed or not a mapping.
    """
    with open(path, "r", encoding="utf-8") as fh:
        try:
            data = yaml.safe_load(fh)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Malformed YAML in {path}: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(
            f"Expected a YAML mapping at top level, got {type(data).__name__}"
        )
    return data


def load_settings(path: str | Path) -> ForgeSettings:
    """Load pipeline settings from a YAML file.

    Settings may sit at the top level or under a ``forge:`` section::

        forge:
          pose_tolerance: 4
          outline_color: [20, 15, 10]

    Args:
        path: Path to the YAML settings file.

    Returns:
        A validated ``ForgeSettings`` instance.

    Raises:
        ConfigError: If the file is missing, malformed, or fails validation.
    """
    resolved = Path(path)
    if not resolved.is_file():
        raise ConfigError(f"Settings file not found: {resolved}")

    data = _parse_yaml(resolved)
    section = data.get("forge", data)
    if not isinstance(section, dict):
        raise ConfigError(
            f"'forge' section must be a YAML mapping, got {type(section).__name__}"
        )

    try:
        settings = ForgeSettings(**section)
    except ValidationError as exc:
        raise ConfigError(f"Invalid settings in {resolved}: {exc}") from exc

    logger.info("Loaded settings from %s", resolved)
    return settings
