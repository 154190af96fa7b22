"""Data models for pixel buffers, skeletons, rigging joints and forge results."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field

from spriteguard.errors import PixelDataError

# RGB triple as extracted from a buffer or supplied as a target palette.
RGB = tuple[int, int, int]

# Joint names in head-to-feet order, paired with the scanline height fraction
# each one is sampled at.
JOINT_FRACTIONS: tuple[tuple[str, float], ...] = (
    ("head", 0.15),
    ("shoulders", 0.30),
    ("hips", 0.55),
    ("knees", 0.75),
    ("feet", 0.95),
)


class PixelData:
    """RGBA pixel buffer tagged with its dimensions.

    The buffer is interleaved ``R, G, B, A`` in row-major order, so the
    pixel at ``(x, y)`` starts at byte ``(y * width + x) * 4``.

    Stages that mutate "in place" take ownership of the buffer they are
    given and return it; callers must use the returned reference and
    treat the one they passed in as consumed.

    The dimensions and the buffer reference are fixed at construction
    and exposed read-only, so the length invariant holds for the life of
    the object.  Stages edit pixels through ``data`` in place.

    Attributes:
        width: Width in pixels (> 0), read-only.
        height: Height in pixels (> 0), read-only.
        data: Raw RGBA bytes, exactly ``width * height * 4`` long.
            The reference is read-only; its contents are mutable.

    Raises:
        PixelDataError: If the dimensions are not positive or the buffer
            length does not match them.
    """

    __slots__ = ("_width", "_height", "_data")

    def __init__(self, width: int, height: int, data: bytes | bytearray) -> None:
        if width <= 0 or height <= 0:
            raise PixelDataError(f"Dimensions must be positive, got {width}x{height}")
        expected = width * height * 4
        if len(data) != expected:
            raise PixelDataError(
                f"Buffer length {len(data)} does not match "
                f"{width}x{height} RGBA (expected {expected})"
            )
        self._width = width
        self._height = height
        self._data = data if isinstance(data, bytearray) else bytearray(data)

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def data(self) -> bytearray:
        """The RGBA bytes.  Contents are mutable; the buffer itself cannot be replaced."""
        return self._data

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PixelData):
            return NotImplemented
        return (
            self.width == other.width
            and self.height == other.height
            and self.data == other.data
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"PixelData(width={self.width}, height={self.height})"

    @classmethod
    def blank(
        cls,
        width: int,
        height: int,
        color: tuple[int, int, int, int] = (0, 0, 0, 0),
    ) -> PixelData:
        """Create a buffer filled with a single RGBA color."""
        if width <= 0 or height <= 0:
            raise PixelDataError(f"Dimensions must be positive, got {width}x{height}")
        return cls(width, height, bytearray(bytes(color) * (width * height)))

    @property
    def size(self) -> tuple[int, int]:
        """Return ``(width, height)``."""
        return (self.width, self.height)

    @property
    def pixel_count(self) -> int:
        """Number of pixels in the buffer."""
        return self.width * self.height

    def offset(self, x: int, y: int) -> int:
        """Byte offset of the red channel of pixel ``(x, y)``."""
        return (y * self.width + x) * 4

    def get_pixel(self, x: int, y: int) -> tuple[int, int, int, int]:
        """Return the RGBA value at ``(x, y)``."""
        i = self.offset(x, y)
        d = self.data
        return (d[i], d[i + 1], d[i + 2], d[i + 3])

    def set_pixel(self, x: int, y: int, rgba: tuple[int, int, int, int]) -> None:
        """Overwrite the RGBA value at ``(x, y)``."""
        i = self.offset(x, y)
        self.data[i : i + 4] = bytes(rgba)


class Skeleton(BaseModel):
    """Coarse five-joint skeleton sampled from fixed horizontal scanlines.

    Each joint is ``(x, y)`` where ``x`` is the mean column of the active
    pixels on scanline ``y``.
    """

    head: tuple[float, int]
    shoulders: tuple[float, int]
    hips: tuple[float, int]
    knees: tuple[float, int]
    feet: tuple[float, int]

    model_config = ConfigDict(frozen=True)

    def joints(self) -> list[tuple[str, tuple[float, int]]]:
        """Return ``(name, point)`` pairs in head-to-feet order."""
        return [(name, getattr(self, name)) for name, _ in JOINT_FRACTIONS]


class Joint(BaseModel):
    """A rigging joint in percentage coordinates of the sprite canvas.

    Attributes:
        id: Stable joint identifier.
        label: Human-readable name (e.g. "Left Knee").
        x: Horizontal position, 0–100.
        y: Vertical position, 0–100.
    """

    id: str
    label: str = ""
    x: float = Field(..., ge=0.0, le=100.0)
    y: float = Field(..., ge=0.0, le=100.0)


RiggingData = list[Joint]


class RatioMetrics(BaseModel):
    """Share of opaque pixels inside the head, bust and hip height bands."""

    head: float = Field(..., ge=0.0, le=1.0)
    bust: float = Field(..., ge=0.0, le=1.0)
    hip: float = Field(..., ge=0.0, le=1.0)


class IdentityReport(BaseModel):
    """Read-only diagnostics for a sprite.

    Attributes:
        hash: Perceptual identity hash.
        skeleton: Scanline skeleton estimate.
        ratios: Anatomical band ratios.
        edge_pixels: Number of pixels on alpha edges.
    """

    hash: str
    skeleton: Skeleton
    ratios: RatioMetrics
    edge_pixels: int = Field(default=0, ge=0)


class IntegrityVerdict(BaseModel):
    """Outcome of the post-synthesis integrity audit.

    Attributes:
        passed: True only if both the drift and pose checks passed.
        drift_ok: No changed pixel fell outside the original silhouette.
        pose_ok: All joints stayed within the pose tolerance.
        violations: Number of changed pixels outside the silhouette.
        drift_score: Fraction of pixels left unchanged, 0.0–1.0.
        feedback: Human-readable summary.
    """

    passed: bool
    drift_ok: bool
    pose_ok: bool
    violations: int = Field(default=0, ge=0)
    drift_score: float = Field(..., ge=0.0, le=1.0)
    feedback: str = ""


class ForgeMetadata(BaseModel):
    """Traceability metadata attached to every forged sprite.

    Attributes:
        directive: Full directive text sent to the executor.
        engine: Name of the executor that produced the synthesis.
        timestamp: UTC time the forge completed.
        integrity_score: Drift score of the synthesis.
        sheet_mode: Whether the output is a multi-pose sheet.
        frame_count: Number of poses in the output image.
    """

    directive: str
    engine: str = "external"
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    integrity_score: float = Field(..., ge=0.0, le=1.0)
    sheet_mode: bool = False
    frame_count: int = Field(default=1, ge=1)

    def as_text_chunks(self) -> dict[str, str]:
        """Flatten into string key/value pairs suitable for PNG text chunks."""
        return {
            "spriteguard:directive": self.directive,
            "spriteguard:engine": self.engine,
            "spriteguard:timestamp": self.timestamp.isoformat(),
            "spriteguard:integrity_score": f"{self.integrity_score:.6f}",
            "spriteguard:sheet_mode": str(self.sheet_mode).lower(),
            "spriteguard:frame_count": str(self.frame_count),
        }


class ForgeResult(BaseModel):
    """The pipeline's sole output.

    Attributes:
        image: The validated, post-processed sprite (or sheet).
        identity: Identity hash of the cleaned base image.
        drift: Drift score of the synthesis, 1.0 meaning pixel-identical.
        metadata: Traceability metadata.
    """

    image: PixelData
    identity: str
    drift: float = Field(..., ge=0.0, le=1.0)
    metadata: ForgeMetadata

    model_config = ConfigDict(arbitrary_types_allowed=True)
