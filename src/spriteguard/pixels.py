"""Pixel buffer helpers: defensive cloning and Pillow conversions."""

from __future__ import annotations

import io
from collections.abc import Mapping
from pathlib import Path

from PIL import Image
from PIL.PngImagePlugin import PngInfo

from spriteguard.errors import PixelDataError
from spriteguard.models import PixelData


def clone(img: PixelData) -> PixelData:
    """Deep-copy a pixel buffer.

    The returned buffer shares no memory with *img*, so in-place stages
    may mutate it freely without touching the caller's original.
    """
    return PixelData(img.width, img.height, bytearray(img.data))


def from_image(image: Image.Image) -> PixelData:
    """Convert a Pillow image to a ``PixelData`` buffer (RGBA)."""
    if image.mode != "RGBA":
        image = image.convert("RGBA")
    width, height = image.size
    return PixelData(width, height, bytearray(image.tobytes()))


def to_image(img: PixelData) -> Image.Image:
    """Convert a ``PixelData`` buffer to a Pillow RGBA image."""
    return Image.frombytes("RGBA", (img.width, img.height), bytes(img.data))


def load_pixel_data(source: bytes | str | Path) -> PixelData:
    """Load a sprite from PNG bytes or a file path.

    Args:
        source: Raw image bytes, a string path, or a ``Path`` object.

    Returns:
        The decoded sprite as an RGBA ``PixelData``.

    Raises:
        FileNotFoundError: If *source* is a path that does not exist.
        PixelDataError: If the image cannot be decoded.
        ValueError: If *source* type is unsupported.
    """
    if isinstance(source, bytes):
        stream: io.BytesIO | Path = io.BytesIO(source)
        label = f"<{len(source)} bytes>"
    elif isinstance(source, (str, Path)):
        stream = Path(source)
        if not stream.exists():
            raise FileNotFoundError(f"Image not found: {stream}")
        label = str(stream)
    else:
        raise ValueError(f"Unsupported image source type: {type(source)}")

    try:
        with Image.open(stream) as image:
            image.load()
            return from_image(image)
    except OSError as exc:
        raise PixelDataError(f"Cannot decode image: {label}") from exc


def to_png_bytes(
    img: PixelData, text_chunks: Mapping[str, str] | None = None
) -> bytes:
    """Encode a sprite as PNG bytes, optionally with ``tEXt`` metadata."""
    pnginfo: PngInfo | None = None
    if text_chunks:
        pnginfo = PngInfo()
        for key, value in text_chunks.items():
            pnginfo.add_text(key, value)
    buf = io.BytesIO()
    to_image(img).save(buf, format="PNG", pnginfo=pnginfo)
    return buf.getvalue()


def save_pixel_data(
    img: PixelData,
    path: str | Path,
    text_chunks: Mapping[str, str] | None = None,
) -> Path:
    """Write a sprite to *path* as PNG, creating parent directories.

    Returns:
        The path written to.
    """
    dest = Path(path)
    dest.parent.mkdir(parents=True, exist_ok=True)
    dest.write_bytes(to_png_bytes(img, text_chunks))
    return dest


def read_text_chunks(source: bytes | str | Path) -> dict[str, str]:
    """Return the PNG text chunks embedded in an image."""
    stream = io.BytesIO(source) if isinstance(source, bytes) else Path(source)
    with Image.open(stream) as image:
        image.load()
        return {str(k): str(v) for k, v in getattr(image, "text", {}).items()}
