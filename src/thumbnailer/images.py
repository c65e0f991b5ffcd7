from __future__ import annotations

import io
from pathlib import Path

from PIL import Image

from .constants import JPEG_QUALITY, TRANSFORM_MARKER
from .exceptions import ImageDecodeError, ImageEncodeError, StagingError

# Pillow plugins allowed to decode staged sources.
DECODABLE_FORMATS = ("JPEG", "PNG")


def transformed_path(source: Path) -> Path:
    """Return the staging path of the thumbnail rendered from *source*."""
    return source.with_name(f"{TRANSFORM_MARKER}{source.name}")


def target_size(source_size: tuple[int, int], width: int) -> tuple[int, int]:
    """Compute the output size for *width*, preserving the source aspect ratio."""

    if width <= 0:
        raise ValueError("Target width must be a positive integer")
    source_width, source_height = source_size
    if source_width <= 0 or source_height <= 0:
        raise ValueError("Source image has no pixels")
    height = max(1, round(source_height * width / source_width))
    return width, height


def render_thumbnail(
    image_bytes: bytes, width: int, *, quality: int = JPEG_QUALITY
) -> bytes:
    """Resize *image_bytes* to *width* and re-encode it as JPEG."""

    if width <= 0:
        raise ValueError("Target width must be a positive integer")

    source = io.BytesIO(image_bytes)
    try:
        with Image.open(source, formats=DECODABLE_FORMATS) as original:
            original.load()
            rgb = original.convert("RGB")
    # Pillow reports some corrupt chunks as SyntaxError.
    except (OSError, SyntaxError, Image.DecompressionBombError) as exc:
        raise ImageDecodeError("Unable to decode image") from exc

    try:
        size = target_size(rgb.size, width)
    except ValueError as exc:
        raise ImageDecodeError("Decoded image has no pixels") from exc
    resized = rgb.resize(size, Image.Resampling.LANCZOS)
    buffer = io.BytesIO()
    try:
        resized.save(buffer, format="JPEG", quality=quality)
    except (OSError, ValueError) as exc:
        raise ImageEncodeError("Unable to encode thumbnail") from exc
    return buffer.getvalue()


def resize_image(source: Path, width: int) -> Path:
    """Render a thumbnail of the staged *source* next to it and return its path.

    A file left at the destination path by an earlier run is removed first.
    """

    destination = transformed_path(source)
    try:
        destination.unlink(missing_ok=True)
    except OSError as exc:
        raise StagingError(f"Unable to remove stale file {destination.name}") from exc

    try:
        image_bytes = source.read_bytes()
    except OSError as exc:
        raise StagingError(f"Unable to read staged file {source.name}") from exc

    thumbnail = render_thumbnail(image_bytes, width)
    try:
        destination.write_bytes(thumbnail)
    except OSError as exc:
        raise StagingError(f"Unable to write thumbnail {destination.name}") from exc
    return destination
