"""Shared constants for the thumbnail pipeline."""

from __future__ import annotations

from typing import Final

JPEG_MIME_TYPE: Final[str] = "image/jpeg"
PNG_MIME_TYPE: Final[str] = "image/png"
ALLOWED_IMAGE_MIME_TYPES: frozenset[str] = frozenset({JPEG_MIME_TYPE, PNG_MIME_TYPE})

# Bytes inspected when sniffing a staged object.
SNIFF_HEADER_SIZE: Final[int] = 262

TRANSFORM_MARKER: Final[str] = "tmp_prew_"
JPEG_QUALITY: Final[int] = 70
UPLOAD_ACL: Final[str] = "public-read"

TASK_NAMESPACE: Final[str] = "thumbnailer"
