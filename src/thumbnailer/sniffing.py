"""Content-based detection of image formats."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from .constants import (
    ALLOWED_IMAGE_MIME_TYPES,
    JPEG_MIME_TYPE,
    PNG_MIME_TYPE,
    SNIFF_HEADER_SIZE,
)
from .exceptions import StagingError


@dataclass(frozen=True, slots=True)
class SniffResult:
    mime_type: str
    accepted: bool


REJECTED = SniffResult(mime_type="", accepted=False)


def _is_webp(data: bytes) -> bool:
    return data[:4] == b"RIFF" and data[8:12] == b"WEBP"


# Ordered (mime type, matcher) pairs. Only JPEG and PNG are accepted, the rest
# are recognised so they can be rejected.
_SIGNATURES: tuple[tuple[str, bytes | Callable[[bytes], bool]], ...] = (
    (JPEG_MIME_TYPE, b"\xff\xd8\xff"),
    (PNG_MIME_TYPE, b"\x89PNG\r\n\x1a\n"),
    ("image/gif", b"GIF87a"),
    ("image/gif", b"GIF89a"),
    ("image/webp", _is_webp),
    ("image/bmp", b"BM"),
    ("image/tiff", b"II*\x00"),
    ("image/tiff", b"MM\x00*"),
    ("image/vnd.microsoft.icon", b"\x00\x00\x01\x00"),
    ("application/pdf", b"%PDF"),
    ("application/zip", b"PK\x03\x04"),
    ("application/gzip", b"\x1f\x8b"),
)


def detect_mime_type(data: bytes) -> str | None:
    """Return the MIME type implied by the magic number of *data*, if known."""

    for mime_type, matcher in _SIGNATURES:
        if isinstance(matcher, bytes):
            if data.startswith(matcher):
                return mime_type
        elif matcher(data):
            return mime_type
    return None


def classify(data: bytes) -> SniffResult:
    """Classify raw bytes, accepting only JPEG and PNG images.

    The decision is based on leading byte signatures alone; filenames and
    declared content types are never consulted. Unknown, empty or truncated
    payloads are rejected with an empty MIME type.
    """

    mime_type = detect_mime_type(data[:SNIFF_HEADER_SIZE])
    if mime_type is None or mime_type not in ALLOWED_IMAGE_MIME_TYPES:
        return REJECTED
    return SniffResult(mime_type=mime_type, accepted=True)


def sniff_file(path: Path) -> SniffResult:
    """Classify a staged file by reading only its header."""

    try:
        with path.open("rb") as handle:
            header = handle.read(SNIFF_HEADER_SIZE)
    except OSError as exc:
        raise StagingError(f"Unable to read staged file {path.name}") from exc
    return classify(header)
