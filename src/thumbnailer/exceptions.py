"""Error hierarchy used across the thumbnail pipeline."""

from __future__ import annotations


class ThumbnailerError(RuntimeError):
    """Base error for thumbnail pipeline failures."""


class StorageError(ThumbnailerError):
    """Raised when blob storage interactions fail."""


class ObjectNotFoundError(StorageError):
    """Raised when the requested object does not exist."""


class StagingError(ThumbnailerError):
    """Raised when local staging files or directories cannot be handled."""


class ImageProcessingError(ThumbnailerError):
    """Raised when thumbnail generation fails."""


class ImageDecodeError(ImageProcessingError):
    """Raised when the staged image cannot be decoded."""


class ImageEncodeError(ImageProcessingError):
    """Raised when the resized image cannot be encoded."""


class KeyRewriteError(ThumbnailerError, ValueError):
    """Raised when a destination key cannot be derived from the configuration."""
