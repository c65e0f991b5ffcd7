"""On-demand thumbnail generation for objects in blob storage."""

from .config import RuntimeOverrides, ThumbnailerSettings
from .exceptions import (
    ImageDecodeError,
    ImageEncodeError,
    ImageProcessingError,
    KeyRewriteError,
    ObjectNotFoundError,
    StagingError,
    StorageError,
    ThumbnailerError,
)
from .pipeline import OutcomeStatus, PipelineOutcome, PipelineStage, ThumbnailPipeline
from .schemas import ThumbnailRequest, ThumbnailResponse

__all__ = (
    "ImageDecodeError",
    "ImageEncodeError",
    "ImageProcessingError",
    "KeyRewriteError",
    "ObjectNotFoundError",
    "OutcomeStatus",
    "PipelineOutcome",
    "PipelineStage",
    "RuntimeOverrides",
    "StagingError",
    "StorageError",
    "ThumbnailPipeline",
    "ThumbnailRequest",
    "ThumbnailResponse",
    "ThumbnailerError",
    "ThumbnailerSettings",
)
