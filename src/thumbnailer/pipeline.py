from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import StrEnum

from structlog.stdlib import BoundLogger

from .config import ThumbnailerSettings
from .constants import JPEG_MIME_TYPE
from .exceptions import (
    ImageProcessingError,
    KeyRewriteError,
    ObjectNotFoundError,
    StagingError,
    StorageError,
)
from .images import resize_image
from .keys import derive_destination_key
from .logging import get_logger
from .schemas import ThumbnailRequest, ThumbnailResponse
from .sniffing import sniff_file
from .staging import staging_run
from .storage import StorageClient
from .transfer import PublishedObject, fetch, publish


class OutcomeStatus(StrEnum):
    """Terminal states of a pipeline run."""

    SUCCEEDED = "succeeded"
    SKIPPED = "skipped"
    FAILED = "failed"


class PipelineStage(StrEnum):
    """Stages executed, in order, by the pipeline."""

    FETCHING = "fetching"
    SNIFFING = "sniffing"
    TRANSFORMING = "transforming"
    REWRITING = "rewriting"
    PUBLISHING = "publishing"


@dataclass(slots=True)
class PipelineOutcome:
    status: OutcomeStatus
    stage: PipelineStage
    published: PublishedObject | None = None
    message: str = ""
    category: str = ""
    error: Exception | None = None

    def to_response(self) -> ThumbnailResponse:
        if self.status is OutcomeStatus.FAILED:
            return ThumbnailResponse.failure(self.message)
        if self.published is None:
            return ThumbnailResponse(status=True)
        return ThumbnailResponse(
            status=True,
            key=self.published.key,
            content_type=self.published.content_type,
            data=self.published.data,
        )


class ThumbnailPipeline:
    """Fetch, sniff, resize and publish a single object.

    Unsupported content ends the run as ``skipped`` rather than ``failed``.
    Every file staged during the run is removed before :meth:`execute`
    returns.
    """

    def __init__(self, storage: StorageClient, settings: ThumbnailerSettings) -> None:
        self._storage = storage
        self._settings = settings

    def run(self, request: ThumbnailRequest) -> PipelineOutcome:
        return asyncio.run(self.execute(request))

    async def execute(self, request: ThumbnailRequest) -> PipelineOutcome:
        log = get_logger(__name__).bind(
            src_bucket=request.src_bucket, src_key=request.src_key
        )
        stage = PipelineStage.FETCHING
        content_type = ""
        try:
            with staging_run(self._settings.staging_root) as staging:
                log = log.bind(run_id=staging.run_id)
                source = await fetch(
                    self._storage, staging, request.src_bucket, request.src_key
                )

                stage = PipelineStage.SNIFFING
                sniffed = sniff_file(source)
                if not sniffed.accepted:
                    log.info("thumbnail-skipped")
                    return PipelineOutcome(status=OutcomeStatus.SKIPPED, stage=stage)
                content_type = sniffed.mime_type

                stage = PipelineStage.TRANSFORMING
                thumbnail = resize_image(source, request.width)

                stage = PipelineStage.REWRITING
                destination_key = derive_destination_key(
                    thumbnail,
                    staging.root,
                    request.src_bucket,
                    request.rewrite_part,
                    request.root_folder,
                    request.preset_name,
                )

                stage = PipelineStage.PUBLISHING
                if self._settings.declare_jpeg_content_type:
                    content_type = JPEG_MIME_TYPE
                published = await publish(
                    self._storage,
                    thumbnail,
                    content_type,
                    request.dst_bucket,
                    destination_key,
                )
        except Exception as exc:
            return self._handle_failure(request, stage, content_type, exc, log)

        log.info(
            "thumbnail-published",
            dst_bucket=request.dst_bucket,
            key=published.key,
            content_type=published.content_type,
        )
        return PipelineOutcome(
            status=OutcomeStatus.SUCCEEDED, stage=stage, published=published
        )

    def _handle_failure(
        self,
        request: ThumbnailRequest,
        stage: PipelineStage,
        content_type: str,
        exc: Exception,
        log: BoundLogger,
    ) -> PipelineOutcome:
        message = self._map_error(request, stage, content_type, exc)
        category = self._categorise_error(exc)
        log.error(
            "thumbnail-failed",
            stage=stage.value,
            category=category,
            error=str(exc),
        )
        return PipelineOutcome(
            status=OutcomeStatus.FAILED,
            stage=stage,
            message=message,
            category=category,
            error=exc,
        )

    def _map_error(
        self,
        request: ThumbnailRequest,
        stage: PipelineStage,
        content_type: str,
        exc: Exception,
    ) -> str:
        if stage is PipelineStage.FETCHING:
            if isinstance(exc, ObjectNotFoundError):
                return f"File {request.src_key} not exists in {request.src_bucket}"
            if isinstance(exc, StorageError):
                return (
                    f"Unable to download {request.src_key} from {request.src_bucket}"
                )
            return f"Unable to stage {request.src_key}"
        if stage is PipelineStage.SNIFFING:
            return f"Unable to inspect {request.src_key}"
        if stage is PipelineStage.TRANSFORMING:
            return (
                f"File {request.src_key} is not image:{content_type} OR resize error"
            )
        if stage is PipelineStage.REWRITING:
            return f"Unable to derive destination key for {request.src_key}"
        return f"Unable to upload {request.dst_bucket}"

    def _categorise_error(self, exc: Exception) -> str:
        if isinstance(exc, StorageError):
            return "storage"
        if isinstance(exc, ImageProcessingError):
            return "image"
        if isinstance(exc, StagingError):
            return "staging"
        if isinstance(exc, KeyRewriteError):
            return "config"
        return "unknown"
