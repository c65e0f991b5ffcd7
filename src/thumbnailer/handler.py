"""Entry point turning one request payload into one response payload."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from .bootstrap import RuntimeState
from .logging import get_logger, request_context
from .pipeline import OutcomeStatus, PipelineOutcome
from .schemas import ThumbnailRequest, ThumbnailResponse

_log = get_logger(__name__)


def _describe_validation_error(exc: ValidationError) -> str:
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"]) or "request"
        problems.append(f"{location}: {error['msg']}")
    return "Invalid request: " + "; ".join(problems)


def handle(payload: Mapping[str, Any], runtime: RuntimeState) -> ThumbnailResponse:
    """Validate *payload*, run the pipeline and build the response."""

    try:
        request = ThumbnailRequest.model_validate(dict(payload))
    except ValidationError as exc:
        message = _describe_validation_error(exc)
        _log.warning("thumbnail-request-invalid", error=message)
        return ThumbnailResponse.failure(message)

    with request_context(
        src_bucket=request.src_bucket,
        src_key=request.src_key,
        dst_bucket=request.dst_bucket,
        preset_name=request.preset_name,
    ):
        outcome: PipelineOutcome = runtime.pipeline().run(request)
        if outcome.status is OutcomeStatus.FAILED:
            _log.error(
                "thumbnail-request-failed",
                stage=outcome.stage.value,
                category=outcome.category,
                exc_info=outcome.error,
            )
    return outcome.to_response()
