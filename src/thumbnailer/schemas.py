"""Request and response payloads of the thumbnail service."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator


class ThumbnailRequest(BaseModel):
    """A single thumbnail generation request.

    Values are used verbatim; object keys may legitimately carry leading or
    trailing whitespace.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    src_key: str = Field(min_length=1)
    src_bucket: str = Field(min_length=1)
    dst_bucket: str = Field(min_length=1)
    root_folder: str = Field(min_length=1)
    preset_name: str = Field(min_length=1)
    rewrite_part: str
    width: StrictInt = Field(gt=0)

    @field_validator("src_bucket", "dst_bucket", "root_folder", "preset_name")
    @classmethod
    def reject_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value


class ThumbnailResponse(BaseModel):
    """Outcome of a request; ``status`` is ``False`` only for failures."""

    status: bool
    key: str = ""
    content_type: str = ""
    data: str = ""
    error: str = ""

    @classmethod
    def failure(cls, message: str) -> ThumbnailResponse:
        return cls(status=False, error=message)
