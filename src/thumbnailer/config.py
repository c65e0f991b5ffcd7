from __future__ import annotations

import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

if TYPE_CHECKING:
    from .storage import StorageClient


def _default_staging_root() -> Path:
    return Path(tempfile.gettempdir()) / "thumbnailer"


class ThumbnailerSettings(BaseSettings):
    """Configuration container for the thumbnail worker."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    celery_broker_url: str = Field(
        "memory://",
        validation_alias=AliasChoices(
            "THUMBNAILER_CELERY_BROKER_URL", "CELERY_BROKER_URL"
        ),
    )
    celery_result_backend: str = Field(
        "redis://localhost:6379/1",
        validation_alias=AliasChoices(
            "THUMBNAILER_CELERY_RESULT_BACKEND", "CELERY_RESULT_BACKEND"
        ),
    )

    s3_region: str = Field(
        "us-east-1",
        validation_alias=AliasChoices("THUMBNAILER_S3_REGION", "S3_REGION"),
    )
    s3_endpoint: str | None = Field(
        None,
        validation_alias=AliasChoices("THUMBNAILER_S3_ENDPOINT", "S3_ENDPOINT"),
    )
    s3_access_key: str | None = Field(
        None,
        validation_alias=AliasChoices("THUMBNAILER_S3_ACCESS_KEY", "S3_ACCESS_KEY"),
    )
    s3_secret_key: str | None = Field(
        None,
        validation_alias=AliasChoices("THUMBNAILER_S3_SECRET_KEY", "S3_SECRET_KEY"),
    )

    staging_root: Path = Field(
        default_factory=_default_staging_root,
        validation_alias=AliasChoices("THUMBNAILER_STAGING_ROOT", "STAGING_ROOT"),
    )
    # When disabled the sniffed source type is declared on upload, even for
    # PNG inputs that were re-encoded as JPEG.
    declare_jpeg_content_type: bool = Field(
        False,
        validation_alias=AliasChoices(
            "THUMBNAILER_DECLARE_JPEG_CONTENT_TYPE", "DECLARE_JPEG_CONTENT_TYPE"
        ),
    )

    log_level: str = Field(
        "INFO", validation_alias=AliasChoices("THUMBNAILER_LOG_LEVEL", "LOG_LEVEL")
    )
    log_json: bool = Field(
        True, validation_alias=AliasChoices("THUMBNAILER_LOG_JSON", "LOG_JSON")
    )


@dataclass(slots=True)
class RuntimeOverrides:
    """Optional dependency overrides used primarily for tests."""

    settings: ThumbnailerSettings | None = None
    storage: StorageClient | None = None
    log_level: str | None = None
