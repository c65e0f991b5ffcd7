"""Moving objects between blob storage and the local staging area."""

from __future__ import annotations

import base64
from dataclasses import dataclass
from pathlib import Path

from .constants import UPLOAD_ACL
from .exceptions import StagingError
from .staging import RunStaging
from .storage import StorageClient


@dataclass(frozen=True, slots=True)
class PublishedObject:
    key: str
    content_type: str
    data: str


async def fetch(
    storage: StorageClient, staging: RunStaging, bucket: str, key: str
) -> Path:
    """Download ``bucket/key`` into the run's staging area.

    Raises:
        ObjectNotFoundError: If the object does not exist.
        StorageError: For any other transfer failure.
        StagingError: If the local copy cannot be written.
    """

    local_path = staging.path_for(bucket, key)
    payload = await storage.download(bucket, key)

    try:
        local_path.parent.mkdir(parents=True, exist_ok=True)
        local_path.write_bytes(payload)
    except OSError as exc:
        raise StagingError(f"Unable to stage {bucket}/{key}") from exc
    return local_path


async def publish(
    storage: StorageClient,
    path: Path,
    content_type: str,
    bucket: str,
    key: str,
) -> PublishedObject:
    """Upload the staged thumbnail publicly and return it inline as base64."""

    try:
        payload = path.read_bytes()
    except OSError as exc:
        raise StagingError(f"Unable to read thumbnail {path.name}") from exc

    await storage.upload(bucket, key, payload, content_type, acl=UPLOAD_ACL)
    encoded = base64.b64encode(payload).decode("ascii")
    return PublishedObject(key=key, content_type=content_type, data=encoded)
