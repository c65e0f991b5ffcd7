from __future__ import annotations

import asyncio
import io
from dataclasses import dataclass
from typing import Protocol, cast
from urllib.parse import urlparse

from .config import ThumbnailerSettings
from .constants import UPLOAD_ACL
from .exceptions import ObjectNotFoundError, StorageError

_MISSING_OBJECT_CODES = frozenset({"NoSuchKey", "NoSuchBucket", "NoSuchObject"})


class StorageClient(Protocol):
    async def download(self, bucket: str, key: str) -> bytes: ...

    async def upload(
        self,
        bucket: str,
        key: str,
        data: bytes,
        content_type: str,
        *,
        acl: str = UPLOAD_ACL,
    ) -> str: ...


class MinioObject(Protocol):
    def read(self) -> bytes: ...

    def close(self) -> None: ...

    def release_conn(self) -> None: ...


class MinioLike(Protocol):
    def get_object(self, bucket: str, key: str) -> MinioObject: ...

    def put_object(
        self,
        bucket: str,
        key: str,
        data: io.BytesIO,
        length: int,
        content_type: str,
        metadata: dict[str, str] | None = None,
    ) -> object: ...


@dataclass(slots=True)
class StoredObject:
    data: bytes
    content_type: str
    acl: str


def _is_missing_object(exc: Exception) -> bool:
    return getattr(exc, "code", None) in _MISSING_OBJECT_CODES


class MinioStorage(StorageClient):
    """Async-friendly wrapper around the MinIO client."""

    def __init__(self, client: MinioLike) -> None:
        self._client: MinioLike = client

    @classmethod
    def from_settings(cls, settings: ThumbnailerSettings) -> MinioStorage:
        if not settings.s3_endpoint:
            raise StorageError("S3 endpoint is not configured")
        from minio import Minio

        parsed = urlparse(settings.s3_endpoint)
        secure = parsed.scheme == "https"
        endpoint = parsed.netloc or parsed.path
        client = cast(
            MinioLike,
            Minio(
                endpoint,
                access_key=settings.s3_access_key,
                secret_key=settings.s3_secret_key,
                secure=secure,
                region=settings.s3_region,
            ),
        )
        return cls(client)

    async def download(self, bucket: str, key: str) -> bytes:
        def _download() -> bytes:
            response: MinioObject = self._client.get_object(bucket, key)
            try:
                return response.read()
            finally:
                response.close()
                response.release_conn()

        try:
            return await asyncio.to_thread(_download)
        except Exception as exc:
            if _is_missing_object(exc):
                raise ObjectNotFoundError(f"{bucket}/{key} not found") from exc
            raise StorageError(str(exc)) from exc

    async def upload(
        self,
        bucket: str,
        key: str,
        data: bytes,
        content_type: str,
        *,
        acl: str = UPLOAD_ACL,
    ) -> str:
        stream = io.BytesIO(data)
        length = len(data)

        def _upload() -> None:
            self._client.put_object(
                bucket,
                key,
                stream,
                length,
                content_type=content_type,
                metadata={"x-amz-acl": acl},
            )

        try:
            await asyncio.to_thread(_upload)
        except Exception as exc:
            raise StorageError(str(exc)) from exc
        return f"s3://{bucket}/{key}"


class InMemoryStorage(StorageClient):
    """Simple in-memory storage used in tests."""

    def __init__(self) -> None:
        self._objects: dict[str, StoredObject] = {}

    def get(self, bucket: str, key: str) -> StoredObject | None:
        return self._objects.get(f"{bucket}/{key}")

    def keys(self, bucket: str) -> list[str]:
        prefix = f"{bucket}/"
        return sorted(
            name[len(prefix) :] for name in self._objects if name.startswith(prefix)
        )

    async def download(self, bucket: str, key: str) -> bytes:
        stored = self.get(bucket, key)
        if stored is None:
            raise ObjectNotFoundError("object not found")
        return stored.data

    async def upload(
        self,
        bucket: str,
        key: str,
        data: bytes,
        content_type: str,
        *,
        acl: str = UPLOAD_ACL,
    ) -> str:
        self._objects[f"{bucket}/{key}"] = StoredObject(
            data=bytes(data), content_type=content_type, acl=acl
        )
        return f"s3://{bucket}/{key}"
