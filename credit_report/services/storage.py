"""Key-value blob storage used to cache generated reports."""

from __future__ import annotations

import logging
from typing import Any, Optional, Protocol, runtime_checkable

from botocore.exceptions import BotoCoreError, ClientError
from fastapi.concurrency import run_in_threadpool

from credit_report.config.settings import StorageConfig
from credit_report.services.aws import create_boto3_client

logger = logging.getLogger(__name__)


class StorageError(RuntimeError):
    """Raised when blob persistence fails."""


@runtime_checkable
class BlobStore(Protocol):
    async def get(self, key: str) -> Optional[bytes]:
        ...

    async def set(self, key: str, data: bytes) -> None:
        ...

    async def delete(self, key: str) -> None:
        ...

    async def clear(self) -> None:
        ...


class MemoryBlobStore:
    """Process-local store; contents vanish on restart."""

    def __init__(self) -> None:
        self._items: dict[str, bytes] = {}

    async def get(self, key: str) -> Optional[bytes]:
        return self._items.get(key)

    async def set(self, key: str, data: bytes) -> None:
        self._items[key] = bytes(data)

    async def delete(self, key: str) -> None:
        self._items.pop(key, None)

    async def clear(self) -> None:
        self._items.clear()


class S3BlobStore:
    """Store blobs as objects under ``prefix`` in a single bucket."""

    def __init__(
        self,
        bucket_name: str,
        *,
        prefix: str = "",
        client: Any = None,
        region: str | None = None,
    ) -> None:
        if not bucket_name:
            raise StorageError("S3 bucket name is not configured.")
        self._bucket = bucket_name
        self._prefix = prefix
        self._client = client or create_boto3_client("s3", region_name=region)

    def _key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    async def get(self, key: str) -> Optional[bytes]:
        def _read() -> Optional[bytes]:
            try:
                response = self._client.get_object(Bucket=self._bucket, Key=self._key(key))
            except ClientError as exc:
                code = exc.response.get("Error", {}).get("Code")
                if code in {"NoSuchKey", "404", "NotFound"}:
                    return None
                raise
            return response["Body"].read()

        try:
            return await run_in_threadpool(_read)
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"Failed to read {key} from S3: {exc}") from exc

    async def set(self, key: str, data: bytes) -> None:
        try:
            await run_in_threadpool(
                self._client.put_object,
                Bucket=self._bucket,
                Key=self._key(key),
                Body=data,
                ContentType="application/json",
            )
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"Failed to write {key} to S3: {exc}") from exc

    async def delete(self, key: str) -> None:
        try:
            await run_in_threadpool(
                self._client.delete_object,
                Bucket=self._bucket,
                Key=self._key(key),
            )
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"Failed to delete {key} from S3: {exc}") from exc

    async def clear(self) -> None:
        def _clear() -> int:
            removed = 0
            paginator = self._client.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=self._bucket, Prefix=self._prefix):
                objects = [{"Key": item["Key"]} for item in page.get("Contents", [])]
                if objects:
                    self._client.delete_objects(
                        Bucket=self._bucket,
                        Delete={"Objects": objects, "Quiet": True},
                    )
                    removed += len(objects)
            return removed

        try:
            removed = await run_in_threadpool(_clear)
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"Failed to clear S3 prefix {self._prefix}: {exc}") from exc
        logger.info("Cleared %s cached objects from s3://%s/%s", removed, self._bucket, self._prefix)


def build_blob_store(config: StorageConfig) -> BlobStore:
    if config.backend == "s3":
        client = None
        if config.access_key and config.secret_key:
            client = create_boto3_client(
                "s3",
                region_name=config.region,
                aws_access_key_id=config.access_key,
                aws_secret_access_key=config.secret_key,
            )
        return S3BlobStore(
            config.bucket_name,
            prefix=config.prefix,
            client=client,
            region=config.region,
        )
    return MemoryBlobStore()


__all__ = ["BlobStore", "MemoryBlobStore", "S3BlobStore", "StorageError", "build_blob_store"]
