"""Thin adapter for interacting with S3-compatible object storage."""

from collections.abc import Iterator, Mapping
import os
from typing import Any, Protocol

import boto3

from core.utils.constants import (
    ENV_AWS_ENDPOINT_URL,
    ENV_AWS_REGION,
    UPLOAD_CACHE_CONTROL,
)


class _Boto3S3Client(Protocol):
    """Internal typing for boto3 S3 client (AWS-facing only)."""

    def put_object(
        self,
        *,
        Bucket: str,
        Key: str,
        Body: bytes,
        ContentType: str,
        CacheControl: str,
    ) -> Any: ...

    def head_object(self, *, Bucket: str, Key: str) -> Mapping[str, Any]: ...

    def delete_object(self, *, Bucket: str, Key: str) -> Any: ...

    def get_paginator(self, operation_name: str) -> Any: ...


class S3AdapterProtocol(Protocol):
    """Minimal S3 adapter protocol (repository-facing)."""

    def put_object(
        self,
        *,
        bucket: str,
        key: str,
        body: bytes,
        content_type: str,
    ) -> None: ...

    def head_object(self, *, bucket: str, key: str) -> Mapping[str, Any]: ...

    def delete_object(self, *, bucket: str, key: str) -> None: ...

    def iter_keys(self, *, bucket: str, prefix: str) -> Iterator[str]: ...


class S3Adapter:
    """Low-level S3 operations (mechanical, no error handling).

    This adapter:
    - Wraps a boto3 S3 client shared by every bucket
    - Does NOT handle errors (lets them bubble up)
    - Domain implementations catch and translate errors
    """

    def __init__(self) -> None:
        """Create S3 client from environment configuration."""
        self._client: _Boto3S3Client = boto3.client(
            "s3",
            endpoint_url=os.getenv(ENV_AWS_ENDPOINT_URL),
            region_name=os.getenv(ENV_AWS_REGION),
        )

    def put_object(
        self,
        *,
        bucket: str,
        key: str,
        body: bytes,
        content_type: str,
    ) -> None:
        """Store object in S3, overwriting any existing object.
        Raises boto3 exceptions - caught by domain implementation.
        """
        self._client.put_object(
            Bucket=bucket,
            Key=key,
            Body=body,
            ContentType=content_type,
            CacheControl=UPLOAD_CACHE_CONTROL,
        )

    def head_object(self, *, bucket: str, key: str) -> Mapping[str, Any]:
        """Fetch object metadata.
        Raises boto3 exceptions - caught by domain implementation.
        """
        return self._client.head_object(Bucket=bucket, Key=key)

    def delete_object(self, *, bucket: str, key: str) -> None:
        """Delete object from S3.
        Raises boto3 exceptions - caught by domain implementation.
        """
        self._client.delete_object(Bucket=bucket, Key=key)

    def iter_keys(self, *, bucket: str, prefix: str) -> Iterator[str]:
        """Yield every key under a prefix, following pagination."""
        paginator = self._client.get_paginator("list_objects_v2")
        for page in paginator.paginate(Bucket=bucket, Prefix=prefix):
            for obj in page.get("Contents", []):
                yield obj["Key"]
