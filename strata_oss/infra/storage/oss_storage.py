"""OSS-backed snapshot storage.

This module stores snapshot files in Aliyun OSS, or any other object store
that speaks the S3-compatible API, under an optional key prefix.

Dependencies:
    - boto3
    - botocore
"""

from __future__ import annotations

import base64
from typing import Any, BinaryIO

from strata_oss.infra.observability import metrics
from strata_oss.infra.storage.checksum import ChecksumReader, decode_etag, md5_digest
from strata_oss.infra.storage.client import (
    Credentials,
    Storage,
    StorageConfig,
    StorageHandle,
)
from strata_oss.infra.storage.errors import (
    ChecksumError,
    NotFoundError,
    StorageConfigError,
    TransportError,
    is_not_found,
    provider_error_code,
)
from strata_oss.infra.storage.listing import PaginatedLister
from strata_oss.infra.storage.paths import PathCodec
from strata_oss.infra.storage.provisioning import BucketProvisioner

OBJECT_CONTENT_TYPE = "application/octet-stream"
OBJECT_ACL = "private"


def _default_endpoint(region: str, use_ssl: bool) -> str | None:
    """Public OSS endpoint for ``oss-*`` regions; None lets botocore pick AWS."""
    if not region.startswith("oss-"):
        return None
    scheme = "https" if use_ssl else "http"
    return f"{scheme}://{region}.aliyuncs.com"


class OSSStorage(Storage):
    """Snapshot storage on an OSS bucket.

    Construction provisions the bucket if it does not answer a one-key listing.
    Every logical path is stored under ``<prefix>/<path>``. Reads are checked
    against the object's ETag, and objects are written with a private ACL.
    """

    def __init__(self, *, config: StorageConfig, credentials: Credentials) -> None:
        """Connect to the bucket described by ``config``.

        Args:
            config: Bucket, region, prefix and ACL options.
            credentials: Access key pair used to sign requests.

        Raises:
            StorageConfigError: If boto3 is not installed.
            ProvisioningError: If the bucket is missing and cannot be created.
        """
        client = self._build_client(config, credentials)
        BucketProvisioner(
            client,
            bucket=config.bucket,
            region=config.region,
            acl=config.bucket_acl,
        ).ensure_bucket()

        self._handle = StorageHandle(
            client=client,
            bucket=config.bucket,
            region=config.region,
            credentials=credentials,
            prefix=config.prefix,
        )
        self._codec = PathCodec(config.prefix)
        self._lister = PaginatedLister(client, bucket=config.bucket, codec=self._codec)

    @staticmethod
    def _build_client(config: StorageConfig, credentials: Credentials) -> Any:
        """Create a boto3 S3 client pointed at the OSS endpoint."""
        try:
            import boto3
            from botocore.config import Config
        except ImportError as exc:
            raise StorageConfigError(
                "boto3 and botocore are required for the OSS storage backend. "
                "Install with: pip install boto3"
            ) from exc

        return boto3.client(
            "s3",
            endpoint_url=config.endpoint_url
            or _default_endpoint(config.region, config.use_ssl),
            region_name=config.region,
            aws_access_key_id=credentials.access_key_id,
            aws_secret_access_key=credentials.access_key_secret,
            use_ssl=bool(config.use_ssl),
            # Only the Content-MD5 set by put; no SDK-added CRC checksum headers.
            config=Config(
                s3={"addressing_style": config.addressing_style},
                request_checksum_calculation="when_required",
                response_checksum_validation="when_required",
            ),
        )

    @property
    def handle(self) -> StorageHandle:
        return self._handle

    @property
    def _client(self) -> Any:
        return self._handle.client

    @property
    def _bucket(self) -> str:
        return self._handle.bucket

    def get(self, path: str) -> ChecksumReader:
        """Open the object at ``path`` wrapped in a verifying reader."""
        key = self._codec.add_prefix(path)
        with metrics.observe_operation("get", bucket=self._bucket, key=key):
            try:
                response = self._client.get_object(Bucket=self._bucket, Key=key)
            except Exception as exc:
                if is_not_found(exc):
                    raise NotFoundError(path) from exc
                raise TransportError(
                    f"Failed to get object: {exc}", error_code=provider_error_code(exc)
                ) from exc

            body = response["Body"]
            try:
                expected = decode_etag(response.get("ETag"))
            except ChecksumError:
                body.close()
                raise
            return ChecksumReader(body, expected)

    def put(self, path: str, data: bytes) -> None:
        """Upload ``data`` to ``path`` with a Content-MD5 header."""
        key = self._codec.add_prefix(path)
        content_md5 = base64.b64encode(md5_digest(data)).decode("ascii")
        with metrics.observe_operation("put", bucket=self._bucket, key=key):
            try:
                self._client.put_object(
                    Bucket=self._bucket,
                    Key=key,
                    Body=data,
                    ContentType=OBJECT_CONTENT_TYPE,
                    ContentMD5=content_md5,
                    ACL=OBJECT_ACL,
                )
            except Exception as exc:
                raise TransportError(
                    f"Failed to put object: {exc}", error_code=provider_error_code(exc)
                ) from exc

    def put_reader(self, path: str, reader: BinaryIO) -> None:
        # The whole payload is buffered so its MD5 is known before the upload
        # starts; peak memory grows with the object size.
        data = reader.read()
        self.put(path, data)

    def delete(self, path: str) -> None:
        key = self._codec.add_prefix(path)
        with metrics.observe_operation("delete", bucket=self._bucket, key=key):
            try:
                self._client.delete_object(Bucket=self._bucket, Key=key)
            except Exception as exc:
                raise TransportError(
                    f"Failed to delete object: {exc}",
                    error_code=provider_error_code(exc),
                ) from exc

    def list(self, prefix: str, max_count: int) -> list[str]:
        with metrics.observe_operation(
            "list", bucket=self._bucket, key=self._codec.add_prefix(prefix)
        ):
            return self._lister.list(prefix, max_count)

    def lock(self, path: str) -> None:
        """Not implemented by this backend; always succeeds."""

    def unlock(self, path: str) -> None:
        """Not implemented by this backend; always succeeds."""
