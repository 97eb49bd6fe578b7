"""Storage contract and data types.

This module defines the abstract interface consumed by the snapshot
orchestrator, together with the immutable records a backend is built from.
"""

from __future__ import annotations

import abc
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, BinaryIO

from strata_oss.common.config import ADDRESSING_STYLES, BUCKET_ACLS
from strata_oss.infra.storage.errors import StorageConfigError

if TYPE_CHECKING:
    from strata_oss.common.config import Settings


@dataclass(frozen=True, slots=True)
class Credentials:
    """Access key pair supplied by the caller."""

    access_key_id: str
    access_key_secret: str = field(repr=False)

    def __post_init__(self) -> None:
        if not self.access_key_id or not self.access_key_secret:
            raise StorageConfigError(
                "access_key_id and access_key_secret must be non-empty"
            )


@dataclass(frozen=True, slots=True)
class StorageConfig:
    """Construction options for an object storage backend."""

    bucket: str
    region: str = "oss-cn-hangzhou"
    prefix: str = ""
    bucket_acl: str = "private"
    endpoint_url: str | None = None
    addressing_style: str = "virtual"
    use_ssl: bool = True

    def __post_init__(self) -> None:
        if not self.bucket:
            raise StorageConfigError("bucket is required")
        if self.bucket_acl not in BUCKET_ACLS:
            raise StorageConfigError(
                f"Unsupported bucket ACL: {self.bucket_acl}. "
                f"Expected one of {', '.join(BUCKET_ACLS)}."
            )
        if self.addressing_style not in ADDRESSING_STYLES:
            raise StorageConfigError(
                f"Unsupported addressing style: {self.addressing_style}. "
                f"Expected one of {', '.join(ADDRESSING_STYLES)}."
            )

    @classmethod
    def from_settings(cls, settings: "Settings") -> "StorageConfig":
        if not settings.OSS_BUCKET:
            raise StorageConfigError("OSS_BUCKET is required")
        return cls(
            bucket=settings.OSS_BUCKET,
            region=settings.OSS_REGION,
            prefix=settings.OSS_BUCKET_PREFIX,
            bucket_acl=settings.OSS_BUCKET_ACL,
            endpoint_url=settings.OSS_ENDPOINT_URL,
            addressing_style=settings.OSS_ADDRESSING_STYLE,
            use_ssl=settings.OSS_USE_SSL,
        )


@dataclass(frozen=True, slots=True)
class StorageHandle:
    """Everything a backend needs to talk to its bucket.

    Created once when the backend is constructed and never mutated, so it can
    be shared by concurrently issued operations.
    """

    client: Any
    bucket: str
    region: str
    credentials: Credentials
    prefix: str


@dataclass(frozen=True, slots=True)
class ListingPage:
    """Result of a single bounded list request."""

    keys: tuple[str, ...]
    is_truncated: bool
    next_marker: str | None = None


class Storage(abc.ABC):
    """Interface every storage backend used for snapshots must implement.

    Paths are slash-delimited logical paths; any provider-side prefixing is
    hidden behind this interface.
    """

    @abc.abstractmethod
    def get(self, path: str) -> BinaryIO:
        """Open the object stored at ``path`` for reading.

        Args:
            path: Logical object path.

        Returns:
            A readable binary stream. Integrity is verified once the stream
            has been read to the end.

        Raises:
            NotFoundError: If no object exists at ``path``.
            ChecksumError: If the stored digest is missing, malformed, or does
                not match the bytes read.
            TransportError: If the provider call fails.
        """

    @abc.abstractmethod
    def put(self, path: str, data: bytes) -> None:
        """Store ``data`` at ``path``, replacing any existing object.

        Raises:
            TransportError: If the provider call fails.
        """

    @abc.abstractmethod
    def put_reader(self, path: str, reader: BinaryIO) -> None:
        """Consume ``reader`` and store its contents at ``path``.

        Raises:
            TransportError: If the provider call fails.
        """

    @abc.abstractmethod
    def delete(self, path: str) -> None:
        """Remove the object at ``path``.

        Deleting a path that does not exist is not an error.

        Raises:
            TransportError: If the provider call fails.
        """

    @abc.abstractmethod
    def list(self, prefix: str, max_count: int) -> list[str]:
        """Return up to ``max_count`` logical paths starting with ``prefix``.

        Paths come back in provider order. A result shorter than
        ``max_count`` means the prefix has no further matches.

        Raises:
            TransportError: If a provider call fails.
        """

    @abc.abstractmethod
    def lock(self, path: str) -> None:
        """Acquire an advisory lock on ``path``."""

    @abc.abstractmethod
    def unlock(self, path: str) -> None:
        """Release an advisory lock on ``path``."""
