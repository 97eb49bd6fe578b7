"""Object storage abstraction layer.

This module provides the storage contract used by the snapshot orchestrator
and its OSS implementation, which also works against other S3-compatible
services.
"""

from .client import (
    Credentials,
    ListingPage,
    Storage,
    StorageConfig,
    StorageHandle,
)
from .errors import (
    ChecksumDecodeError,
    ChecksumError,
    ChecksumMismatchError,
    ChecksumMissingError,
    NotFoundError,
    ProvisioningError,
    StorageConfigError,
    StorageError,
    TransportError,
)
from .oss_storage import OSSStorage

__all__ = [
    "ChecksumDecodeError",
    "ChecksumError",
    "ChecksumMismatchError",
    "ChecksumMissingError",
    "Credentials",
    "ListingPage",
    "NotFoundError",
    "OSSStorage",
    "ProvisioningError",
    "Storage",
    "StorageConfig",
    "StorageConfigError",
    "StorageError",
    "StorageHandle",
    "TransportError",
]
