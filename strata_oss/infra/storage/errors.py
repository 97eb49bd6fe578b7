"""Error taxonomy raised by object storage backends."""

from __future__ import annotations


class StorageError(RuntimeError):
    """Raised when object storage operations fail."""


class StorageConfigError(StorageError):
    """Raised when the storage backend is not properly configured."""


class NotFoundError(StorageError):
    """Raised when the requested object does not exist."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Object not found: {path}")
        self.path = path


class ChecksumError(StorageError):
    """Base class for read integrity failures."""


class ChecksumMissingError(ChecksumError):
    """Raised when a read response carries no ETag digest."""


class ChecksumDecodeError(ChecksumError):
    """Raised when the ETag digest is not valid hexadecimal."""


class ChecksumMismatchError(ChecksumError):
    """Raised at end of stream when the consumed bytes do not match the ETag."""

    def __init__(self, expected: bytes, actual: bytes) -> None:
        super().__init__(
            f"Checksum mismatch: expected {expected.hex()}, got {actual.hex()}"
        )
        self.expected = expected
        self.actual = actual


class ProvisioningError(StorageError):
    """Raised when the bucket neither answers the existence check nor can be created."""

    def __init__(self, bucket: str, message: str) -> None:
        super().__init__(message)
        self.bucket = bucket


class TransportError(StorageError):
    """Raised when a provider call fails for any other reason.

    The botocore exception is kept as ``__cause__``; ``error_code`` holds the
    provider's structured error code when the failure carried one.
    """

    def __init__(self, message: str, *, error_code: str | None = None) -> None:
        super().__init__(message)
        self.error_code = error_code


NOT_FOUND_CODES = frozenset({"NoSuchKey", "NotFound", "404"})


def provider_error_code(exc: BaseException) -> str | None:
    """Return the structured error code of a botocore ``ClientError``."""
    response = getattr(exc, "response", None)
    if not isinstance(response, dict):
        return None
    code = response.get("Error", {}).get("Code")
    return str(code) if code is not None else None


def is_not_found(exc: BaseException) -> bool:
    return provider_error_code(exc) in NOT_FOUND_CODES
