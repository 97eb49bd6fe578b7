"""Read-side integrity checking.

Objects written with a single PUT carry their MD5 digest as a quoted hex
``ETag``. ``ChecksumReader`` hashes the body as it is consumed and compares
the result with that digest when the body is exhausted.
"""

from __future__ import annotations

import binascii
import hashlib
import io
import logging
from typing import Any

from botocore.exceptions import BotoCoreError

from strata_oss.infra.observability import metrics
from strata_oss.infra.storage.errors import (
    ChecksumDecodeError,
    ChecksumMismatchError,
    ChecksumMissingError,
    TransportError,
    provider_error_code,
)

logger = logging.getLogger(__name__)


def decode_etag(etag: str | None) -> bytes:
    """Decode a quoted hexadecimal ETag header into raw digest bytes."""
    if etag is None:
        raise ChecksumMissingError("No ETag header")
    if not etag:
        raise ChecksumMissingError("ETag header is empty")
    value = etag
    if value.startswith('"'):
        value = value[1:]
    if value.endswith('"'):
        value = value[:-1]
    try:
        return binascii.unhexlify(value)
    except (binascii.Error, ValueError) as exc:
        raise ChecksumDecodeError(f"ETag is not valid hex: {etag!r}") from exc


def md5_digest(data: bytes) -> bytes:
    return hashlib.md5(data, usedforsecurity=False).digest()


class ChecksumReader(io.RawIOBase):
    """Binary stream that verifies an MD5 digest once fully consumed.

    A mismatch is raised from the read call that observes end of data;
    callers that stop reading early never see it.
    """

    def __init__(self, body: Any, expected: bytes) -> None:
        super().__init__()
        self._body = body
        self._expected = expected
        self._hasher = hashlib.md5(usedforsecurity=False)
        self._verified = False
        self._mismatch: ChecksumMismatchError | None = None

    @property
    def expected_digest(self) -> bytes:
        return self._expected

    def readable(self) -> bool:
        return True

    def readinto(self, buffer: Any) -> int:
        size = len(buffer)
        if size == 0:
            return 0
        try:
            chunk = self._body.read(size)
        except BotoCoreError as exc:
            raise TransportError(
                f"Failed to read object: {exc}", error_code=provider_error_code(exc)
            ) from exc
        if not chunk:
            self._verify()
            return 0
        count = len(chunk)
        buffer[:count] = chunk
        self._hasher.update(chunk)
        return count

    def _verify(self) -> None:
        if self._verified:
            if self._mismatch is not None:
                raise self._mismatch
            return
        self._verified = True
        actual = self._hasher.digest()
        if actual != self._expected:
            logger.error(
                "checksum_mismatch expected=%s actual=%s",
                self._expected.hex(),
                actual.hex(),
            )
            metrics.CHECKSUM_MISMATCHES.inc()
            self._mismatch = ChecksumMismatchError(self._expected, actual)
            raise self._mismatch

    def close(self) -> None:
        if not self.closed:
            try:
                self._body.close()
            finally:
                super().close()
