"""Bucket provisioning performed once when a backend is constructed."""

from __future__ import annotations

import logging
from typing import Any

from strata_oss.infra.storage.errors import ProvisioningError, provider_error_code

logger = logging.getLogger(__name__)

# AWS rejects an explicit LocationConstraint for its default region.
_DEFAULT_REGIONS = frozenset({"", "us-east-1"})


class BucketProvisioner:
    """Makes sure the target bucket exists before the backend is used.

    A one-key listing is issued first; only when that fails is the bucket
    created. This keeps many instances starting at the same time from all
    issuing creation calls, which the provider may answer with a conflicting
    operation error. It narrows the race but does not close it.
    """

    def __init__(self, client: Any, *, bucket: str, region: str, acl: str) -> None:
        self._client = client
        self._bucket = bucket
        self._region = region
        self._acl = acl

    def bucket_exists(self) -> bool:
        try:
            self._client.list_objects(
                Bucket=self._bucket,
                Prefix="",
                Delimiter="/",
                Marker="",
                MaxKeys=1,
            )
        except Exception as exc:
            # Not found, access denied and network errors all look the same here.
            logger.warning(
                "bucket check failed bucket=%s code=%s error=%s",
                self._bucket,
                provider_error_code(exc) or "-",
                exc,
            )
            return False
        return True

    def ensure_bucket(self) -> bool:
        """Create the bucket unless the existence check shows it already exists.

        Returns:
            True when a bucket was created, False when the existence check succeeded.

        Raises:
            ProvisioningError: If the existence check and creation both failed.
        """
        if self.bucket_exists():
            logger.info("bucket ready bucket=%s", self._bucket)
            return False

        params: dict[str, Any] = {"Bucket": self._bucket, "ACL": self._acl}
        if self._region not in _DEFAULT_REGIONS:
            params["CreateBucketConfiguration"] = {
                "LocationConstraint": self._region
            }

        try:
            self._client.create_bucket(**params)
        except Exception as exc:
            raise ProvisioningError(
                self._bucket, f"Failed to create bucket {self._bucket}: {exc}"
            ) from exc

        logger.info(
            "bucket created bucket=%s region=%s acl=%s",
            self._bucket,
            self._region,
            self._acl,
        )
        return True
