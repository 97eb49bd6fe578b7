"""Bounded, multi-request object listing."""

from __future__ import annotations

import logging
from typing import Any

from strata_oss.infra.storage.client import ListingPage
from strata_oss.infra.storage.errors import TransportError, provider_error_code
from strata_oss.infra.storage.paths import PathCodec

logger = logging.getLogger(__name__)

# The provider never returns more than this many keys per request, whatever
# MaxKeys says.
MAX_KEYS_PER_REQUEST = 1000


class PaginatedLister:
    """Lists logical paths under a prefix across as many pages as needed."""

    def __init__(
        self,
        client: Any,
        *,
        bucket: str,
        codec: PathCodec,
        page_limit: int = MAX_KEYS_PER_REQUEST,
    ) -> None:
        self._client = client
        self._bucket = bucket
        self._codec = codec
        self._page_limit = page_limit

    def fetch_page(self, prefix: str, marker: str, max_keys: int) -> ListingPage:
        """Issue one list request for provider keys under ``prefix``."""
        try:
            response = self._client.list_objects(
                Bucket=self._bucket,
                Prefix=prefix,
                Delimiter="",
                Marker=marker,
                MaxKeys=max_keys,
            )
        except Exception as exc:
            raise TransportError(
                f"Failed to list objects: {exc}", error_code=provider_error_code(exc)
            ) from exc

        keys = tuple(item["Key"] for item in response.get("Contents") or [])
        truncated = bool(response.get("IsTruncated"))
        next_marker = None
        if truncated:
            next_marker = keys[-1] if keys else response.get("NextMarker")
        return ListingPage(keys=keys, is_truncated=truncated, next_marker=next_marker)

    def list(self, prefix: str, max_count: int) -> list[str]:
        provider_prefix = self._codec.add_prefix(prefix)
        marker = ""
        remaining = max_count
        items: list[str] = []
        while remaining > 0:
            request_size = min(remaining, self._page_limit)
            page = self.fetch_page(provider_prefix, marker, request_size)
            # Budget shrinks by what was asked for, not what came back.
            remaining -= request_size
            items.extend(self._codec.remove_prefix(key) for key in page.keys)
            if not page.is_truncated:
                break
            if not page.next_marker:
                logger.warning(
                    "truncated listing without marker bucket=%s prefix=%s",
                    self._bucket,
                    provider_prefix,
                )
                break
            marker = page.next_marker
        return items
