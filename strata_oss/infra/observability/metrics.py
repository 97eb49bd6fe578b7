from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from typing import Iterator

from prometheus_client import Counter, Histogram

from strata_oss.infra.storage.errors import NotFoundError

# Low-cardinality labels only: operation names, never object keys.
OPERATIONS = Counter(
    "storage_operations_total",
    "Total object storage operations",
    ["operation", "status"],
)

LATENCY = Histogram(
    "storage_operation_duration_seconds",
    "Object storage operation latency in seconds",
    ["operation"],
)

# Raised after get has returned, so observe_operation never sees it.
CHECKSUM_MISMATCHES = Counter(
    "storage_checksum_mismatches_total",
    "Object reads whose bytes did not match the stored ETag",
)

logger = logging.getLogger("strata_oss.storage")


@contextmanager
def observe_operation(operation: str, *, bucket: str, key: str) -> Iterator[None]:
    """Record count, latency and a structured log line for one storage call."""
    start = time.perf_counter()
    try:
        yield
    except NotFoundError:
        OPERATIONS.labels(operation, "not_found").inc()
        LATENCY.labels(operation).observe(time.perf_counter() - start)
        logger.debug(
            "storage_not_found operation=%s bucket=%s key=%s", operation, bucket, key
        )
        raise
    except Exception as exc:
        elapsed = time.perf_counter() - start
        duration_ms = round(elapsed * 1000, 3)
        OPERATIONS.labels(operation, "error").inc()
        LATENCY.labels(operation).observe(elapsed)
        logger.error(
            "storage_error operation=%s bucket=%s key=%s duration_ms=%.3f error=%s",
            operation,
            bucket,
            key,
            duration_ms,
            type(exc).__name__,
            extra={
                "extra": {
                    "operation": operation,
                    "bucket": bucket,
                    "key": key,
                    "duration_ms": duration_ms,
                    "exception": repr(exc),
                }
            },
        )
        raise

    elapsed = time.perf_counter() - start
    duration_ms = round(elapsed * 1000, 3)
    OPERATIONS.labels(operation, "ok").inc()
    LATENCY.labels(operation).observe(elapsed)
    logger.debug(
        "storage operation=%s bucket=%s key=%s duration_ms=%.3f",
        operation,
        bucket,
        key,
        duration_ms,
        extra={
            "extra": {
                "operation": operation,
                "bucket": bucket,
                "key": key,
                "duration_ms": duration_ms,
            }
        },
    )
