"""Snapshot storage on Aliyun OSS and S3-compatible object stores.

The host process calls ``setup_logging()`` once at startup, before it builds
an ``OSSStorage``, so storage log lines use the configured level and format.
"""

from strata_oss.common.logging import setup_logging

__version__ = "0.1.0"

__all__ = ["setup_logging"]
