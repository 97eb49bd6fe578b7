from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

ENV_FILE = Path(".env")

BUCKET_ACLS: tuple[str, ...] = (
    "private",
    "public-read",
    "public-read-write",
    "authenticated-read",
    "bucket-owner-read",
    "bucket-owner-full-control",
)
ADDRESSING_STYLES: tuple[str, ...] = ("auto", "path", "virtual")
LOG_FORMATS: tuple[str, ...] = ("json", "plain")


def _load_env_file() -> None:
    if not ENV_FILE.exists():
        return
    for raw_line in ENV_FILE.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key and key not in os.environ:
            os.environ[key] = value


def _as_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    return value.lower() in {"1", "true", "t", "yes", "y", "on"}


def _as_optional(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


@dataclass
class Settings:
    OSS_REGION: str = "oss-cn-hangzhou"
    OSS_BUCKET: str | None = None
    OSS_BUCKET_PREFIX: str = ""
    OSS_BUCKET_ACL: str = "private"
    OSS_ENDPOINT_URL: str | None = None
    OSS_ADDRESSING_STYLE: str = "virtual"
    OSS_USE_SSL: bool = True
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"

    def __post_init__(self) -> None:
        acl = self.OSS_BUCKET_ACL.strip().lower()
        if acl not in BUCKET_ACLS:
            raise ValueError(
                f"OSS_BUCKET_ACL must be one of {', '.join(BUCKET_ACLS)}; got {self.OSS_BUCKET_ACL!r}."
            )
        self.OSS_BUCKET_ACL = acl

        style = self.OSS_ADDRESSING_STYLE.strip().lower()
        if style not in ADDRESSING_STYLES:
            raise ValueError(
                f"OSS_ADDRESSING_STYLE must be one of {', '.join(ADDRESSING_STYLES)}."
            )
        self.OSS_ADDRESSING_STYLE = style

        log_format = self.LOG_FORMAT.strip().lower()
        if log_format not in LOG_FORMATS:
            raise ValueError("LOG_FORMAT must be either 'json' or 'plain'.")
        self.LOG_FORMAT = log_format
        self.LOG_LEVEL = self.LOG_LEVEL.strip().upper()

    @classmethod
    def from_environment(cls) -> "Settings":
        _load_env_file()
        return cls(
            OSS_REGION=os.environ.get("OSS_REGION", cls.OSS_REGION),
            OSS_BUCKET=_as_optional(os.environ.get("OSS_BUCKET")),
            OSS_BUCKET_PREFIX=os.environ.get(
                "OSS_BUCKET_PREFIX", cls.OSS_BUCKET_PREFIX
            ),
            OSS_BUCKET_ACL=os.environ.get("OSS_BUCKET_ACL", cls.OSS_BUCKET_ACL),
            OSS_ENDPOINT_URL=_as_optional(os.environ.get("OSS_ENDPOINT_URL")),
            OSS_ADDRESSING_STYLE=os.environ.get(
                "OSS_ADDRESSING_STYLE", cls.OSS_ADDRESSING_STYLE
            ),
            OSS_USE_SSL=_as_bool(os.environ.get("OSS_USE_SSL"), cls.OSS_USE_SSL),
            LOG_LEVEL=os.environ.get("LOG_LEVEL", cls.LOG_LEVEL),
            LOG_FORMAT=os.environ.get("LOG_FORMAT", cls.LOG_FORMAT),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_environment()
