from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class PathCodec:
    """Maps logical paths to provider keys under a fixed prefix."""

    prefix: str

    def add_prefix(self, path: str) -> str:
        return f"{self.prefix}/{path}"

    def remove_prefix(self, key: str) -> str:
        # Only valid for keys produced by add_prefix with the same prefix.
        return key[len(self.prefix) + 1 :]
