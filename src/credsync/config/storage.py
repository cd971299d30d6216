"""Where the on-disk HTTP cache lives when the sqlite cache backend is selected."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

DATA_DIR_ENV: Final[str] = "CREDSYNC_DATA_DIR"
HTTP_CACHE_FILENAME: Final[str] = "gateway_cache.db"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    data_dir: Path

    @classmethod
    def from_env(cls) -> StorageConfig:
        override = os.getenv(DATA_DIR_ENV)
        if override:
            return cls(data_dir=Path(override).expanduser().resolve())
        cache_home = os.getenv("XDG_CACHE_HOME")
        base = Path(cache_home) if cache_home else Path.home() / ".cache"
        return cls(data_dir=(base / "credsync").expanduser().resolve())

    def http_cache_path(self, *, create: bool = True) -> Path:
        if create:
            self.data_dir.mkdir(parents=True, exist_ok=True)
        return self.data_dir / HTTP_CACHE_FILENAME


def get_storage_config() -> StorageConfig:
    return StorageConfig.from_env()


def get_http_cache_path() -> Path:
    return get_storage_config().http_cache_path()
