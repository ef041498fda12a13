# SPDX-License-Identifier: MIT
"""Disk cache for resolved variables.

Every build step runs in a fresh process, so an in-memory cache alone
would run vcvarsall.bat on every build. Values are therefore persisted,
one file per variable, in a cache directory inside the build's output
directory.

The cache is never invalidated here. Whoever owns the output directory
clears it, e.g. after a toolchain upgrade.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from pathlib import Path

from vcvars.core.errors import CacheFailedError
from vcvars.util.paths import safe_filename

logger = logging.getLogger(__name__)

CACHE_DIR_NAME = "vcvars-cache"


def cache_filename(name: str) -> str:
    """Return the cache filename for a variable, as requested (not uppercased)."""
    return safe_filename(f"{name}.txt")


class CacheStore(ABC):
    """Storage for cached values, addressed by filename."""

    @abstractmethod
    def exists(self, filename: str) -> bool:
        """Return True if a value is stored under ``filename``."""

    @abstractmethod
    def read(self, filename: str) -> str:
        """Return the value stored under ``filename``."""

    @abstractmethod
    def write(self, filename: str, value: str) -> None:
        """Store ``value`` under ``filename``, replacing any previous value."""


class FileCacheStore(CacheStore):
    """Stores each value as the whole content of a file in ``cache_dir``.

    The directory is created (with parents) on first use. Values are
    written as UTF-8 without newline translation, so a value reads back
    exactly as it was written.

    There is no locking: two processes filling the same file race, and
    the last writer wins.
    """

    def __init__(self, cache_dir: Path | str) -> None:
        self.cache_dir = Path(cache_dir)
        self._dir_ready = False

    def path(self, filename: str) -> Path:
        return self.cache_dir / filename

    def _ensure_dir(self) -> None:
        if self._dir_ready:
            return
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
        except OSError as err:
            raise CacheFailedError(self.cache_dir, err) from err
        self._dir_ready = True

    def exists(self, filename: str) -> bool:
        self._ensure_dir()
        return self.path(filename).exists()

    def read(self, filename: str) -> str:
        self._ensure_dir()
        path = self.path(filename)
        try:
            with open(path, encoding="utf-8", newline="") as f:
                return f.read()
        except (OSError, UnicodeDecodeError) as err:
            raise CacheFailedError(path, err) from err

    def write(self, filename: str, value: str) -> None:
        self._ensure_dir()
        path = self.path(filename)
        try:
            with open(path, "w", encoding="utf-8", newline="") as f:
                f.write(value)
        except OSError as err:
            raise CacheFailedError(path, err) from err


class VarCache:
    """Read-through cache in front of a variable resolver.

    Example:
        cache = VarCache(FileCacheStore(out_dir / CACHE_DIR_NAME))
        include = cache.get("INCLUDE", vcvars.get)
    """

    def __init__(self, store: CacheStore) -> None:
        self.store = store

    def get(self, name: str, resolve: Callable[[str], str]) -> str:
        """Return the cached value of ``name``, resolving and storing it on a miss.

        Errors from ``resolve`` propagate unchanged and nothing is written.

        Raises:
            CacheFailedError: If the cache directory or file can't be accessed.
        """
        filename = cache_filename(name)
        if self.store.exists(filename):
            logger.debug("Cache hit for %s", name)
            return self.store.read(filename)

        logger.debug("Cache miss for %s", name)
        value = resolve(name)
        self.store.write(filename, value)
        return value
