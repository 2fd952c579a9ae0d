"""Storage backends for the assessment cache.

The assessment cache only needs ``read(key)`` and ``write(key, data)``;
where the bytes end up is decided here. The default layout keeps a
cache file at the scan root and falls back to a per-root file under the
application data directory when the root is not writable.
"""

import hashlib
import logging
import os
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Protocol

from devclean.core.paths import ROOT_CACHE_FILENAME, get_fallback_cache_dir

logger = logging.getLogger(__name__)


class CacheWriteError(OSError):
    """Raised when no storage location accepted a cache write."""


class CacheStorage(Protocol):
    """Byte storage addressed by a string key."""

    def read(self, key: str) -> bytes | None:
        """Return stored bytes, or None if nothing readable is stored."""
        ...

    def write(self, key: str, data: bytes) -> None:
        """Store bytes, raising OSError on failure."""
        ...


def _read_file(path: Path) -> bytes | None:
    try:
        return path.read_bytes()
    except FileNotFoundError:
        return None
    except OSError as e:
        logger.warning("Cannot read cache file %s: %s", path, e)
        return None


def _write_file_atomic(path: Path, data: bytes) -> None:
    """Write via a temporary file in the same directory and os.replace()."""
    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(mode="wb", dir=path.parent, delete=False, suffix=".tmp") as f:
            tmp_path = Path(f.name)
            f.write(data)
        os.replace(tmp_path, path)
    except OSError:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise


class RootFileStorage:
    """Stores the cache as a file inside the directory named by the key.

    With the scan root as key, the file is ``<root>/.devclean-cache.json``.
    """

    def __init__(self, filename: str = ROOT_CACHE_FILENAME) -> None:
        self._filename = filename

    def path_for(self, key: str) -> Path:
        return Path(key) / self._filename

    def read(self, key: str) -> bytes | None:
        return _read_file(self.path_for(key))

    def write(self, key: str, data: bytes) -> None:
        _write_file_atomic(self.path_for(key), data)


class HashedFileStorage:
    """Stores each key as ``cache-<sha256(key)>.json`` under a base directory.

    The base directory is created on first write.
    """

    def __init__(self, base_dir: Path | None = None) -> None:
        self._base_dir = base_dir

    @property
    def base_dir(self) -> Path:
        return self._base_dir if self._base_dir is not None else get_fallback_cache_dir()

    def path_for(self, key: str) -> Path:
        digest = hashlib.sha256(key.encode("utf-8")).hexdigest()
        return self.base_dir / f"cache-{digest}.json"

    def read(self, key: str) -> bytes | None:
        return _read_file(self.path_for(key))

    def write(self, key: str, data: bytes) -> None:
        path = self.path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        _write_file_atomic(path, data)


class FallbackStorage:
    """Tries several storages in order of preference.

    Reads return the first storage that yields bytes. Writes stop at the
    first storage that succeeds and raise CacheWriteError only when every
    storage failed.
    """

    def __init__(self, *storages: CacheStorage) -> None:
        if not storages:
            msg = "FallbackStorage needs at least one storage"
            raise ValueError(msg)
        self._storages = storages

    def read(self, key: str) -> bytes | None:
        for storage in self._storages:
            data = storage.read(key)
            if data is not None:
                return data
        return None

    def write(self, key: str, data: bytes) -> None:
        errors: list[str] = []
        for storage in self._storages:
            try:
                storage.write(key, data)
                return
            except OSError as e:
                logger.debug("Cache write via %s failed: %s", type(storage).__name__, e)
                errors.append(str(e))
        raise CacheWriteError(f"Unable to write cache file: {'; '.join(errors)}")


def default_storage() -> FallbackStorage:
    """Root-local cache file first, application data directory second."""
    return FallbackStorage(RootFileStorage(), HashedFileStorage())
