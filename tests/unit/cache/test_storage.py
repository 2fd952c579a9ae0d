"""Unit tests for assessment cache storage backends."""

import hashlib
from pathlib import Path
from unittest.mock import patch

import pytest
from devclean.cache.storage import (
    CacheWriteError,
    FallbackStorage,
    HashedFileStorage,
    RootFileStorage,
    default_storage,
)


class MemoryStorage:
    """In-memory storage that can be told to fail writes."""

    def __init__(self, fail_writes: bool = False) -> None:
        self.data: dict[str, bytes] = {}
        self.fail_writes = fail_writes

    def read(self, key: str) -> bytes | None:
        return self.data.get(key)

    def write(self, key: str, data: bytes) -> None:
        if self.fail_writes:
            raise PermissionError("read-only")
        self.data[key] = data


class TestRootFileStorage:
    """Tests for RootFileStorage."""

    def test_path_at_root(self, tmp_path: Path) -> None:
        """The cache file lives at the scan root."""
        assert RootFileStorage().path_for(str(tmp_path)) == tmp_path / ".devclean-cache.json"

    def test_write_then_read(self, tmp_path: Path) -> None:
        """Written bytes are read back."""
        storage = RootFileStorage()

        storage.write(str(tmp_path), b"{}")

        assert storage.read(str(tmp_path)) == b"{}"
        assert list(tmp_path.iterdir()) == [tmp_path / ".devclean-cache.json"]

    def test_missing_file_reads_none(self, tmp_path: Path) -> None:
        """A missing cache file reads as None."""
        assert RootFileStorage().read(str(tmp_path)) is None

    def test_write_to_missing_root_fails(self, tmp_path: Path) -> None:
        """Writing into a missing directory raises OSError."""
        with pytest.raises(OSError):
            RootFileStorage().write(str(tmp_path / "missing"), b"{}")


class TestHashedFileStorage:
    """Tests for HashedFileStorage."""

    def test_path_uses_key_digest(self, tmp_path: Path) -> None:
        """The file name is derived from the SHA-256 of the key."""
        digest = hashlib.sha256(b"/code").hexdigest()

        assert HashedFileStorage(tmp_path).path_for("/code") == tmp_path / f"cache-{digest}.json"

    def test_creates_base_dir_on_write(self, tmp_path: Path) -> None:
        """The base directory is created on first write."""
        storage = HashedFileStorage(tmp_path / "data" / "cache")

        storage.write("/code", b"[]")

        assert storage.read("/code") == b"[]"

    def test_default_base_dir(self, isolated_dirs: Path) -> None:
        """Without a base directory the application data directory is used."""
        storage = HashedFileStorage()

        assert storage.base_dir == isolated_dirs / ".local" / "share" / "devclean" / "cache"


class TestFallbackStorage:
    """Tests for FallbackStorage."""

    def test_requires_storages(self) -> None:
        """At least one storage is required."""
        with pytest.raises(ValueError):
            FallbackStorage()

    def test_write_prefers_primary(self) -> None:
        """The first storage that accepts the write wins."""
        primary, secondary = MemoryStorage(), MemoryStorage()

        FallbackStorage(primary, secondary).write("k", b"1")

        assert primary.data == {"k": b"1"}
        assert secondary.data == {}

    def test_write_falls_back(self) -> None:
        """A failing primary falls back to the secondary."""
        primary, secondary = MemoryStorage(fail_writes=True), MemoryStorage()

        FallbackStorage(primary, secondary).write("k", b"1")

        assert secondary.data == {"k": b"1"}

    def test_total_failure_raises(self) -> None:
        """Only a failure of every storage is reported."""
        storage = FallbackStorage(MemoryStorage(fail_writes=True), MemoryStorage(fail_writes=True))

        with pytest.raises(CacheWriteError, match="read-only"):
            storage.write("k", b"1")

    def test_read_takes_first_available(self) -> None:
        """Reads return the first storage holding data."""
        primary, secondary = MemoryStorage(), MemoryStorage()
        secondary.data["k"] = b"2"
        storage = FallbackStorage(primary, secondary)

        assert storage.read("k") == b"2"
        primary.data["k"] = b"1"
        assert storage.read("k") == b"1"
        assert storage.read("other") is None

    def test_default_storage_falls_back_to_data_dir(
        self, tmp_path: Path, isolated_dirs: Path
    ) -> None:
        """An unwritable root sends the cache to the data directory."""
        root = tmp_path / "root"
        root.mkdir()
        storage = default_storage()

        with patch.object(RootFileStorage, "write", side_effect=PermissionError("denied")):
            storage.write(str(root), b"{}")

        assert not (root / ".devclean-cache.json").exists()
        assert storage.read(str(root)) == b"{}"

