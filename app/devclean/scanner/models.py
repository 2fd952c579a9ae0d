"""Scanner domain models.

This module defines the records produced while walking a filesystem:
per-project metadata, progress snapshots, and the raw scan result.
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class ProjectMeta:
    """Metadata describing one discovered project or cache directory.

    The ``id`` is the absolute directory path and doubles as the
    assessment cache key.

    Attributes:
        id: Unique identity (absolute directory path).
        path: Absolute directory path.
        name: Display name (manifest name, folder name, or cache label).
        manifest_path: Path to package.json ("" for cache entries).
        dependency_count: Number of declared dependencies across all maps.
        has_git: A .git entry exists in the project directory.
        has_env_file: A sibling file starting with ".env" exists.
        has_startup_keyword: Startup/production hint in name, keywords or scripts.
        is_cache: True for package-manager cache directories.
        last_modified: Modification time in epoch milliseconds.
        last_modified_days: Whole days elapsed since last_modified.
        size_bytes: Recursive size of all files below the directory.
    """

    id: str
    path: str
    name: str
    manifest_path: str = ""
    dependency_count: int = 0
    has_git: bool = False
    has_env_file: bool = False
    has_startup_keyword: bool = False
    is_cache: bool = False
    last_modified: int = 0
    last_modified_days: int = 0
    size_bytes: int = 0

    def __post_init__(self) -> None:
        """Validate project metadata after initialization."""
        if not self.id:
            msg = "Project id cannot be empty"
            raise ValueError(msg)
        if self.is_cache and (self.manifest_path or self.dependency_count):
            msg = f"Cache entry cannot carry manifest data: {self.id}"
            raise ValueError(msg)
        if self.dependency_count < 0 or self.size_bytes < 0:
            msg = f"Counts must be non-negative for {self.id}"
            raise ValueError(msg)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a camelCase dictionary for JSON serialization."""
        return {
            "id": self.id,
            "path": self.path,
            "name": self.name,
            "packageJsonPath": self.manifest_path,
            "dependencyCount": self.dependency_count,
            "hasGit": self.has_git,
            "hasEnvFile": self.has_env_file,
            "hasStartupKeyword": self.has_startup_keyword,
            "isCache": self.is_cache,
            "lastModified": self.last_modified,
            "lastModifiedDays": self.last_modified_days,
            "sizeBytes": self.size_bytes,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ProjectMeta":
        """Rebuild a ProjectMeta from its ``to_dict`` form.

        Raises:
            KeyError: If ``id`` or ``path`` is missing.
            ValueError: If the data violates the model invariants.
        """
        return cls(
            id=str(data["id"]),
            path=str(data["path"]),
            name=str(data.get("name", "")),
            manifest_path=str(data.get("packageJsonPath", "")),
            dependency_count=int(data.get("dependencyCount", 0)),
            has_git=bool(data.get("hasGit", False)),
            has_env_file=bool(data.get("hasEnvFile", False)),
            has_startup_keyword=bool(data.get("hasStartupKeyword", False)),
            is_cache=bool(data.get("isCache", False)),
            last_modified=int(data.get("lastModified", 0)),
            last_modified_days=int(data.get("lastModifiedDays", 0)),
            size_bytes=int(data.get("sizeBytes", 0)),
        )


@dataclass(frozen=True, slots=True)
class ScanProgress:
    """Snapshot of traversal progress handed to a progress sink.

    Attributes:
        found_count: Manifests discovered so far.
        current_path: Path most recently visited.
        scanned_count: Entries visited in the work pass so far.
        total_count: Entries counted in the counting pass.
    """

    found_count: int
    current_path: str
    scanned_count: int
    total_count: int


@dataclass(frozen=True, slots=True)
class ScanResult:
    """Raw result of a traversal, before risk assessment.

    Attributes:
        projects: Project and cache metadata, sorted by path.
        total_entries: Entries visited by the counting pass.
        skipped_entries: Entries that could not be read.
    """

    projects: list[ProjectMeta] = field(default_factory=lambda: [])
    total_entries: int = 0
    skipped_entries: int = 0
