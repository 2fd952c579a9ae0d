"""Directory ignore policy for traversal.

Build output, VCS metadata and installed dependencies are always
skipped. Full-disk scans additionally skip reserved top-level system
directories, looked up once from a table keyed by platform family.
"""

from collections.abc import Mapping
from dataclasses import dataclass

from devclean.core.paths import get_platform_family

DEFAULT_IGNORES: frozenset[str] = frozenset(
    {
        "node_modules",
        "dist",
        "build",
        ".git",
        ".next",
        ".cache",
        "coverage",
    }
)

# Reserved system directories skipped when scanning a whole disk
FULL_DISK_IGNORES: Mapping[str, frozenset[str]] = {
    "unix": frozenset(
        {
            "System",
            "Library",
            "Applications",
            "private",
            "Volumes",
            "proc",
            "dev",
            "sys",
            "run",
            "tmp",
        }
    ),
    "windows": frozenset(
        {
            "Windows",
            "Program Files",
            "Program Files (x86)",
            "ProgramData",
            "$Recycle.Bin",
            "System Volume Information",
        }
    ),
}


@dataclass(frozen=True, slots=True)
class IgnorePolicy:
    """Set of base names whose entries (and subtrees) are skipped.

    Matching is exact and case-sensitive.

    Attributes:
        names: Base names to skip.
    """

    names: frozenset[str]

    def __call__(self, name: str) -> bool:
        return name in self.names

    @classmethod
    def create(
        cls,
        scan_all: bool,
        platform_family: str | None = None,
        table: Mapping[str, frozenset[str]] = FULL_DISK_IGNORES,
    ) -> "IgnorePolicy":
        """Resolve the ignore policy for a scan.

        Args:
            scan_all: Whether this is a full-disk scan.
            platform_family: "unix" or "windows". Defaults to the host.
            table: Full-disk ignore lists keyed by platform family.

        Returns:
            IgnorePolicy with the default set, plus the platform list when
            ``scan_all`` is True.
        """
        if not scan_all:
            return cls(names=DEFAULT_IGNORES)
        family = platform_family or get_platform_family()
        return cls(names=DEFAULT_IGNORES | table.get(family, frozenset()))
