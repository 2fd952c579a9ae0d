"""Delete planning.

Resolves user-selected entries into concrete filesystem targets and
measures them. A plan is built fresh for every delete request.
"""

import os
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from devclean.utils.fs import path_size_bytes

# Subdirectories removed by a dependency-only delete
DEPENDENCY_DIRS: tuple[str, ...] = ("node_modules", ".cache")


@dataclass(frozen=True, slots=True)
class DeleteEntry:
    """A user-selected entry to delete.

    Attributes:
        path: Project or cache directory.
        is_cache: True for package-manager cache directories.
    """

    path: str
    is_cache: bool = False


@dataclass(frozen=True, slots=True)
class DeletePlanItem:
    """One concrete delete target.

    Attributes:
        path: Absolute target path.
        size_bytes: Measured size when planned.
    """

    path: str
    size_bytes: int

    def to_dict(self) -> dict[str, Any]:
        return {"path": self.path, "sizeBytes": self.size_bytes}


@dataclass(frozen=True, slots=True)
class DeletePlan:
    """Ordered delete targets and their combined size."""

    items: tuple[DeletePlanItem, ...] = ()

    @property
    def total_bytes(self) -> int:
        return sum(item.size_bytes for item in self.items)

    def __len__(self) -> int:
        return len(self.items)

    def to_dict(self) -> dict[str, Any]:
        return {
            "items": [item.to_dict() for item in self.items],
            "totalBytes": self.total_bytes,
        }


def resolve_targets(entries: Iterable[DeleteEntry], deps_only: bool) -> list[str]:
    """Resolve entries to existing target paths, deduplicated in first-seen order.

    For a dependency-only delete of a project, the targets are its
    node_modules and .cache subdirectories (whichever exist). Otherwise
    the entry path itself is the target. Dangling symlinks count as
    missing.
    """
    targets: list[str] = []
    seen: set[str] = set()

    for entry in entries:
        base = os.path.abspath(entry.path)
        if deps_only and not entry.is_cache:
            candidates = [os.path.join(base, name) for name in DEPENDENCY_DIRS]
        else:
            candidates = [base]

        for candidate in candidates:
            if not os.path.exists(candidate) or candidate in seen:
                continue
            seen.add(candidate)
            targets.append(candidate)

    return targets


def build_plan(entries: Iterable[DeleteEntry], deps_only: bool = False) -> DeletePlan:
    """Build a delete plan for the selected entries.

    Args:
        entries: Selected project or cache entries.
        deps_only: Only remove dependency directories of projects.

    Returns:
        DeletePlan with one measured item per existing target.
    """
    items = tuple(
        DeletePlanItem(path=target, size_bytes=path_size_bytes(target))
        for target in resolve_targets(entries, deps_only)
    )
    return DeletePlan(items=items)
