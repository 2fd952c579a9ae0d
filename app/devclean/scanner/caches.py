"""Package-manager cache discovery.

Collects well-known npm, yarn and pnpm cache locations plus the
user-level system cache directory, and turns each existing one into a
cache ProjectMeta. Discovery is independent of manifest traversal.
"""

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from devclean.core.paths import get_system_cache_dir, get_system_data_dir
from devclean.scanner.metadata import days_since
from devclean.scanner.models import ProjectMeta
from devclean.utils.fs import directory_size_bytes, mtime_ms

logger = logging.getLogger(__name__)

# Environment variables that relocate package-manager caches
CACHE_ENV_OVERRIDES: tuple[tuple[str, str], ...] = (
    ("NPM_CONFIG_CACHE", "npm cache"),
    ("YARN_CACHE_FOLDER", "yarn cache"),
    ("PNPM_STORE_PATH", "pnpm store"),
)


@dataclass(frozen=True, slots=True)
class CacheCandidate:
    """A directory that may hold package-manager cache data.

    Attributes:
        path: Candidate directory.
        label: Human-readable source label (e.g. "npm cache").
        expand_children: Report each immediate subdirectory separately.
    """

    path: Path
    label: str
    expand_children: bool = False


def gather_cache_candidates(
    home: Path | None = None,
    system_cache_dir: Path | None = None,
    data_dir: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> list[CacheCandidate]:
    """List cache candidates in a fixed order.

    Args:
        home: User home directory (defaults to Path.home()).
        system_cache_dir: OS cache root (defaults to the platform location).
        data_dir: OS data root (defaults to the platform location).
        environ: Environment mapping (defaults to os.environ).

    Returns:
        Candidates, not yet checked for existence or duplicates.
    """
    home = home if home is not None else Path.home()
    system_cache_dir = system_cache_dir if system_cache_dir is not None else get_system_cache_dir()
    data_dir = data_dir if data_dir is not None else get_system_data_dir()
    environ = environ if environ is not None else os.environ

    candidates = [
        CacheCandidate(system_cache_dir, "System cache", expand_children=True),
        CacheCandidate(home / ".npm", "npm cache"),
        CacheCandidate(home / ".yarn" / "cache", "yarn cache"),
        CacheCandidate(home / ".yarn", "yarn data"),
        CacheCandidate(home / ".pnpm-store", "pnpm store"),
        CacheCandidate(home / ".cache" / "yarn", "yarn cache"),
        CacheCandidate(home / ".cache" / "npm", "npm cache"),
        CacheCandidate(data_dir / "pnpm" / "store", "pnpm store"),
    ]

    for env_var, label in CACHE_ENV_OVERRIDES:
        value = environ.get(env_var)
        if value:
            candidates.append(CacheCandidate(Path(value), label))

    return candidates


def _dedup_key(path: Path) -> str:
    try:
        return str(path.resolve())
    except OSError:
        return os.path.abspath(path)


def _cache_meta(path: Path, label: str, now: int | None) -> ProjectMeta:
    last_modified = mtime_ms(path) or 0
    path_str = str(path)
    return ProjectMeta(
        id=path_str,
        path=path_str,
        name=f"{label} - {path.name}",
        is_cache=True,
        last_modified=last_modified,
        last_modified_days=days_since(last_modified, now),
        size_bytes=directory_size_bytes(path),
    )


def scan_cache_dirs(
    candidates: list[CacheCandidate] | None = None,
    now: int | None = None,
) -> list[ProjectMeta]:
    """Build cache ProjectMeta records for every existing candidate.

    Candidates flagged ``expand_children`` contribute one record per
    immediate subdirectory. A directory reachable through several
    candidates is reported once, under the first label that found it.

    Args:
        candidates: Candidates to inspect (defaults to gather_cache_candidates()).
        now: Reference time in epoch milliseconds.

    Returns:
        Cache ProjectMeta records in discovery order.
    """
    if candidates is None:
        candidates = gather_cache_candidates()

    projects: list[ProjectMeta] = []
    seen: set[str] = set()

    for candidate in candidates:
        if not candidate.path.is_dir():
            continue

        if candidate.expand_children:
            try:
                children = sorted(candidate.path.iterdir())
            except OSError as e:
                logger.debug("Cannot list cache directory %s: %s", candidate.path, e)
                continue
            for child in children:
                if child.is_symlink() or not child.is_dir():
                    continue
                key = _dedup_key(child)
                if key in seen:
                    continue
                seen.add(key)
                projects.append(_cache_meta(child, candidate.label, now))
            continue

        key = _dedup_key(candidate.path)
        if key in seen:
            continue
        seen.add(key)
        projects.append(_cache_meta(candidate.path, candidate.label, now))

    return projects
