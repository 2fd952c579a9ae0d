"""Traversal engine for project discovery.

Walks a root directory twice. The first pass counts entries so progress
can be reported against a known total; the second pass collects
package.json manifests and reports progress to an optional sink.
Symlinks are never followed and unreadable entries are counted as
skipped rather than aborting the scan.
"""

import logging
import os
import time
from collections.abc import Callable
from pathlib import Path
from typing import Protocol

from devclean.scanner.caches import scan_cache_dirs
from devclean.scanner.ignore import IgnorePolicy
from devclean.scanner.metadata import MANIFEST_NAME, extract_project_meta, now_ms
from devclean.scanner.models import ProjectMeta, ScanProgress, ScanResult
from devclean.utils.fs import WalkError, walk_tree

logger = logging.getLogger(__name__)

# Emit progress at most this often (seconds) ...
PROGRESS_INTERVAL = 0.12
# ... and additionally every N visited entries
PROGRESS_EVERY = 200


class ProgressSink(Protocol):
    """Observer receiving progress snapshots during the work pass.

    Called synchronously on the traversal thread, so implementations
    must return quickly.
    """

    def __call__(self, progress: ScanProgress) -> None: ...


class ScanError(Exception):
    """Base exception for scan failures."""


class RootNotFoundError(ScanError):
    """Raised when the scan root does not exist."""


class ScanCancelledError(ScanError):
    """Raised when a caller-supplied cancellation check fires."""


class ProjectScanner:
    """Discovers projects and caches below a root directory.

    Args:
        scan_all: Also skip platform-reserved top-level directories.
        scan_caches: Append package-manager cache directories.
        progress: Optional sink for progress snapshots.
        should_cancel: Optional cooperative check, evaluated between entries.
        ignore_policy: Override the resolved ignore policy.
        cache_scanner: Override cache discovery (used by tests).
        clock: Monotonic clock used for progress throttling.
    """

    def __init__(
        self,
        *,
        scan_all: bool = False,
        scan_caches: bool = False,
        progress: ProgressSink | None = None,
        should_cancel: Callable[[], bool] | None = None,
        ignore_policy: IgnorePolicy | None = None,
        cache_scanner: Callable[[], list[ProjectMeta]] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._scan_all = scan_all
        self._scan_caches = scan_caches
        self._progress = progress
        self._should_cancel = should_cancel
        self._ignore = ignore_policy or IgnorePolicy.create(scan_all)
        self._cache_scanner = cache_scanner
        self._clock = clock

    def scan(self, root: Path) -> ScanResult:
        """Scan ``root`` for projects (and caches, if enabled).

        Args:
            root: Directory to scan.

        Returns:
            ScanResult with projects sorted by path.

        Raises:
            RootNotFoundError: If ``root`` does not exist.
            ScanCancelledError: If the cancellation check fires.
        """
        root = Path(os.path.abspath(root))
        if not root.exists():
            msg = f"Root path not found: {root}"
            raise RootNotFoundError(msg)

        total_entries, skipped_entries = self._count(root)
        logger.debug(
            "Counted %d entries under %s (%d skipped)", total_entries, root, skipped_entries
        )

        manifests = self._collect_manifests(root, total_entries)

        now = now_ms()
        projects: list[ProjectMeta] = []
        for manifest_path in manifests:
            self._check_cancel()
            meta = extract_project_meta(manifest_path, now=now)
            if meta is not None:
                projects.append(meta)

        if self._scan_caches:
            cache_scanner = self._cache_scanner or (lambda: scan_cache_dirs(now=now))
            known = {p.id for p in projects}
            for meta in cache_scanner():
                if meta.id in known:
                    continue
                known.add(meta.id)
                projects.append(meta)

        projects.sort(key=lambda p: p.path)
        return ScanResult(
            projects=projects,
            total_entries=total_entries,
            skipped_entries=skipped_entries,
        )

    def _count(self, root: Path) -> tuple[int, int]:
        """Counting pass: visited entries and visit errors."""
        total = 0
        skipped = 0
        for item in walk_tree(root, skip=self._ignore):
            self._check_cancel()
            if isinstance(item, WalkError):
                logger.debug("Cannot read %s: %s", item.path, item.error)
                skipped += 1
            else:
                total += 1
        return total, skipped

    def _collect_manifests(self, root: Path, total_entries: int) -> list[Path]:
        """Work pass: collect manifest paths and report progress."""
        manifests: list[Path] = []
        found_count = 0
        scanned_count = 0
        last_emit = self._clock()

        for item in walk_tree(root, skip=self._ignore):
            self._check_cancel()
            if isinstance(item, WalkError):
                continue

            scanned_count += 1
            if item.is_file and item.name == MANIFEST_NAME:
                manifests.append(Path(item.path))
                found_count += 1

            if self._progress is None:
                continue
            now = self._clock()
            if now - last_emit >= PROGRESS_INTERVAL or scanned_count % PROGRESS_EVERY == 0:
                last_emit = now
                self._progress(
                    ScanProgress(
                        found_count=found_count,
                        current_path=item.path,
                        scanned_count=scanned_count,
                        total_count=total_entries,
                    )
                )

        if self._progress is not None:
            self._progress(
                ScanProgress(
                    found_count=found_count,
                    current_path=str(root),
                    scanned_count=scanned_count,
                    total_count=total_entries,
                )
            )

        return manifests

    def _check_cancel(self) -> None:
        if self._should_cancel is not None and self._should_cancel():
            raise ScanCancelledError("Scan cancelled")


def scan(
    root: Path,
    scan_all: bool = False,
    scan_caches: bool = False,
    progress: ProgressSink | None = None,
) -> ScanResult:
    """Scan ``root`` with default settings.

    Convenience wrapper around ProjectScanner.

    Raises:
        RootNotFoundError: If ``root`` does not exist.
    """
    scanner = ProjectScanner(scan_all=scan_all, scan_caches=scan_caches, progress=progress)
    return scanner.scan(root)
