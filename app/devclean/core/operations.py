"""Scan and delete operations.

These are the two entry points front ends call: ``run_scan`` discovers
and assesses projects below a root directory, ``run_delete`` plans and
executes the removal (or quarantine) of selected entries.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

from devclean.cache.storage import CacheWriteError, default_storage
from devclean.cache.store import AssessmentCache
from devclean.cleanup.executor import DeleteExecutor
from devclean.cleanup.planner import build_plan
from devclean.risk.assessor import AiStats, RiskAssessor
from devclean.scanner.traversal import ProjectScanner

if TYPE_CHECKING:
    from devclean.cache.storage import CacheStorage
    from devclean.cleanup.executor import DeleteReport
    from devclean.cleanup.planner import DeleteEntry
    from devclean.risk.ai import RiskAdvisor
    from devclean.risk.models import ProjectRecord
    from devclean.scanner.traversal import ProgressSink

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ScanRequest:
    """Parameters of a scan.

    Attributes:
        root_path: Directory to scan. An empty string means the current
            working directory.
        scan_all: Also skip platform-reserved top-level directories.
        ai_enabled: Consult the assessment cache and AI collaborator.
        scan_caches: Include package-manager cache directories.
    """

    root_path: str = ""
    scan_all: bool = False
    ai_enabled: bool = False
    scan_caches: bool = False


@dataclass(frozen=True, slots=True)
class ScanSummary:
    """Totals describing a finished scan."""

    root_path: str
    scan_all: bool
    scan_caches: bool
    total_entries: int
    skipped_entries: int
    project_count: int
    cache_count: int
    cache_bytes: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "rootPath": self.root_path,
            "scanAll": self.scan_all,
            "scanCaches": self.scan_caches,
            "totalEntries": self.total_entries,
            "skippedEntries": self.skipped_entries,
            "projectCount": self.project_count,
            "cacheCount": self.cache_count,
            "cacheBytes": self.cache_bytes,
        }


@dataclass(frozen=True, slots=True)
class ScanReport:
    """Assessed projects of a scan, with AI statistics and a summary.

    Attributes:
        projects: Final records, sorted by path.
        ai_stats: AI usage counters; None when AI was disabled.
        summary: Scan totals.
    """

    projects: list[ProjectRecord]
    ai_stats: AiStats | None
    summary: ScanSummary

    def to_dict(self) -> dict[str, Any]:
        """Convert to the export document format."""
        return {
            "summary": self.summary.to_dict(),
            "aiStats": self.ai_stats.to_dict() if self.ai_stats is not None else None,
            "projects": [record.to_dict() for record in self.projects],
        }


@dataclass(frozen=True, slots=True)
class DeleteRequest:
    """Parameters of a delete.

    Attributes:
        entries: Selected projects or caches.
        deps_only: Remove only dependency directories of projects.
        dry_run: Report what would happen without touching the filesystem.
        quarantine: Move targets to the quarantine directory instead of removing them.
    """

    entries: Sequence[DeleteEntry]
    deps_only: bool = False
    dry_run: bool = False
    quarantine: bool = False


def run_scan(
    request: ScanRequest,
    progress: ProgressSink | None = None,
    advisor: RiskAdvisor | None = None,
    cache_storage: CacheStorage | None = None,
    should_cancel: Callable[[], bool] | None = None,
) -> ScanReport:
    """Scan a directory tree and assess every project found.

    With AI enabled, the assessment cache for the root is loaded before
    assessing and saved afterwards. A cache that cannot be saved is
    logged and does not fail the scan.

    Args:
        request: Scan parameters.
        progress: Optional progress sink for the traversal.
        advisor: AI collaborator used on cache misses (AI enabled only).
        cache_storage: Where the assessment cache lives. Defaults to the
            root-local file with the application data directory as fallback.
        should_cancel: Optional cooperative cancellation check.

    Returns:
        ScanReport with projects sorted by path.

    Raises:
        RootNotFoundError: If the root directory does not exist.
        ScanCancelledError: If the cancellation check fires.
    """
    root_key = os.path.abspath(request.root_path or ".")
    root = Path(root_key)

    scanner = ProjectScanner(
        scan_all=request.scan_all,
        scan_caches=request.scan_caches,
        progress=progress,
        should_cancel=should_cancel,
    )
    result = scanner.scan(root)

    storage = cache_storage
    cache: AssessmentCache | None = None
    if request.ai_enabled:
        if storage is None:
            storage = default_storage()
        cache = AssessmentCache.load(storage, root_key)
        logger.debug("Loaded %d cached assessment(s) for %s", len(cache), root_key)

    assessor = RiskAssessor(ai_enabled=request.ai_enabled, advisor=advisor, cache=cache)
    projects = assessor.assess_all(result.projects)

    if request.ai_enabled and storage is not None:
        try:
            assessor.cache.save(storage, root_key)
        except (CacheWriteError, OSError) as e:
            logger.error("Failed to save assessment cache for %s: %s", root_key, e)

    caches = [record for record in projects if record.meta.is_cache]
    summary = ScanSummary(
        root_path=root_key,
        scan_all=request.scan_all,
        scan_caches=request.scan_caches,
        total_entries=result.total_entries,
        skipped_entries=result.skipped_entries,
        project_count=len(projects) - len(caches),
        cache_count=len(caches),
        cache_bytes=sum(record.meta.size_bytes for record in caches),
    )
    logger.info(
        "Scanned %s: %d project(s), %d cache(s)",
        root_key,
        summary.project_count,
        summary.cache_count,
    )

    return ScanReport(
        projects=projects,
        ai_stats=assessor.stats if request.ai_enabled else None,
        summary=summary,
    )


def run_delete(request: DeleteRequest, quarantine_root: Path | None = None) -> DeleteReport:
    """Plan and execute a delete request.

    Args:
        request: Delete parameters.
        quarantine_root: Quarantine directory (used with ``quarantine``).

    Returns:
        DeleteReport with one outcome per resolved target.

    Raises:
        QuarantineError: If quarantining and the quarantine directory
            cannot be created.
    """
    plan = build_plan(request.entries, deps_only=request.deps_only)
    logger.debug("Delete plan: %d item(s), %d bytes", len(plan), plan.total_bytes)
    executor = DeleteExecutor(quarantine_root=quarantine_root)
    return executor.execute(plan, dry_run=request.dry_run, quarantine=request.quarantine)
