"""Project and cache discovery.

This module provides the traversal engine, ignore policy, cache
discovery, and package.json metadata extraction.
"""

from devclean.scanner.caches import CacheCandidate, gather_cache_candidates, scan_cache_dirs
from devclean.scanner.ignore import DEFAULT_IGNORES, FULL_DISK_IGNORES, IgnorePolicy
from devclean.scanner.metadata import extract_project_meta, has_startup_signal
from devclean.scanner.models import ProjectMeta, ScanProgress, ScanResult
from devclean.scanner.traversal import (
    ProgressSink,
    ProjectScanner,
    RootNotFoundError,
    ScanCancelledError,
    ScanError,
    scan,
)

__all__ = [
    "DEFAULT_IGNORES",
    "FULL_DISK_IGNORES",
    "CacheCandidate",
    "IgnorePolicy",
    "ProgressSink",
    "ProjectMeta",
    "ProjectScanner",
    "RootNotFoundError",
    "ScanCancelledError",
    "ScanError",
    "ScanProgress",
    "ScanResult",
    "extract_project_meta",
    "gather_cache_candidates",
    "has_startup_signal",
    "scan",
    "scan_cache_dirs",
]
