"""Project metadata extraction from package.json manifests.

Turns a discovered manifest into a ProjectMeta record carrying the
signals the risk engine scores: dependency count, VCS and env-file
presence, startup keywords, age, and size.
"""

import json
import logging
import os
import time
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from devclean.scanner.models import ProjectMeta
from devclean.utils.fs import directory_size_bytes, mtime_ms

logger = logging.getLogger(__name__)

MANIFEST_NAME = "package.json"

DEPENDENCY_KEYS: tuple[str, ...] = (
    "dependencies",
    "devDependencies",
    "peerDependencies",
    "optionalDependencies",
)

STARTUP_HINTS: tuple[str, ...] = ("startup", "production", "prod")

_MS_PER_DAY = 1000 * 60 * 60 * 24


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def days_since(timestamp_ms: int, now: int | None = None) -> int:
    """Whole days elapsed since ``timestamp_ms`` (never negative)."""
    current = now if now is not None else now_ms()
    return max(0, current - timestamp_ms) // _MS_PER_DAY


def has_startup_signal(name: str, keywords: Iterable[str], scripts: Iterable[str]) -> bool:
    """Check name, keywords and script commands for production/startup hints.

    Matching is a case-insensitive substring test, so "prod" also matches
    "production" and "product".
    """
    texts = (
        name.lower(),
        " ".join(keywords).lower(),
        " ".join(scripts).lower(),
    )
    return any(hint in text for hint in STARTUP_HINTS for text in texts)


def read_manifest(path: Path) -> dict[str, Any] | None:
    """Read and parse a package.json file.

    Returns:
        The parsed JSON object, or None if the file is unreadable, not
        valid JSON, or not a JSON object.
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.debug("Skipping unparsable manifest %s: %s", path, e)
        return None
    if not isinstance(data, dict):
        logger.debug("Skipping manifest that is not a JSON object: %s", path)
        return None
    return data


def dependency_count(manifest: dict[str, Any]) -> int:
    """Sum the entries of every dependency map in the manifest."""
    total = 0
    for key in DEPENDENCY_KEYS:
        value = manifest.get(key)
        if isinstance(value, dict):
            total += len(value)
    return total


def has_env_file(directory: Path) -> bool:
    """Check whether any entry in ``directory`` starts with ".env"."""
    try:
        with os.scandir(directory) as it:
            return any(entry.name.startswith(".env") for entry in it)
    except OSError:
        return False


def _string_list(value: object) -> list[str]:
    if isinstance(value, list):
        return [item for item in value if isinstance(item, str)]
    return []


def _script_commands(value: object) -> list[str]:
    if isinstance(value, dict):
        return [item for item in value.values() if isinstance(item, str)]
    return []


def extract_project_meta(manifest_path: Path, now: int | None = None) -> ProjectMeta | None:
    """Build a ProjectMeta for the project owning ``manifest_path``.

    The project directory is the manifest's parent directory.

    Args:
        manifest_path: Path to a package.json file.
        now: Reference time in epoch milliseconds (defaults to now).

    Returns:
        ProjectMeta, or None when the manifest cannot be parsed.
    """
    manifest = read_manifest(manifest_path)
    if manifest is None:
        return None

    project_dir = manifest_path.parent

    raw_name = manifest.get("name")
    if isinstance(raw_name, str) and raw_name.strip():
        name = raw_name
    else:
        name = project_dir.name

    keywords = _string_list(manifest.get("keywords"))
    scripts = _script_commands(manifest.get("scripts"))

    last_modified = mtime_ms(manifest_path)
    if last_modified is None:
        last_modified = mtime_ms(project_dir) or 0

    dir_str = str(project_dir)
    return ProjectMeta(
        id=dir_str,
        path=dir_str,
        name=name,
        manifest_path=str(manifest_path),
        dependency_count=dependency_count(manifest),
        has_git=(project_dir / ".git").exists(),
        has_env_file=has_env_file(project_dir),
        has_startup_keyword=has_startup_signal(name, keywords, scripts),
        is_cache=False,
        last_modified=last_modified,
        last_modified_days=days_since(last_modified, now),
        size_bytes=directory_size_bytes(project_dir),
    )
