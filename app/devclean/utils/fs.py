"""Filesystem helpers shared by the scanner and the delete planner.

All walking here uses ``os.scandir`` and never follows symbolic links
below the starting directory.
"""

import logging
import os
import stat
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class WalkEntry:
    """A successfully visited filesystem entry.

    Attributes:
        path: Full path of the entry.
        name: Base name of the entry.
        is_dir: True for real directories (symlinks to directories are not).
        is_file: True for regular files.
    """

    path: str
    name: str
    is_dir: bool
    is_file: bool


@dataclass(frozen=True, slots=True)
class WalkError:
    """An entry or directory that could not be read during a walk."""

    path: str
    error: OSError


def walk_tree(
    root: str | os.PathLike[str],
    skip: Callable[[str], bool] | None = None,
) -> Iterator[WalkEntry | WalkError]:
    """Walk a directory tree depth-first without following symlinks.

    The root itself is yielded first and is never passed to ``skip``. A
    root that is a symlink to a directory is descended into; links below
    the root are not. Children are visited in name order. When
    ``skip(name)`` is true for a child, neither the child nor its subtree
    is yielded.

    Args:
        root: Directory (or file) to start from.
        skip: Optional predicate on base names.

    Yields:
        WalkEntry for each visited entry, WalkError for each failure.
    """
    root_str = os.fspath(root)
    try:
        st = os.stat(root_str)
    except OSError as exc:
        yield WalkError(path=root_str, error=exc)
        return

    name = os.path.basename(root_str.rstrip("/\\")) or root_str
    is_dir = stat.S_ISDIR(st.st_mode)
    yield WalkEntry(path=root_str, name=name, is_dir=is_dir, is_file=stat.S_ISREG(st.st_mode))
    if not is_dir:
        return

    stack: list[str] = [root_str]
    while stack:
        current = stack.pop()
        try:
            with os.scandir(current) as it:
                children = sorted(it, key=lambda e: e.name)
        except OSError as exc:
            yield WalkError(path=current, error=exc)
            continue

        subdirs: list[str] = []
        for child in children:
            if skip is not None and skip(child.name):
                continue
            try:
                child_is_dir = child.is_dir(follow_symlinks=False)
                child_is_file = child.is_file(follow_symlinks=False)
            except OSError as exc:
                yield WalkError(path=child.path, error=exc)
                continue
            yield WalkEntry(
                path=child.path,
                name=child.name,
                is_dir=child_is_dir,
                is_file=child_is_file,
            )
            if child_is_dir:
                subdirs.append(child.path)
        # Reverse so the first sibling is popped (and descended) first
        stack.extend(reversed(subdirs))


def directory_size_bytes(path: str | os.PathLike[str]) -> int:
    """Sum the sizes of all regular files below a directory.

    Unreadable entries are ignored.
    """
    total = 0
    for item in walk_tree(path):
        if isinstance(item, WalkError) or not item.is_file:
            continue
        try:
            total += os.lstat(item.path).st_size
        except OSError:
            continue
    return total


def path_size_bytes(path: str | os.PathLike[str]) -> int:
    """Return a file's own size, or the recursive size of a directory.

    Symlinks are measured as links, not followed.
    """
    try:
        st = os.lstat(path)
    except OSError:
        return 0
    if stat.S_ISDIR(st.st_mode):
        return directory_size_bytes(path)
    return st.st_size


def mtime_ms(path: str | os.PathLike[str]) -> int | None:
    """Return the modification time in epoch milliseconds, or None on error."""
    try:
        return int(Path(path).stat().st_mtime * 1000)
    except OSError:
        return None
