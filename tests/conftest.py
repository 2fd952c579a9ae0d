"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

import json
import logging
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import pytest


@pytest.fixture(autouse=True)
def reset_package_logger() -> Iterator[None]:
    """Undo logging configuration done by CLI invocations."""
    yield
    package_logger = logging.getLogger("devclean")
    package_logger.handlers.clear()
    package_logger.setLevel(logging.NOTSET)


@pytest.fixture
def isolated_dirs(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point HOME and the XDG directories at a temporary location.

    Returns:
        The temporary home directory.
    """
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home / ".config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(home / ".local" / "share"))
    monkeypatch.setenv("XDG_CACHE_HOME", str(home / ".cache"))
    for var in (
        "GEMINI_API_KEY",
        "GEMINI_MODEL",
        "NPM_CONFIG_CACHE",
        "YARN_CACHE_FOLDER",
        "PNPM_STORE_PATH",
    ):
        monkeypatch.delenv(var, raising=False)
    return home


@pytest.fixture
def make_project() -> Callable[..., Path]:
    """Factory creating a project directory with a package.json.

    Usage:
        make_project(root, "app", manifest={"name": "app"}, git=True, env=True)
    """

    def _make(
        root: Path,
        name: str,
        manifest: dict[str, Any] | None = None,
        git: bool = False,
        env: bool = False,
    ) -> Path:
        project = root / name
        project.mkdir(parents=True, exist_ok=True)
        data = manifest if manifest is not None else {"name": name}
        (project / "package.json").write_text(json.dumps(data))
        if git:
            (project / ".git").mkdir()
        if env:
            (project / ".env").write_text("SECRET=1\n")
        return project

    return _make
