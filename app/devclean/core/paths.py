"""Platform-aware path management for devclean.

This module provides standardized paths for configuration, persistent
data, and caches. On Linux the XDG Base Directory Specification is
followed; macOS and Windows use their native locations.

Linux defaults:
- Config: ~/.config/devclean/
- Data:   ~/.local/share/devclean/
- Cache:  ~/.cache/ (system-wide user cache root)
"""

import os
import sys
from pathlib import Path

# Application identifier for directory naming
APP_NAME = "devclean"

# Name of the assessment cache file stored at a scan root
ROOT_CACHE_FILENAME = ".devclean-cache.json"


def get_platform_family(platform: str | None = None) -> str:
    """Return the platform family used for platform-specific tables.

    Args:
        platform: Optional ``sys.platform`` style identifier. Defaults to
            the running interpreter's platform.

    Returns:
        "windows" for Windows hosts, "unix" for everything else.
    """
    value = platform if platform is not None else sys.platform
    if value.startswith(("win", "cygwin")):
        return "windows"
    return "unix"


def _is_macos() -> bool:
    return sys.platform == "darwin"


def _windows_dir(env_var: str, fallback: str) -> Path:
    base = os.environ.get(env_var)
    if base:
        return Path(base)
    return Path.home() / fallback


def get_system_cache_dir() -> Path:
    """Get the user-level cache root shared by all applications.

    Returns:
        Path to ~/.cache (or XDG_CACHE_HOME), ~/Library/Caches on macOS,
        or %LOCALAPPDATA% on Windows.
    """
    if get_platform_family() == "windows":
        return _windows_dir("LOCALAPPDATA", "AppData/Local")
    if _is_macos():
        return Path.home() / "Library" / "Caches"
    base = os.environ.get("XDG_CACHE_HOME")
    if base:
        return Path(base)
    return Path.home() / ".cache"


def get_system_data_dir() -> Path:
    """Get the user-level data root shared by all applications.

    Returns:
        Path to ~/.local/share (or XDG_DATA_HOME), ~/Library/Application
        Support on macOS, or %APPDATA% on Windows.
    """
    if get_platform_family() == "windows":
        return _windows_dir("APPDATA", "AppData/Roaming")
    if _is_macos():
        return Path.home() / "Library" / "Application Support"
    base = os.environ.get("XDG_DATA_HOME")
    if base:
        return Path(base)
    return Path.home() / ".local" / "share"


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Returns:
        Path to ~/.config/devclean/ (or XDG_CONFIG_HOME/devclean/). On
        macOS and Windows the config lives next to the application data.
    """
    if get_platform_family() == "windows" or _is_macos():
        return get_data_dir()
    base = os.environ.get("XDG_CONFIG_HOME")
    if base:
        return Path(base) / APP_NAME
    return Path.home() / ".config" / APP_NAME


def get_data_dir() -> Path:
    """Get the application data directory path.

    Holds the fallback assessment caches and the quarantine area.

    Returns:
        Path to <system data dir>/devclean/.
    """
    return get_system_data_dir() / APP_NAME


def get_config_path() -> Path:
    """Get the configuration file path.

    Returns:
        Path to <config dir>/config.toml.
    """
    return get_config_dir() / "config.toml"


def get_fallback_cache_dir() -> Path:
    """Get the directory holding per-root fallback assessment caches.

    Returns:
        Path to <data dir>/cache/.
    """
    return get_data_dir() / "cache"


def get_quarantine_dir() -> Path:
    """Get the default quarantine directory path.

    Returns:
        Path to <data dir>/quarantine/.
    """
    return get_data_dir() / "quarantine"

