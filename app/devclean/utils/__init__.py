"""Utility modules for devclean.

This module exports commonly used utility functions.
"""

from devclean.utils.formatting import (
    console,
    err_console,
    format_size,
    print_error,
    print_info,
    print_success,
    print_warning,
)
from devclean.utils.fs import directory_size_bytes, mtime_ms, path_size_bytes

__all__ = [
    "console",
    "directory_size_bytes",
    "err_console",
    "format_size",
    "mtime_ms",
    "path_size_bytes",
    "print_error",
    "print_info",
    "print_success",
    "print_warning",
]
