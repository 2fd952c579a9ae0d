"""CLI commands for devclean.

This package contains all subcommand implementations.
"""

from devclean.cli.commands import clean, config, scan

__all__ = ["clean", "config", "scan"]
