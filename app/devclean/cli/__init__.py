"""CLI package for devclean.

This package contains the Typer application and all subcommands.
"""

from devclean.cli.main import app

__all__ = ["app"]
