"""Main CLI application entry point.

Defines the Typer application and global options.
"""

import logging
from typing import Annotated

import typer
from rich.logging import RichHandler

from devclean import __version__
from devclean.cli.commands import clean, config, scan
from devclean.utils.formatting import err_console

# Create main Typer app
app = typer.Typer(
    name="devclean",
    help="Find stale developer projects and package caches, and clean them up.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"devclean version {__version__}")
        raise typer.Exit()


def configure_logging(verbose: bool) -> None:
    """Route log records to stderr through Rich.

    Args:
        verbose: Log at DEBUG instead of WARNING.
    """
    level = logging.DEBUG if verbose else logging.WARNING
    handler = RichHandler(console=err_console, show_path=False, rich_tracebacks=True)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))

    package_logger = logging.getLogger("devclean")
    package_logger.handlers.clear()
    package_logger.addHandler(handler)
    package_logger.setLevel(level)


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose (debug) logging.",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress non-essential output.",
        ),
    ] = False,
) -> None:
    """devclean - Find and clean up stale developer projects.

    Scans a directory tree for package.json projects and package-manager
    caches, scores how risky each is to delete, and removes or
    quarantines the ones you pick.
    """
    configure_logging(verbose)

    # Store options in context for subcommands
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet


# Register commands
app.command(name="scan")(scan.scan_projects)
app.command(name="clean")(clean.clean_entries)
app.add_typer(config.app, name="config")


if __name__ == "__main__":
    app()
