"""Rich console formatting utilities.

Provides consistent formatting for CLI output using Rich.
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING

from rich.console import Console
from rich.table import Table

from devclean.core.theme import get_theme

if TYPE_CHECKING:
    from devclean.risk.models import ProjectRecord


def _detect_color_system() -> str | None:
    """Detect the best color system for the current terminal.

    Returns "truecolor" for interactive terminals to enable full hex color support,
    None otherwise to let Rich auto-detect.
    """
    if sys.stdout.isatty():
        return "truecolor"
    return None


# Shared console instances (theme loaded once at import)
console = Console(theme=get_theme(), color_system=_detect_color_system())
err_console = Console(theme=get_theme(), stderr=True, color_system=_detect_color_system())


def format_size(size_bytes: int | None) -> str:
    """Format byte count as human-readable string."""
    if size_bytes is None or size_bytes == 0:
        return "0 B"
    size = float(size_bytes)
    for unit in ("B", "KB", "MB", "GB"):
        if abs(size) < 1024:
            return f"{size:.1f} {unit}" if unit != "B" else f"{int(size)} B"
        size /= 1024
    return f"{size:.1f} TB"


def risk_style(class_name: str) -> str:
    """Map a risk class label to its theme style name."""
    return f"risk.{class_name.lower()}"


def create_project_table(title: str = "Projects") -> Table:
    """Create a pre-configured table for displaying scan results.

    Args:
        title: Table title.

    Returns:
        Rich Table configured for project display.
    """
    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
        row_styles=["", "on grey7"],
    )
    table.add_column("Risk", no_wrap=True)
    table.add_column("Score", justify="right", width=5)
    table.add_column("Name", no_wrap=True)
    table.add_column("Path", style="muted", overflow="fold")
    table.add_column("Size", style="info", justify="right")
    table.add_column("Age", justify="right", style="muted")
    table.add_column("Reasons", style="text", overflow="ellipsis")
    return table


def format_project_row(record: ProjectRecord) -> tuple[str, str, str, str, str, str, str]:
    """Format a project record as a table row with risk coloring.

    Cache directories get a distinct name style so they stand out from
    manifest-based projects.
    """
    style = risk_style(record.risk.class_name.value)
    risk = f"[{style}]{record.risk.class_name.value}[/]"
    score = f"[{style}]{record.risk.score}[/]"
    name_style = "cache" if record.meta.is_cache else "text"
    name = f"[{name_style}]{record.meta.name}[/]"
    age = f"{record.meta.last_modified_days}d"
    reasons = "; ".join(record.risk.reasons) or "-"
    return (
        risk,
        score,
        name,
        record.meta.path,
        format_size(record.meta.size_bytes),
        age,
        reasons,
    )


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[info]{message}[/]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    err_console.print(f"[warning]Warning:[/] {message}")


def print_error(message: str) -> None:
    """Print an error message."""
    err_console.print(f"[error]Error:[/] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[success]{message}[/]")
