"""Scan command implementation.

Discovers projects (and optionally package-manager caches) below a
root directory and shows how risky each one is to delete.
"""

import json
from contextlib import nullcontext
from enum import Enum
from pathlib import Path
from typing import Annotated

import typer
from rich.progress import BarColumn, MofNCompleteColumn, Progress, SpinnerColumn, TextColumn

from devclean.core.config import API_KEY_ENV, ConfigError, get_api_key, load_config_or_default
from devclean.core.operations import ScanReport, ScanRequest, run_scan
from devclean.risk.ai import GeminiClient
from devclean.risk.assessor import AiStats
from devclean.scanner.models import ScanProgress
from devclean.scanner.traversal import ScanError
from devclean.utils.formatting import (
    console,
    create_project_table,
    err_console,
    format_project_row,
    format_size,
    print_error,
    print_info,
    print_success,
)


class OutputFormat(str, Enum):
    """Output format options."""

    TABLE = "table"
    JSON = "json"


class ProgressDisplay:
    """Progress sink that drives a Rich progress bar."""

    def __init__(self, progress: Progress) -> None:
        self._progress = progress
        self._task = progress.add_task("Counting entries", total=None)

    def __call__(self, snapshot: ScanProgress) -> None:
        self._progress.update(
            self._task,
            description=f"Scanning ({snapshot.found_count} found)",
            total=snapshot.total_count or None,
            completed=snapshot.scanned_count,
        )


def _create_progress() -> Progress:
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        console=err_console,
        transient=True,
    )


def scan_projects(
    ctx: typer.Context,
    root: Annotated[
        Path | None,
        typer.Argument(help="Directory to scan (default: current directory)."),
    ] = None,
    scan_all: Annotated[
        bool,
        typer.Option("--all", "-a", help="Full-disk mode: also skip system directories."),
    ] = False,
    caches: Annotated[
        bool,
        typer.Option("--caches", "-c", help="Include package-manager cache directories."),
    ] = False,
    ai: Annotated[
        bool,
        typer.Option("--ai", help=f"Ask Gemini for a second opinion (needs {API_KEY_ENV})."),
    ] = False,
    output_format: Annotated[
        OutputFormat,
        typer.Option(
            "--format",
            "-f",
            help="Output format: table or json.",
            case_sensitive=False,
        ),
    ] = OutputFormat.TABLE,
    export_path: Annotated[
        Path | None,
        typer.Option(
            "--export",
            "-e",
            help="Export scan results to JSON file.",
        ),
    ] = None,
    limit: Annotated[
        int | None,
        typer.Option(
            "--limit",
            "-n",
            help="Limit number of projects to display.",
        ),
    ] = None,
) -> None:
    """Scan a directory tree for projects and rate their deletion risk.

    Examples:
        devclean scan                        # Scan the current directory
        devclean scan ~/code --caches        # Include npm/yarn/pnpm caches
        devclean scan / --all                # Full-disk scan
        devclean scan ~/code --ai            # Combine heuristics with Gemini
        devclean scan ~/code --export s.json # Save results for `devclean clean --from`
    """
    obj = ctx.obj or {}
    quiet = bool(obj.get("quiet", False))

    advisor: GeminiClient | None = None
    if ai:
        api_key = get_api_key()
        if api_key is None:
            print_error(f"AI assessment requires the {API_KEY_ENV} environment variable.")
            raise typer.Exit(code=1)
        try:
            config = load_config_or_default()
        except ConfigError as e:
            print_error(str(e))
            raise typer.Exit(code=1) from e
        advisor = GeminiClient(
            api_key,
            model=config.effective_model,
            timeout=float(config.ai_timeout_seconds),
        )

    request = ScanRequest(
        root_path=str(root) if root is not None else "",
        scan_all=scan_all,
        ai_enabled=ai,
        scan_caches=caches,
    )

    show_progress = not quiet and output_format == OutputFormat.TABLE
    progress_bar = _create_progress() if show_progress else None
    try:
        with progress_bar if progress_bar is not None else nullcontext():
            sink = ProgressDisplay(progress_bar) if progress_bar is not None else None
            report = run_scan(request, progress=sink, advisor=advisor)
    except ScanError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
    finally:
        if advisor is not None:
            advisor.close()

    # Handle export (always the full result, regardless of --limit)
    if export_path is not None:
        _export_report(report, export_path)

    display = report.projects[:limit] if limit else report.projects

    # JSON output format
    if output_format == OutputFormat.JSON:
        data = report.to_dict()
        data["projects"] = [record.to_dict() for record in display]
        console.print_json(json.dumps(data))
        return

    if not report.projects:
        print_success("No projects found.")
        return

    # Table output format (default)
    table = create_project_table(f"Projects under {report.summary.root_path}")
    for record in display:
        table.add_row(*format_project_row(record))
    console.print(table)

    if not quiet:
        _print_summary(report, len(display), limit)
        if report.ai_stats is not None:
            _print_ai_stats(report.ai_stats)


# === Private helper functions ===


def _print_summary(report: ScanReport, displayed: int, limit: int | None) -> None:
    """Print scan totals below the table."""
    summary = report.summary
    parts = [f"Showing {displayed} of {len(report.projects)} entries"]
    parts.append(f"({summary.project_count} projects, {summary.cache_count} caches)")
    if limit and displayed < len(report.projects):
        parts.append(f"(limited to {limit})")
    console.print(f"\n[dim]{' '.join(parts)}[/]")

    total_bytes = sum(record.meta.size_bytes for record in report.projects)
    console.print(
        f"[dim]{summary.total_entries} entries scanned, {summary.skipped_entries} skipped, "
        f"{format_size(total_bytes)} total[/]"
    )
    if summary.cache_count:
        console.print(f"[dim]Caches hold {format_size(summary.cache_bytes)}[/]")


def _print_ai_stats(stats: AiStats) -> None:
    """Print AI cache and request counters."""
    line = (
        f"AI: {stats.calls} call(s), {stats.cache_hits} cache hit(s), "
        f"{stats.cache_misses} cache miss(es)"
    )
    if stats.failures:
        line += f", {stats.failures} failure(s) fell back to heuristics"
    console.print(f"[dim]{line}[/]")


def _export_report(report: ScanReport, export_path: Path) -> None:
    """Write the full scan report to a JSON file."""
    export_path = export_path.resolve()
    if export_path.is_dir():
        print_error(f"Export path is a directory: {export_path}")
        raise typer.Exit(code=1)

    try:
        export_path.parent.mkdir(parents=True, exist_ok=True)
        export_path.write_text(json.dumps(report.to_dict(), indent=2))
        print_info(f"Scan results exported to {export_path}")
    except OSError as e:
        print_error(f"Failed to export: {e}")
        raise typer.Exit(code=1) from e
