"""Clean command implementation.

Deletes or quarantines projects and cache directories, either named on
the command line or selected from a ``devclean scan --export`` file.
"""

import json
from pathlib import Path
from typing import Annotated

import typer
from rich.table import Table

from devclean.cleanup.executor import (
    STATUS_DELETED,
    STATUS_DRY_RUN,
    STATUS_MISSING,
    STATUS_MOVED,
    DeleteOutcome,
    DeleteReport,
    QuarantineError,
)
from devclean.cleanup.planner import DeleteEntry, DeletePlan, build_plan
from devclean.core.config import ConfigError, load_config_or_default
from devclean.core.operations import DeleteRequest, run_delete
from devclean.risk.models import ProjectRecord, RiskClass
from devclean.utils.formatting import (
    console,
    format_size,
    print_error,
    print_info,
    print_success,
    print_warning,
)

_STATUS_STYLES: dict[str, str] = {
    STATUS_DRY_RUN: "info",
    STATUS_DELETED: "success",
    STATUS_MOVED: "success",
    STATUS_MISSING: "warning",
}


def clean_entries(
    paths: Annotated[
        list[Path] | None,
        typer.Argument(help="Project directories to clean."),
    ] = None,
    cache_paths: Annotated[
        list[Path] | None,
        typer.Option("--cache", help="Cache directory to clean (repeatable)."),
    ] = None,
    from_file: Annotated[
        Path | None,
        typer.Option("--from", help="Select entries from a `devclean scan --export` file."),
    ] = None,
    risk_class: Annotated[
        RiskClass | None,
        typer.Option(
            "--class",
            help="With --from, only select entries of this risk class.",
            case_sensitive=False,
        ),
    ] = None,
    deps_only: Annotated[
        bool,
        typer.Option("--deps-only", help="Only remove node_modules and .cache of projects."),
    ] = False,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Show what would be deleted."),
    ] = False,
    quarantine: Annotated[
        bool,
        typer.Option("--quarantine", help="Move entries to the quarantine directory instead."),
    ] = False,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip confirmation prompt."),
    ] = False,
) -> None:
    """Delete or quarantine projects and caches.

    Examples:
        devclean clean ~/code/old-demo               # Delete a project
        devclean clean ~/code/app --deps-only        # Only node_modules/.cache
        devclean clean --cache ~/.npm --dry-run      # Preview a cache cleanup
        devclean clean --from s.json --class burner  # Clean all burners from an export
        devclean clean ~/code/x --quarantine         # Move aside instead of deleting
    """
    if risk_class is not None and from_file is None:
        print_error("--class can only be used together with --from.")
        raise typer.Exit(code=1)

    entries = [DeleteEntry(path=str(p)) for p in paths or []]
    entries.extend(DeleteEntry(path=str(p), is_cache=True) for p in cache_paths or [])
    if from_file is not None:
        entries.extend(_load_export_entries(from_file, risk_class))

    if not entries:
        print_info("Nothing selected for cleanup.")
        return

    quarantine_root: Path | None = None
    if quarantine:
        try:
            quarantine_root = load_config_or_default().effective_quarantine_dir
        except ConfigError as e:
            print_error(str(e))
            raise typer.Exit(code=1) from e

    # Display planned deletions
    plan = build_plan(entries, deps_only=deps_only)
    if not plan.items:
        print_info("None of the selected paths exist.")
        return
    _print_plan(plan, dry_run, quarantine)

    # Confirm unless --yes or --dry-run
    if not dry_run and not yes:
        verb = "quarantining" if quarantine else "deleting"
        confirmed = typer.confirm(
            f"\nProceed with {verb} {len(plan)} path(s) ({format_size(plan.total_bytes)})?",
            default=False,
        )
        if not confirmed:
            print_info("Aborted.")
            raise typer.Exit(code=0)

    request = DeleteRequest(
        entries=entries,
        deps_only=deps_only,
        dry_run=dry_run,
        quarantine=quarantine,
    )
    try:
        report = run_delete(request, quarantine_root=quarantine_root)
    except QuarantineError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    _print_results(report, dry_run)

    # Exit with error if any item failed
    if any(item.failed for item in report.items):
        raise typer.Exit(code=1)


# === Private helper functions ===


def _load_export_entries(path: Path, risk_class: RiskClass | None) -> list[DeleteEntry]:
    """Read delete entries from a scan export file."""
    try:
        data = json.loads(path.read_text())
        records = [ProjectRecord.from_dict(item) for item in data["projects"]]
    except OSError as e:
        print_error(f"Failed to read {path}: {e}")
        raise typer.Exit(code=1) from e
    except (KeyError, TypeError, ValueError) as e:
        print_error(f"Not a devclean export file: {path} ({e})")
        raise typer.Exit(code=1) from e

    if risk_class is not None:
        records = [r for r in records if r.risk.class_name == risk_class]
    return [DeleteEntry(path=r.meta.path, is_cache=r.meta.is_cache) for r in records]


def _print_plan(plan: DeletePlan, dry_run: bool, quarantine: bool) -> None:
    """Display planned deletions."""
    label = "Planned Quarantine" if quarantine else "Planned Deletions"
    if dry_run:
        label += " (dry-run)"
    table = Table(title=label, show_lines=False)
    table.add_column("Path", style="bold")
    table.add_column("Size", justify="right", width=10)

    for item in plan.items:
        table.add_row(item.path, format_size(item.size_bytes))

    console.print(table)
    console.print(f"[dim]{len(plan)} path(s), {format_size(plan.total_bytes)} total[/]")


def _status_cell(outcome: DeleteOutcome) -> str:
    if outcome.failed:
        return "[error]failed[/]"
    style = _STATUS_STYLES.get(outcome.status, "text")
    return f"[{style}]{outcome.status}[/]"


def _print_results(report: DeleteReport, dry_run: bool) -> None:
    """Display per-item outcomes and totals."""
    table = Table(title="Cleanup Results", show_lines=False)
    table.add_column("Path", style="bold")
    table.add_column("Status", width=10)
    table.add_column("Details", style="dim")

    for outcome in report.items:
        if outcome.failed:
            detail = outcome.status
        elif outcome.destination:
            detail = f"-> {outcome.destination}"
        else:
            detail = format_size(outcome.size_bytes)
        table.add_row(outcome.path, _status_cell(outcome), detail)

    console.print(table)

    fail_count = sum(1 for item in report.items if item.failed)
    reclaimed = format_size(report.reclaimed_bytes)

    if dry_run:
        print_info(f"Dry-run: {len(report.items)} path(s) would free {reclaimed}.")
    elif fail_count:
        print_warning(f"{report.removed_count} succeeded, {fail_count} failed ({reclaimed} freed)")
    else:
        print_success(f"Removed {report.removed_count} path(s), {reclaimed} freed.")
