"""Delete plan execution.

Processes plan items strictly in order, either removing them or moving
them into a quarantine directory. Each item is independent: a failure is
recorded on that item and the remaining items are still processed.
There is no rollback.
"""

import logging
import os
import shutil
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from devclean.cleanup.planner import DeletePlan, DeletePlanItem

logger = logging.getLogger(__name__)

STATUS_DRY_RUN = "dry-run"
STATUS_DELETED = "deleted"
STATUS_MOVED = "moved"
STATUS_MISSING = "missing"
ERROR_PREFIX = "error:"


class DeleteAction(str, Enum):
    """What happens to a delete target."""

    DELETE = "delete"
    QUARANTINE = "quarantine"


class QuarantineError(Exception):
    """Raised when the quarantine directory cannot be prepared."""


@dataclass(frozen=True, slots=True)
class DeleteOutcome:
    """Result of processing one plan item.

    Attributes:
        path: Target path.
        size_bytes: Size measured when planned.
        action: delete or quarantine.
        status: dry-run, deleted, moved, missing, or "error: <message>".
        destination: Quarantine destination (moved items only).
        original_path: Original location (moved items only).
    """

    path: str
    size_bytes: int
    action: DeleteAction
    status: str
    destination: str | None = None
    original_path: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.status in (STATUS_DELETED, STATUS_MOVED)

    @property
    def failed(self) -> bool:
        return self.status.startswith(ERROR_PREFIX)

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "sizeBytes": self.size_bytes,
            "action": self.action.value,
            "status": self.status,
            "destination": self.destination,
            "originalPath": self.original_path,
        }


@dataclass(slots=True)
class DeleteReport:
    """Aggregate result of executing a plan."""

    removed_count: int = 0
    reclaimed_bytes: int = 0
    items: list[DeleteOutcome] = field(default_factory=lambda: [])

    def to_dict(self) -> dict[str, Any]:
        return {
            "removedCount": self.removed_count,
            "reclaimedBytes": self.reclaimed_bytes,
            "items": [item.to_dict() for item in self.items],
        }


def quarantine_destination(root: Path, name: str, stamp: int) -> Path:
    """Pick a free ``<stamp>_<name>`` path under ``root``.

    On collision a numeric suffix is appended: ``_1``, ``_2``, ...
    """
    name = name or "item"
    destination = root / f"{stamp}_{name}"
    counter = 1
    while os.path.lexists(destination):
        destination = root / f"{stamp}_{name}_{counter}"
        counter += 1
    return destination


class DeleteExecutor:
    """Executes delete plans.

    Args:
        quarantine_root: Directory that receives quarantined items.
            Required only when executing with ``quarantine=True``.
        clock: Returns the current time in seconds (quarantine naming).
    """

    def __init__(
        self,
        quarantine_root: Path | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._quarantine_root = quarantine_root
        self._clock = clock

    def execute(
        self,
        plan: DeletePlan,
        dry_run: bool = False,
        quarantine: bool = False,
    ) -> DeleteReport:
        """Execute (or simulate) a delete plan.

        Args:
            plan: Plan to execute.
            dry_run: Report what would happen without touching the filesystem.
            quarantine: Move targets into the quarantine root instead of removing them.

        Returns:
            DeleteReport with one outcome per plan item, in plan order.

        Raises:
            QuarantineError: If quarantining and the quarantine root is
                missing or cannot be created. Raised before any item is
                processed.
        """
        action = DeleteAction.QUARANTINE if quarantine else DeleteAction.DELETE

        if dry_run:
            logger.info("Dry-run: %d item(s) would be processed", len(plan))
            return DeleteReport(
                removed_count=0,
                reclaimed_bytes=plan.total_bytes,
                items=[
                    DeleteOutcome(
                        path=item.path,
                        size_bytes=item.size_bytes,
                        action=action,
                        status=STATUS_DRY_RUN,
                    )
                    for item in plan.items
                ],
            )

        quarantine_root = self._prepare_quarantine_root() if quarantine else None

        report = DeleteReport()
        for item in plan.items:
            outcome = self._process(item, action, quarantine_root)
            if outcome.succeeded:
                report.removed_count += 1
                report.reclaimed_bytes += item.size_bytes
            report.items.append(outcome)
        return report

    def _prepare_quarantine_root(self) -> Path:
        if self._quarantine_root is None:
            msg = "No quarantine directory configured"
            raise QuarantineError(msg)
        try:
            self._quarantine_root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            msg = f"Cannot create quarantine directory {self._quarantine_root}: {e}"
            raise QuarantineError(msg) from e
        return self._quarantine_root

    def _process(
        self,
        item: DeletePlanItem,
        action: DeleteAction,
        quarantine_root: Path | None,
    ) -> DeleteOutcome:
        if not os.path.lexists(item.path):
            return DeleteOutcome(
                path=item.path,
                size_bytes=item.size_bytes,
                action=action,
                status=STATUS_MISSING,
            )

        try:
            if quarantine_root is not None:
                destination = self._move_to_quarantine(Path(item.path), quarantine_root)
                logger.info("Quarantined %s -> %s", item.path, destination)
                return DeleteOutcome(
                    path=item.path,
                    size_bytes=item.size_bytes,
                    action=action,
                    status=STATUS_MOVED,
                    destination=str(destination),
                    original_path=item.path,
                )
            self._remove(Path(item.path))
            logger.info("Deleted %s", item.path)
            return DeleteOutcome(
                path=item.path,
                size_bytes=item.size_bytes,
                action=action,
                status=STATUS_DELETED,
            )
        except OSError as e:
            logger.warning("Failed to %s %s: %s", action.value, item.path, e)
            return DeleteOutcome(
                path=item.path,
                size_bytes=item.size_bytes,
                action=action,
                status=f"{ERROR_PREFIX} {e}",
            )

    def _move_to_quarantine(self, target: Path, root: Path) -> Path:
        stamp = int(self._clock())
        destination = quarantine_destination(root, target.name, stamp)
        # Same-filesystem rename only: a cross-device move fails with an error
        os.rename(target, destination)
        return destination

    @staticmethod
    def _remove(target: Path) -> None:
        # Directories (but not symlinks to directories)
        if target.is_dir() and not target.is_symlink():
            shutil.rmtree(target)
        else:
            target.unlink()
