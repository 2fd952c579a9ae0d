"""Delete planning and execution.

This module resolves selected projects and caches into concrete delete
targets and removes or quarantines them.
"""

from devclean.cleanup.executor import (
    DeleteAction,
    DeleteExecutor,
    DeleteOutcome,
    DeleteReport,
    QuarantineError,
    quarantine_destination,
)
from devclean.cleanup.planner import DeleteEntry, DeletePlan, DeletePlanItem, build_plan

__all__ = [
    "DeleteAction",
    "DeleteEntry",
    "DeleteExecutor",
    "DeleteOutcome",
    "DeletePlan",
    "DeletePlanItem",
    "DeleteReport",
    "QuarantineError",
    "build_plan",
    "quarantine_destination",
]
