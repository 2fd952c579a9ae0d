"""Risk assessment models.

This module defines risk classes, assessment sources, the assessment
itself, and the ProjectRecord pairing a project with its assessment.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from devclean.scanner.models import ProjectMeta

CRITICAL_THRESHOLD = 8
ACTIVE_THRESHOLD = 5
MAX_SCORE = 10


class RiskClass(str, Enum):
    """How risky it is to delete a project.

    Attributes:
        CRITICAL: Likely important work; do not delete.
        ACTIVE: In use; delete with care.
        BURNER: Throwaway or stale; safe to delete.
    """

    CRITICAL = "Critical"
    ACTIVE = "Active"
    BURNER = "Burner"

    @classmethod
    def from_score(cls, score: int) -> "RiskClass":
        """Classify a score: >=8 Critical, >=5 Active, else Burner."""
        if score >= CRITICAL_THRESHOLD:
            return cls.CRITICAL
        if score >= ACTIVE_THRESHOLD:
            return cls.ACTIVE
        return cls.BURNER


class RiskSource(str, Enum):
    """Where an assessment came from."""

    HEURISTIC = "Heuristic"
    AI = "AI"
    COMBINED = "Combined"

    @classmethod
    def _missing_(cls, value: object) -> "RiskSource | None":
        # Accept any casing, e.g. "Ai" or "heuristic"
        if isinstance(value, str):
            for member in cls:
                if member.value.lower() == value.lower():
                    return member
        return None


class RiskAssessment(BaseModel):
    """A scored risk classification with its supporting reasons.

    Reasons keep evaluation order; they are never sorted.

    Attributes:
        class_name: Risk class, always derived from ``score``.
        score: Integer score in [0, 10].
        reasons: Human-readable reasons in the order they were produced.
        source: Heuristic, AI, or Combined.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    class_name: RiskClass = Field(alias="className")
    score: int = Field(ge=0, le=MAX_SCORE)
    reasons: tuple[str, ...] = ()
    source: RiskSource

    @model_validator(mode="after")
    def validate_class_matches_score(self) -> "RiskAssessment":
        """Validate that the class agrees with the score thresholds."""
        expected = RiskClass.from_score(self.score)
        if self.class_name != expected:
            msg = f"Class {self.class_name.value} does not match score {self.score}"
            raise ValueError(msg)
        return self

    @classmethod
    def from_score(
        cls,
        score: int,
        reasons: tuple[str, ...] | list[str],
        source: RiskSource,
    ) -> "RiskAssessment":
        """Create an assessment whose class is derived from ``score``."""
        return cls(
            class_name=RiskClass.from_score(score),
            score=score,
            reasons=tuple(reasons),
            source=source,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to the camelCase dictionary used in JSON files."""
        return self.model_dump(mode="json", by_alias=True)


@dataclass(frozen=True, slots=True)
class ProjectRecord:
    """A scanned project together with its final risk assessment.

    Attributes:
        meta: Project metadata from the scanner.
        risk: Final (heuristic or combined) risk assessment.
    """

    meta: ProjectMeta
    risk: RiskAssessment

    def to_dict(self) -> dict[str, Any]:
        """Convert to a flat dictionary: metadata fields plus a ``risk`` key."""
        return {**self.meta.to_dict(), "risk": self.risk.to_dict()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ProjectRecord":
        """Rebuild a record from its ``to_dict`` form.

        Raises:
            KeyError: If required keys are missing.
            ValueError: If the data is invalid.
        """
        return cls(
            meta=ProjectMeta.from_dict(data),
            risk=RiskAssessment.model_validate(data["risk"]),
        )
