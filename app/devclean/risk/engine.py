"""Heuristic risk scoring and AI merge policy.

The heuristic is a pure function of ProjectMeta: a fixed, ordered list
of rules each adding or subtracting points and contributing a reason
when triggered. The merge policy averages a heuristic score with an AI
score, truncating toward zero.
"""

from collections.abc import Callable
from dataclasses import dataclass

from devclean.risk.models import MAX_SCORE, RiskAssessment, RiskClass, RiskSource
from devclean.scanner.models import ProjectMeta

BURNER_HINTS: tuple[str, ...] = ("tutorial", "test", "boilerplate", "example", "sample")

RECENT_DAYS = 30
INACTIVE_DAYS = 180
HIGH_DEPENDENCY_COUNT = 40


def is_burner_name(name: str) -> bool:
    """Check whether a project name looks like a tutorial or throwaway."""
    lowered = name.lower()
    return any(hint in lowered for hint in BURNER_HINTS)


def classify(score: int) -> RiskClass:
    """Classify a score: >=8 Critical, >=5 Active, else Burner."""
    return RiskClass.from_score(score)


def clamp_score(score: int) -> int:
    """Clamp a raw score into [0, 10]."""
    return max(0, min(MAX_SCORE, score))


@dataclass(frozen=True, slots=True)
class HeuristicRule:
    """One scoring rule.

    Attributes:
        applies: Predicate over project metadata.
        delta: Points added when the rule applies (may be negative).
        reason: Reason recorded when the rule applies.
    """

    applies: Callable[[ProjectMeta], bool]
    delta: int
    reason: str


# Evaluation order is significant: reasons are reported in this order.
HEURISTIC_RULES: tuple[HeuristicRule, ...] = (
    HeuristicRule(lambda m: m.is_cache, -4, "System cache directory"),
    HeuristicRule(lambda m: m.has_git, 4, "Git history detected"),
    HeuristicRule(lambda m: m.has_env_file, 3, "Environment file present"),
    HeuristicRule(lambda m: m.has_startup_keyword, 3, "Startup keywords in package.json"),
    HeuristicRule(lambda m: m.last_modified_days <= RECENT_DAYS, 2, "Modified within 30 days"),
    HeuristicRule(
        lambda m: m.dependency_count >= HIGH_DEPENDENCY_COUNT, 1, "High dependency count"
    ),
    HeuristicRule(lambda m: is_burner_name(m.name), -2, "Name matches tutorial/test patterns"),
    HeuristicRule(lambda m: m.last_modified_days >= INACTIVE_DAYS, -1, "Inactive for 6+ months"),
)


def evaluate_heuristic(meta: ProjectMeta) -> RiskAssessment:
    """Score a project from its metadata alone.

    Args:
        meta: Project metadata.

    Returns:
        RiskAssessment with source Heuristic and a score clamped to [0, 10].
    """
    score = 0
    reasons: list[str] = []
    for rule in HEURISTIC_RULES:
        if rule.applies(meta):
            score += rule.delta
            reasons.append(rule.reason)

    return RiskAssessment.from_score(clamp_score(score), reasons, RiskSource.HEURISTIC)


def merge(heuristic: RiskAssessment, ai: RiskAssessment | None) -> RiskAssessment:
    """Combine a heuristic assessment with an optional AI assessment.

    The combined score is the truncated mean of both scores. Reasons are
    the heuristic reasons followed by AI reasons not already present,
    in first-seen order.

    Args:
        heuristic: Heuristic assessment.
        ai: AI assessment, or None when unavailable.

    Returns:
        ``heuristic`` unchanged when ``ai`` is None, otherwise a Combined
        assessment.
    """
    if ai is None:
        return heuristic

    score = (heuristic.score + ai.score) // 2
    reasons = list(heuristic.reasons)
    for reason in ai.reasons:
        if reason not in reasons:
            reasons.append(reason)

    return RiskAssessment.from_score(score, reasons, RiskSource.COMBINED)
