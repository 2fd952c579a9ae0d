"""Risk scoring for discovered projects.

Public API:
- RiskClass, RiskSource, RiskAssessment, ProjectRecord: assessment models
- evaluate_heuristic, merge, classify: scoring rules
- GeminiClient, parse_ai_reply, AiAssessmentError: AI collaborator

The cache-aware RiskAssessor lives in devclean.risk.assessor.
"""

from devclean.risk.ai import (
    AiAssessmentError,
    GeminiClient,
    ParsedReply,
    ReplyParseError,
    RiskAdvisor,
    parse_ai_reply,
)
from devclean.risk.engine import classify, evaluate_heuristic, is_burner_name, merge
from devclean.risk.models import ProjectRecord, RiskAssessment, RiskClass, RiskSource

__all__ = [
    "AiAssessmentError",
    "GeminiClient",
    "ParsedReply",
    "ProjectRecord",
    "ReplyParseError",
    "RiskAdvisor",
    "RiskAssessment",
    "RiskClass",
    "RiskSource",
    "classify",
    "evaluate_heuristic",
    "is_burner_name",
    "merge",
    "parse_ai_reply",
]
