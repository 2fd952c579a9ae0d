"""Per-project risk assessment with optional AI consultation.

Every project gets a heuristic assessment. When AI is enabled, projects
with a manifest are also looked up in the assessment cache by manifest
hash; on a miss the AI collaborator is asked and its answer cached.
AI failures never abort the scan: the heuristic result is used instead.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from devclean.cache.store import AssessmentCache, hash_file
from devclean.risk.ai import AiAssessmentError, RiskAdvisor
from devclean.risk.engine import evaluate_heuristic, merge
from devclean.risk.models import ProjectRecord
from devclean.scanner.models import ProjectMeta

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class AiStats:
    """Counters describing AI usage during one scan.

    Attributes:
        cache_hits: Projects answered from the assessment cache.
        cache_misses: Projects with no usable cache entry.
        calls: Requests sent to the AI collaborator.
        failures: Requests that failed and fell back to the heuristic.
    """

    cache_hits: int = 0
    cache_misses: int = 0
    calls: int = 0
    failures: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "cacheHits": self.cache_hits,
            "cacheMisses": self.cache_misses,
            "calls": self.calls,
            "failures": self.failures,
        }


class RiskAssessor:
    """Assesses projects, consulting the cache and AI when enabled.

    Args:
        ai_enabled: Whether to consult the cache and AI at all.
        advisor: AI collaborator. With AI enabled but no advisor, cache
            hits are still used and misses fall back to the heuristic.
        cache: Assessment cache to read and update.
    """

    def __init__(
        self,
        *,
        ai_enabled: bool = False,
        advisor: RiskAdvisor | None = None,
        cache: AssessmentCache | None = None,
    ) -> None:
        self._ai_enabled = ai_enabled
        self._advisor = advisor
        self._cache = cache if cache is not None else AssessmentCache()
        self.stats = AiStats()

    @property
    def cache(self) -> AssessmentCache:
        return self._cache

    def assess(self, meta: ProjectMeta) -> ProjectRecord:
        """Produce the final record for one project."""
        heuristic = evaluate_heuristic(meta)
        if not self._ai_enabled or meta.is_cache:
            return ProjectRecord(meta=meta, risk=heuristic)

        content_hash = hash_file(Path(meta.manifest_path)) if meta.manifest_path else None

        if content_hash is not None:
            cached = self._cache.lookup(meta.id, content_hash)
            if cached is not None:
                self.stats.cache_hits += 1
                return ProjectRecord(meta=meta, risk=merge(heuristic, cached))

        self.stats.cache_misses += 1
        if self._advisor is None:
            return ProjectRecord(meta=meta, risk=heuristic)

        self.stats.calls += 1
        try:
            ai_assessment = self._advisor.assess(meta)
        except AiAssessmentError as e:
            self.stats.failures += 1
            logger.warning("AI assessment failed for %s, using heuristic: %s", meta.path, e)
            return ProjectRecord(meta=meta, risk=heuristic)

        if content_hash is not None:
            self._cache.store(meta.id, content_hash, ai_assessment)
        return ProjectRecord(meta=meta, risk=merge(heuristic, ai_assessment))

    def assess_all(self, projects: Iterable[ProjectMeta]) -> list[ProjectRecord]:
        """Assess projects in order."""
        return [self.assess(meta) for meta in projects]
