"""Unit tests for the risk assessor.

Tests the heuristic / cache / AI orchestration and its statistics.
"""

import hashlib
from collections.abc import Callable
from pathlib import Path

from devclean.cache.store import AssessmentCache
from devclean.risk.ai import AiAssessmentError
from devclean.risk.assessor import AiStats, RiskAssessor
from devclean.risk.models import RiskAssessment, RiskSource
from devclean.scanner.metadata import extract_project_meta
from devclean.scanner.models import ProjectMeta


class FakeAdvisor:
    """Advisor returning a fixed assessment (or failing)."""

    def __init__(self, score: int = 9, fail: bool = False) -> None:
        self.score = score
        self.fail = fail
        self.calls: list[str] = []

    def assess(self, meta: ProjectMeta) -> RiskAssessment:
        self.calls.append(meta.id)
        if self.fail:
            raise AiAssessmentError("quota exceeded")
        return RiskAssessment.from_score(self.score, ["AI reason"], RiskSource.AI)


def _project(tmp_path: Path, make_project: Callable[..., Path]) -> ProjectMeta:
    project = make_project(tmp_path, "shop", git=True)
    meta = extract_project_meta(project / "package.json")
    assert meta is not None
    return meta


def _manifest_hash(meta: ProjectMeta) -> str:
    return hashlib.sha256(Path(meta.manifest_path).read_bytes()).hexdigest()


class TestAiDisabled:
    """Tests with AI disabled."""

    def test_heuristic_only(self, tmp_path: Path, make_project: Callable[..., Path]) -> None:
        """Without AI, the advisor is never consulted."""
        meta = _project(tmp_path, make_project)
        advisor = FakeAdvisor()

        record = RiskAssessor(ai_enabled=False, advisor=advisor).assess(meta)

        assert record.risk.source == RiskSource.HEURISTIC
        assert advisor.calls == []
        assert RiskAssessor().stats == AiStats()


class TestAiEnabled:
    """Tests with AI enabled."""

    def test_cache_miss_calls_ai_and_stores(
        self, tmp_path: Path, make_project: Callable[..., Path]
    ) -> None:
        """A miss asks the AI, merges, and caches the answer."""
        meta = _project(tmp_path, make_project)
        advisor = FakeAdvisor(score=9)
        cache = AssessmentCache()
        assessor = RiskAssessor(ai_enabled=True, advisor=advisor, cache=cache)

        record = assessor.assess(meta)

        # heuristic: git +4, recent +2 = 6; merged with 9 -> 7
        assert record.risk.score == 7
        assert record.risk.source == RiskSource.COMBINED
        assert record.risk.reasons[-1] == "AI reason"
        assert assessor.stats == AiStats(cache_hits=0, cache_misses=1, calls=1, failures=0)
        cached = cache.lookup(meta.id, _manifest_hash(meta))
        assert cached is not None
        assert cached.score == 9

    def test_cache_hit_skips_ai(self, tmp_path: Path, make_project: Callable[..., Path]) -> None:
        """A hash-matching cache entry is used without calling the AI."""
        meta = _project(tmp_path, make_project)
        cache = AssessmentCache()
        cache.store(
            meta.id,
            _manifest_hash(meta),
            RiskAssessment.from_score(2, ["cached"], RiskSource.AI),
        )
        advisor = FakeAdvisor()
        assessor = RiskAssessor(ai_enabled=True, advisor=advisor, cache=cache)

        record = assessor.assess(meta)

        assert advisor.calls == []
        assert record.risk.score == 4
        assert "cached" in record.risk.reasons
        assert assessor.stats.cache_hits == 1
        assert assessor.stats.cache_misses == 0

    def test_changed_manifest_invalidates_cache(
        self, tmp_path: Path, make_project: Callable[..., Path]
    ) -> None:
        """A stale hash counts as a miss and the AI is asked again."""
        meta = _project(tmp_path, make_project)
        cache = AssessmentCache()
        cache.store(meta.id, "0" * 64, RiskAssessment.from_score(2, [], RiskSource.AI))
        advisor = FakeAdvisor()

        RiskAssessor(ai_enabled=True, advisor=advisor, cache=cache).assess(meta)

        assert advisor.calls == [meta.id]

    def test_ai_failure_falls_back_to_heuristic(
        self, tmp_path: Path, make_project: Callable[..., Path]
    ) -> None:
        """AI failures are counted and the heuristic is used."""
        meta = _project(tmp_path, make_project)
        assessor = RiskAssessor(ai_enabled=True, advisor=FakeAdvisor(fail=True))

        record = assessor.assess(meta)

        assert record.risk.source == RiskSource.HEURISTIC
        assert record.risk.score == 6
        assert assessor.stats == AiStats(cache_hits=0, cache_misses=1, calls=1, failures=1)
        assert len(assessor.cache) == 0

    def test_no_advisor_counts_miss_only(
        self, tmp_path: Path, make_project: Callable[..., Path]
    ) -> None:
        """Without an advisor a miss falls back to the heuristic."""
        meta = _project(tmp_path, make_project)
        assessor = RiskAssessor(ai_enabled=True)

        record = assessor.assess(meta)

        assert record.risk.source == RiskSource.HEURISTIC
        assert assessor.stats == AiStats(cache_misses=1)

    def test_cache_entries_never_use_ai(self) -> None:
        """Cache directories are scored by the heuristic only."""
        meta = ProjectMeta(id="/c/npm", path="/c/npm", name="npm cache - npm", is_cache=True)
        advisor = FakeAdvisor()
        assessor = RiskAssessor(ai_enabled=True, advisor=advisor)

        record = assessor.assess(meta)

        assert record.risk.source == RiskSource.HEURISTIC
        assert advisor.calls == []
        assert assessor.stats == AiStats()

    def test_unreadable_manifest_still_asks_ai(self, tmp_path: Path) -> None:
        """Without a manifest hash the AI is asked but nothing is cached."""
        meta = ProjectMeta(
            id=str(tmp_path / "gone"),
            path=str(tmp_path / "gone"),
            name="gone",
            manifest_path=str(tmp_path / "gone" / "package.json"),
        )
        advisor = FakeAdvisor()
        assessor = RiskAssessor(ai_enabled=True, advisor=advisor)

        record = assessor.assess(meta)

        assert advisor.calls == [meta.id]
        assert record.risk.source == RiskSource.COMBINED
        assert len(assessor.cache) == 0

    def test_stats_to_dict(self) -> None:
        """Stats serialize with camelCase keys."""
        stats = AiStats(cache_hits=1, cache_misses=2, calls=3, failures=4)

        assert stats.to_dict() == {"cacheHits": 1, "cacheMisses": 2, "calls": 3, "failures": 4}
