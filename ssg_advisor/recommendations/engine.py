"""
Recommendation engine: scores every catalog SSG for one analysis and picks
the winner.

Usage flow
----------
1. rank_candidates(record, hints=None)
   -> list[ScoredCandidate]  (every catalog entry, best first)

2. recommend(record, hints=None)
   -> BaseRecommendation     (winner + top alternatives + reasoning)

3. recommend_for_id(store, analysis_id, hints=None)
   -> BaseRecommendation     (resolves the record first; AnalysisNotFound
                              propagates from the store)

Ranking is deterministic: candidates sort by score (rounded to 6 places so
float noise cannot reorder equal scores), then by catalog priority.

Optional ``RecommendationHints`` steer one call. A priority hint adds the
scorer's priority bonus to generators whose strengths include it. An
ecosystem hint replaces the analysis ecosystem for scoring; the analysis must
still carry a recognizable ecosystem of its own.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from ssg_advisor.errors import InvalidAnalysis
from ssg_advisor.models.analysis import AnalysisRecord
from ssg_advisor.models.recommendation import (
    AlternativeSsg,
    BaseRecommendation,
    RecommendationHints,
)
from ssg_advisor.recommendations.catalog import CATALOG, CatalogEntry
from ssg_advisor.recommendations.scorer import (
    ScoreComponents,
    build_reasoning,
    compute_score,
    score_to_confidence,
)
from ssg_advisor.store.base import KnowledgeGraphStore
from ssg_advisor.taxonomy.ssg_taxonomy import Ecosystem, SizeClass

logger = logging.getLogger(__name__)

_NO_HINTS = RecommendationHints()


@dataclass
class ScoredCandidate:
    """One catalog entry scored against one analysis.

    Attributes:
        entry:      Catalog entry.
        components: Score breakdown.
        score:      ``components.total`` rounded to 4 places.
    """

    entry:      CatalogEntry
    components: ScoreComponents
    score:      float

    def to_alternative(self) -> AlternativeSsg:
        return AlternativeSsg(
            ssg=self.entry.ssg,
            score=self.score,
            pros=list(self.entry.pros),
            cons=list(self.entry.cons),
        )


class RecommendationEngine:
    """Stateless heuristic SSG recommender.

    Args:
        catalog: Entries to score; defaults to the built-in ``CATALOG``.
        max_alternatives: Maximum runners-up attached to a recommendation.
    """

    def __init__(
        self,
        catalog: tuple[CatalogEntry, ...] = CATALOG,
        max_alternatives: int = 4,
    ) -> None:
        if not catalog:
            raise ValueError("catalog must contain at least one entry.")
        if max_alternatives < 0:
            raise ValueError(f"max_alternatives must be non-negative, got {max_alternatives}.")
        self.catalog = catalog
        self.max_alternatives = max_alternatives

    def rank_candidates(
        self,
        record: AnalysisRecord,
        hints: Optional[RecommendationHints] = None,
    ) -> list[ScoredCandidate]:
        """Score every catalog entry for ``record``, best first.

        Raises:
            InvalidAnalysis: If the record's ecosystem is missing or unrecognized.
        """
        hints = hints or _NO_HINTS
        detected = _require_ecosystem(record)
        return self._rank(record, hints.ecosystem or detected, record.size_class, hints)

    def recommend(
        self,
        record: AnalysisRecord,
        hints: Optional[RecommendationHints] = None,
    ) -> BaseRecommendation:
        """Pick the best SSG for ``record``.

        Raises:
            InvalidAnalysis: If the record's ecosystem is missing or unrecognized.
        """
        hints = hints or _NO_HINTS
        detected = _require_ecosystem(record)
        ecosystem = hints.ecosystem or detected
        size_class = record.size_class
        ranked = self._rank(record, ecosystem, size_class, hints)

        best = ranked[0]
        reasoning = build_reasoning(
            best.entry, best.components, ecosystem, size_class, record.total_files,
            priority=hints.priority,
        )
        if ecosystem != detected:
            reasoning.insert(
                1, f"Scored as {ecosystem.value} by request (analysis reported {detected.value})"
            )
        alternatives = [c.to_alternative() for c in ranked[1:1 + self.max_alternatives]]

        logger.info(
            "Analysis %s: recommended %s (score=%.4f, ecosystem=%s, size=%s, priority=%s)",
            record.analysis_id, best.entry.ssg.value, best.score,
            ecosystem.value, size_class.value,
            hints.priority.value if hints.priority else None,
        )
        return BaseRecommendation(
            analysis_id=record.analysis_id,
            recommended=best.entry.ssg,
            score=best.score,
            confidence=score_to_confidence(best.score),
            reasoning=reasoning,
            alternatives=alternatives,
            ecosystem=ecosystem,
            size_class=size_class,
        )

    def recommend_for_id(
        self,
        store: KnowledgeGraphStore,
        analysis_id: str,
        hints: Optional[RecommendationHints] = None,
    ) -> BaseRecommendation:
        """Resolve ``analysis_id`` through ``store`` and recommend for it.

        Raises:
            AnalysisNotFound: If the id does not resolve.
            InvalidAnalysis: If the record's ecosystem is missing or unrecognized.
        """
        return self.recommend(store.get_analysis(analysis_id), hints)

    def _rank(
        self,
        record: AnalysisRecord,
        ecosystem: Ecosystem,
        size_class: SizeClass,
        hints: RecommendationHints,
    ) -> list[ScoredCandidate]:
        scored: list[ScoredCandidate] = []
        for entry in self.catalog:
            components = compute_score(
                entry, ecosystem, record.languages, size_class, priority=hints.priority
            )
            candidate = ScoredCandidate(
                entry=entry, components=components, score=round(components.total, 4)
            )
            logger.debug(
                "Analysis %s: %s eco=%.2f lang=%.0f size=%.2f pop=%.2f prio=%.0f -> %.4f",
                record.analysis_id, entry.ssg.value,
                components.ecosystem_match, components.language_match,
                components.size_fit, components.popularity,
                components.priority_match, candidate.score,
            )
            scored.append(candidate)

        scored.sort(key=lambda c: (-round(c.components.total, 6), c.entry.priority))
        return scored


def _require_ecosystem(record: AnalysisRecord) -> Ecosystem:
    ecosystem: Optional[Ecosystem] = record.resolved_ecosystem
    if ecosystem is None:
        if record.ecosystem is None or not record.ecosystem.strip():
            raise InvalidAnalysis(
                f"Analysis '{record.analysis_id}' has no primary ecosystem."
            )
        raise InvalidAnalysis(
            f"Analysis '{record.analysis_id}' has unrecognized ecosystem "
            f"'{record.ecosystem}'. Must be one of {sorted(e.value for e in Ecosystem)}."
        )
    return ecosystem
