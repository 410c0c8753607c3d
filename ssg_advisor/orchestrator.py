"""
Recommendation orchestrator: the single entry point outward-facing tooling
calls.

Each ``recommend(analysis_id, user_id, hints)`` call is one sequential pass:

    1. resolve the AnalysisRecord      (store; AnalysisNotFound propagates)
    2. score the catalog               (engine, steered by optional hints;
                                        InvalidAnalysis propagates)
    3. resolve the caller's profile    (manager; StoreError degrades)
    4. overlay preferences             (pure)

When no ``user_id`` is given (``None`` or blank) the fixed default profile
(empty list, auto-apply off) is used, so the heuristic result passes through.

If the store fails while the profile is being read, the heuristic result is
still returned, with ``applied_preference=False`` and a diagnostic note.
A store failure while reading the analysis is not degraded: without the
analysis there is nothing to return.

Usage::

    from ssg_advisor.config import load_config
    from ssg_advisor.orchestrator import build_orchestrator

    orchestrator = build_orchestrator(load_config())
    final = orchestrator.recommend("abc-123", user_id="alice")
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Optional, Union

from ssg_advisor.errors import InvalidPreference, StoreError
from ssg_advisor.models.preference import PreferenceUpdate, UserPreferenceProfile
from ssg_advisor.models.recommendation import FinalRecommendation, RecommendationHints
from ssg_advisor.preferences.manager import UserPreferenceManager
from ssg_advisor.recommendations.engine import RecommendationEngine
from ssg_advisor.recommendations.overlay import (
    DEFAULT_CONFIDENCE_BOOST,
    apply_preferences,
    pass_through,
)
from ssg_advisor.store.base import KnowledgeGraphStore
from ssg_advisor.store.memory import InMemoryKnowledgeGraphStore
from ssg_advisor.store.sqlite_store import SQLiteKnowledgeGraphStore

if TYPE_CHECKING:
    from ssg_advisor.config import AppConfig

logger = logging.getLogger(__name__)


class RecommendationOrchestrator:
    """Wires store, preference manager, engine and overlay together.

    Args:
        store: Knowledge graph store holding analyses and profiles.
        preference_manager: Manager over ``store``; built if omitted.
        engine: Heuristic engine; default catalog if omitted.
        confidence_boost: δ added when a preference applies.
    """

    def __init__(
        self,
        store: KnowledgeGraphStore,
        preference_manager: Optional[UserPreferenceManager] = None,
        engine: Optional[RecommendationEngine] = None,
        confidence_boost: float = DEFAULT_CONFIDENCE_BOOST,
    ) -> None:
        self.store = store
        self.preferences = preference_manager or UserPreferenceManager(store)
        self.engine = engine or RecommendationEngine()
        self.confidence_boost = confidence_boost

    def recommend(
        self,
        analysis_id: str,
        user_id: Optional[str] = None,
        hints: Optional[RecommendationHints] = None,
    ) -> FinalRecommendation:
        """Recommend an SSG for a stored analysis, personalized for ``user_id``.

        ``hints`` steer the heuristic ranking only; an auto-applied
        preference still overrides the hinted winner.

        Raises:
            AnalysisNotFound: If ``analysis_id`` does not resolve.
            InvalidAnalysis: If the analysis has no recognizable ecosystem.
            StoreError: If the store fails while reading the analysis.
        """
        base = self.engine.recommend_for_id(self.store, analysis_id, hints)

        if user_id is not None and not user_id.strip():
            user_id = None

        if user_id is None:
            profile = UserPreferenceProfile.default()
        else:
            try:
                profile = self.preferences.get_or_create_profile(user_id)
            except (StoreError, InvalidPreference) as exc:
                logger.warning(
                    "Preference lookup failed for user=%s; returning heuristic result: %s",
                    user_id, exc,
                )
                return pass_through(
                    base, diagnostics=[f"Preferences unavailable for user '{user_id}': {exc}"]
                )

        final = apply_preferences(base, profile, confidence_boost=self.confidence_boost)
        logger.info(
            "Recommendation analysis=%s user=%s -> %s (confidence=%.4f, applied=%s)",
            analysis_id, user_id, final.recommended.value,
            final.confidence, final.applied_preference,
        )
        return final

    def update_preferences(
        self,
        user_id: str,
        update: Union[PreferenceUpdate, Mapping[str, Any]],
    ) -> UserPreferenceProfile:
        return self.preferences.update_preferences(user_id, update)

    def get_profile(self, user_id: str) -> UserPreferenceProfile:
        return self.preferences.get_profile(user_id)


def build_store(config: "AppConfig") -> KnowledgeGraphStore:
    """Create the store backend named by ``config.database.backend``."""
    db = config.database
    if db.backend == "memory":
        return InMemoryKnowledgeGraphStore()
    return SQLiteKnowledgeGraphStore(
        db.db_path,
        wal_mode=db.wal_mode,
        busy_timeout_ms=db.busy_timeout_ms,
    )


def build_orchestrator(
    config: "AppConfig",
    store: Optional[KnowledgeGraphStore] = None,
) -> RecommendationOrchestrator:
    """Build a fully wired orchestrator from ``AppConfig``.

    Args:
        config: Application config.
        store: Pre-built store; created from ``config.database`` if omitted.
    """
    store = store or build_store(config)
    return RecommendationOrchestrator(
        store=store,
        preference_manager=UserPreferenceManager(store),
        engine=RecommendationEngine(max_alternatives=config.recommendation.max_alternatives),
        confidence_boost=config.recommendation.confidence_boost,
    )
