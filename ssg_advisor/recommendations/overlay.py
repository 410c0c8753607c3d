"""
Preference overlay: combines a ``BaseRecommendation`` with a user's
``UserPreferenceProfile`` into the ``FinalRecommendation`` callers see.

Decision table
--------------
    auto_apply  preferred   base vs preferred[0]   result
    ----------  ---------   --------------------   ------------------------------------
    False       any         n/a                    base as-is, applied_preference=False
    True        empty       n/a                    base as-is, applied_preference=False
    True        non-empty   equal                  keep base; prepend "Matches your
                                                   preferred SSG" note; confidence += δ
    True        non-empty   different              recommended = preferred[0]; prepend
                                                   "Switched to X based on usage
                                                   history" note; confidence += δ

Confidence is capped at 1.0 and rounded to 4 places. On a switch the
heuristic winner moves to the front of ``alternatives`` and the preferred
SSG is removed from them; the list never grows past the length the engine
produced, so ``max_alternatives`` still holds (with ``max_alternatives = 0``
the displaced winner is dropped too).

``apply_preferences`` is pure: same inputs, same output; nothing is read
from or written to a store.
"""

from __future__ import annotations

from collections.abc import Iterable

from ssg_advisor.models.preference import UserPreferenceProfile
from ssg_advisor.models.recommendation import (
    AlternativeSsg,
    BaseRecommendation,
    FinalRecommendation,
)
from ssg_advisor.recommendations.catalog import get_entry

DEFAULT_CONFIDENCE_BOOST = 0.05


def pass_through(
    base: BaseRecommendation,
    diagnostics: Iterable[str] = (),
) -> FinalRecommendation:
    """Return ``base`` unchanged as a ``FinalRecommendation``."""
    return FinalRecommendation(
        recommended=base.recommended,
        confidence=base.confidence,
        reasoning=list(base.reasoning),
        applied_preference=False,
        alternatives=list(base.alternatives),
        diagnostics=list(diagnostics),
    )


def apply_preferences(
    base: BaseRecommendation,
    profile: UserPreferenceProfile,
    confidence_boost: float = DEFAULT_CONFIDENCE_BOOST,
) -> FinalRecommendation:
    """Apply the decision table above.

    Args:
        base:             Heuristic recommendation.
        profile:          The caller's preference profile.
        confidence_boost: δ added to confidence when a preference applies.

    Returns:
        The final recommendation.
    """
    if not profile.auto_apply_preferences or not profile.preferred_ssgs:
        return pass_through(base)

    preferred = profile.preferred_ssgs[0]
    confidence = round(min(1.0, base.confidence + confidence_boost), 4)

    if preferred == base.recommended:
        return FinalRecommendation(
            recommended=base.recommended,
            confidence=confidence,
            reasoning=[f"Matches your preferred SSG ({preferred.value})", *base.reasoning],
            applied_preference=True,
            alternatives=list(base.alternatives),
        )

    entry = get_entry(base.recommended)
    displaced = AlternativeSsg(
        ssg=base.recommended,
        score=base.score,
        pros=list(entry.pros),
        cons=list(entry.cons),
    )
    # The engine already cut base.alternatives to its limit; keep that length.
    alternatives = [displaced, *(a for a in base.alternatives if a.ssg != preferred)]
    alternatives = alternatives[:len(base.alternatives)]

    return FinalRecommendation(
        recommended=preferred,
        confidence=confidence,
        reasoning=[
            f"Switched to {preferred.value} based on usage history "
            f"(heuristic choice was {base.recommended.value})",
            *base.reasoning,
        ],
        applied_preference=True,
        alternatives=alternatives,
    )
