"""
Recommendation output models.

``BaseRecommendation`` is the heuristic engine's answer for one analysis.
``FinalRecommendation`` is what callers receive after the user's preference
profile has been overlaid on it. ``RecommendationHints`` carries the optional
per-call priority and ecosystem a caller may pass alongside an analysis id.

All three are frozen and ephemeral: they live for one call and are never
persisted by the core.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ssg_advisor.taxonomy.ssg_taxonomy import (
    Ecosystem,
    ProjectPriority,
    SizeClass,
    SsgId,
    parse_ecosystem,
    parse_priority,
)


# Ecosystem hint values that mean "no override".
_ANY_ECOSYSTEM = {"", "any"}


class RecommendationHints(BaseModel):
    """Optional per-call steering for the heuristic engine.

    Attributes:
        priority: Favour generators whose catalog strengths include it.
        ecosystem: Score as if the analysis reported this ecosystem.
            ``None`` (or ``"any"`` / blank on input) keeps the analysis value.
    """

    model_config = ConfigDict(frozen=True)

    priority: Optional[ProjectPriority] = None
    ecosystem: Optional[Ecosystem] = None

    @field_validator("priority", mode="before")
    @classmethod
    def parse_priority_hint(cls, v: Any) -> Any:
        if v is None or isinstance(v, ProjectPriority):
            return v
        if isinstance(v, str) and not v.strip():
            return None
        parsed = parse_priority(v) if isinstance(v, str) else None
        if parsed is None:
            raise ValueError(
                f"Unknown priority '{v}'. Must be one of {[p.value for p in ProjectPriority]}."
            )
        return parsed

    @field_validator("ecosystem", mode="before")
    @classmethod
    def parse_ecosystem_hint(cls, v: Any) -> Any:
        if v is None or isinstance(v, Ecosystem):
            return v
        if isinstance(v, str) and v.strip().lower() in _ANY_ECOSYSTEM:
            return None
        parsed = parse_ecosystem(v) if isinstance(v, str) else None
        if parsed is None:
            raise ValueError(
                f"Unknown ecosystem '{v}'. Must be 'any' or one of "
                f"{[e.value for e in Ecosystem]}."
            )
        return parsed

    @property
    def is_empty(self) -> bool:
        return self.priority is None and self.ecosystem is None


class AlternativeSsg(BaseModel):
    """A runner-up SSG with its heuristic score.

    Attributes:
        ssg: Candidate SSG.
        score: Raw heuristic score (0–1).
        pros: Short strengths from the catalog.
        cons: Short weaknesses from the catalog.
    """

    model_config = ConfigDict(frozen=True)

    ssg: SsgId
    score: float
    pros: list[str] = Field(default_factory=list)
    cons: list[str] = Field(default_factory=list)


class BaseRecommendation(BaseModel):
    """Heuristic recommendation before any user preference is applied.

    Attributes:
        analysis_id: The analysis this recommendation was derived from.
        recommended: Highest-scoring SSG.
        score: Raw score of ``recommended``.
        confidence: ``score`` normalized into [0, 1].
        reasoning: Ordered explanation strings; the first names the
            ecosystem/size fit and the recommended SSG.
        alternatives: Remaining candidates, best first.
        ecosystem: Ecosystem the analysis resolved to.
        size_class: Size bucket the analysis resolved to.
    """

    model_config = ConfigDict(frozen=True)

    analysis_id: str
    recommended: SsgId
    score: float
    confidence: float
    reasoning: list[str]
    alternatives: list[AlternativeSsg] = Field(default_factory=list)
    ecosystem: Ecosystem
    size_class: SizeClass

    @field_validator("confidence")
    @classmethod
    def validate_confidence(cls, v: float) -> float:
        if not 0.0 <= v <= 1.0:
            raise ValueError(f"confidence must be in [0.0, 1.0], got {v}.")
        return v

    @field_validator("reasoning")
    @classmethod
    def validate_reasoning_not_empty(cls, v: list[str]) -> list[str]:
        if not v:
            raise ValueError("reasoning must contain at least one entry.")
        return v


class FinalRecommendation(BaseModel):
    """Recommendation returned to callers.

    Attributes:
        recommended: Final SSG (the user's first preference when auto-apply
            overrides the heuristic).
        confidence: Adjusted confidence in [0, 1].
        reasoning: Explanation strings; a preference note comes first when
            ``applied_preference`` is ``True``.
        applied_preference: Whether the user's profile changed or confirmed
            the heuristic result.
        alternatives: Other candidates, best first.
        diagnostics: Non-fatal notes, e.g. why personalization was skipped.
    """

    model_config = ConfigDict(frozen=True)

    recommended: SsgId
    confidence: float
    reasoning: list[str]
    applied_preference: bool = False
    alternatives: list[AlternativeSsg] = Field(default_factory=list)
    diagnostics: list[str] = Field(default_factory=list)

    @field_validator("confidence")
    @classmethod
    def validate_confidence(cls, v: float) -> float:
        if not 0.0 <= v <= 1.0:
            raise ValueError(f"confidence must be in [0.0, 1.0], got {v}.")
        return v

    @field_validator("reasoning")
    @classmethod
    def validate_reasoning_not_empty(cls, v: list[str]) -> list[str]:
        if not v:
            raise ValueError("reasoning must contain at least one entry.")
        return v

    def to_record(self) -> dict[str, Any]:
        """Structured record for outward-facing tooling (camelCase keys)."""
        return {
            "recommended":       self.recommended.value,
            "confidence":        self.confidence,
            "reasoning":         list(self.reasoning),
            "appliedPreference": self.applied_preference,
            "alternatives": [
                {"name": alt.ssg.value, "score": alt.score, "pros": alt.pros, "cons": alt.cons}
                for alt in self.alternatives
            ],
            "diagnostics":       list(self.diagnostics),
        }
