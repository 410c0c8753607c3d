"""
User preference models.

``UserPreferenceProfile`` is the durable per-user record kept in the
knowledge graph store. It is frozen; the preference manager produces a new
profile for every mutation and saves it as an atomic full replace.

``PreferenceUpdate`` is a partial update: any field left as ``None`` keeps
the stored value. SSG names arrive as raw strings and are validated by the
preference manager, which raises ``InvalidPreference`` instead of a
pydantic error.

Both models serialize with camelCase aliases (``preferredSSGs``,
``autoApplyPreferences``) for export/import, and accept either spelling.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from ssg_advisor.taxonomy.ssg_taxonomy import SsgId
from ssg_advisor.utils.time_utils import utcnow

DocumentationStyle = Literal["minimal", "comprehensive", "tutorial-heavy"]
ExpertiseLevel = Literal["beginner", "intermediate", "advanced"]

DEFAULT_USER_ID = "default"


class UserPreferenceProfile(BaseModel):
    """Preference history for one user.

    Attributes:
        user_id: Unique user key.
        preferred_ssgs: Ranked preferred SSGs, most preferred first. Unique.
        auto_apply_preferences: When ``True`` and ``preferred_ssgs`` is
            non-empty, the first preferred SSG overrides the heuristic choice.
        usage_counts: Times each SSG was used by this user.
        success_counts: Times each SSG was used successfully (deploy ok).
        documentation_style: Preferred documentation depth.
        expertise_level: Self-reported expertise.
        preferred_technologies: Free-form technology names.
        last_updated: UTC datetime of the last mutation.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    user_id: str
    preferred_ssgs: list[SsgId] = Field(default_factory=list, alias="preferredSSGs")
    auto_apply_preferences: bool = False
    usage_counts: dict[SsgId, int] = Field(default_factory=dict)
    success_counts: dict[SsgId, int] = Field(default_factory=dict)
    documentation_style: DocumentationStyle = "comprehensive"
    expertise_level: ExpertiseLevel = "intermediate"
    preferred_technologies: list[str] = Field(default_factory=list)
    last_updated: datetime = Field(default_factory=utcnow)

    @field_validator("user_id")
    @classmethod
    def validate_user_id(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("user_id must be a non-empty string.")
        return v.strip()

    @field_validator("preferred_ssgs")
    @classmethod
    def validate_unique_ssgs(cls, v: list[SsgId]) -> list[SsgId]:
        if len(set(v)) != len(v):
            raise ValueError(f"preferred_ssgs must not contain duplicates, got {v}.")
        return v

    @field_validator("usage_counts", "success_counts")
    @classmethod
    def validate_counts(cls, v: dict[SsgId, int]) -> dict[SsgId, int]:
        for ssg, count in v.items():
            if count < 0:
                raise ValueError(f"Count for '{ssg}' must be non-negative, got {count}.")
        return v

    @classmethod
    def default(cls, user_id: str = DEFAULT_USER_ID) -> "UserPreferenceProfile":
        """An empty profile: no preferred SSGs, auto-apply off."""
        return cls(user_id=user_id)

    def success_rate(self, ssg: SsgId) -> float:
        """Fraction of recorded uses of ``ssg`` that succeeded (0.0 if unused)."""
        used = self.usage_counts.get(ssg, 0)
        if used == 0:
            return 0.0
        return self.success_counts.get(ssg, 0) / used


class PreferenceUpdate(BaseModel):
    """Partial profile update. ``None`` means "leave unchanged"."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )

    preferred_ssgs: Optional[list[str]] = Field(default=None, alias="preferredSSGs")
    auto_apply_preferences: Optional[bool] = None
    documentation_style: Optional[DocumentationStyle] = None
    expertise_level: Optional[ExpertiseLevel] = None
    preferred_technologies: Optional[list[str]] = None

    def is_empty(self) -> bool:
        return not self.model_dump(exclude_none=True)


class UsageRecommendation(BaseModel):
    """An SSG ranked from a user's usage history.

    Attributes:
        ssg: The SSG.
        score: ``usage_count × success_rate``.
        reason: Human-readable summary, e.g. ``"Used 3 time(s), 100% success rate"``.
    """

    model_config = ConfigDict(frozen=True)

    ssg: SsgId
    score: float
    reason: str
