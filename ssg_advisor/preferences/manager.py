"""
User preference manager: validated profile mutations.

Every derived change is one atomic read-modify-write in the store:

    store.update_preference_profile(user_id, lambda current: <new profile>)

The store guarantees that nothing else writes the same profile between that
read and that save, across threads, store instances and processes sharing a
database file. So concurrent ``update_preferences`` / ``record_usage`` calls
for one user cannot lose each other's changes, while calls for different
users proceed in parallel.

Validation happens before the store is touched; a rejected update leaves
the stored profile exactly as it was.

Usage-count reordering rule
---------------------------
``record_usage(user, ssg)`` increments ``usage_counts[ssg]``, adds ``ssg``
to ``preferred_ssgs`` if it is not there yet, then stable-sorts
``preferred_ssgs`` by usage count, highest first. SSGs with equal counts
keep their previous relative order, so re-sorting an already sorted list is
a no-op.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping
from typing import Any, Union

from pydantic import ValidationError

from ssg_advisor.errors import InvalidPreference
from ssg_advisor.models.preference import (
    PreferenceUpdate,
    UsageRecommendation,
    UserPreferenceProfile,
)
from ssg_advisor.store.base import KnowledgeGraphStore
from ssg_advisor.taxonomy.ssg_taxonomy import SsgId, parse_ssg
from ssg_advisor.utils.time_utils import utcnow

logger = logging.getLogger(__name__)

_KNOWN_SSGS = sorted(s.value for s in SsgId)


class UserPreferenceManager:
    """Reads and mutates preference profiles held in a ``KnowledgeGraphStore``.

    Holds no state of its own, so any number of managers may front the same
    store or database file.
    """

    def __init__(self, store: KnowledgeGraphStore) -> None:
        self.store = store

    # ── Reads ─────────────────────────────────────────────────────────────────

    def get_or_create_profile(self, user_id: str) -> UserPreferenceProfile:
        """Return the user's profile, or the default profile on first access."""
        return self.store.get_preference_profile(_check_user_id(user_id))

    get_profile = get_or_create_profile

    def usage_recommendations(self, user_id: str) -> list[UsageRecommendation]:
        """Rank the SSGs a user has used by ``usage_count × success_rate``.

        Returns:
            One entry per used SSG, highest score first (ties by SSG name).
        """
        profile = self.get_or_create_profile(user_id)
        recs: list[UsageRecommendation] = []
        for ssg, used in profile.usage_counts.items():
            if used <= 0:
                continue
            rate = profile.success_rate(ssg)
            reason = f"Used {used} time(s)"
            if rate >= 0.8:
                reason += f", {rate:.0%} success rate"
            elif rate < 0.5:
                reason += f", only {rate:.0%} success rate"
            recs.append(UsageRecommendation(ssg=ssg, score=round(used * rate, 4), reason=reason))

        recs.sort(key=lambda r: (-r.score, r.ssg.value))
        return recs

    def export_preferences(self, user_id: str) -> str:
        """Serialize the user's profile as camelCase JSON."""
        return self.get_or_create_profile(user_id).model_dump_json(by_alias=True, indent=2)

    # ── Mutations ─────────────────────────────────────────────────────────────

    def update_preferences(
        self,
        user_id: str,
        update: Union[PreferenceUpdate, Mapping[str, Any]],
    ) -> UserPreferenceProfile:
        """Merge a partial update into the user's profile and persist it.

        Args:
            user_id: Profile key.
            update: ``PreferenceUpdate`` or an equivalent mapping
                (snake_case or camelCase keys).

        Returns:
            The saved profile.

        Raises:
            InvalidPreference: Unknown SSG, duplicate SSG, or malformed field.
                Nothing is written.
        """
        user_id = _check_user_id(user_id)
        if not isinstance(update, PreferenceUpdate):
            try:
                update = PreferenceUpdate.model_validate(dict(update))
            except ValidationError as exc:
                raise InvalidPreference(f"Malformed preference update: {exc}") from exc

        changes: dict[str, Any] = update.model_dump(exclude_none=True)
        if update.preferred_ssgs is not None:
            changes["preferred_ssgs"] = validate_ssg_list(update.preferred_ssgs)

        profile = self.store.update_preference_profile(
            user_id, lambda current: _rebuild(current, **changes)
        )

        logger.info(
            "Updated preferences for user=%s fields=%s", user_id, sorted(changes)
        )
        return profile

    def record_usage(self, user_id: str, ssg: Union[SsgId, str], success: bool = True) -> UserPreferenceProfile:
        """Count one use of ``ssg`` and reorder the preferred list by usage.

        Args:
            user_id: Profile key.
            ssg: SSG that was used.
            success: Whether the use succeeded (e.g. the site deployed).

        Returns:
            The saved profile.

        Raises:
            InvalidPreference: If ``ssg`` is not in the catalog.
        """
        user_id = _check_user_id(user_id)
        ssg_id = _require_ssg(ssg)

        def count_use(current: UserPreferenceProfile) -> UserPreferenceProfile:
            usage = dict(current.usage_counts)
            usage[ssg_id] = usage.get(ssg_id, 0) + 1
            successes = dict(current.success_counts)
            if success:
                successes[ssg_id] = successes.get(ssg_id, 0) + 1

            preferred = list(current.preferred_ssgs)
            if ssg_id not in preferred:
                preferred.append(ssg_id)

            return _rebuild(
                current,
                usage_counts=usage,
                success_counts=successes,
                preferred_ssgs=reorder_by_usage(preferred, usage),
            )

        profile = self.store.update_preference_profile(user_id, count_use)
        logger.info(
            "Recorded usage user=%s ssg=%s success=%s count=%d",
            user_id, ssg_id.value, success, profile.usage_counts[ssg_id],
        )
        return profile

    def reset_preferences(self, user_id: str) -> UserPreferenceProfile:
        """Replace the user's profile with a fresh default and persist it."""
        user_id = _check_user_id(user_id)
        profile = UserPreferenceProfile.default(user_id)
        self.store.save_preference_profile(user_id, profile)
        logger.info("Reset preferences for user=%s", user_id)
        return profile

    def import_preferences(self, user_id: str, payload: str) -> UserPreferenceProfile:
        """Replace the user's profile with one exported by ``export_preferences``.

        Raises:
            InvalidPreference: Malformed JSON, failed validation, or a
                ``userId`` that differs from ``user_id``.
        """
        user_id = _check_user_id(user_id)
        try:
            raw = json.loads(payload)
        except json.JSONDecodeError as exc:
            raise InvalidPreference(f"Preference import is not valid JSON: {exc}") from exc
        if not isinstance(raw, dict):
            raise InvalidPreference("Preference import must be a JSON object.")

        imported_id = raw.get("userId", raw.get("user_id"))
        if imported_id != user_id:
            raise InvalidPreference(
                f"User ID mismatch: expected '{user_id}', got '{imported_id}'."
            )

        raw_ssgs = raw.get("preferredSSGs", raw.get("preferred_ssgs", []))
        if not isinstance(raw_ssgs, list):
            raise InvalidPreference("preferredSSGs must be a list.")
        validate_ssg_list(raw_ssgs)

        try:
            profile = UserPreferenceProfile.model_validate(raw)
        except ValidationError as exc:
            raise InvalidPreference(f"Imported profile failed validation: {exc}") from exc
        profile = profile.model_copy(update={"last_updated": utcnow()})

        self.store.save_preference_profile(user_id, profile)
        logger.info("Imported preferences for user=%s", user_id)
        return profile


# ── Public helpers ────────────────────────────────────────────────────────────

def validate_ssg_list(values: Iterable[Union[SsgId, str]]) -> list[SsgId]:
    """Parse a preferred-SSG list, rejecting unknown and duplicate entries.

    Raises:
        InvalidPreference: On the first unknown SSG, or if any SSG repeats.
    """
    parsed: list[SsgId] = [_require_ssg(v) for v in values]
    seen: set[SsgId] = set()
    dupes: set[str] = set()
    for ssg in parsed:
        if ssg in seen:
            dupes.add(ssg.value)
        seen.add(ssg)
    if dupes:
        raise InvalidPreference(f"Duplicate SSG(s) in preferred list: {sorted(dupes)}.")
    return parsed


def reorder_by_usage(preferred: list[SsgId], usage: Mapping[SsgId, int]) -> list[SsgId]:
    """Stable-sort ``preferred`` by usage count, highest first."""
    return sorted(preferred, key=lambda s: -usage.get(s, 0))


# ── Private helpers ───────────────────────────────────────────────────────────

def _require_ssg(value: Union[SsgId, str]) -> SsgId:
    if isinstance(value, SsgId):
        return value
    ssg = parse_ssg(value) if isinstance(value, str) else None
    if ssg is None:
        raise InvalidPreference(f"Unknown SSG '{value}'. Must be one of {_KNOWN_SSGS}.")
    return ssg


def _check_user_id(user_id: str) -> str:
    if not isinstance(user_id, str) or not user_id.strip():
        raise InvalidPreference("user_id must be a non-empty string.")
    return user_id.strip()


def _rebuild(current: UserPreferenceProfile, **changes: Any) -> UserPreferenceProfile:
    """Validate a new profile from ``current`` plus ``changes``, stamped now."""
    data = current.model_dump()
    data.update(changes)
    data["last_updated"] = utcnow()
    try:
        return UserPreferenceProfile.model_validate(data)
    except ValidationError as exc:
        raise InvalidPreference(f"Preference update failed validation: {exc}") from exc
