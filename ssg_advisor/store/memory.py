"""
In-memory knowledge graph store.

Useful for tests and for one-shot CLI runs with ``backend = "memory"``.
Nothing survives the process.

``_lock`` guards the two dicts and is held only for one lookup or one
replace. Profile writes additionally run inside that user's critical section
in ``profile_locks``, so an ``update_preference_profile()`` read-modify-write
cannot interleave with another write to the same profile, while different
users never wait on each other.

Stored values are deep copies, so a caller mutating a returned profile's
lists never changes what is stored.
"""

from __future__ import annotations

import logging
import threading

from ssg_advisor.errors import AnalysisNotFound
from ssg_advisor.models.analysis import AnalysisRecord
from ssg_advisor.models.preference import UserPreferenceProfile
from ssg_advisor.store.base import (
    KnowledgeGraphStore,
    ProfileMutation,
    check_mutated_profile,
    check_profile_key,
)
from ssg_advisor.store.locks import KeyedLockRegistry

logger = logging.getLogger(__name__)


class InMemoryKnowledgeGraphStore(KnowledgeGraphStore):
    """Dict-backed ``KnowledgeGraphStore``."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._analyses: dict[str, AnalysisRecord] = {}
        self._profiles: dict[str, UserPreferenceProfile] = {}
        self.profile_locks = KeyedLockRegistry()

    def upsert_analysis(self, record: AnalysisRecord) -> str:
        with self._lock:
            self._analyses[record.analysis_id] = record.model_copy(deep=True)
        logger.debug("Stored analysis %s", record.analysis_id)
        return record.analysis_id

    def get_analysis(self, analysis_id: str) -> AnalysisRecord:
        with self._lock:
            record = self._analyses.get(analysis_id)
        if record is None:
            raise AnalysisNotFound(analysis_id)
        return record.model_copy(deep=True)

    def get_preference_profile(self, user_id: str) -> UserPreferenceProfile:
        with self._lock:
            profile = self._profiles.get(user_id)
        if profile is None:
            return UserPreferenceProfile.default(user_id)
        return profile.model_copy(deep=True)

    def save_preference_profile(self, user_id: str, profile: UserPreferenceProfile) -> None:
        check_profile_key(user_id, profile)
        with self.profile_locks.hold(user_id):
            self._put_profile(user_id, profile)
        logger.debug("Saved preference profile for user=%s", user_id)

    def update_preference_profile(
        self, user_id: str, mutate: ProfileMutation
    ) -> UserPreferenceProfile:
        with self.profile_locks.hold(user_id):
            updated = check_mutated_profile(user_id, mutate(self.get_preference_profile(user_id)))
            self._put_profile(user_id, updated)
        logger.debug("Updated preference profile for user=%s", user_id)
        return updated.model_copy(deep=True)

    def list_analysis_ids(self) -> list[str]:
        with self._lock:
            return sorted(self._analyses)

    def list_user_ids(self) -> list[str]:
        with self._lock:
            return sorted(self._profiles)

    def _put_profile(self, user_id: str, profile: UserPreferenceProfile) -> None:
        with self._lock:
            self._profiles[user_id] = profile.model_copy(deep=True)
