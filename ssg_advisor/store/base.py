"""
Abstract contract for the knowledge graph store.

The store is a durable key-value contract with two key spaces:
  - analyses, keyed by ``analysis_id``
  - preference profiles, keyed by ``user_id``

Every operation touches exactly one key and the store offers no cross-key
transactions. A profile save is an atomic full replace.
``update_preference_profile(user_id, mutate)`` is an atomic
read-modify-write: no other write to the same profile can land between its
read and its save, even from another store instance over the same backing
data. The preference manager routes every derived change through it.

Implementations must:
  - raise ``AnalysisNotFound`` from ``get_analysis()`` for an unknown id,
  - return ``UserPreferenceProfile.default(user_id)`` from
    ``get_preference_profile()`` for an unknown user (never raise for that),
  - raise ``StoreError`` for any other backend fault,
  - never retry.

Usage::

    class MyStore(KnowledgeGraphStore):
        def upsert_analysis(self, record): ...
        ...
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable

from ssg_advisor.errors import InvalidPreference
from ssg_advisor.models.analysis import AnalysisRecord
from ssg_advisor.models.preference import UserPreferenceProfile

ProfileMutation = Callable[[UserPreferenceProfile], UserPreferenceProfile]


class KnowledgeGraphStore(ABC):
    """Keyed storage for analyses and preference profiles."""

    @abstractmethod
    def upsert_analysis(self, record: AnalysisRecord) -> str:
        """Store ``record`` under its ``analysis_id`` and return that id."""
        ...

    @abstractmethod
    def get_analysis(self, analysis_id: str) -> AnalysisRecord:
        """Return the stored analysis.

        Raises:
            AnalysisNotFound: If no analysis has this id.
            StoreError: On backend failure.
        """
        ...

    @abstractmethod
    def get_preference_profile(self, user_id: str) -> UserPreferenceProfile:
        """Return the stored profile, or a default profile if none exists.

        Raises:
            StoreError: On backend failure (never for a missing key).
        """
        ...

    @abstractmethod
    def save_preference_profile(self, user_id: str, profile: UserPreferenceProfile) -> None:
        """Atomically replace the stored profile for ``user_id``.

        Raises:
            ValueError: If ``profile.user_id`` does not match ``user_id``.
            StoreError: On backend failure.
        """
        ...

    @abstractmethod
    def update_preference_profile(
        self, user_id: str, mutate: ProfileMutation
    ) -> UserPreferenceProfile:
        """Atomically replace the profile with ``mutate(current)``.

        ``current`` is the stored profile, or the default one for a new user.
        If ``mutate`` raises, nothing is written and the exception propagates.

        Returns:
            The saved profile.

        Raises:
            InvalidPreference: If the mutated profile belongs to another user.
            StoreError: On backend failure.
        """
        ...

    @abstractmethod
    def list_analysis_ids(self) -> list[str]:
        """Return every stored analysis id."""
        ...

    @abstractmethod
    def list_user_ids(self) -> list[str]:
        """Return every user id with a stored profile."""
        ...


def check_profile_key(user_id: str, profile: UserPreferenceProfile) -> None:
    """Reject a save whose key and profile disagree."""
    if profile.user_id != user_id:
        raise ValueError(
            f"Profile user_id '{profile.user_id}' does not match key '{user_id}'."
        )


def check_mutated_profile(user_id: str, profile: UserPreferenceProfile) -> UserPreferenceProfile:
    """Reject a mutation that re-keys the profile to another user."""
    if profile.user_id != user_id:
        raise InvalidPreference(
            f"Updated profile belongs to '{profile.user_id}', not '{user_id}'."
        )
    return profile
