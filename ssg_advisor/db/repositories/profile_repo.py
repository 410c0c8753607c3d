"""
Repository for per-user preference profiles.

A profile is stored as one JSON document per user so that a save is a
single-row full replace, which gives the per-key atomicity the store contract needs.
"""

from __future__ import annotations

import logging
from typing import Optional

from ssg_advisor.db.repositories.base import BaseRepository
from ssg_advisor.models.preference import UserPreferenceProfile
from ssg_advisor.utils.time_utils import to_iso

logger = logging.getLogger(__name__)


class PreferenceProfileRepository(BaseRepository):
    """Read/write access to the ``preference_profiles`` table."""

    def save(self, profile: UserPreferenceProfile) -> None:
        """Insert or fully replace the profile row for ``profile.user_id``."""
        self.execute(
            """
            INSERT INTO preference_profiles (user_id, profile_json, updated_at)
            VALUES (?, ?, ?)
            ON CONFLICT(user_id) DO UPDATE SET
                profile_json = excluded.profile_json,
                updated_at   = excluded.updated_at;
            """,
            (
                profile.user_id,
                profile.model_dump_json(),
                to_iso(profile.last_updated),
            ),
        )

    def get(self, user_id: str) -> Optional[UserPreferenceProfile]:
        """Fetch the stored profile for ``user_id``, or ``None``."""
        row = self.fetchone(
            "SELECT profile_json FROM preference_profiles WHERE user_id = ?;",
            (user_id,),
        )
        if row is None:
            return None
        return UserPreferenceProfile.model_validate_json(row["profile_json"])

    def list_user_ids(self) -> list[str]:
        """Return all user ids with a stored profile, most recently updated first."""
        rows = self.fetchall(
            "SELECT user_id FROM preference_profiles ORDER BY updated_at DESC, user_id;"
        )
        return [row["user_id"] for row in rows]
