"""Tests for AnalysisRepository and PreferenceProfileRepository."""

from __future__ import annotations

from datetime import datetime, timezone

from ssg_advisor.db.repositories.analysis_repo import AnalysisRepository
from ssg_advisor.db.repositories.base import BaseRepository
from ssg_advisor.db.repositories.profile_repo import PreferenceProfileRepository
from ssg_advisor.models.analysis import AnalysisRecord
from ssg_advisor.models.preference import UserPreferenceProfile
from ssg_advisor.taxonomy.ssg_taxonomy import SsgId


class TestAnalysisRepository:
    def test_upsert_and_get(self, in_memory_db, python_analysis):
        repo = AnalysisRepository(in_memory_db)
        assert repo.upsert(python_analysis) == "py-small"

        fetched = repo.get_by_id("py-small")
        assert fetched == python_analysis

    def test_get_missing_returns_none(self, in_memory_db):
        assert AnalysisRepository(in_memory_db).get_by_id("nope") is None

    def test_upsert_replaces_existing(self, in_memory_db, js_analysis):
        repo = AnalysisRepository(in_memory_db)
        repo.upsert(js_analysis)
        repo.upsert(js_analysis.model_copy(update={"total_files": 5}))

        assert repo.get_by_id("js-small").total_files == 5
        assert BaseRepository(in_memory_db).count("analyses") == 1

    def test_languages_round_trip(self, in_memory_db, go_analysis):
        repo = AnalysisRepository(in_memory_db)
        repo.upsert(go_analysis)
        assert repo.get_by_id("go-large").languages == ["go"]

    def test_list_ids_newest_first(self, in_memory_db, all_analyses):
        repo = AnalysisRepository(in_memory_db)
        for record in all_analyses:
            repo.upsert(record)
        assert repo.list_ids() == ["go-large", "py-small", "js-small"]

    def test_created_at_is_utc(self, in_memory_db):
        repo = AnalysisRepository(in_memory_db)
        record = AnalysisRecord(
            analysis_id="t",
            ecosystem="ruby",
            created_at=datetime(2026, 1, 2, 3, 4, 5, 678000, tzinfo=timezone.utc),
        )
        repo.upsert(record)
        assert repo.get_by_id("t").created_at == record.created_at


class TestPreferenceProfileRepository:
    def test_get_missing_returns_none(self, in_memory_db):
        assert PreferenceProfileRepository(in_memory_db).get("alice") is None

    def test_save_and_get(self, in_memory_db):
        repo = PreferenceProfileRepository(in_memory_db)
        profile = UserPreferenceProfile(
            user_id="alice",
            preferred_ssgs=[SsgId.HUGO, SsgId.ELEVENTY],
            auto_apply_preferences=True,
            usage_counts={SsgId.HUGO: 3},
        )
        repo.save(profile)

        fetched = repo.get("alice")
        assert fetched == profile

    def test_save_is_full_replace(self, in_memory_db):
        repo = PreferenceProfileRepository(in_memory_db)
        repo.save(UserPreferenceProfile(user_id="alice", preferred_ssgs=[SsgId.HUGO]))
        repo.save(UserPreferenceProfile(user_id="alice"))

        assert repo.get("alice").preferred_ssgs == []
        assert repo.count("preference_profiles") == 1

    def test_list_user_ids(self, in_memory_db):
        repo = PreferenceProfileRepository(in_memory_db)
        repo.save(UserPreferenceProfile(
            user_id="old", last_updated=datetime(2026, 1, 1, tzinfo=timezone.utc)
        ))
        repo.save(UserPreferenceProfile(
            user_id="new", last_updated=datetime(2026, 6, 1, tzinfo=timezone.utc)
        ))
        assert repo.list_user_ids() == ["new", "old"]
