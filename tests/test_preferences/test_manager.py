"""
Tests for ssg_advisor/preferences/manager.py.

What we test
------------
update_preferences():
  - Partial merge keeps unspecified fields.
  - Unknown / duplicate SSGs raise InvalidPreference and leave storage untouched.
  - Accepts PreferenceUpdate or a mapping (either key spelling).
  - Stamps last_updated.

record_usage():
  - Increments usage (and success) counters.
  - Adds an unseen SSG to the preferred list.
  - Reorders the preferred list by usage, stable on ties.
  - Rejects unknown SSGs.

reset / export / import / usage_recommendations.
"""

from __future__ import annotations

import json

import pytest

from ssg_advisor.errors import InvalidPreference
from ssg_advisor.models.preference import PreferenceUpdate, UserPreferenceProfile
from ssg_advisor.preferences.manager import (
    UserPreferenceManager,
    reorder_by_usage,
    validate_ssg_list,
)
from ssg_advisor.taxonomy.ssg_taxonomy import SsgId


@pytest.fixture
def manager(memory_store) -> UserPreferenceManager:
    return UserPreferenceManager(memory_store)


# ── Reads ─────────────────────────────────────────────────────────────────────

class TestGetOrCreateProfile:
    def test_default_for_new_user(self, manager):
        profile = manager.get_or_create_profile("alice")
        assert profile == UserPreferenceProfile.default("alice").model_copy(
            update={"last_updated": profile.last_updated}
        )

    def test_get_profile_alias(self, manager):
        assert manager.get_profile("alice").user_id == "alice"

    def test_blank_user_id_rejected(self, manager):
        with pytest.raises(InvalidPreference, match="user_id"):
            manager.get_or_create_profile("  ")


# ── update_preferences ────────────────────────────────────────────────────────

class TestUpdatePreferences:
    def test_sets_list_and_flag(self, manager):
        profile = manager.update_preferences(
            "alice",
            PreferenceUpdate(preferred_ssgs=["hugo", "eleventy"], auto_apply_preferences=True),
        )
        assert profile.preferred_ssgs == [SsgId.HUGO, SsgId.ELEVENTY]
        assert profile.auto_apply_preferences is True
        assert manager.get_profile("alice") == profile

    def test_partial_update_keeps_other_fields(self, manager):
        manager.update_preferences("alice", {"preferred_ssgs": ["mkdocs"]})
        profile = manager.update_preferences("alice", {"autoApplyPreferences": True})
        assert profile.preferred_ssgs == [SsgId.MKDOCS]
        assert profile.auto_apply_preferences is True

    def test_style_fields(self, manager):
        profile = manager.update_preferences(
            "alice",
            {"documentationStyle": "minimal", "expertiseLevel": "advanced",
             "preferredTechnologies": ["react"]},
        )
        assert profile.documentation_style == "minimal"
        assert profile.expertise_level == "advanced"
        assert profile.preferred_technologies == ["react"]

    def test_ssg_names_case_insensitive(self, manager):
        profile = manager.update_preferences("alice", {"preferred_ssgs": ["Hugo"]})
        assert profile.preferred_ssgs == [SsgId.HUGO]

    def test_unknown_ssg_rejected_and_nothing_written(self, manager, memory_store):
        manager.update_preferences("alice", {"preferred_ssgs": ["hugo"]})
        with pytest.raises(InvalidPreference, match="gatsby"):
            manager.update_preferences(
                "alice", {"preferred_ssgs": ["gatsby"], "auto_apply_preferences": True}
            )
        stored = memory_store.get_preference_profile("alice")
        assert stored.preferred_ssgs == [SsgId.HUGO]
        assert stored.auto_apply_preferences is False

    def test_duplicate_ssg_rejected(self, manager, memory_store):
        with pytest.raises(InvalidPreference, match="Duplicate"):
            manager.update_preferences("alice", {"preferred_ssgs": ["hugo", "HUGO"]})
        assert memory_store.list_user_ids() == []

    def test_malformed_update_rejected(self, manager):
        with pytest.raises(InvalidPreference, match="Malformed"):
            manager.update_preferences("alice", {"bogus": 1})

    def test_bad_style_rejected(self, manager):
        with pytest.raises(InvalidPreference):
            manager.update_preferences("alice", {"documentation_style": "verbose"})

    def test_last_updated_advances(self, manager):
        first = manager.update_preferences("alice", {"auto_apply_preferences": True})
        second = manager.update_preferences("alice", {"auto_apply_preferences": False})
        assert second.last_updated >= first.last_updated

    def test_clear_list(self, manager):
        manager.update_preferences("alice", {"preferred_ssgs": ["hugo"]})
        profile = manager.update_preferences("alice", {"preferred_ssgs": []})
        assert profile.preferred_ssgs == []


# ── record_usage ──────────────────────────────────────────────────────────────

class TestRecordUsage:
    def test_increments_counters(self, manager):
        manager.record_usage("alice", "hugo")
        profile = manager.record_usage("alice", SsgId.HUGO, success=False)
        assert profile.usage_counts[SsgId.HUGO] == 2
        assert profile.success_counts[SsgId.HUGO] == 1

    def test_adds_unseen_ssg_to_preferred(self, manager):
        profile = manager.record_usage("alice", "jekyll")
        assert profile.preferred_ssgs == [SsgId.JEKYLL]

    def test_reorders_by_usage(self, manager):
        manager.update_preferences("alice", {"preferred_ssgs": ["mkdocs", "hugo"]})
        manager.record_usage("alice", "hugo")
        profile = manager.record_usage("alice", "hugo")
        assert profile.preferred_ssgs == [SsgId.HUGO, SsgId.MKDOCS]

        profile = manager.record_usage("alice", "jekyll")
        assert profile.preferred_ssgs == [SsgId.HUGO, SsgId.JEKYLL, SsgId.MKDOCS]

    def test_ties_keep_previous_order(self, manager):
        manager.update_preferences("alice", {"preferred_ssgs": ["mkdocs", "hugo"]})
        profile = manager.record_usage("alice", "eleventy")
        assert profile.preferred_ssgs == [SsgId.ELEVENTY, SsgId.MKDOCS, SsgId.HUGO]

    def test_keeps_auto_apply_flag(self, manager):
        manager.update_preferences("alice", {"auto_apply_preferences": True})
        assert manager.record_usage("alice", "hugo").auto_apply_preferences is True

    def test_unknown_ssg_rejected(self, manager, memory_store):
        with pytest.raises(InvalidPreference, match="Unknown SSG"):
            manager.record_usage("alice", "gatsby")
        assert memory_store.list_user_ids() == []


# ── reset / export / import ───────────────────────────────────────────────────

class TestResetExportImport:
    def test_reset(self, manager):
        manager.update_preferences(
            "alice", {"preferred_ssgs": ["hugo"], "auto_apply_preferences": True}
        )
        profile = manager.reset_preferences("alice")
        assert profile.preferred_ssgs == []
        assert profile.auto_apply_preferences is False
        assert manager.get_profile("alice").preferred_ssgs == []

    def test_export_is_camel_case_json(self, manager):
        manager.update_preferences("alice", {"preferred_ssgs": ["hugo"]})
        data = json.loads(manager.export_preferences("alice"))
        assert data["userId"] == "alice"
        assert data["preferredSSGs"] == ["hugo"]

    def test_export_import_restores_profile(self, manager):
        manager.update_preferences(
            "alice", {"preferred_ssgs": ["hugo", "jekyll"], "auto_apply_preferences": True}
        )
        manager.record_usage("alice", "hugo")
        exported = manager.export_preferences("alice")

        manager.reset_preferences("alice")
        restored = manager.import_preferences("alice", exported)

        assert restored.preferred_ssgs == [SsgId.HUGO, SsgId.JEKYLL]
        assert restored.auto_apply_preferences is True
        assert restored.usage_counts == {SsgId.HUGO: 1}
        assert manager.get_profile("alice").preferred_ssgs == [SsgId.HUGO, SsgId.JEKYLL]

    def test_import_user_mismatch_rejected(self, manager):
        exported = manager.export_preferences("alice")
        with pytest.raises(InvalidPreference, match="mismatch"):
            manager.import_preferences("bob", exported)

    def test_import_invalid_json_rejected(self, manager):
        with pytest.raises(InvalidPreference, match="not valid JSON"):
            manager.import_preferences("alice", "{oops")

    def test_import_non_object_rejected(self, manager):
        with pytest.raises(InvalidPreference, match="JSON object"):
            manager.import_preferences("alice", "[]")

    def test_import_unknown_ssg_rejected(self, manager):
        payload = json.dumps({"userId": "alice", "preferredSSGs": ["gatsby"]})
        with pytest.raises(InvalidPreference, match="gatsby"):
            manager.import_preferences("alice", payload)


# ── usage_recommendations ─────────────────────────────────────────────────────

class TestUsageRecommendations:
    def test_empty_for_new_user(self, manager):
        assert manager.usage_recommendations("alice") == []

    def test_ranked_by_usage_times_success(self, manager):
        for _ in range(3):
            manager.record_usage("alice", "hugo")
        manager.record_usage("alice", "jekyll")
        manager.record_usage("alice", "jekyll", success=False)
        manager.record_usage("alice", "mkdocs", success=False)
        manager.record_usage("alice", "mkdocs", success=False)

        recs = manager.usage_recommendations("alice")
        assert [r.ssg for r in recs] == [SsgId.HUGO, SsgId.JEKYLL, SsgId.MKDOCS]
        assert recs[0].score == pytest.approx(3.0)
        assert recs[0].reason == "Used 3 time(s), 100% success rate"
        assert recs[1].reason == "Used 2 time(s)"
        assert recs[2].reason == "Used 2 time(s), only 0% success rate"


# ── Helpers ───────────────────────────────────────────────────────────────────

class TestHelpers:
    def test_validate_ssg_list(self):
        assert validate_ssg_list(["hugo", SsgId.JEKYLL]) == [SsgId.HUGO, SsgId.JEKYLL]

    def test_validate_ssg_list_rejects_duplicates(self):
        with pytest.raises(InvalidPreference, match="hugo"):
            validate_ssg_list(["hugo", "jekyll", "hugo"])

    def test_reorder_by_usage_is_stable(self):
        preferred = [SsgId.MKDOCS, SsgId.HUGO, SsgId.JEKYLL]
        usage = {SsgId.JEKYLL: 2}
        assert reorder_by_usage(preferred, usage) == [SsgId.JEKYLL, SsgId.MKDOCS, SsgId.HUGO]
