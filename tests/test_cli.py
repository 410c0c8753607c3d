"""
CLI tests via typer's CliRunner.

Each test gets its own TOML config pointing at a temporary SQLite file, with
logging at WARNING and no log file so stdout carries only command output.
"""

from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from ssg_advisor.cli import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for var in (
        "SSG_ADVISOR_DB_PATH",
        "SSG_ADVISOR_STORE_BACKEND",
        "SSG_ADVISOR_LOG_LEVEL",
        "SSG_ADVISOR_CONFIDENCE_BOOST",
        "SSG_ADVISOR_DEBUG",
    ):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def cfg(tmp_path) -> str:
    db_path = (tmp_path / "cli.db").as_posix()
    path = tmp_path / "cli.toml"
    path.write_text(
        f"""
[database]
backend = "sqlite"
db_path = "{db_path}"

[logging]
level = "WARNING"
log_file = ""
""",
        encoding="utf-8",
    )
    return str(path)


@pytest.fixture
def analysis_file(tmp_path) -> str:
    path = tmp_path / "analyses.json"
    path.write_text(
        json.dumps([
            {"analysis_id": "js-small", "ecosystem": "javascript", "total_files": 60},
            {"analysis_id": "py-small", "ecosystem": "python", "total_files": 40},
        ]),
        encoding="utf-8",
    )
    return str(path)


def _invoke(*args):
    return runner.invoke(app, list(args))


def _import(cfg, analysis_file):
    result = _invoke("import-analysis", "--file", analysis_file, "--config", cfg)
    assert result.exit_code == 0, result.output
    return result


# ── Setup commands ────────────────────────────────────────────────────────────

class TestSetupCommands:
    def test_init_db(self, cfg):
        result = _invoke("init-db", "--config", cfg)
        assert result.exit_code == 0, result.output
        assert "[OK] Database ready." in result.output
        assert "preference_profiles" in result.output

    def test_validate_config(self, cfg):
        result = _invoke("validate-config", "--config", cfg)
        assert result.exit_code == 0, result.output
        assert "Store backend:    sqlite" in result.output

    def test_validate_config_missing_file(self, tmp_path):
        result = _invoke("validate-config", "--config", str(tmp_path / "nope.toml"))
        assert result.exit_code == 1
        assert "[ERROR]" in result.output


# ── import-analysis / recommend ───────────────────────────────────────────────

class TestRecommend:
    def test_import_prints_ids(self, cfg, analysis_file):
        result = _import(cfg, analysis_file)
        assert result.output.split() == ["js-small", "py-small"]

    def test_import_rejects_invalid_record(self, cfg, tmp_path):
        bad = tmp_path / "bad.json"
        bad.write_text(json.dumps({"analysis_id": "x", "total_files": -3}), encoding="utf-8")
        result = _invoke("import-analysis", "--file", str(bad), "--config", cfg)
        assert result.exit_code == 1
        assert "failed validation" in result.output

    def test_recommend_without_user(self, cfg, analysis_file):
        _import(cfg, analysis_file)
        result = _invoke("recommend", "js-small", "--config", cfg)
        assert result.exit_code == 0, result.output
        record = json.loads(result.stdout)
        assert record["recommended"] == "docusaurus"
        assert record["appliedPreference"] is False

    def test_recommend_with_preference(self, cfg, analysis_file):
        _import(cfg, analysis_file)
        result = _invoke(
            "prefs", "update", "alice",
            "--ssg", "hugo", "--ssg", "eleventy", "--auto-apply",
            "--config", cfg,
        )
        assert result.exit_code == 0, result.output

        result = _invoke("recommend", "js-small", "--user", "alice", "--config", cfg)
        assert result.exit_code == 0, result.output
        record = json.loads(result.stdout)
        assert record["recommended"] == "hugo"
        assert "Switched to hugo" in record["reasoning"][0]

    def test_recommend_with_blank_user(self, cfg, analysis_file):
        _import(cfg, analysis_file)
        result = _invoke("recommend", "js-small", "--user", "", "--config", cfg)
        assert result.exit_code == 0, result.output
        record = json.loads(result.stdout)
        assert record["recommended"] == "docusaurus"
        assert record["diagnostics"] == []

    def test_recommend_with_hints(self, cfg, analysis_file):
        _import(cfg, analysis_file)
        result = _invoke(
            "recommend", "js-small", "--ecosystem", "go", "--priority", "performance",
            "--config", cfg,
        )
        assert result.exit_code == 0, result.output
        record = json.loads(result.stdout)
        assert record["recommended"] == "hugo"
        assert "hugo suits a performance priority" in record["reasoning"]

    def test_recommend_any_ecosystem(self, cfg, analysis_file):
        _import(cfg, analysis_file)
        result = _invoke("recommend", "js-small", "--ecosystem", "any", "--config", cfg)
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["recommended"] == "docusaurus"

    def test_recommend_rejects_unknown_priority(self, cfg, analysis_file):
        _import(cfg, analysis_file)
        result = _invoke("recommend", "js-small", "--priority", "speed", "--config", cfg)
        assert result.exit_code == 1
        assert "Invalid hint" in result.output
        assert "speed" in result.output

    def test_unknown_analysis(self, cfg):
        result = _invoke("recommend", "missing", "--config", cfg)
        assert result.exit_code == 1
        assert "[ERROR] Analysis not found" in result.output


# ── Preference administration ─────────────────────────────────────────────────

class TestPrefs:
    def test_show_default(self, cfg):
        result = _invoke("prefs", "show", "alice", "--config", cfg)
        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["userId"] == "alice"
        assert data["preferredSSGs"] == []

    def test_update_unknown_ssg(self, cfg):
        result = _invoke("prefs", "update", "alice", "--ssg", "gatsby", "--config", cfg)
        assert result.exit_code == 1
        assert "Unknown SSG" in result.output

    def test_update_requires_an_option(self, cfg):
        result = _invoke("prefs", "update", "alice", "--config", cfg)
        assert result.exit_code == 1
        assert "Nothing to update" in result.output

    def test_record_usage_and_history(self, cfg):
        assert _invoke("record-usage", "alice", "hugo", "--config", cfg).exit_code == 0
        assert _invoke("record-usage", "alice", "hugo", "--config", cfg).exit_code == 0
        failed = _invoke("record-usage", "alice", "jekyll", "--failed", "--config", cfg)
        assert failed.exit_code == 0, failed.output
        assert "Preferred SSGs: hugo, jekyll" in failed.output

        result = _invoke("prefs", "history", "alice", "--config", cfg)
        assert result.exit_code == 0, result.output
        lines = [line for line in result.output.splitlines() if line.strip()]
        assert lines[0].split()[0] == "hugo"
        assert "Used 2 time(s), 100% success rate" in lines[0]

    def test_history_empty(self, cfg):
        result = _invoke("prefs", "history", "alice", "--config", cfg)
        assert "No usage recorded." in result.output

    def test_reset(self, cfg):
        _invoke("prefs", "update", "alice", "--ssg", "hugo", "--config", cfg)
        assert _invoke("prefs", "reset", "alice", "--config", cfg).exit_code == 0
        data = json.loads(_invoke("prefs", "show", "alice", "--config", cfg).stdout)
        assert data["preferredSSGs"] == []

    def test_export_import_round_trip(self, cfg, tmp_path):
        _invoke("prefs", "update", "alice", "--ssg", "mkdocs", "--auto-apply", "--config", cfg)
        out = tmp_path / "alice.json"
        result = _invoke("prefs", "export", "alice", "--output", str(out), "--config", cfg)
        assert result.exit_code == 0, result.output

        _invoke("prefs", "reset", "alice", "--config", cfg)
        result = _invoke("prefs", "import", "alice", "--file", str(out), "--config", cfg)
        assert result.exit_code == 0, result.output

        data = json.loads(_invoke("prefs", "show", "alice", "--config", cfg).stdout)
        assert data["preferredSSGs"] == ["mkdocs"]
        assert data["autoApplyPreferences"] is True

    def test_import_for_other_user_rejected(self, cfg, tmp_path):
        out = tmp_path / "alice.json"
        _invoke("prefs", "export", "alice", "--output", str(out), "--config", cfg)
        result = _invoke("prefs", "import", "bob", "--file", str(out), "--config", cfg)
        assert result.exit_code == 1
        assert "mismatch" in result.output
