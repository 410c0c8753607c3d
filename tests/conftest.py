"""
Shared pytest fixtures for the SSG advisor test suite.

Provides:
  - ``in_memory_db``: A fresh in-memory SQLite connection with the full
    schema applied. Created anew for each test that requests it.
  - Sample ``AnalysisRecord`` objects for the main ecosystems.
  - ``memory_store`` / ``sqlite_store``: empty store backends.
  - ``seeded_store``: an in-memory store holding every sample analysis.
"""

from __future__ import annotations

import sqlite3
from datetime import datetime, timezone
from typing import Generator

import pytest

from ssg_advisor.db.schema import apply_schema
from ssg_advisor.models.analysis import AnalysisRecord
from ssg_advisor.store.memory import InMemoryKnowledgeGraphStore
from ssg_advisor.store.sqlite_store import SQLiteKnowledgeGraphStore


# ── Database fixture ──────────────────────────────────────────────────────────

@pytest.fixture
def in_memory_db() -> Generator[sqlite3.Connection, None, None]:
    """Yield a fresh in-memory SQLite connection with the full schema applied.

    Connection is closed after the test.
    """
    conn = sqlite3.connect(":memory:")
    conn.row_factory = sqlite3.Row
    apply_schema(conn)
    yield conn
    conn.close()


# ── Sample analyses ───────────────────────────────────────────────────────────

@pytest.fixture
def js_analysis() -> AnalysisRecord:
    """A small JavaScript project (60 files); heuristic winner is docusaurus."""
    return AnalysisRecord(
        analysis_id="js-small",
        ecosystem="javascript",
        languages=[],
        total_files=60,
        project_name="widget-ui",
        created_at=datetime(2026, 10, 1, 12, 0, 0, tzinfo=timezone.utc),
    )


@pytest.fixture
def python_analysis() -> AnalysisRecord:
    """A small Python project (40 files); heuristic winner is mkdocs."""
    return AnalysisRecord(
        analysis_id="py-small",
        ecosystem="python",
        languages=[],
        total_files=40,
        total_lines=3200,
        project_name="datatool",
        created_at=datetime(2026, 10, 2, 12, 0, 0, tzinfo=timezone.utc),
    )


@pytest.fixture
def go_analysis() -> AnalysisRecord:
    """A large Go project; heuristic winner is hugo."""
    return AnalysisRecord(
        analysis_id="go-large",
        ecosystem="go",
        languages=["Go"],
        total_files=2500,
        created_at=datetime(2026, 10, 3, 12, 0, 0, tzinfo=timezone.utc),
    )


@pytest.fixture
def all_analyses(js_analysis, python_analysis, go_analysis) -> list[AnalysisRecord]:
    return [js_analysis, python_analysis, go_analysis]


# ── Stores ────────────────────────────────────────────────────────────────────

@pytest.fixture
def memory_store() -> InMemoryKnowledgeGraphStore:
    return InMemoryKnowledgeGraphStore()


@pytest.fixture
def seeded_store(memory_store, all_analyses) -> InMemoryKnowledgeGraphStore:
    for record in all_analyses:
        memory_store.upsert_analysis(record)
    return memory_store


@pytest.fixture
def sqlite_store(tmp_path) -> SQLiteKnowledgeGraphStore:
    """A file-backed store with schema and migrations applied."""
    return SQLiteKnowledgeGraphStore(str(tmp_path / "advisor.db"))
