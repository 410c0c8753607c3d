"""
SQLite schema DDL for the knowledge graph store.

Every CREATE uses ``IF NOT EXISTS``, so ``apply_schema()`` can run on each
store start-up and in every test fixture.

Tables:
  1. analyses            : one row per ``AnalysisRecord`` (keyed by analysis_id)
  2. preference_profiles : one row per user; the profile is a JSON document
                            replaced wholesale on every save
"""

from __future__ import annotations

import logging
import sqlite3

logger = logging.getLogger(__name__)

# ── DDL statements ─────────────────────────────────────────────────────────────

_DDL_ANALYSES = """
CREATE TABLE IF NOT EXISTS analyses (
    analysis_id     TEXT    PRIMARY KEY,
    ecosystem       TEXT,
    languages_json  TEXT    NOT NULL DEFAULT '[]',
    total_files     INTEGER NOT NULL DEFAULT 0,
    total_lines     INTEGER,
    project_name    TEXT,
    created_at      TEXT    NOT NULL,
    stored_at       TEXT    NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now'))
);
"""

_DDL_PREFERENCE_PROFILES = """
CREATE TABLE IF NOT EXISTS preference_profiles (
    user_id         TEXT    PRIMARY KEY,
    profile_json    TEXT    NOT NULL,
    updated_at      TEXT    NOT NULL
);
"""

_ALL_DDL = [
    _DDL_ANALYSES,
    _DDL_PREFERENCE_PROFILES,
]

ALL_TABLE_NAMES = [
    "analyses",
    "preference_profiles",
]


def apply_schema(conn: sqlite3.Connection) -> None:
    """Create any missing knowledge graph tables on ``conn`` and commit."""
    for ddl in _ALL_DDL:
        conn.execute(ddl)
    conn.commit()
    logger.debug("Schema verified: %s", ", ".join(ALL_TABLE_NAMES))


def get_existing_tables(conn: sqlite3.Connection) -> list[str]:
    """Return the table names present in the database, sorted alphabetically."""
    rows = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table' ORDER BY name;"
    ).fetchall()
    return [row["name"] for row in rows]


def get_existing_indexes(conn: sqlite3.Connection) -> list[str]:
    """Return the index names present in the database, sorted alphabetically."""
    rows = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='index' ORDER BY name;"
    ).fetchall()
    return [row["name"] for row in rows]
