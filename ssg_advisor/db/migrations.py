"""
Forward-only migrations for the knowledge graph database.

``apply_schema()`` creates the base tables; everything after the baseline
lives here as a numbered step. Applied step IDs are recorded in
``schema_versions`` so each step runs exactly once per database. There are
no down-migrations.

To add a step, write a ``_step_NNNN_<what>(conn)`` function and register it
at the end of ``MIGRATIONS``; steps run in registration order.
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Callable

logger = logging.getLogger(__name__)

MigrationFn = Callable[[sqlite3.Connection], None]

_VERSION_TABLE_DDL = """
CREATE TABLE IF NOT EXISTS schema_versions (
    version_id  TEXT NOT NULL PRIMARY KEY,
    description TEXT,
    applied_at  TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now'))
);
"""


def _step_0001_bootstrap(conn: sqlite3.Connection) -> None:
    """Baseline; records that ``apply_schema()`` tables exist."""


def _step_0002_analysis_ecosystem_index(conn: sqlite3.Connection) -> None:
    conn.execute(
        "CREATE INDEX IF NOT EXISTS idx_analyses_ecosystem ON analyses(ecosystem);"
    )


def _step_0003_profile_updated_index(conn: sqlite3.Connection) -> None:
    # Backs "recently active users" listings.
    conn.execute(
        "CREATE INDEX IF NOT EXISTS idx_profiles_updated_at "
        "ON preference_profiles(updated_at DESC);"
    )


# version_id -> (step, description)
MIGRATIONS: dict[str, tuple[MigrationFn, str]] = {
    "0001_bootstrap": (_step_0001_bootstrap, "Baseline schema"),
    "0002_analysis_ecosystem_index": (
        _step_0002_analysis_ecosystem_index,
        "Index analyses by ecosystem",
    ),
    "0003_profile_updated_index": (
        _step_0003_profile_updated_index,
        "Index preference profiles by updated_at",
    ),
}


def _pending(conn: sqlite3.Connection) -> list[str]:
    done = {row[0] for row in conn.execute("SELECT version_id FROM schema_versions;")}
    return [version_id for version_id in MIGRATIONS if version_id not in done]


def run_migrations(conn: sqlite3.Connection) -> int:
    """Apply every registered step not yet recorded in ``schema_versions``.

    Each step commits together with its ``schema_versions`` row, so a failed
    step leaves earlier steps applied and is retried on the next call.

    Args:
        conn: Open connection with the base schema applied.

    Returns:
        Number of steps applied by this call (0 when up to date).
    """
    conn.execute(_VERSION_TABLE_DDL)
    conn.commit()

    pending = _pending(conn)
    if not pending:
        logger.debug("Schema up to date (%d migration(s) recorded).", len(MIGRATIONS))
        return 0

    for version_id in pending:
        step, description = MIGRATIONS[version_id]
        logger.info("Applying migration %s: %s", version_id, description)
        try:
            step(conn)
            conn.execute(
                "INSERT INTO schema_versions (version_id, description) VALUES (?, ?);",
                (version_id, description),
            )
            conn.commit()
        except sqlite3.Error:
            conn.rollback()
            logger.exception("Migration %s failed.", version_id)
            raise

    logger.info("Applied %d migration(s).", len(pending))
    return len(pending)
