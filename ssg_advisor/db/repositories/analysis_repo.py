"""
Repository for stored project analyses.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from typing import Optional

from ssg_advisor.db.repositories.base import BaseRepository
from ssg_advisor.models.analysis import AnalysisRecord
from ssg_advisor.utils.time_utils import from_iso, to_iso

logger = logging.getLogger(__name__)


class AnalysisRepository(BaseRepository):
    """Read/write access to the ``analyses`` table."""

    def upsert(self, record: AnalysisRecord) -> str:
        """Insert or replace an analysis by id.

        Args:
            record: The ``AnalysisRecord`` to persist.

        Returns:
            The ``analysis_id``.
        """
        self.execute(
            """
            INSERT INTO analyses (
                analysis_id, ecosystem, languages_json, total_files,
                total_lines, project_name, created_at, stored_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, strftime('%Y-%m-%dT%H:%M:%SZ', 'now'))
            ON CONFLICT(analysis_id) DO UPDATE SET
                ecosystem      = excluded.ecosystem,
                languages_json = excluded.languages_json,
                total_files    = excluded.total_files,
                total_lines    = excluded.total_lines,
                project_name   = excluded.project_name,
                created_at     = excluded.created_at,
                stored_at      = excluded.stored_at;
            """,
            (
                record.analysis_id,
                record.ecosystem,
                json.dumps(record.languages),
                record.total_files,
                record.total_lines,
                record.project_name,
                to_iso(record.created_at),
            ),
        )
        return record.analysis_id

    def get_by_id(self, analysis_id: str) -> Optional[AnalysisRecord]:
        """Fetch an analysis by primary key, or ``None``."""
        row = self.fetchone(
            "SELECT * FROM analyses WHERE analysis_id = ?;", (analysis_id,)
        )
        return _row_to_analysis(row) if row else None

    def list_ids(self) -> list[str]:
        """Return all stored analysis ids, newest first."""
        rows = self.fetchall(
            "SELECT analysis_id FROM analyses ORDER BY created_at DESC, analysis_id;"
        )
        return [row["analysis_id"] for row in rows]


# ── Private helpers ────────────────────────────────────────────────────────────

def _row_to_analysis(row: sqlite3.Row) -> AnalysisRecord:
    return AnalysisRecord(
        analysis_id=row["analysis_id"],
        ecosystem=row["ecosystem"],
        languages=json.loads(row["languages_json"] or "[]"),
        total_files=row["total_files"],
        total_lines=row["total_lines"],
        project_name=row["project_name"],
        created_at=from_iso(row["created_at"]),
    )
