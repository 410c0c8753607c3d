"""
Thin SQL helpers shared by the analysis and preference-profile repositories.

A repository wraps a connection it does not own: the SQLite knowledge graph
store opens it through ``get_connection()`` and commits when the call ends.
SQL is written out by hand in each repository method and results come back
as Pydantic models.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Any, Optional

logger = logging.getLogger(__name__)

Params = tuple[Any, ...] | dict[str, Any]


class BaseRepository:
    """Statement execution with DEBUG-level SQL tracing."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    def execute(self, sql: str, params: Params = ()) -> sqlite3.Cursor:
        """Execute a single SQL statement with ``?`` or ``:name`` placeholders."""
        logger.debug("SQL: %s | params: %s", sql.strip(), params)
        return self.conn.execute(sql, params)

    def fetchone(self, sql: str, params: Params = ()) -> Optional[sqlite3.Row]:
        """Execute a query and return the first row, or ``None``."""
        return self.execute(sql, params).fetchone()

    def fetchall(self, sql: str, params: Params = ()) -> list[sqlite3.Row]:
        """Execute a query and return all rows."""
        return self.execute(sql, params).fetchall()

    def count(self, table: str) -> int:
        """Row count for ``table`` (used by ``init-db`` to report contents)."""
        row = self.fetchone(f"SELECT COUNT(*) AS n FROM {table};")
        assert row is not None
        return int(row["n"])
