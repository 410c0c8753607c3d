"""
SQLite connections for the knowledge graph store.

``get_connection()`` yields one short-lived connection per store call; no
connection is ever shared between threads. On open it applies:

  busy_timeout   always; concurrent profile writers wait instead of failing
  journal_mode   WAL for file databases when ``wal_mode`` is set

Rows come back as ``sqlite3.Row``. The transaction commits when the ``with``
body finishes and rolls back if it raises.

Usage::

    from ssg_advisor.db.connection import get_connection

    with get_connection("data/db/ssg_advisor.db") as conn:
        conn.execute("SELECT ...")
"""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

logger = logging.getLogger(__name__)

MEMORY_DB = ":memory:"


def _apply_pragmas(conn: sqlite3.Connection, wal: bool, busy_timeout_ms: int) -> None:
    conn.execute(f"PRAGMA busy_timeout = {int(busy_timeout_ms)};")
    if wal:
        mode = conn.execute("PRAGMA journal_mode = WAL;").fetchone()[0]
        if str(mode).lower() != "wal":
            logger.warning("SQLite kept journal_mode=%s; WAL was requested.", mode)


@contextmanager
def get_connection(
    db_path: str,
    wal_mode: bool = True,
    busy_timeout_ms: int = 5000,
) -> Generator[sqlite3.Connection, None, None]:
    """Open a configured SQLite connection for the duration of a ``with`` block.

    Args:
        db_path: Database file, created along with its parent directories if
            missing. ``":memory:"`` gives a private throwaway database.
        wal_mode: Request WAL journaling (ignored for ``":memory:"``).
        busy_timeout_ms: How long to wait on a locked database.

    Yields:
        The open connection.

    Raises:
        sqlite3.Error: If the database cannot be opened or stays locked.
        OSError: If the parent directory cannot be created.
    """
    on_disk = db_path != MEMORY_DB
    if on_disk:
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(db_path, timeout=busy_timeout_ms / 1000)
    conn.row_factory = sqlite3.Row
    try:
        _apply_pragmas(conn, wal=wal_mode and on_disk, busy_timeout_ms=busy_timeout_ms)
        yield conn
    except Exception:
        conn.rollback()
        raise
    else:
        conn.commit()
    finally:
        conn.close()
