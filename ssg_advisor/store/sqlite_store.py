"""
SQLite-backed knowledge graph store.

Each call opens its own connection through ``get_connection()`` and commits
on exit, so the store can be shared by many threads. A profile save is one
``INSERT ... ON CONFLICT DO UPDATE`` on a single row;
``update_preference_profile()`` reads and saves inside one
``BEGIN IMMEDIATE`` transaction, which serializes read-modify-writes across
every connection to the file, including other processes.

``sqlite3.Error``, filesystem errors, and undecodable stored rows are re-raised as
``StoreError``; ``AnalysisNotFound`` passes through untouched.
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import TypeVar

from ssg_advisor.db.connection import get_connection
from ssg_advisor.db.migrations import run_migrations
from ssg_advisor.db.repositories.analysis_repo import AnalysisRepository
from ssg_advisor.db.repositories.profile_repo import PreferenceProfileRepository
from ssg_advisor.db.schema import apply_schema
from ssg_advisor.errors import AnalysisNotFound, StoreError
from ssg_advisor.models.analysis import AnalysisRecord
from ssg_advisor.models.preference import UserPreferenceProfile
from ssg_advisor.store.base import (
    KnowledgeGraphStore,
    ProfileMutation,
    check_mutated_profile,
    check_profile_key,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SQLiteKnowledgeGraphStore(KnowledgeGraphStore):
    """Durable ``KnowledgeGraphStore`` on a SQLite file.

    Args:
        db_path: Path to the SQLite database file (created if missing).
        wal_mode: Enable WAL journal mode.
        busy_timeout_ms: Lock wait before ``OperationalError``.
        ensure_schema: Apply the schema and pending migrations on construction.
    """

    def __init__(
        self,
        db_path: str,
        wal_mode: bool = True,
        busy_timeout_ms: int = 5000,
        ensure_schema: bool = True,
    ) -> None:
        if db_path == ":memory:":
            raise ValueError(
                "SQLiteKnowledgeGraphStore needs a file path; "
                "use InMemoryKnowledgeGraphStore for an ephemeral store."
            )
        self.db_path = db_path
        self.wal_mode = wal_mode
        self.busy_timeout_ms = busy_timeout_ms
        if ensure_schema:
            self.initialize()

    def initialize(self) -> int:
        """Apply the schema and pending migrations. Returns migrations applied."""
        with self._connect() as conn:
            apply_schema(conn)
            return run_migrations(conn)

    # ── Analyses ──────────────────────────────────────────────────────────────

    def upsert_analysis(self, record: AnalysisRecord) -> str:
        analysis_id = self._run(lambda conn: AnalysisRepository(conn).upsert(record))
        logger.info("Stored analysis %s (ecosystem=%s)", analysis_id, record.ecosystem)
        return analysis_id

    def get_analysis(self, analysis_id: str) -> AnalysisRecord:
        record = self._run(lambda conn: AnalysisRepository(conn).get_by_id(analysis_id))
        if record is None:
            raise AnalysisNotFound(analysis_id)
        return record

    def list_analysis_ids(self) -> list[str]:
        return self._run(lambda conn: AnalysisRepository(conn).list_ids())

    # ── Preference profiles ───────────────────────────────────────────────────

    def get_preference_profile(self, user_id: str) -> UserPreferenceProfile:
        profile = self._run(lambda conn: PreferenceProfileRepository(conn).get(user_id))
        if profile is None:
            return UserPreferenceProfile.default(user_id)
        return profile

    def save_preference_profile(self, user_id: str, profile: UserPreferenceProfile) -> None:
        check_profile_key(user_id, profile)
        self._run(lambda conn: PreferenceProfileRepository(conn).save(profile))
        logger.debug("Saved preference profile for user=%s", user_id)

    def update_preference_profile(
        self, user_id: str, mutate: ProfileMutation
    ) -> UserPreferenceProfile:
        def read_modify_write(conn: sqlite3.Connection) -> UserPreferenceProfile:
            # Take the write lock before reading so no other connection can
            # save this profile between our read and our save.
            conn.execute("BEGIN IMMEDIATE;")
            repo = PreferenceProfileRepository(conn)
            current = repo.get(user_id) or UserPreferenceProfile.default(user_id)
            updated = check_mutated_profile(user_id, mutate(current))
            repo.save(updated)
            return updated

        profile = self._run(read_modify_write)
        logger.debug("Updated preference profile for user=%s", user_id)
        return profile

    def list_user_ids(self) -> list[str]:
        return self._run(lambda conn: PreferenceProfileRepository(conn).list_user_ids())

    # ── Helpers ───────────────────────────────────────────────────────────────

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        try:
            with get_connection(
                self.db_path,
                wal_mode=self.wal_mode,
                busy_timeout_ms=self.busy_timeout_ms,
            ) as conn:
                yield conn
        except (sqlite3.Error, OSError) as exc:
            raise StoreError(f"SQLite store failure at {self.db_path}: {exc}") from exc

    def _run(self, fn: Callable[[sqlite3.Connection], T]) -> T:
        """Run ``fn`` inside one connection, translating backend faults."""
        with self._connect() as conn:
            try:
                return fn(conn)
            except ValueError as exc:
                # pydantic ValidationError, JSONDecodeError and bad ISO timestamps
                raise StoreError(f"Stored row failed validation: {exc}") from exc
