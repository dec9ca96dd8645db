"""SQLite storage adapter.

Implements the core ExecutionMarkerPort using a simple SQLite database.
"""

from __future__ import annotations

import sqlite3
from datetime import datetime, timezone
from typing import Optional


class SQLiteStorage:
    """Thin SQLite wrapper that satisfies the ExecutionMarkerPort contract."""

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def init_db(self) -> None:
        """Create tables if they do not exist.

        Tables:
        - executions: append-only log of successful run end times
        """

        with self._connect() as conn:
            # Fields:
            # - id: auto-increment primary key
            # - executed_at: window end of the run, ISO-8601 UTC
            # - recorded_at: wall-clock time the row was written
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS executions (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    executed_at TIMESTAMP NOT NULL,
                    recorded_at TIMESTAMP NOT NULL
                )
                """
            )

    def read(self) -> Optional[datetime]:
        """Return the most recent execution time, if any run was recorded."""

        with self._connect() as conn:
            row = conn.execute(
                "SELECT executed_at FROM executions ORDER BY executed_at DESC, id DESC LIMIT 1"
            ).fetchone()
        if not row:
            return None
        executed_at = datetime.fromisoformat(row["executed_at"])
        if executed_at.tzinfo is None:
            executed_at = executed_at.replace(tzinfo=timezone.utc)
        return executed_at

    def write(self, executed_at: datetime) -> None:
        """Record a successful run ending at `executed_at`."""

        if executed_at.tzinfo is None:
            executed_at = executed_at.replace(tzinfo=timezone.utc)
        recorded_at = datetime.now(timezone.utc)
        with self._connect() as conn:
            conn.execute(
                "INSERT INTO executions (executed_at, recorded_at) VALUES (?, ?)",
                (executed_at.astimezone(timezone.utc).isoformat(), recorded_at.isoformat()),
            )

    def list_executions(self, limit: int = 10) -> list[datetime]:
        """Return the latest recorded execution times, newest first."""

        with self._connect() as conn:
            rows = conn.execute(
                "SELECT executed_at FROM executions ORDER BY executed_at DESC, id DESC LIMIT ?",
                (limit,),
            ).fetchall()
        return [datetime.fromisoformat(row["executed_at"]) for row in rows]
