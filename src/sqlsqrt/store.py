# SQLsqrt — Interactive SQL Shell with Streaming Table Rendering
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
SQLite-backed statement history for SQLsqrt.

The history is append-only: statements are added after they execute
successfully and are never rewritten.
"""

from __future__ import annotations

import sqlite3
from datetime import datetime
from pathlib import Path

# Longest statement kept in history
MAX_STATEMENT_CHARS = 65_536


class SQLiteHistoryStore:
    """SQLite implementation of the HistoryStore protocol."""

    def __init__(self, db_path: Path, database: str = ""):
        """Initialize store with database path.

        Args:
            db_path: Path to SQLite database file (must have schema)
            database: label of the database the statements ran against

        Note:
            Store does NOT create schema. Schema must be created by
            db.ensure_schema() before constructing SQLiteHistoryStore.
        """
        self.db_path = db_path
        self.database = database

    def append(self, statement: str) -> None:
        """Append one statement to the history."""
        statement = statement[:MAX_STATEMENT_CHARS]
        conn = sqlite3.connect(str(self.db_path))
        try:
            conn.execute(
                """
                INSERT INTO history (statement, database, created_at)
                VALUES (?, ?, ?)
                """,
                (statement, self.database, datetime.now().isoformat()),
            )
            conn.commit()
        finally:
            conn.close()

    def recent(self, limit: int = 100) -> list[str]:
        """Return up to ``limit`` most recent statements, oldest first."""
        conn = sqlite3.connect(str(self.db_path))
        try:
            cur = conn.execute(
                """
                SELECT statement FROM history
                ORDER BY id DESC
                LIMIT ?
                """,
                (limit,),
            )
            rows = cur.fetchall()
            return [statement for (statement,) in reversed(rows)]
        finally:
            conn.close()


class MemoryHistoryStore:
    """In-process history used when persistence is disabled."""

    def __init__(self) -> None:
        self.statements: list[str] = []

    def append(self, statement: str) -> None:
        self.statements.append(statement)

    def recent(self, limit: int = 100) -> list[str]:
        return self.statements[-limit:] if limit > 0 else []
