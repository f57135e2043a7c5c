# SQLsqrt — Interactive SQL Shell with Streaming Table Rendering
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Schema helpers for the SQLsqrt history database.

This module is the only place that creates tables in the history
database; SQLiteHistoryStore assumes the schema exists.
"""

from __future__ import annotations

import sqlite3
from pathlib import Path


def ensure_schema(db_path: Path) -> None:
    """Create the history schema if it does not exist.

    Creates:
    - history: one row per successfully executed statement

    This function is idempotent - safe to call multiple times.
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(str(db_path))
    try:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS history (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                statement TEXT NOT NULL,
                database TEXT NOT NULL DEFAULT '',
                created_at TEXT NOT NULL
            )
            """
        )
        conn.execute(
            """
            CREATE INDEX IF NOT EXISTS idx_history_created_at
            ON history(created_at)
            """
        )
        conn.commit()
    finally:
        conn.close()
