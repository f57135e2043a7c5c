# SQLsqrt — Interactive SQL Shell with Streaming Table Rendering
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
SQLite binding of the statement execution collaborator.

SQLiteConnection turns raw statement text into SQLiteRowSource objects and
wraps every driver failure in a StatementError carrying a short context
label, so the shell can report "Error executing statement: ...".
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from .errors import StatementError

logger = logging.getLogger(__name__)

# Keyword list of the SQLite SQL dialect (sqlite3_keyword_name()).
SQLITE_KEYWORDS: tuple[str, ...] = (
    "ABORT", "ACTION", "ADD", "AFTER", "ALL", "ALTER", "ALWAYS", "ANALYZE",
    "AND", "AS", "ASC", "ATTACH", "AUTOINCREMENT", "BEFORE", "BEGIN",
    "BETWEEN", "BY", "CASCADE", "CASE", "CAST", "CHECK", "COLLATE", "COLUMN",
    "COMMIT", "CONFLICT", "CONSTRAINT", "CREATE", "CROSS", "CURRENT",
    "CURRENT_DATE", "CURRENT_TIME", "CURRENT_TIMESTAMP", "DATABASE",
    "DEFAULT", "DEFERRABLE", "DEFERRED", "DELETE", "DESC", "DETACH",
    "DISTINCT", "DO", "DROP", "EACH", "ELSE", "END", "ESCAPE", "EXCEPT",
    "EXCLUDE", "EXCLUSIVE", "EXISTS", "EXPLAIN", "FAIL", "FILTER", "FIRST",
    "FOLLOWING", "FOR", "FOREIGN", "FROM", "FULL", "GENERATED", "GLOB",
    "GROUP", "GROUPS", "HAVING", "IF", "IGNORE", "IMMEDIATE", "IN", "INDEX",
    "INDEXED", "INITIALLY", "INNER", "INSERT", "INSTEAD", "INTERSECT",
    "INTO", "IS", "ISNULL", "JOIN", "KEY", "LAST", "LEFT", "LIKE", "LIMIT",
    "MATCH", "MATERIALIZED", "NATURAL", "NO", "NOT", "NOTHING", "NOTNULL",
    "NULL", "NULLS", "OF", "OFFSET", "ON", "OR", "ORDER", "OTHERS", "OUTER",
    "OVER", "PARTITION", "PLAN", "PRAGMA", "PRECEDING", "PRIMARY", "QUERY",
    "RAISE", "RANGE", "RECURSIVE", "REFERENCES", "REGEXP", "REINDEX",
    "RELEASE", "RENAME", "REPLACE", "RESTRICT", "RETURNING", "RIGHT",
    "ROLLBACK", "ROW", "ROWS", "SAVEPOINT", "SELECT", "SET", "TABLE", "TEMP",
    "TEMPORARY", "THEN", "TIES", "TO", "TRANSACTION", "TRIGGER", "UNBOUNDED",
    "UNION", "UNIQUE", "UPDATE", "USING", "VACUUM", "VALUES", "VIEW",
    "VIRTUAL", "WHEN", "WHERE", "WINDOW", "WITH", "WITHOUT",
)

DESCRIBE_SQL = (
    'SELECT name AS "Name", '
    'CASE "notnull" WHEN 0 THEN \'Y\' ELSE \'N\' END AS "Null?", '
    'type AS "Type" '
    "FROM pragma_table_info(?) ORDER BY cid"
)

SCHEMA_NAMES_SQL = (
    "SELECT name FROM sqlite_master "
    "WHERE type IN ('table', 'view') AND name NOT LIKE 'sqlite_%' "
    "ORDER BY name"
)


class SQLiteRowSource:
    """RowSource over an executed sqlite3 cursor."""

    def __init__(self, cursor: sqlite3.Cursor) -> None:
        self._cursor = cursor
        self._names = [d[0] for d in (cursor.description or ())]
        self.closed = False

    def column_count(self) -> int:
        return len(self._names)

    def column_name(self, index: int) -> str:
        return self._names[index]

    def next_row(self) -> Sequence[Any] | None:
        if self.closed:
            return None
        try:
            row = self._cursor.fetchone()
        except sqlite3.Error as e:
            raise StatementError(str(e), "fetching row") from e
        return row

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self._cursor.close()


class SQLiteConnection:
    """Connection protocol implementation backed by sqlite3."""

    def __init__(self, conn: sqlite3.Connection, database: str = "") -> None:
        self._conn = conn
        self.database = database

    @classmethod
    def open(cls, database: str | Path) -> SQLiteConnection:
        """Open ``database`` (a file path or ``:memory:``) in autocommit mode."""
        target = str(database)
        try:
            if target != ":memory:" and not target.startswith("file:"):
                parent = Path(target).expanduser().parent
                if not parent.is_dir():
                    raise StatementError(
                        f"directory does not exist: {parent}",
                        "connecting to database",
                    )
                target = str(Path(target).expanduser())
            conn = sqlite3.connect(
                target, isolation_level=None, uri=target.startswith("file:")
            )
        except sqlite3.Error as e:
            raise StatementError(str(e), "connecting to database") from e
        logger.debug("connected to %s", target)
        return cls(conn, database=target)

    def execute(self, sql: str) -> SQLiteRowSource:
        logger.debug("executing statement: %s", sql)
        try:
            cursor = self._conn.execute(sql)
        except sqlite3.Warning as e:
            # e.g. "You can only execute one statement at a time."
            raise StatementError(str(e), "preparing statement") from e
        except sqlite3.Error as e:
            raise StatementError(str(e), "executing statement") from e
        return SQLiteRowSource(cursor)

    def describe(self, table_name: str) -> SQLiteRowSource:
        logger.debug("describing table: %s", table_name)
        try:
            cursor = self._conn.execute(DESCRIBE_SQL, (table_name,))
        except sqlite3.Error as e:
            raise StatementError(str(e), "describing table") from e
        return SQLiteRowSource(cursor)

    def reserved_words(self) -> list[str]:
        words = list(SQLITE_KEYWORDS)
        try:
            rows = self._conn.execute(SCHEMA_NAMES_SQL).fetchall()
        except sqlite3.Error as e:
            raise StatementError(str(e), "fetching reserved words") from e
        words.extend(name for (name,) in rows)
        return words

    def close(self) -> None:
        self._conn.close()
