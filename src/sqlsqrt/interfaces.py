# SQLsqrt — Interactive SQL Shell with Streaming Table Rendering
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Protocol definitions for dependency injection.

These interfaces keep the session engine independent of the database
driver, the history backend and the configuration source.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol


class RowSource(Protocol):
    """An exhaustible producer of decoded rows."""

    def column_count(self) -> int:
        """Number of columns in every row."""
        ...

    def column_name(self, index: int) -> str:
        """Header label of the 0-based column ``index``."""
        ...

    def next_row(self) -> Sequence[Any] | None:
        """Next row of decoded values, or None once exhausted."""
        ...

    def close(self) -> None:
        """Release the underlying statement."""
        ...


class Connection(Protocol):
    """Statement execution collaborator."""

    def execute(self, sql: str) -> RowSource:
        """Prepare and execute ``sql``.

        Raises:
            StatementError: with a context label such as
                "executing statement"
        """
        ...

    def describe(self, table_name: str) -> RowSource:
        """Rows of (Name, Null?, Type) for the columns of a table."""
        ...

    def reserved_words(self) -> list[str]:
        """Keywords and object names offered for completion."""
        ...

    def close(self) -> None:
        ...


class HistoryStore(Protocol):
    """Append-only statement history."""

    def append(self, statement: str) -> None:
        ...

    def recent(self, limit: int = 100) -> list[str]:
        """Most recent statements, oldest first."""
        ...


class ConfigModel(Protocol):
    """Protocol for configuration access."""

    def get(self, key: str, default: Any = None) -> Any:
        ...

    def get_path(self, path: str, default: Any = None) -> Any:
        """Nested lookup using a dot-separated path."""
        ...
