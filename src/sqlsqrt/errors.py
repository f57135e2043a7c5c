# SQLsqrt — Interactive SQL Shell with Streaming Table Rendering
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Error taxonomy for SQLsqrt.

- StatementError: the database refused to connect/prepare/execute/fetch.
  Carries a short context label ("executing statement") next to the message.
- CommandError: a shell command was used incorrectly (missing argument).

Both are recoverable: the session reports them and reads the next line.
Table layout errors live in sqlsqrt.table and signal programming errors.
"""

from __future__ import annotations


class SqlsqrtError(Exception):
    """Root of all SQLsqrt errors."""


class StatementError(SqlsqrtError):
    """A database operation failed."""

    def __init__(self, message: str, context: str = "") -> None:
        super().__init__(message)
        self.context = context

    def describe(self, prefix: str = "Error") -> str:
        if self.context:
            return f"{prefix} {self.context}: {self}"
        return f"{prefix}: {self}"


class CommandError(SqlsqrtError):
    """A shell command could not run with the given arguments."""


class DuplicateCommandError(SqlsqrtError, KeyError):
    """Two commands were registered under the same name."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message.
        return str(self.args[0]) if self.args else ""


__all__ = [
    "SqlsqrtError",
    "StatementError",
    "CommandError",
    "DuplicateCommandError",
]
