# SQLsqrt — Interactive SQL Shell with Streaming Table Rendering
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Utility functions for SQLsqrt.
"""

from __future__ import annotations


def has_trailing_backslash(text: str) -> bool:
    """Check if the last character of text is a line-continuation backslash.

    Only the very last character counts; a backslash followed by spaces
    is part of the statement.

    Examples:
        "select 1 \\" -> True
        "path \\\\" -> True
        "select 1 \\ " -> False
    """
    return text.endswith("\\")


class StatementBuffer:
    """Accumulates continuation lines into one statement.

    A line ending in a backslash is buffered (without the backslash) and
    the statement continues on the next line; the lines are joined with
    newlines once a line without the trailing backslash arrives.
    """

    def __init__(self) -> None:
        self._lines: list[str] = []

    @property
    def in_continuation(self) -> bool:
        return bool(self._lines)

    def feed(self, line: str) -> str | None:
        """Add a line; return the completed statement or None."""
        if has_trailing_backslash(line):
            self._lines.append(line[:-1])
            return None
        self._lines.append(line)
        statement = "\n".join(self._lines)
        self._lines = []
        return statement

    def clear(self) -> None:
        self._lines = []
