# SQLsqrt — Interactive SQL Shell with Streaming Table Rendering
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Streaming pagination of query results.

A result is pulled from its row source one bounded page at a time. Each
page is laid out in a fresh Table and rendered once, after the page is
complete. The row read to find out whether more rows exist is pushed back
onto the cursor, so the next page starts with it instead of skipping it.

ResultPager holds at most one open result; opening another one closes the
previous handle.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime
from typing import Any, TextIO

from .config import ANSI_COLORS
from .errors import CommandError
from .interfaces import RowSource
from .table import Table

logger = logging.getLogger(__name__)

NULL_MARKER = "<null>"
UNSUPPORTED_TYPE = "unsupported type"
DEFAULT_PAGE_SIZE = 20

HEADER_STYLE = ANSI_COLORS["bold"]
NULL_STYLE = ANSI_COLORS["italic"]


def format_timestamp(value: datetime) -> str:
    offset = value.utcoffset()
    tz_hours = int(offset.total_seconds() / 3600) if offset else 0
    return (
        f"{value:%Y-%m-%d %H:%M:%S}.{value.microsecond:06d} Z{tz_hours}"
    )


def format_value(value: Any, null_marker: str = NULL_MARKER) -> str:
    """Display string for one decoded column value.

    Null is checked before the type, so a null of any type renders as
    the null marker.
    """
    if value is None:
        return null_marker
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, str):
        return f'"{value}"'
    if isinstance(value, (bytes, bytearray, memoryview)):
        text = bytes(value).decode("utf-8", errors="replace")
        return f'"{text}"'
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return repr(value)
    if isinstance(value, datetime):
        return format_timestamp(value)
    return UNSUPPORTED_TYPE


class RowCursor:
    """Row source wrapper with a one-row pushback slot."""

    def __init__(self, source: RowSource) -> None:
        self.source = source
        self._pending: Sequence[Any] | None = None
        self.exhausted = False

    def next_row(self) -> Sequence[Any] | None:
        if self._pending is not None:
            row, self._pending = self._pending, None
            return row
        if self.exhausted:
            return None
        row = self.source.next_row()
        if row is None:
            self.exhausted = True
        return row

    def push_back(self, row: Sequence[Any]) -> None:
        if self._pending is not None:
            raise RuntimeError("cursor already holds a pushed-back row")
        self._pending = row

    def close(self) -> None:
        self.source.close()


def fetch_and_render(
    cursor: RowCursor,
    max_rows: int | None,
    out: TextIO,
    *,
    null_marker: str = NULL_MARKER,
    padding: int = 1,
    styled: bool = True,
) -> bool:
    """Render the next page of ``cursor`` to ``out``.

    Args:
        cursor: open result
        max_rows: page size, or None to drain the result
        out: text stream receiving the table and the row-count line
        styled: bold header labels and italic null cells

    Returns:
        True if the result still has unconsumed rows.
    """
    if max_rows is not None and max_rows < 1:
        raise ValueError(f"max_rows must be >= 1, got {max_rows}")

    row = cursor.next_row()
    if row is None:
        out.write("No rows returned\n")
        return False

    source = cursor.source
    column_count = source.column_count()
    table = Table(column_count, padding=padding)
    table.append_row(
        [source.column_name(i) for i in range(column_count)],
        style=HEADER_STYLE if styled else "",
    )

    fetched = 0
    while row is not None and (max_rows is None or fetched < max_rows):
        row_index = table.append_row(
            [format_value(v, null_marker) for v in row]
        )
        if styled:
            for column, value in enumerate(row):
                if value is None:
                    table.set_cell_style(row_index, column, NULL_STYLE)
        fetched += 1
        row = cursor.next_row()

    has_more = row is not None
    if has_more:
        cursor.push_back(row)

    table.render(out)
    out.write(f"Fetched {fetched} rows\n")
    logger.debug("rendered page: rows=%d has_more=%s", fetched, has_more)
    return has_more


class ResultPager:
    """Owns the single active result of a session."""

    def __init__(
        self,
        page_size: int = DEFAULT_PAGE_SIZE,
        null_marker: str = NULL_MARKER,
        padding: int = 1,
        styled: bool = True,
    ) -> None:
        if page_size < 1:
            raise ValueError(f"page size must be >= 1, got {page_size}")
        self.page_size = page_size
        self.null_marker = null_marker
        self.padding = padding
        self.styled = styled
        self.active: RowCursor | None = None

    @property
    def has_active(self) -> bool:
        return self.active is not None

    def open(self, source: RowSource) -> RowCursor:
        """Make ``source`` the active result, closing the previous one."""
        self.discard()
        self.active = RowCursor(source)
        return self.active

    def discard(self) -> None:
        if self.active is None:
            return
        cursor, self.active = self.active, None
        cursor.close()

    def _render(self, max_rows: int | None, out: TextIO) -> bool:
        assert self.active is not None
        try:
            has_more = fetch_and_render(
                self.active,
                max_rows,
                out,
                null_marker=self.null_marker,
                padding=self.padding,
                styled=self.styled,
            )
        except Exception:
            self.discard()
            raise
        if not has_more:
            self.discard()
        return has_more

    def next_page(self, out: TextIO) -> bool:
        """Render the next page of the active result."""
        if self.active is None:
            raise CommandError("No active statement")
        return self._render(self.page_size, out)

    def start(self, source: RowSource, out: TextIO) -> bool:
        """Open ``source`` and render its first page."""
        self.open(source)
        return self._render(self.page_size, out)

    def render_all(self, source: RowSource, out: TextIO) -> None:
        """Open ``source`` and render every row in a single table."""
        self.open(source)
        self._render(None, out)
