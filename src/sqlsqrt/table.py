# SQLsqrt — Interactive SQL Shell with Streaming Table Rendering
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Box-drawing table layout for SQLsqrt.

The table is an append-only grid of already-stringified cells:
- rows are appended one at a time (row 0 holds the header labels)
- per-column width statistics are a running fold over every write
- widths are resolved when rendering, so a wide value written late
  still widens its column for the whole table
- multi-line cells are emitted line by line, in lock-step across the row
- cell styles (ANSI font codes) are kept beside the text and never count
  toward a column width
"""

from __future__ import annotations

import io
from dataclasses import dataclass
from typing import TextIO

from .config import ANSI_COLORS
from .errors import SqlsqrtError

# Widths are tracked as unsigned 32-bit values.
MAX_VALUE_WIDTH = 2**32 - 1


class TableError(SqlsqrtError):
    """Base class for table layout errors."""


class OutOfRangeError(TableError, IndexError):
    """Row or column index beyond the current bounds of the table."""


class ValueTooWideError(TableError, ValueError):
    """Cell value longer than the maximum representable column width."""


@dataclass
class Column:
    """Width statistics for one column."""

    min_value_width: int | None = None
    max_value_width: int = 0
    configured_width: int = 0

    @property
    def width(self) -> int:
        return max(self.configured_width, self.max_value_width)

    def observe(self, width: int) -> None:
        if self.min_value_width is None:
            self.min_value_width = width
        else:
            self.min_value_width = min(self.min_value_width, width)
        self.max_value_width = max(self.max_value_width, width)


@dataclass(frozen=True)
class CellBorder:
    left: str
    divider: str
    right: str
    row_border: str = "─"
    cell_border: str = "│"


FIRST_ROW_BORDERS = CellBorder("┌", "┬", "┐")
OTHER_ROW_BORDERS = CellBorder("├", "┼", "┤")
LAST_ROW_BORDERS = CellBorder("└", "┴", "┘")


class Table:
    """Append-only grid of string cells rendered as a bordered box."""

    def __init__(
        self,
        column_count: int,
        *,
        padding: int = 1,
        max_value_width: int = MAX_VALUE_WIDTH,
    ) -> None:
        if column_count < 0:
            raise ValueError(
                f"column count must be >= 0, got {column_count}"
            )
        self.columns: list[Column] = [Column() for _ in range(column_count)]
        self.values: list[str] = []
        # value index -> ANSI prefix; unstyled cells are absent
        self.styles: dict[int, str] = {}
        self.num_rows = 0
        self.padding = padding
        self.max_value_width = max_value_width

        self.first_row_borders = FIRST_ROW_BORDERS
        self.other_row_borders = OTHER_ROW_BORDERS
        self.last_row_borders = LAST_ROW_BORDERS

    @property
    def column_count(self) -> int:
        return len(self.columns)

    # -----------------------
    # Grid access
    # -----------------------

    def add_row(self) -> int:
        """Append an all-empty row and return its 0-based index."""
        row_index = self.num_rows
        self.num_rows += 1
        self.values.extend([""] * len(self.columns))
        return row_index

    def _resolve_value_idx(self, row: int, column: int) -> int:
        if column < 0 or column >= len(self.columns):
            raise OutOfRangeError(
                f"column {column} is out-of-range. "
                f"table has {len(self.columns)} columns"
            )
        if row < 0 or row >= self.num_rows:
            raise OutOfRangeError(
                f"row index {row} is out-of-range. "
                f"table has {self.num_rows} rows"
            )
        return (row * len(self.columns)) + column

    def cell_value(self, row: int, column: int) -> str:
        return self.values[self._resolve_value_idx(row, column)]

    def set_cell(self, row: int, column: int, value: str) -> None:
        """Store a cell value and fold its length into the column stats.

        Raises:
            OutOfRangeError: row or column beyond current bounds
            ValueTooWideError: value longer than max_value_width
        """
        if len(value) > self.max_value_width:
            raise ValueTooWideError(
                f"table value width overflow: {len(value)} > "
                f"{self.max_value_width}"
            )
        idx = self._resolve_value_idx(row, column)
        self.values[idx] = value
        self.columns[column].observe(len(value))

    def set_cell_style(self, row: int, column: int, style: str) -> None:
        """Set the ANSI prefix used when rendering one cell ("" clears it)."""
        idx = self._resolve_value_idx(row, column)
        if style:
            self.styles[idx] = style
        else:
            self.styles.pop(idx, None)

    def cell_style(self, row: int, column: int) -> str:
        return self.styles.get(self._resolve_value_idx(row, column), "")

    def append_row(self, values: list[str], style: str = "") -> int:
        """Add a row and fill it from ``values`` (one entry per column).

        ``style`` applies to every cell of the new row.
        """
        if len(values) != len(self.columns):
            raise OutOfRangeError(
                f"row has {len(values)} values. "
                f"table has {len(self.columns)} columns"
            )
        row = self.add_row()
        for column, value in enumerate(values):
            self.set_cell(row, column, value)
            if style:
                self.set_cell_style(row, column, style)
        return row

    def column_width(self, column: int) -> int:
        """Effective render width of a column (padding excluded)."""
        if column < 0 or column >= len(self.columns):
            raise OutOfRangeError(
                f"column {column} is out-of-range. "
                f"table has {len(self.columns)} columns"
            )
        return self.columns[column].width

    # -----------------------
    # Rendering
    # -----------------------

    def _border_line(self, borders: CellBorder, widths: list[int]) -> str:
        segments = [
            borders.row_border * (width + (self.padding * 2))
            for width in widths
        ]
        return borders.left + borders.divider.join(segments) + borders.right

    def _render_row(
        self, out: TextIO, row: int, widths: list[int], borders: CellBorder
    ) -> None:
        pad = " " * self.padding
        # Unconsumed tail per column; a column absent here has not
        # started emitting yet.
        remaining: dict[int, str] = {}
        while True:
            has_incomplete = False
            parts: list[str] = []
            for column, width in enumerate(widths):
                if column in remaining:
                    text = remaining[column]
                else:
                    text = self.cell_value(row, column)
                segment, newline, rest = text.partition("\n")
                remaining[column] = rest
                if newline:
                    has_incomplete = True
                trailing = " " * ((width - len(segment)) + self.padding)
                shown = segment
                style = self.styles.get(row * len(widths) + column)
                if style and segment:
                    shown = style + segment + ANSI_COLORS["reset"]
                parts.append(borders.cell_border + pad + shown + trailing)
            out.write("".join(parts) + borders.cell_border + "\n")
            if not has_incomplete:
                return

    def render(self, out: TextIO) -> None:
        """Write the table to ``out``; nothing for an empty table."""
        if self.num_rows == 0 or not self.columns:
            return

        widths = [col.width for col in self.columns]
        first = self._border_line(self.first_row_borders, widths)
        other = self._border_line(self.other_row_borders, widths)

        for row in range(self.num_rows):
            if row == 0:
                borders, line = self.first_row_borders, first
            else:
                borders, line = self.other_row_borders, other
            out.write(line + "\n")
            self._render_row(out, row, widths, borders)

        out.write(self._border_line(self.last_row_borders, widths) + "\n")

    def render_to_string(self) -> str:
        buf = io.StringIO()
        self.render(buf)
        return buf.getvalue()
