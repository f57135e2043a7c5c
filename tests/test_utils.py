"""
Tests for sqlsqrt.utils module.
"""

import pytest

from sqlsqrt.utils import StatementBuffer, has_trailing_backslash


@pytest.mark.parametrize(
    "text, expected",
    [
        ("select 1 \\", True),
        ("\\", True),
        ("path \\\\", True),
        ("select 1 \\   ", False),
        ("select 1", False),
        ("", False),
        ("a \\ b", False),
    ],
)
def test_has_trailing_backslash(text: str, expected: bool) -> None:
    assert has_trailing_backslash(text) is expected


def test_single_line_statement_completes_immediately() -> None:
    buf = StatementBuffer()
    assert buf.feed("select 1") == "select 1"
    assert not buf.in_continuation


def test_continuation_lines_join_with_newlines() -> None:
    buf = StatementBuffer()

    assert buf.feed("select a, \\") is None
    assert buf.in_continuation
    assert buf.feed("b \\") is None
    assert buf.feed("from t") == "select a, \nb \nfrom t"
    assert not buf.in_continuation


def test_clear_drops_pending_lines() -> None:
    buf = StatementBuffer()
    buf.feed("select \\")
    buf.clear()

    assert not buf.in_continuation
    assert buf.feed("select 2") == "select 2"


def test_only_the_final_backslash_is_removed() -> None:
    buf = StatementBuffer()

    assert buf.feed("select 'a\\\\") is None
    assert buf.feed("' \\ ") == "select 'a\\\n' \\ "
