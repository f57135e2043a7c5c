# SQLsqrt — Interactive SQL Shell with Streaming Table Rendering
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
SQLsqrt CLI entry point and REPL loop.

Design:
- CLI owns process startup: argument parsing, logging, opening the database.
- Session is the engine (connection + history + config injected).
- UI is terminal-friendly PromptSession (keeps scrollback + copy/select).
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from collections.abc import Callable, Sequence

from . import config, db
from .driver import SQLiteConnection
from .errors import StatementError
from .interfaces import HistoryStore
from .kernel import ErrorOutput, Session, write_crash_log
from .logs import configure_logging
from .store import MemoryHistoryStore, SQLiteHistoryStore
from .ui import PromptToolkitUI
from .utils import StatementBuffer

logger = logging.getLogger(__name__)


def colorize_prompt(prompt: str) -> str:
    """Color the prompt name and caret ("SQLsqrt" cyan, ">" pink)."""
    colors = config.ANSI_COLORS
    head, caret, tail = prompt.rpartition(">")
    if not caret:
        return colors["cyan"] + prompt + colors["reset"]
    return (
        colors["cyan"] + head + colors["pink"] + caret + colors["reset"] + tail
    )


def print_error(text: str) -> None:
    print(text, file=sys.stderr)


def run_repl(
    session: Session,
    ui=None,
    input_fn: Callable[[str], str] = input,
    output_fn: Callable[[str], None] = print,
    error_fn: Callable[[str], None] = print_error,
) -> None:
    """Run the interactive loop until .exit or end of input.

    ``ui`` is anything with read(prompt) and write(text); without one the
    loop falls back to ``input_fn`` / ``output_fn``, and error lines go to
    ``error_fn`` (stderr).
    """

    def write(text: str) -> None:
        if ui is not None:
            ui.write(text)
        else:
            output_fn(text[:-1] if text.endswith("\n") else text)

    def write_error(text: str) -> None:
        if ui is not None:
            colors = config.ANSI_COLORS
            body = text[:-1] if text.endswith("\n") else text
            ui.write(colors["red"] + body + colors["reset"] + "\n")
        else:
            error_fn(text[:-1] if text.endswith("\n") else text)

    farewell = str(session.config.get_path("shell.farewell", "Bye!"))
    buffer = StatementBuffer()

    while session.running:
        try:
            prompt = session.prompt(continuation=buffer.in_continuation)
            if ui is not None:
                line = ui.read(colorize_prompt(prompt))
            else:
                line = input_fn(prompt + " ")

            statement = buffer.feed(line or "")
            if statement is None or not statement.strip():
                continue

            try:
                # Dispatched as typed; " .exit" is a statement, not .exit
                response = session.handle_line(statement)
                if isinstance(response, ErrorOutput):
                    write_error(response)
                elif response:
                    write(response)
            except Exception as e:
                # Unhandled exception - write crash log, keep the session
                write_crash_log(
                    e,
                    raw_command=statement,
                    database=getattr(session.connection, "database", ""),
                )
                logger.debug("unhandled exception", exc_info=True)
                write_error(
                    f"[ERROR] Unhandled exception: "
                    f"{type(e).__name__}: {e}\n"
                )

        except KeyboardInterrupt:
            if buffer.in_continuation:
                buffer.clear()
                write("\n[Cancelled]\n")
                continue
            write(f"\n{farewell}\n")
            break
        except EOFError:
            write(f"\n{farewell}\n")
            break

    session.close()


def _positive_int(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {text}") from None
    if value < 1:
        raise argparse.ArgumentTypeError(f"must be >= 1: {value}")
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sqlsqrt",
        description="Interactive SQL shell with paged box-drawing results.",
    )
    parser.add_argument(
        "database",
        nargs="?",
        default=":memory:",
        help="SQLite database file to open (default: in-memory database)",
    )
    parser.add_argument(
        "--page-size",
        type=_positive_int,
        default=None,
        help="rows per page before .it is needed (default from config: 20)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="DEBUG, INFO, WARNING, ERROR or CRITICAL",
    )
    parser.add_argument(
        "--no-history",
        action="store_true",
        help="keep statement history in memory only",
    )
    parser.add_argument(
        "--plain",
        action="store_true",
        help="read lines with input() instead of the prompt_toolkit UI",
    )
    return parser


def open_history(
    cfg: config.YAMLConfig, enabled: bool, database: str
) -> HistoryStore:
    if not enabled or not cfg.get_path("history.enabled", True):
        return MemoryHistoryStore()
    path = config.history_db_path(config.get_data_root())
    db.ensure_schema(path)
    return SQLiteHistoryStore(path, database=database)


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point for the SQLsqrt CLI."""
    args = build_parser().parse_args(argv)

    cfg = config.load_system_config()
    if args.page_size is not None:
        cfg.set_path("shell.page_size", args.page_size)
    if not sys.stdout.isatty():
        # piped output stays free of escape codes
        cfg.set_path("table.styled", False)

    level = args.log_level or str(cfg.get_path("logging.level", "WARNING"))
    try:
        configure_logging(level)
    except ValueError as e:
        print(f"Fatal error: {e}", file=sys.stderr)
        return 2

    try:
        connection = SQLiteConnection.open(args.database)
    except StatementError as e:
        print(e.describe("Fatal error"), file=sys.stderr)
        return 1

    try:
        history = open_history(
            cfg, enabled=not args.no_history, database=connection.database
        )
        session = Session(connection=connection, history=history, config=cfg)
        start_output = session.start()
    except StatementError as e:
        connection.close()
        print(e.describe("Fatal error"), file=sys.stderr)
        return 1

    try:
        if args.plain or os.environ.get("SQLSQRT_PLAIN_UI") == "1":
            if start_output:
                print(start_output)
            run_repl(session)
        else:
            ui = PromptToolkitUI(session)
            if start_output:
                ui.write(start_output + "\n")
            run_repl(session, ui=ui)
    finally:
        connection.close()
    return 0
