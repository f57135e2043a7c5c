# SQLsqrt — Interactive SQL Shell with Streaming Table Rendering
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
SQLsqrt kernel.

Session engine of the shell:
- command routing (longest-prefix match over registered command names)
- statement execution and paging of the active result
- completion index over command names and reserved words

Important boundary:
- Kernel does not open databases or load YAML.
- Kernel consumes the injected Connection, HistoryStore and ConfigModel.
"""

from __future__ import annotations

import io
import logging
import traceback
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from . import config as cfg_module
from .commands import (
    Command,
    CommandKind,
    CommandRouter,
    CompletionIndex,
)
from .errors import CommandError, StatementError
from .interfaces import ConfigModel, Connection, HistoryStore
from .pager import (
    DEFAULT_PAGE_SIZE,
    HEADER_STYLE,
    NULL_MARKER,
    ResultPager,
)
from .table import Table

logger = logging.getLogger(__name__)

# Registered once per session, in this order.
BUILTIN_COMMANDS: tuple[Command, ...] = (
    Command(
        ".describe",
        CommandKind.DESCRIBE,
        usage=".describe <table>",
        summary="List the columns of a table",
    ),
    Command(
        ".exit",
        CommandKind.EXIT,
        usage=".exit",
        summary="Leave the shell",
    ),
    Command(
        ".it",
        CommandKind.FETCH_MORE,
        usage=".it",
        summary="Fetch the next page of the last result",
    ),
    Command(
        ".help",
        CommandKind.HELP,
        usage=".help",
        summary="Show this help",
    ),
)


class ErrorOutput(str):
    """Output text reporting a failed statement.

    Compares equal to the plain text; the loop uses the type to send it
    to the error stream.
    """


def write_crash_log(
    error: Exception,
    raw_command: str = "",
    database: str = "",
    log_path: Path | None = None,
) -> None:
    """Write an entry to the crash log.

    Logs unhandled exceptions from the per-line loop.
    Only creates the log directory when actually needed.
    Appends to crash.log (never overwrites).
    """
    try:
        if log_path is None:
            log_path = cfg_module.crash_log_path(cfg_module.get_data_root())
        log_path.parent.mkdir(parents=True, exist_ok=True)

        lines = [f"{datetime.now().isoformat()}"]
        if raw_command:
            lines.append(f"raw={raw_command}")
        if database:
            lines.append(f"db={database}")
        lines.append(f"error={type(error).__name__}: {error}")
        lines.append("traceback:")
        lines.append(traceback.format_exc())
        lines.append("----")

        with log_path.open("a", encoding="utf-8") as f:
            f.write("\n".join(lines) + "\n")

    except OSError:
        # Already in an error state; the caller reports the original error
        logger.warning("could not write crash log", exc_info=True)


@dataclass
class Session:
    """SQLsqrt session engine."""

    connection: Connection
    history: HistoryStore
    config: ConfigModel

    running: bool = False

    router: CommandRouter = field(default_factory=CommandRouter)
    completion: CompletionIndex = field(default_factory=CompletionIndex)
    pager: ResultPager = field(init=False)

    def __post_init__(self) -> None:
        page_size = int(
            self.config.get_path("shell.page_size", DEFAULT_PAGE_SIZE)
        )
        null_marker = str(
            self.config.get_path("shell.null_marker", NULL_MARKER)
        )
        self.padding = int(self.config.get_path("table.padding", 1))
        self.styled = bool(self.config.get_path("table.styled", True))
        self.pager = ResultPager(
            page_size=page_size,
            null_marker=null_marker,
            padding=self.padding,
            styled=self.styled,
        )

        # The command set is fixed for the lifetime of the session;
        # a name collision raises DuplicateCommandError here.
        for command in BUILTIN_COMMANDS:
            self.router.register(command)

    # -----------------------
    # Session
    # -----------------------

    def start(self) -> str:
        """Start the session and build the completion index.

        Reserved words come from the live connection, so this must run
        after the connection is established.
        """
        self.running = True
        if not self.completion.built:
            words = self.connection.reserved_words()
            names: set[str] = set(self.router.names())
            names.update(words)
            names.update(w.lower() for w in words)
            self.completion.build(names)
            logger.debug("completion index built: %d keys", len(names))
        return "Type .help for commands."

    def prompt(self, continuation: bool = False) -> str:
        if continuation:
            return str(
                self.config.get_path(
                    "shell.continuation_prompt",
                    cfg_module.DEFAULT_CONTINUATION_PROMPT,
                )
            )
        return str(
            self.config.get_path("shell.prompt", cfg_module.DEFAULT_PROMPT)
        )

    def complete(self, text: str) -> list[str]:
        """Full-line completions for ``text``."""
        return self.completion.complete(text)

    def close(self) -> None:
        self.running = False
        self.pager.discard()

    # -----------------------
    # Line handling
    # -----------------------

    def handle_line(self, line: str) -> str:
        """Handle one complete input line and return its output."""
        if not line.strip():
            return ""

        match = self.router.match(line)
        if match is None:
            return self._execute_statement(line)

        logger.debug(
            "dispatching %s with argument %r",
            match.command.name,
            match.argument,
        )
        try:
            return self._run_command(match.command, match.argument)
        except CommandError as e:
            return f"{e}\n"
        except StatementError as e:
            return ErrorOutput(e.describe() + "\n")

    def _run_command(self, command: Command, argument: str) -> str:
        kind = command.kind

        if kind is CommandKind.EXIT:
            self.close()
            return str(self.config.get_path("shell.farewell", "Bye!")) + "\n"

        if kind is CommandKind.DESCRIBE:
            return self._handle_describe(argument)

        if kind is CommandKind.FETCH_MORE:
            out = io.StringIO()
            self.pager.next_page(out)
            return out.getvalue()

        if kind is CommandKind.HELP:
            return self._generate_help()

        raise CommandError(f"Unknown command: {command.name}")

    def _handle_describe(self, argument: str) -> str:
        table_name = argument.strip()
        if not table_name:
            raise CommandError("describe requires a table name")
        source = self.connection.describe(table_name)
        out = io.StringIO()
        self.pager.render_all(source, out)
        return out.getvalue()

    def _execute_statement(self, sql: str) -> str:
        try:
            source = self.connection.execute(sql)
        except StatementError as e:
            return ErrorOutput(e.describe() + "\n")

        self.history.append(sql)

        out = io.StringIO()
        try:
            self.pager.start(source, out)
        except StatementError as e:
            # nothing is written before a fetch fails
            return ErrorOutput(e.describe() + "\n")
        return out.getvalue()

    def _generate_help(self) -> str:
        commands = self.router.commands()
        table = Table(2, padding=self.padding)
        table.append_row(
            ["Command", "Description"],
            style=HEADER_STYLE if self.styled else "",
        )
        for command in commands:
            table.append_row([command.usage or command.name, command.summary])
        return (
            table.render_to_string()
            + "Any other input is sent to the database as a statement.\n"
        )
