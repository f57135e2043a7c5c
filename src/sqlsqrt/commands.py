# SQLsqrt — Interactive SQL Shell with Streaming Table Rendering
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Command routing and completion for the SQLsqrt shell.

Commands are a closed set of kinds (describe, exit, fetch more, help)
registered once per session. Routing is a longest-prefix match of the
input line against the registered names; a line no name prefixes is a
statement, not a command.

The completion index is a second trie holding command names and the
reserved words reported by the connected database.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum, auto

from .errors import DuplicateCommandError
from .trie import KeywordTrie


class CommandKind(Enum):
    DESCRIBE = auto()
    EXIT = auto()
    FETCH_MORE = auto()
    HELP = auto()


@dataclass(frozen=True)
class Command:
    name: str
    kind: CommandKind
    usage: str = ""
    summary: str = ""


@dataclass(frozen=True)
class CommandMatch:
    command: Command
    argument: str


class CommandRouter:
    """Maps input lines to registered commands."""

    def __init__(self) -> None:
        self._trie = KeywordTrie(unique=True)

    def __len__(self) -> int:
        return len(self._trie)

    def register(self, command: Command) -> None:
        if not command.name:
            raise ValueError("command name must not be empty")
        try:
            self._trie.insert(command.name, command)
        except KeyError:
            raise DuplicateCommandError(
                f"command {command.name!r} is already registered"
            ) from None

    def commands(self) -> list[Command]:
        return [cmd for _name, cmd in self._trie.iter_prefix("")]

    def names(self) -> list[str]:
        return list(self._trie)

    def match(self, line: str) -> CommandMatch | None:
        """Resolve ``line`` to a command and its argument tail.

        Returns None when no registered name prefixes the line; the caller
        then treats the whole line as a statement.
        """
        if not line:
            return None
        found = self._trie.longest_prefix(line)
        if found is None:
            return None
        name, command = found
        # The matched key length marks the end of the command token;
        # spaces between it and the argument are dropped.
        end = len(name)
        while end < len(line) and line[end] == " ":
            end += 1
        return CommandMatch(command=command, argument=line[end:])


# Characters that end a completable word.
WORD_BOUNDARIES = " (),.@"


class CompletionIndex:
    """Prefix-range lookups over command names and reserved words."""

    def __init__(self) -> None:
        self._trie = KeywordTrie()
        self.built = False

    def __len__(self) -> int:
        return len(self._trie)

    def build(self, names: Iterable[str]) -> None:
        if self.built:
            raise RuntimeError("completion index is already built")
        for name in names:
            if name:
                self._trie.insert(name)
        self.built = True

    @staticmethod
    def word_start(text: str) -> int:
        """Index where the trailing partial word of ``text`` begins.

        A boundary at position 0 (e.g. the dot of ``.de``) counts as part
        of the word, same as no boundary at all.
        """
        pos = max(text.rfind(ch) for ch in WORD_BOUNDARIES)
        if pos <= 0:
            return 0
        return pos + 1

    def complete(self, partial: str) -> list[str]:
        """Full-line replacements for the trailing partial word."""
        if not partial:
            return []
        start = self.word_start(partial)
        head = partial[:start]
        key = partial[start:]
        return [head + name for name, _value in self._trie.iter_prefix(key)]
