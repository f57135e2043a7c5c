# SQLsqrt — Interactive SQL Shell with Streaming Table Rendering
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Character trie used for command routing and completion.

Keys are kept case-sensitive. Iteration is in lexicographic key order,
which is the order completion candidates are offered in.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Any


class TrieNode:
    __slots__ = ("children", "is_end", "value")

    def __init__(self) -> None:
        self.children: dict[str, TrieNode] = {}
        self.is_end = False
        self.value: Any = None


class KeywordTrie:
    """Ordered key -> value mapping with prefix queries."""

    def __init__(
        self,
        items: Iterable[tuple[str, Any]] = (),
        *,
        unique: bool = False,
    ) -> None:
        self.root = TrieNode()
        self.unique = unique
        self._size = 0
        for key, value in items:
            self.insert(key, value)

    def __len__(self) -> int:
        return self._size

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        node = self._find_node(key)
        return node is not None and node.is_end

    def __iter__(self) -> Iterator[str]:
        for key, _value in self.iter_prefix(""):
            yield key

    def insert(self, key: str, value: Any = None) -> None:
        """Insert or replace ``key``.

        With ``unique=True`` a second insert of the same key raises KeyError.
        """
        node = self.root
        for char in key:
            child = node.children.get(char)
            if child is None:
                child = TrieNode()
                node.children[char] = child
            node = child
        if node.is_end:
            if self.unique:
                raise KeyError(key)
        else:
            self._size += 1
        node.is_end = True
        node.value = value

    def get(self, key: str, default: Any = None) -> Any:
        node = self._find_node(key)
        if node is None or not node.is_end:
            return default
        return node.value

    def _find_node(self, key: str) -> TrieNode | None:
        node = self.root
        for char in key:
            node = node.children.get(char)
            if node is None:
                return None
        return node

    def longest_prefix(self, text: str) -> tuple[str, Any] | None:
        """Return the longest key that is a prefix of ``text``.

        Walks ``text`` once; the last key-terminating node seen wins.
        """
        node = self.root
        best: tuple[str, Any] | None = None
        if node.is_end:
            best = ("", node.value)
        for length, char in enumerate(text, start=1):
            node = node.children.get(char)
            if node is None:
                break
            if node.is_end:
                best = (text[:length], node.value)
        return best

    def iter_prefix(self, prefix: str) -> Iterator[tuple[str, Any]]:
        """Yield every (key, value) whose key starts with ``prefix``."""
        start = self._find_node(prefix)
        if start is None:
            return
        # Explicit stack; children pushed in reverse so pops come out sorted.
        stack: list[tuple[str, TrieNode]] = [(prefix, start)]
        while stack:
            key, node = stack.pop()
            if node.is_end:
                yield key, node.value
            for char in sorted(node.children, reverse=True):
                stack.append((key + char, node.children[char]))
