# tests/test_trie.py
from __future__ import annotations

import pytest

from sqlsqrt.trie import KeywordTrie


def test_insert_get_and_contains() -> None:
    trie = KeywordTrie([("select", 1), ("set", 2)])

    assert len(trie) == 2
    assert "select" in trie
    assert "sel" not in trie
    assert 42 not in trie
    assert trie.get("set") == 2
    assert trie.get("se", "missing") == "missing"


def test_reinsert_replaces_value_without_growing() -> None:
    trie = KeywordTrie()
    trie.insert("key", "old")
    trie.insert("key", "new")

    assert len(trie) == 1
    assert trie.get("key") == "new"


def test_unique_trie_rejects_duplicate_keys() -> None:
    trie = KeywordTrie(unique=True)
    trie.insert(".exit", "first")

    with pytest.raises(KeyError):
        trie.insert(".exit", "second")
    assert trie.get(".exit") == "first"


def test_keys_are_case_sensitive() -> None:
    trie = KeywordTrie([("SELECT", None)])
    assert "select" not in trie
    assert list(trie.iter_prefix("sel")) == []


def test_iteration_is_lexicographic() -> None:
    trie = KeywordTrie((k, None) for k in ["set", "select", "abc", "ab", "s"])
    assert list(trie) == ["ab", "abc", "s", "select", "set"]


def test_iter_prefix_includes_exact_key() -> None:
    trie = KeywordTrie((k, k.upper()) for k in ["se", "select", "set", "from"])

    assert list(trie.iter_prefix("se")) == [
        ("se", "SE"),
        ("select", "SELECT"),
        ("set", "SET"),
    ]
    assert list(trie.iter_prefix("x")) == []


def test_longest_prefix_prefers_longer_key() -> None:
    trie = KeywordTrie([(".d", "short"), (".describe", "long")])

    assert trie.longest_prefix(".describe foo") == (".describe", "long")
    assert trie.longest_prefix(".desc") == (".d", "short")
    assert trie.longest_prefix(".x") is None
    assert trie.longest_prefix("") is None


def test_longest_prefix_with_empty_key() -> None:
    trie = KeywordTrie([("", "root")])
    assert trie.longest_prefix("anything") == ("", "root")
