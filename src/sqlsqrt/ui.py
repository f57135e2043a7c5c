# SQLsqrt — Interactive SQL Shell with Streaming Table Rendering
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.formatted_text import ANSI
from prompt_toolkit.history import History
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.patch_stdout import patch_stdout
from prompt_toolkit.shortcuts import clear as pt_clear
from prompt_toolkit.shortcuts import print_formatted_text
from prompt_toolkit.styles import Style

from .interfaces import HistoryStore

if TYPE_CHECKING:
    from .kernel import Session  # pragma: no cover


# ----------------------------
# Config helpers (read through session.config.get_path)
# ----------------------------


def _cfg_get_path(session: Session | None, path: str, default):
    if session is None:
        return default
    cfg = getattr(session, "config", None)
    if cfg is None or not hasattr(cfg, "get_path"):
        return default
    return cfg.get_path(path, default)


def _cfg_dict(session: Session | None, path: str, default: dict) -> dict:
    val = _cfg_get_path(session, path, default)
    return val if isinstance(val, dict) else default


def _cfg_int(session: Session | None, path: str, default: int) -> int:
    val = _cfg_get_path(session, path, default)
    return val if isinstance(val, int) else default


# ----------------------------
# Theme / Style
# ----------------------------


def _default_style_dict() -> dict[str, str]:
    return {
        "completion-menu": "bg:#111111 #d0d0d0",
        "completion-menu.completion": "bg:#111111 #d0d0d0",
        "completion-menu.completion.current": "bg:#303030 #ffffff bold",
        "completion-menu.meta.completion": "bg:#111111 #808080",
        "completion-menu.meta.completion.current": "bg:#303030 #a0a0a0",
        "scrollbar.background": "bg:#202020",
        "scrollbar.button": "bg:#505050",
    }


def _build_style(session: Session | None) -> Style:
    base = _default_style_dict()
    overrides = _cfg_dict(session, "ui.theme.style", {})
    # only keep string->string
    for k, v in list(overrides.items()):
        if isinstance(k, str) and isinstance(v, str):
            base[k] = v
    return Style.from_dict(base)


# ----------------------------
# Completion + history adapters
# ----------------------------


class SqlCompleter(Completer):
    """Offers the session's full-line completions for the current input.

    The completion index returns whole replacement lines, so every
    completion replaces all text before the cursor.
    """

    def __init__(self, session: Session | None) -> None:
        self.session = session

    def get_completions(
        self, document, complete_event
    ) -> Iterable[Completion]:
        if self.session is None:
            return
        before = document.text_before_cursor or ""
        if not before:
            return

        # While typing, only suggest once a partial word exists;
        # Tab on a word boundary lists every candidate.
        start = self.session.completion.word_start(before)
        partial = before[start:]
        if not partial and not complete_event.completion_requested:
            return

        for replacement in self.session.complete(before):
            yield Completion(
                replacement,
                start_position=-len(before),
                display=replacement[start:],
            )


class StoreHistory(History):
    """Line-editor history backed by the session's HistoryStore.

    Only statements that executed successfully reach the store (the
    session appends them), so store_string does not persist anything.
    """

    def __init__(self, store: HistoryStore, limit: int = 500) -> None:
        super().__init__()
        self.store = store
        self.limit = limit

    def load_history_strings(self) -> Iterable[str]:
        # prompt_toolkit expects newest first
        yield from reversed(self.store.recent(self.limit))

    def store_string(self, string: str) -> None:
        return None


# ----------------------------
# PromptSession UI
# ----------------------------


class PromptToolkitUI:
    """
    Terminal-friendly UI:
      - Keeps normal terminal scrollback + drag-select copy.
      - Uses PromptSession for completion menus and history recall.
      - Ctrl+L clears the screen.
    """

    def __init__(self, session: Session | None = None) -> None:
        self.session = session
        self.prompt_session: PromptSession[str] | None = None
        self._completer: SqlCompleter | None = None
        self._style = _build_style(session)

        # Track whether we ended on a newline (to prevent prompt mangling)
        self._needs_newline_before_prompt = False

    def _build_history(self) -> History | None:
        if self.session is None:
            return None
        limit = _cfg_int(self.session, "history.recall_limit", 500)
        return StoreHistory(self.session.history, limit=limit)

    def _ensure_session(self) -> None:
        if self.prompt_session is not None:
            return

        self._completer = SqlCompleter(self.session)
        self.prompt_session = PromptSession(
            key_bindings=self.build_key_bindings(),
            completer=self._completer,
            complete_while_typing=True,
            history=self._build_history(),
            style=self._style,
        )

    # ---------- public API ----------

    def read(self, prompt: str) -> str:
        """Read one line. Raises EOFError at end of input."""
        self._ensure_session()
        assert self.prompt_session is not None

        if self._needs_newline_before_prompt:
            print_formatted_text(ANSI("\n"), style=self._style, end="")
            self._needs_newline_before_prompt = False

        with patch_stdout():
            return self.prompt_session.prompt(ANSI(prompt + " "))

    def write(self, text: str) -> None:
        """Write EXACTLY what we receive (no extra newline).

        Track prompt safety.
        """
        if not text:
            return
        print_formatted_text(ANSI(text), style=self._style, end="")
        self._needs_newline_before_prompt = not text.endswith("\n")

    def clear(self) -> None:
        pt_clear()

    # ---------- keybindings ----------

    def build_key_bindings(self) -> KeyBindings:
        kb = KeyBindings()

        @kb.add("c-l")
        def _(event):
            event.app.renderer.clear()
            event.app.invalidate()

        return kb
