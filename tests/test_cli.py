# tests/test_cli.py
from __future__ import annotations

import io
import logging
import sqlite3
from dataclasses import dataclass, field
from pathlib import Path

import pytest

import sqlsqrt.cli as cli
from sqlsqrt.config import YAMLConfig
from sqlsqrt.errors import StatementError
from sqlsqrt.kernel import Session
from sqlsqrt.store import MemoryHistoryStore, SQLiteHistoryStore


@dataclass
class FakeUI:
    """
    UI abstraction used by CLI:
      - read(prompt) -> str (an exception instance in inputs is raised)
      - write(text) -> None
    """

    inputs: list
    outputs: list[str] = field(default_factory=list)
    prompts: list[str] = field(default_factory=list)

    def read(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self.inputs:
            raise EOFError
        item = self.inputs.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item

    def write(self, text: str) -> None:
        self.outputs.append(text)

    def clear(self) -> None:
        pass


# -------------------------------------------------------------------
# Helper: Create fake dependencies for Session
# -------------------------------------------------------------------


class FakeRowSource:
    def __init__(self, rows: list[tuple]):
        self.rows = list(rows)

    def column_count(self) -> int:
        return 1

    def column_name(self, index: int) -> str:
        return "value"

    def next_row(self):
        return self.rows.pop(0) if self.rows else None

    def close(self) -> None:
        pass


class FakeConnection:
    def __init__(self, fail_with: Exception | None = None):
        self.executed: list[str] = []
        self.fail_with = fail_with
        self.database = "fake.db"

    def execute(self, sql: str) -> FakeRowSource:
        self.executed.append(sql)
        if self.fail_with is not None:
            raise self.fail_with
        return FakeRowSource([(len(self.executed),)])

    def describe(self, table_name: str) -> FakeRowSource:
        return FakeRowSource([])

    def reserved_words(self) -> list[str]:
        return ["SELECT"]

    def close(self) -> None:
        pass


def make_session(conn: FakeConnection | None = None) -> Session:
    s = Session(
        connection=conn or FakeConnection(),
        history=MemoryHistoryStore(),
        config=YAMLConfig({}),
    )
    s.start()
    return s


# -------------------------------------------------------------------
# run_repl behavior
# -------------------------------------------------------------------


def test_run_repl_executes_lines_until_exit() -> None:
    conn = FakeConnection()
    session = make_session(conn)
    ui = FakeUI(inputs=["select 1", "", "   ", ".exit", "select 2"])

    cli.run_repl(session, ui=ui)

    assert conn.executed == ["select 1"]
    assert not session.running
    assert ui.outputs[-1] == "Bye!\n"
    assert any("Fetched 1 rows" in s for s in ui.outputs)


def test_run_repl_joins_continuation_lines() -> None:
    conn = FakeConnection()
    session = make_session(conn)
    ui = FakeUI(inputs=["select \\", "  1 \\", "from t", ".exit"])

    cli.run_repl(session, ui=ui)

    assert conn.executed == ["select \n  1 \nfrom t"]
    assert "(cont.)" not in ui.prompts[0]
    assert "(cont.)" in ui.prompts[1]
    assert "(cont.)" in ui.prompts[2]
    assert "(cont.)" not in ui.prompts[3]


def test_run_repl_colors_prompt_for_ui() -> None:
    ui = FakeUI(inputs=[])
    cli.run_repl(make_session(), ui=ui)

    assert ui.prompts[0] == cli.colorize_prompt("SQLsqrt >")
    assert "\033[" in ui.prompts[0]


def test_run_repl_eof_says_bye() -> None:
    session = make_session()
    ui = FakeUI(inputs=[])

    cli.run_repl(session, ui=ui)

    assert ui.outputs == ["\nBye!\n"]
    assert not session.running


def test_run_repl_interrupt_cancels_continuation() -> None:
    conn = FakeConnection()
    ui = FakeUI(
        inputs=["select \\", KeyboardInterrupt(), "select 2", ".exit"]
    )

    cli.run_repl(make_session(conn), ui=ui)

    assert conn.executed == ["select 2"]
    assert "\n[Cancelled]\n" in ui.outputs


def test_run_repl_interrupt_at_prompt_ends_session() -> None:
    conn = FakeConnection()
    ui = FakeUI(inputs=[KeyboardInterrupt(), "select 1"])

    cli.run_repl(make_session(conn), ui=ui)

    assert conn.executed == []
    assert ui.outputs == ["\nBye!\n"]


def test_run_repl_unhandled_exception_writes_crash_log(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("SQLSQRT_DATA_HOME", str(tmp_path))
    conn = FakeConnection(fail_with=RuntimeError("boom"))
    ui = FakeUI(inputs=["select 1", ".exit"])

    cli.run_repl(make_session(conn), ui=ui)

    assert (
        "\033[31m[ERROR] Unhandled exception: RuntimeError: boom\033[0m\n"
        in ui.outputs
    )
    crash = (tmp_path / "sqlsqrt" / "logs" / "crash.log").read_text(
        encoding="utf-8"
    )
    assert "raw=select 1" in crash
    assert "db=fake.db" in crash


def test_run_repl_statement_error_is_not_a_crash(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("SQLSQRT_DATA_HOME", str(tmp_path))
    conn = FakeConnection(
        fail_with=StatementError("no such table: t", "executing statement")
    )
    ui = FakeUI(inputs=["select * from t", ".exit"])

    cli.run_repl(make_session(conn), ui=ui)

    assert (
        "\033[31mError executing statement: no such table: t\033[0m\n"
        in ui.outputs
    )
    assert not (tmp_path / "sqlsqrt" / "logs" / "crash.log").exists()


def test_run_repl_plain_mode_sends_errors_to_error_fn() -> None:
    conn = FakeConnection(
        fail_with=StatementError("no such table: t", "executing statement")
    )
    lines = iter(["select * from t", ".it", ".exit"])
    printed: list[str] = []
    errors: list[str] = []

    cli.run_repl(
        make_session(conn),
        input_fn=lambda prompt: next(lines),
        output_fn=printed.append,
        error_fn=errors.append,
    )

    assert errors == ["Error executing statement: no such table: t"]
    # a command failure is ordinary output
    assert printed == ["No active statement", "Bye!"]


def test_run_repl_forwards_statements_untrimmed() -> None:
    conn = FakeConnection()
    session = make_session(conn)
    ui = FakeUI(inputs=["  select 1  ", " .exit", ".exit"])

    cli.run_repl(session, ui=ui)

    assert conn.executed == ["  select 1  ", " .exit"]
    assert ui.outputs[-1] == "Bye!\n"
    assert not session.running


def test_run_repl_plain_mode_uses_input_and_output_fns() -> None:
    lines = iter(["select 1", ".exit"])
    prompts: list[str] = []
    printed: list[str] = []

    def fake_input(prompt: str) -> str:
        prompts.append(prompt)
        return next(lines)

    cli.run_repl(make_session(), input_fn=fake_input, output_fn=printed.append)

    assert prompts == ["SQLsqrt > ", "SQLsqrt > "]
    assert printed[-1] == "Bye!"
    assert printed[0].endswith("Fetched 1 rows")


# -------------------------------------------------------------------
# cli.main
# -------------------------------------------------------------------


@pytest.fixture(autouse=True)
def restore_root_logger():
    """cli.main reconfigures the root logger; put pytest's handlers back."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)


@pytest.fixture
def data_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    data = tmp_path / "data"
    monkeypatch.setenv("SQLSQRT_DATA_HOME", str(data))
    monkeypatch.delenv("SQLSQRT_PLAIN_UI", raising=False)
    return data


def test_main_runs_plain_session_end_to_end(
    data_home: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    db_path = tmp_path / "shop.db"
    lines = iter(
        [
            "create table items (name text)",
            "insert into items values ('pen')",
            "select name from items",
            ".exit",
        ]
    )
    printed: list[str] = []
    real_run_repl = cli.run_repl

    def fake_run_repl(session, ui=None):
        assert ui is None
        real_run_repl(
            session,
            input_fn=lambda prompt: next(lines),
            output_fn=printed.append,
        )

    monkeypatch.setattr(cli, "run_repl", fake_run_repl)

    assert cli.main([str(db_path), "--plain"]) == 0

    out = "\n".join(printed)
    assert '"pen"' in out
    assert "Fetched 1 rows" in out

    history = SQLiteHistoryStore(data_home / "sqlsqrt" / "history.db")
    assert history.recent() == [
        "create table items (name text)",
        "insert into items values ('pen')",
        "select name from items",
    ]


def test_main_uses_prompt_toolkit_ui_by_default(
    data_home: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    created: dict[str, object] = {}

    class StubUI:
        def __init__(self, session: Session) -> None:
            created["ui"] = self
            self.outputs: list[str] = []

        def write(self, text: str) -> None:
            self.outputs.append(text)

    def fake_run_repl(session, ui=None):
        created["repl_ui"] = ui

    monkeypatch.setattr(cli, "PromptToolkitUI", StubUI)
    monkeypatch.setattr(cli, "run_repl", fake_run_repl)

    assert cli.main([]) == 0

    ui = created["ui"]
    assert created["repl_ui"] is ui
    assert ui.outputs == ["Type .help for commands.\n"]


def test_main_plain_ui_from_environment(
    data_home: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("SQLSQRT_PLAIN_UI", "1")
    seen: dict[str, object] = {}

    def fake_run_repl(session, ui=None):
        seen["ui"] = ui
        seen["page_size"] = session.pager.page_size
        seen["history"] = session.history

    monkeypatch.setattr(cli, "run_repl", fake_run_repl)

    assert cli.main(["--page-size", "5", "--no-history"]) == 0

    assert seen["ui"] is None
    assert seen["page_size"] == 5
    assert isinstance(seen["history"], MemoryHistoryStore)
    assert not (data_home / "sqlsqrt" / "history.db").exists()


def test_main_disables_styling_when_stdout_is_piped(
    data_home: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    seen: dict[str, object] = {}

    def fake_run_repl(session, ui=None):
        seen["styled"] = session.styled

    monkeypatch.setattr(cli.sys, "stdout", io.StringIO())
    monkeypatch.setattr(cli, "run_repl", fake_run_repl)

    assert cli.main(["--plain"]) == 0
    assert seen["styled"] is False


def test_main_connection_failure_is_fatal(
    data_home: Path,
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    target = tmp_path / "missing" / "dir" / "x.db"

    assert cli.main([str(target), "--plain"]) == 1

    err = capsys.readouterr().err
    assert err.startswith("Fatal error connecting to database: ")


def test_main_rejects_bad_page_size(data_home: Path) -> None:
    with pytest.raises(SystemExit) as exc_info:
        cli.main(["--page-size", "0"])
    assert exc_info.value.code == 2


def test_main_rejects_bad_log_level(
    data_home: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    assert cli.main(["--log-level", "LOUD"]) == 2
    assert "Invalid log level: LOUD" in capsys.readouterr().err


def test_history_schema_created_on_first_use(data_home: Path) -> None:
    cfg = YAMLConfig({"history": {"enabled": True}})

    store = cli.open_history(cfg, enabled=True, database="a.db")
    store.append("select 1")

    conn = sqlite3.connect(str(data_home / "sqlsqrt" / "history.db"))
    try:
        rows = conn.execute("SELECT statement, database FROM history").fetchall()
    finally:
        conn.close()
    assert rows == [("select 1", "a.db")]


def test_history_disabled_in_config(data_home: Path) -> None:
    cfg = YAMLConfig({"history": {"enabled": False}})
    store = cli.open_history(cfg, enabled=True, database="")
    assert isinstance(store, MemoryHistoryStore)
