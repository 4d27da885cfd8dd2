# tests/test_cli.py

from __future__ import annotations

import io
from pathlib import Path

import pytest

from tnt.main import main
from tnt.storage import Storage

from .conftest import strip_ansi


@pytest.fixture()
def task_file(tmp_path: Path) -> Path:
    return tmp_path / "tasks.json"


@pytest.fixture()
def tnt(task_file: Path, capsys):
    """
    Run one tnt command against the temp file; returns (exit code, stdout).
    """

    def run(*argv: str) -> tuple[int, str]:
        code = main(["-f", str(task_file), *argv])
        return code, strip_ansi(capsys.readouterr().out)

    return run


def _active(task_file: Path) -> str | None:
    for task in Storage.load_tasks(task_file):
        if task.active:
            return task.value
    return None


def test_view_without_tasks_does_not_create_file(tnt, task_file: Path) -> None:
    code, out = tnt()
    assert code == 0
    assert "No active task." in out
    assert not task_file.exists()


def test_add_first_task_becomes_active(tnt, task_file: Path) -> None:
    code, out = tnt("add", "write", "report")
    assert code == 0
    assert "Added task 0." in out
    assert "Now working on: 0. write report *" in out
    assert _active(task_file) == "write report"

    _, out = tnt("view")
    assert out.splitlines() == ["0. write report *"]


def test_first_also_done_flow(tnt, task_file: Path) -> None:
    tnt("add", "project")
    tnt("first", "step", "one")
    assert _active(task_file) == "step one"

    tnt("also", "step", "two")
    tasks = Storage.load_tasks(task_file)
    assert tasks[2].parent == 0
    assert tasks[0].children == [1, 2]
    assert _active(task_file) == "step one"

    _, out = tnt("view")
    assert "under: project" in out

    _, out = tnt("done")
    assert "Completed: step one" in out
    assert "Now working on: 2. step two *" in out

    tnt("done")
    assert _active(task_file) == "project"
    _, out = tnt("done")
    assert "Nothing left to do." in out
    assert _active(task_file) is None


def test_add_with_unknown_parent(tnt, task_file: Path) -> None:
    tnt("add", "root")
    _, out = tnt("add", "child", "--parent", "9")
    assert "Task id 9 not found." in out
    assert len(Storage.load_tasks(task_file)) == 1


def test_list_and_list_all(tnt) -> None:
    tnt("add", "foo")
    tnt("add", "bar", "-p", "0")
    tnt("add", "qux")
    _, out = tnt("list")
    assert out.splitlines() == ["0. foo", "2. qux"]
    _, out = tnt("list", "--all")
    assert out.splitlines() == ["0. foo", "  1. bar *", "2. qux"]


def test_list_empty(tnt) -> None:
    _, out = tnt("list")
    assert "No tasks." in out


def test_local_lists_leaves_of_current_root(tnt) -> None:
    tnt("add", "house")
    tnt("add", "paint", "-p", "0")
    tnt("add", "kitchen", "-p", "1")
    tnt("add", "bedroom", "-p", "1")
    tnt("add", "garden")
    _, out = tnt("local")
    assert out.splitlines() == ["2. kitchen *", "3. bedroom"]


def test_stdin_adds_under_current(tnt, task_file: Path, monkeypatch) -> None:
    tnt("add", "groceries")
    monkeypatch.setattr("sys.stdin", io.StringIO("milk\n\neggs\n"))
    _, out = tnt("stdin", "--current")
    assert "Added 2 tasks." in out
    tasks = Storage.load_tasks(task_file)
    assert [t.value for t in tasks] == ["groceries", "milk", "eggs"]
    assert tasks[0].children == [1, 2]
    # the first child of the active task takes focus
    assert _active(task_file) == "milk"


def test_switch_by_name_and_id(tnt, task_file: Path) -> None:
    tnt("add", "write report")
    tnt("add", "call the bank")
    _, out = tnt("switch", "bank")
    assert "Now working on: 1. call the bank *" in out
    assert _active(task_file) == "call the bank"

    tnt("switch", "--id", "0")
    assert _active(task_file) == "write report"

    _, out = tnt("switch", "zzz")
    assert "No task matches 'zzz'." in out
    _, out = tnt("switch", "--id", "5")
    assert "Task id 5 not found." in out


def test_switch_skips_done_tasks(tnt, task_file: Path) -> None:
    tnt("add", "report draft")
    tnt("add", "report final")
    tnt("done")
    _, out = tnt("switch", "report")
    assert "1. report final" in out
    _, out = tnt("switch", "--id", "0")
    assert "Task 0 is already done." in out


def test_clear(tnt, task_file: Path) -> None:
    tnt("add", "a")
    tnt("add", "b")
    _, out = tnt("clear")
    assert "Cleared 2 tasks." in out
    assert Storage.load_tasks(task_file) == []


def test_malformed_file_reports_error_and_keeps_file(tnt, task_file: Path, capsys) -> None:
    task_file.write_text("{broken", encoding="utf-8")
    code = main(["-f", str(task_file), "add", "x"])
    err = capsys.readouterr().err
    assert code == 1
    assert "tnt:" in err
    assert task_file.read_text(encoding="utf-8") == "{broken"


def test_done_task_cannot_take_new_children(tnt, task_file: Path, monkeypatch) -> None:
    tnt("add", "a")
    tnt("done")
    _, out = tnt("add", "b", "-p", "0", "-s")
    assert "Task 0 is already done." in out

    monkeypatch.setattr("sys.stdin", io.StringIO("c\n"))
    _, out = tnt("stdin", "--parent", "0")
    assert "Task 0 is already done." in out

    tasks = Storage.load_tasks(task_file)
    assert len(tasks) == 1
    assert not any(t.active and t.done for t in tasks)
