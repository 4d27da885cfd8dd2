# tests/conftest.py

from __future__ import annotations

import re
from datetime import datetime, timedelta

import pytest

from tnt.forest import Forest
from tnt.models import Task

BASE = datetime(2024, 1, 1, 9, 0, 0)
ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")


def strip_ansi(text: str) -> str:
    return ANSI_RE.sub("", text)


class FakeClock:
    """
    Deterministic clock: every call returns a moment one second later.
    """

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock(BASE + timedelta(hours=1))


def make_task(idx: int, value: str, parent: int | None = None, children: list[int] | None = None,
              active: bool = False, done: bool = False) -> Task:
    return Task(
        id=idx,
        value=value,
        parent=parent,
        children=list(children or []),
        active=active,
        done=done,
        last_touched=BASE,
    )


def scenario_tasks() -> list[Task]:
    """
    foo (0)
      baz (2)  <- active
      d (3)
        e (4)
        f (5)
    bar (1, done)
    """
    return [
        make_task(0, "foo", children=[2, 3]),
        make_task(1, "bar", done=True),
        make_task(2, "baz", parent=0, active=True),
        make_task(3, "d", parent=0, children=[4, 5]),
        make_task(4, "e", parent=3),
        make_task(5, "f", parent=3),
    ]


@pytest.fixture()
def forest(clock: FakeClock) -> Forest:
    return Forest(scenario_tasks(), clock=clock)


@pytest.fixture()
def empty_forest(clock: FakeClock) -> Forest:
    return Forest(clock=clock)
