# tests/conftest.py

from __future__ import annotations

from pathlib import Path

import pytest

from task_browser.tasks.task_models import TaskRecord
from task_browser.tasks.task_store import TaskStore

NOW = 1_700_000_000.0
HOUR = 3600.0


def _task(id, content, tags, completed, captured, start=None, due=None, schedule=None) -> TaskRecord:
    return TaskRecord(
        id=id,
        content=content,
        tags=frozenset(tags),
        completed=completed,
        captured=NOW + captured * HOUR,
        start=None if start is None else NOW + start * HOUR,
        due=None if due is None else NOW + due * HOUR,
        schedule=None if schedule is None else NOW + schedule * HOUR,
    )


# Offsets are in hours relative to NOW. ids match the insertion order of a fresh store.
SAMPLE: list[TaskRecord] = [
    _task(1, "Write quarterly report", {"work", "urgent"}, False, -10, due=5),
    _task(2, "Buy groceries", {"home"}, False, -9, start=-1, schedule=2),
    _task(3, "Fix homework printer", {"homework"}, False, -8, start=3, due=5),
    _task(4, "Call plumber", {"home", "urgent"}, True, -7, due=1),
    _task(5, "Review pull request #42", {"work"}, False, -6, start=-2, schedule=1),
    _task(6, "Plan 100% offsite", {"work", "100%"}, False, -5, due=8, schedule=2),
    _task(7, "Renew passport", set(), False, -4, start=0),
    _task(8, "Email Work contacts", {"Work"}, False, -3),
]


def ids(records) -> list[int]:
    return [r.id for r in records]


@pytest.fixture()
def now() -> float:
    return NOW


@pytest.fixture()
def sample() -> list[TaskRecord]:
    return list(SAMPLE)


@pytest.fixture()
def store(tmp_path: Path) -> TaskStore:
    return TaskStore(tmp_path / "tasks.sqlite3")


@pytest.fixture()
def seeded_store(store: TaskStore) -> TaskStore:
    """
    TaskStore holding SAMPLE.

    We keep a real SQLite file here because the SQL itself is what the
    store-path tests exercise.
    """
    for t in SAMPLE:
        task_id = store.add_task(
            content=t.content,
            tags=t.tags,
            completed=t.completed,
            captured=t.captured,
            start=t.start,
            due=t.due,
            schedule=t.schedule,
        )
        assert task_id == t.id
    return store
