# tests/test_snapshot.py

from __future__ import annotations

import json
from pathlib import Path

import pytest

from task_browser.query.memory_path import filter_tasks
from task_browser.tasks.snapshot import load_snapshot, save_snapshot
from task_browser.tasks.task_models import BrowseRequest

from .conftest import NOW, SAMPLE, ids


def test_save_then_browse_loaded_snapshot(tmp_path: Path) -> None:
    path = tmp_path / "snap.json"
    save_snapshot(path, SAMPLE)
    loaded = load_snapshot(path)
    assert loaded == SAMPLE
    req = BrowseRequest.build(availability="available", order="due", ascending=True)
    assert ids(filter_tasks(req, loaded, now=NOW)) == [1, 6, 2, 5, 8]


def test_bare_list_with_iso_timestamps(tmp_path: Path) -> None:
    path = tmp_path / "snap.json"
    path.write_text(
        json.dumps(
            [
                {"id": 1, "content": "a", "tags": ["x"], "completed": False, "captured": "2024-01-01T00:00:00Z"},
                {"id": 2, "content": "b", "captured": 0},
            ]
        ),
        "utf-8",
    )
    loaded = load_snapshot(path)
    assert [r.id for r in loaded] == [1, 2]
    assert loaded[0].captured == 1704067200.0
    assert loaded[1].tags == frozenset()


@pytest.mark.parametrize(
    "payload",
    [
        {"tasks": "nope"},
        [1, 2],
        [{"content": "missing id and captured"}],
    ],
)
def test_malformed_snapshot(tmp_path: Path, payload) -> None:
    path = tmp_path / "snap.json"
    path.write_text(json.dumps(payload), "utf-8")
    with pytest.raises(ValueError):
        load_snapshot(path)
