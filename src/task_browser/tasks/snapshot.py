# src/task_browser/tasks/snapshot.py

from __future__ import annotations

import json
import logging
from pathlib import Path

from .task_models import TaskRecord

logger = logging.getLogger(__name__)


def load_snapshot(path: str | Path) -> list[TaskRecord]:
    """
    Load task records from a JSON snapshot.

    Accepts either a bare list of task objects or {"tasks": [...]}.
    A malformed file raises ValueError (json.JSONDecodeError is one).
    """
    path = Path(path)
    data = json.loads(path.read_text("utf-8"))
    if isinstance(data, dict):
        data = data.get("tasks")
    if not isinstance(data, list):
        raise ValueError(f"snapshot {path} must hold a list of tasks")

    records: list[TaskRecord] = []
    for i, item in enumerate(data):
        if not isinstance(item, dict):
            raise ValueError(f"snapshot {path}: entry {i} is not an object")
        try:
            records.append(TaskRecord.from_dict(item))
        except (KeyError, TypeError, ValueError) as exc:
            raise ValueError(f"snapshot {path}: entry {i}: {exc}") from exc

    logger.info("Loaded snapshot: %d tasks from %s", len(records), path)
    return records


def save_snapshot(path: str | Path, records: list[TaskRecord]) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(".tmp")
    tmp.write_text(
        json.dumps({"tasks": [r.to_dict() for r in records]}, ensure_ascii=False, indent=2),
        "utf-8",
    )
    tmp.replace(path)
    logger.info("Saved snapshot: %d tasks to %s", len(records), path)
