# src/task_browser/tasks/task_store.py

from __future__ import annotations

import contextlib
import logging
import sqlite3
import time
from collections.abc import AsyncIterator, Iterable
from pathlib import Path
from typing import Any

import aiosqlite

from ..errors import StoreFailure
from ..query.rules import TAG_SEPARATOR
from ..query.store_path import execute_browse, row_to_record, tags_to_str
from .task_models import BrowseRequest, TaskRecord

logger = logging.getLogger(__name__)

# update_task: "leave this column alone" (None means "clear it")
UNSET: Any = object()


class TaskStore:
    """
    SQLite task store.

    Writes and bulk reads use short-lived sqlite3 connections (one per call).
    Browsing goes through aiosqlite so the query is a single awaited round trip.

    Tags are stored as a sorted comma-joined string, so a tag may not
    contain a comma.
    """

    def __init__(self, db_path: str | Path = "tasks.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        try:
            total = self.count_tasks()
        except sqlite3.Error:
            total = -1
        logger.info("TaskStore ready db=%s total=%s", self._db_path, total)

    def close(self) -> None:
        """Compatibility hook for shutdown (no persistent connections to close)."""
        return

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        self._configure_conn(conn)
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")
        # tag filters rely on LIKE being an exact (case-sensitive) match
        conn.execute("PRAGMA case_sensitive_like=ON")

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS tasks (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    content TEXT NOT NULL DEFAULT '',
                    tags TEXT NOT NULL DEFAULT '',
                    completed INTEGER NOT NULL DEFAULT 0,
                    captured REAL NOT NULL,
                    start REAL,
                    due REAL,
                    schedule REAL
                )
                """
            )
            cur.execute("CREATE INDEX IF NOT EXISTS idx_tasks_completed ON tasks(completed, start)")
            cur.execute("CREATE INDEX IF NOT EXISTS idx_tasks_captured ON tasks(captured)")
            conn.commit()
        finally:
            conn.close()

    @staticmethod
    def _check_tags(tags: Iterable[str]) -> list[str]:
        out: list[str] = []
        for t in tags:
            tag = str(t)
            if not tag:
                raise ValueError("tags must be non-empty strings")
            if TAG_SEPARATOR in tag:
                raise ValueError(f"tag may not contain {TAG_SEPARATOR!r}: {tag!r}")
            out.append(tag)
        return out

    # ---- public API ----

    def count_tasks(self) -> int:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute("SELECT COUNT(*) FROM tasks")
            (n,) = cur.fetchone()
            return int(n)
        finally:
            conn.close()

    def add_task(
        self,
        *,
        content: str,
        tags: Iterable[str] | None = None,
        completed: bool = False,
        captured: float | None = None,
        start: float | None = None,
        due: float | None = None,
        schedule: float | None = None,
    ) -> int:
        tag_list = self._check_tags(tags or [])
        captured_ts = float(captured) if captured is not None else time.time()

        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute(
                """
                INSERT INTO tasks(content, tags, completed, captured, start, due, schedule)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    str(content),
                    tags_to_str(tag_list),
                    1 if completed else 0,
                    captured_ts,
                    float(start) if start is not None else None,
                    float(due) if due is not None else None,
                    float(schedule) if schedule is not None else None,
                ),
            )
            conn.commit()
            rowid = cur.lastrowid
            if rowid is None:
                raise RuntimeError("SQLite did not return lastrowid for tasks insert")
            task_id = int(rowid)
            logger.debug(
                "Task added id=%s tags=%s completed=%s captured=%s",
                task_id,
                tag_list,
                completed,
                captured_ts,
            )
            return task_id
        finally:
            conn.close()

    def get_task(self, task_id: int) -> TaskRecord | None:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute("SELECT * FROM tasks WHERE id = ?", (int(task_id),))
            row = cur.fetchone()
            return row_to_record(row) if row else None
        finally:
            conn.close()

    def all_tasks(self) -> list[TaskRecord]:
        """Every task in id order; the snapshot the in-memory browse runs over."""
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute("SELECT * FROM tasks ORDER BY id ASC")
            return [row_to_record(r) for r in cur.fetchall()]
        finally:
            conn.close()

    def set_completed(self, task_id: int, completed: bool = True) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                "UPDATE tasks SET completed = ? WHERE id = ?",
                (1 if completed else 0, int(task_id)),
            )
            conn.commit()
        finally:
            conn.close()

    def update_task(
        self,
        task_id: int,
        *,
        content: str | None = None,
        tags: Iterable[str] | None = None,
        start: float | None = UNSET,
        due: float | None = UNSET,
        schedule: float | None = UNSET,
    ) -> bool:
        """
        Change some fields of one task. Returns False when the id is unknown.

        content/tags: None leaves them as they are.
        start/due/schedule: UNSET leaves them, None clears them.
        """
        fields: list[str] = []
        params: list[Any] = []

        if content is not None:
            fields.append("content = ?")
            params.append(str(content))

        if tags is not None:
            fields.append("tags = ?")
            params.append(tags_to_str(self._check_tags(tags)))

        for name, value in (("start", start), ("due", due), ("schedule", schedule)):
            if value is UNSET:
                continue
            fields.append(f"{name} = ?")
            params.append(float(value) if value is not None else None)

        if not fields:
            return self.get_task(task_id) is not None

        params.append(int(task_id))
        sql = f"UPDATE tasks SET {', '.join(fields)} WHERE id = ?"

        conn = self._get_conn()
        try:
            cur = conn.execute(sql, params)
            conn.commit()
            logger.debug("Task updated id=%s fields=%s", task_id, fields)
            return cur.rowcount > 0
        finally:
            conn.close()

    def delete_task(self, task_id: int) -> bool:
        conn = self._get_conn()
        try:
            cur = conn.execute("DELETE FROM tasks WHERE id = ?", (int(task_id),))
            conn.commit()
            logger.debug("Task delete id=%s", task_id)
            return cur.rowcount > 0
        finally:
            conn.close()

    # ---- browse (async) ----

    @contextlib.asynccontextmanager
    async def connect(self) -> AsyncIterator[aiosqlite.Connection]:
        """aiosqlite connection configured for execute_browse."""
        async with aiosqlite.connect(str(self._db_path), timeout=30.0) as conn:
            conn.row_factory = aiosqlite.Row
            await conn.execute("PRAGMA case_sensitive_like=ON")
            yield conn

    async def browse(self, request: BrowseRequest, *, now: float | None = None) -> list[TaskRecord]:
        """
        Store-backed browse. See execute_browse for semantics.

        Connection failures surface as StoreFailure like query failures do.
        """
        try:
            async with self.connect() as conn:
                return await execute_browse(conn, request, now=now)
        except sqlite3.Error as exc:
            raise StoreFailure(str(exc)) from exc
