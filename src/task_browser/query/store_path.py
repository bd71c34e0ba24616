# src/task_browser/query/store_path.py

from __future__ import annotations

import logging
import sqlite3
import time
from collections.abc import Mapping
from typing import Any

import aiosqlite

from ..core.ports import Clock
from ..errors import StoreFailure
from ..tasks.task_models import BrowseRequest, TaskRecord
from .compiler import compile_query
from .rules import TAG_SEPARATOR, compile_pattern, content_matches

logger = logging.getLogger(__name__)

_OPTIONAL_TIME_COLUMNS = ("start", "due", "schedule")


def tags_to_str(tags) -> str:
    if not tags:
        return ""
    return TAG_SEPARATOR.join(sorted({str(t) for t in tags}))


def str_to_tags(s: str | None) -> frozenset[str]:
    if not s:
        return frozenset()
    return frozenset(t for t in s.split(TAG_SEPARATOR) if t)


def row_to_record(row: sqlite3.Row | Mapping[str, Any]) -> TaskRecord:
    """
    Decode one tasks row.

    Optional time columns may be missing from the row entirely (older
    tables); they decode to None like NULL does.
    """
    keys = set(row.keys())
    if row["captured"] is None:
        raise ValueError(f"task id={row['id']} has no captured timestamp")

    optional: dict[str, float | None] = {}
    for name in _OPTIONAL_TIME_COLUMNS:
        raw = row[name] if name in keys else None
        optional[name] = float(raw) if raw is not None else None

    return TaskRecord(
        id=int(row["id"]),
        content=str(row["content"] or ""),
        tags=str_to_tags(row["tags"] if "tags" in keys else None),
        completed=bool(row["completed"]),
        captured=float(row["captured"]),
        **optional,
    )


async def execute_browse(
    conn: aiosqlite.Connection,
    request: BrowseRequest,
    *,
    now: float | None = None,
    clock: Clock = time.time,
) -> list[TaskRecord]:
    """
    Run a browse request against the tasks table in one round trip.

    conn should come from TaskStore.connect() (row factory and
    case-sensitive LIKE are set there).

    The regex is applied after the rows come back; it only removes rows,
    the SQL ORDER BY is already total so no re-sort is needed.

    Raises InvalidPattern (before touching the store) or StoreFailure.
    """
    pattern = compile_pattern(request)
    query = compile_query(request, now=now, clock=clock)

    try:
        async with conn.execute(query.sql, query.params) as cur:
            rows = await cur.fetchall()
        records = [row_to_record(r) for r in rows]
    except (sqlite3.Error, ValueError, TypeError, KeyError, IndexError, AttributeError) as exc:
        logger.debug("Browse store failed sql=%s", query.sql, exc_info=True)
        raise StoreFailure(str(exc)) from exc

    result = [r for r in records if content_matches(pattern, r)]
    logger.debug("Browse store -> %d rows (kept=%d)", len(records), len(result))
    return result
