# src/task_browser/query/compiler.py

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any

from ..core.ports import Clock
from ..tasks.task_models import BrowseRequest, OrderRequest, OrderType
from .rules import ORDER_COLUMNS, Clause, ClauseOp, build_clauses

logger = logging.getLogger(__name__)

TASKS_TABLE = "tasks"
LIKE_ESCAPE = "\\"


@dataclass(frozen=True, slots=True)
class CompiledQuery:
    sql: str
    params: tuple[Any, ...]


class _WhereBuilder:
    """
    Collects WHERE fragments and their bound values side by side.

    A fragment and its values are appended in one call, so the placeholder
    order in the SQL always equals the params order.
    """

    def __init__(self) -> None:
        self.fragments: list[str] = []
        self.params: list[Any] = []

    def add(self, fragment: str, *values: Any) -> None:
        if fragment.count("?") != len(values):
            raise ValueError(
                f"fragment has {fragment.count('?')} placeholders but {len(values)} values: {fragment}"
            )
        self.fragments.append(fragment)
        self.params.extend(values)


def escape_like(text: str) -> str:
    return (
        text.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def tag_pattern(tag: str) -> str:
    """Bound LIKE value for one tag: matches ",tag," inside ",a,b,c,"."""
    return f"%,{escape_like(tag)},%"


def _add_clause(where: _WhereBuilder, clause: Clause) -> None:
    col = clause.field
    if clause.op is ClauseOp.IS_FALSE:
        where.add(f"{col} = 0")
    elif clause.op is ClauseOp.IS_TRUE:
        where.add(f"{col} = 1")
    elif clause.op is ClauseOp.MISSING_OR_BEFORE:
        where.add(f"({col} IS NULL OR {col} < ?)", clause.value)
    elif clause.op is ClauseOp.HAS_TAG:
        where.add(f"(',' || {col} || ',') LIKE ? ESCAPE '{LIKE_ESCAPE}'", tag_pattern(clause.value))
    elif clause.op is ClauseOp.NEVER:
        where.add("0")
    else:
        raise ValueError(f"unsupported clause op: {clause.op}")


def order_by_sql(order: OrderRequest) -> str:
    """
    ORDER BY for one OrderRequest.

    NULLs go last when ascending and first when descending, and every tie
    falls back to captured then id in the same direction.
    """
    direction = "ASC" if order.ascending else "DESC"
    if order.order is OrderType.CAPTURED:
        return f"ORDER BY captured {direction}, id {direction}"

    col = ORDER_COLUMNS[order.order]
    nulls = "NULLS LAST" if order.ascending else "NULLS FIRST"
    return f"ORDER BY {col} {direction} {nulls}, captured {direction}, id {direction}"


def compile_query(
    request: BrowseRequest,
    *,
    now: float | None = None,
    clock: Clock = time.time,
) -> CompiledQuery:
    """
    Build the SELECT for a browse request.

    "now" is sampled once (or taken from the caller) and bound as a single
    value. Regex filtering is not part of the SQL.
    """
    now_ts = float(now) if now is not None else float(clock())

    where = _WhereBuilder()
    for clause in build_clauses(request, now=now_ts):
        _add_clause(where, clause)

    sql = f"SELECT * FROM {TASKS_TABLE}"
    if where.fragments:
        sql += " WHERE " + " AND ".join(where.fragments)
    sql += " " + order_by_sql(request.order)

    logger.debug("Compiled browse query sql=%s params=%s", sql, where.params)
    return CompiledQuery(sql=sql, params=tuple(where.params))
