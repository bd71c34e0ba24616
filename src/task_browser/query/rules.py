# src/task_browser/query/rules.py

"""
Filtering and ordering rules shared by both browse paths.

A request is reduced to a list of Clauses plus an order column. The compiler
turns clauses into SQL fragments with bound values; the in-memory engine turns
the same clauses into predicates. Neither path decides filter semantics on
its own.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from ..errors import InvalidPattern
from ..tasks.task_models import Availability, BrowseRequest, OrderType, TaskRecord

# column name == TaskRecord attribute name
ORDER_COLUMNS: dict[OrderType, str] = {
    OrderType.CAPTURED: "captured",
    OrderType.START: "start",
    OrderType.DUE: "due",
    OrderType.SCHEDULED: "schedule",
}

TAG_SEPARATOR = ","


class ClauseOp(StrEnum):
    IS_TRUE = "is_true"
    IS_FALSE = "is_false"
    MISSING_OR_BEFORE = "missing_or_before"  # field IS NULL OR field < value
    HAS_TAG = "has_tag"  # exact membership in the tag set
    NEVER = "never"  # matches no record


@dataclass(frozen=True, slots=True)
class Clause:
    op: ClauseOp
    field: str
    value: Any = None


def availability_clauses(availability: Availability, *, now: float) -> list[Clause]:
    if availability is Availability.INCOMPLETE:
        return [Clause(ClauseOp.IS_FALSE, "completed")]
    if availability is Availability.AVAILABLE:
        return [
            Clause(ClauseOp.IS_FALSE, "completed"),
            Clause(ClauseOp.MISSING_OR_BEFORE, "start", float(now)),
        ]
    if availability is Availability.DONE:
        return [Clause(ClauseOp.IS_TRUE, "completed")]
    return []


def build_clauses(request: BrowseRequest, *, now: float) -> list[Clause]:
    """
    Availability clauses first, then one clause per tag in request order.

    A stored tag is never empty and never holds a comma, so such a request
    tag can match nothing and becomes a NEVER clause.
    """
    clauses = availability_clauses(request.availability, now=now)
    for tag in request.tags:
        if not tag or TAG_SEPARATOR in tag:
            clauses.append(Clause(ClauseOp.NEVER, "tags", tag))
        else:
            clauses.append(Clause(ClauseOp.HAS_TAG, "tags", tag))
    return clauses


def clause_predicate(clause: Clause) -> Callable[[TaskRecord], bool]:
    name = clause.field
    value = clause.value

    if clause.op is ClauseOp.IS_TRUE:
        return lambda r: bool(getattr(r, name))
    if clause.op is ClauseOp.IS_FALSE:
        return lambda r: not getattr(r, name)
    if clause.op is ClauseOp.MISSING_OR_BEFORE:

        def _missing_or_before(r: TaskRecord) -> bool:
            v = getattr(r, name)
            return v is None or v < value

        return _missing_or_before
    if clause.op is ClauseOp.HAS_TAG:
        return lambda r: value in getattr(r, name)
    if clause.op is ClauseOp.NEVER:
        return lambda r: False
    raise ValueError(f"unsupported clause op: {clause.op}")


def compile_pattern(request: BrowseRequest) -> re.Pattern[str] | None:
    """Compile query_regexp (None when absent); raise InvalidPattern when it doesn't compile."""
    if request.query_regexp is None:
        return None
    try:
        return re.compile(request.query_regexp)
    except re.error as exc:
        raise InvalidPattern(request.query_regexp, str(exc)) from exc


def content_matches(pattern: re.Pattern[str] | None, record: TaskRecord) -> bool:
    # search, not fullmatch: a hit anywhere in the content counts
    return pattern is None or pattern.search(record.content) is not None


def ascending_sort_key(order: OrderType) -> Callable[[TaskRecord], tuple]:
    """
    Key for the ascending order of one OrderType.

    Optional fields: present values first (by value), missing ones last.
    Ties fall back to captured, then id, so the order is total and the
    descending order is its exact reverse.
    """
    if order is OrderType.CAPTURED:
        return lambda r: (r.captured, r.id)

    name = ORDER_COLUMNS[order]

    def _key(r: TaskRecord) -> tuple:
        v = getattr(r, name)
        if v is None:
            return (1, 0.0, r.captured, r.id)
        return (0, v, r.captured, r.id)

    return _key
