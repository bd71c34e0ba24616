# src/task_browser/query/memory_path.py

from __future__ import annotations

import logging
import time
from collections.abc import Sequence

from ..core.ports import Clock
from ..tasks.task_models import BrowseRequest, TaskRecord
from .rules import ascending_sort_key, build_clauses, clause_predicate, compile_pattern, content_matches

logger = logging.getLogger(__name__)


def filter_tasks(
    request: BrowseRequest,
    records: Sequence[TaskRecord],
    *,
    now: float | None = None,
    clock: Clock = time.time,
) -> list[TaskRecord]:
    """
    Run a browse request over records that are already in memory.

    - records is read, never mutated; the result holds the same objects
    - now is sampled once per call unless the caller passes one
    - descending is the exact reverse of the ascending result

    The caller must keep records stable for the duration of the call.
    Raises InvalidPattern when query_regexp does not compile.
    """
    pattern = compile_pattern(request)
    now_ts = float(now) if now is not None else float(clock())
    predicates = [clause_predicate(c) for c in build_clauses(request, now=now_ts)]

    filtered = [
        r for r in records if all(p(r) for p in predicates) and content_matches(pattern, r)
    ]
    filtered.sort(key=ascending_sort_key(request.order.order))
    if not request.order.ascending:
        filtered.reverse()

    logger.debug(
        "Browse memory -> %d of %d records (availability=%s order=%s asc=%s)",
        len(filtered),
        len(records),
        request.availability.value,
        request.order.order.value,
        request.order.ascending,
    )
    return filtered
