# tests/test_compiler.py

from __future__ import annotations

from task_browser.query.compiler import compile_query, escape_like, order_by_sql, tag_pattern
from task_browser.tasks.task_models import Availability, BrowseRequest, OrderRequest, OrderType

from .fakes import FakeClock

NOW = 1_000.0


def _compile(**kwargs):
    return compile_query(BrowseRequest.build(**kwargs), now=NOW)


def test_all_without_tags_has_no_where() -> None:
    q = _compile(availability="all")
    assert q.sql == "SELECT * FROM tasks ORDER BY captured DESC, id DESC"
    assert q.params == ()


def test_default_request_filters_incomplete() -> None:
    q = compile_query(BrowseRequest(), now=NOW)
    assert q.sql == "SELECT * FROM tasks WHERE completed = 0 ORDER BY captured DESC, id DESC"
    assert q.params == ()


def test_done_filter() -> None:
    q = _compile(availability="done", ascending=True)
    assert q.sql == "SELECT * FROM tasks WHERE completed = 1 ORDER BY captured ASC, id ASC"


def test_available_binds_now_once() -> None:
    clock = FakeClock(NOW)
    q = compile_query(BrowseRequest.build(availability=Availability.AVAILABLE), clock=clock)
    assert "completed = 0 AND (start IS NULL OR start < ?)" in q.sql
    assert q.params == (NOW,)
    assert clock.calls == 1


def test_explicit_now_skips_clock() -> None:
    clock = FakeClock(5.0)
    q = compile_query(BrowseRequest.build(availability="available"), now=NOW, clock=clock)
    assert q.params == (NOW,)
    assert clock.calls == 0


def test_tags_are_bound_in_request_order_after_now() -> None:
    q = _compile(availability="available", tags=["work", "urgent"])
    assert q.params == (NOW, "%,work,%", "%,urgent,%")
    assert q.sql.count("?") == len(q.params)
    assert q.sql.index("start < ?") < q.sql.index("LIKE ?")


def test_tags_with_all_availability_still_emit_where() -> None:
    q = _compile(availability="all", tags=["home"])
    assert q.sql.startswith("SELECT * FROM tasks WHERE (',' || tags || ',') LIKE ? ESCAPE '\\'")
    assert q.params == ("%,home,%",)


def test_tag_text_never_reaches_sql() -> None:
    evil = "x'); DROP TABLE tasks; --"
    q = _compile(availability="all", tags=[evil])
    assert evil not in q.sql
    assert "DROP" not in q.sql
    assert q.params == (f"%,{evil},%",)


def test_like_wildcards_in_tags_are_escaped() -> None:
    assert escape_like("100%") == "100\\%"
    assert escape_like("a_b") == "a\\_b"
    assert escape_like("c:\\tmp") == "c:\\\\tmp"
    assert tag_pattern("100%") == "%,100\\%,%"


def test_order_by_captured_has_id_tie_break() -> None:
    assert order_by_sql(OrderRequest(OrderType.CAPTURED, True)) == "ORDER BY captured ASC, id ASC"


def test_order_by_optional_fields_places_nulls_and_falls_back_to_captured() -> None:
    assert (
        order_by_sql(OrderRequest(OrderType.DUE, True))
        == "ORDER BY due ASC NULLS LAST, captured ASC, id ASC"
    )
    assert (
        order_by_sql(OrderRequest(OrderType.SCHEDULED, False))
        == "ORDER BY schedule DESC NULLS FIRST, captured DESC, id DESC"
    )
    assert (
        order_by_sql(OrderRequest(OrderType.START, False))
        == "ORDER BY start DESC NULLS FIRST, captured DESC, id DESC"
    )


def test_compiling_is_deterministic() -> None:
    req = BrowseRequest.build(availability="available", order="due", tags=["a", "b"])
    assert compile_query(req, now=NOW) == compile_query(req, now=NOW)


def test_unmatchable_tags_compile_to_constant_false() -> None:
    q = _compile(availability="all", tags=["home,urgent", "", "work"])
    assert q.sql.startswith("SELECT * FROM tasks WHERE 0 AND 0 AND (',' || tags || ',') LIKE ?")
    assert q.params == ("%,work,%",)
    assert "home" not in q.sql
