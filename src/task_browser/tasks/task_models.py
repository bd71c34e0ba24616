# src/task_browser/tasks/task_models.py

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import StrEnum
from typing import Any

from ..errors import InvalidRequest


class Availability(StrEnum):
    """
    Readiness classes a browse can be restricted to.

    - all: no filter
    - incomplete: completed == False (default)
    - available: incomplete and not starting in the future
    - done: completed == True
    """

    ALL = "all"
    INCOMPLETE = "incomplete"
    AVAILABLE = "available"
    DONE = "done"

    @classmethod
    def from_raw(cls, raw: Any) -> Availability:
        if raw is None:
            return cls.INCOMPLETE
        return _enum_from_raw(cls, raw, "availability")


class OrderType(StrEnum):
    DUE = "due"
    START = "start"
    CAPTURED = "captured"
    SCHEDULED = "scheduled"

    @classmethod
    def from_raw(cls, raw: Any) -> OrderType:
        if raw is None:
            return cls.CAPTURED
        return _enum_from_raw(cls, raw, "order.order")


def _enum_from_raw(enum_cls, raw: Any, name: str):
    if isinstance(raw, enum_cls):
        return raw
    if not isinstance(raw, str):
        raise InvalidRequest(f"{name} must be a string, got {type(raw).__name__}")
    try:
        return enum_cls(raw.strip().lower())
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise InvalidRequest(f"unknown {name} {raw!r} (expected one of: {allowed})") from None


def parse_timestamp(value: Any, *, name: str = "timestamp") -> float | None:
    """
    Accept epoch seconds (int/float) or an ISO-8601 string.

    Naive ISO strings are taken as UTC.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError(f"{name} must be a number or ISO-8601 string")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        raw = value.strip()
        if not raw:
            return None
        if raw.endswith("Z"):
            raw = raw[:-1] + "+00:00"
        dt = datetime.fromisoformat(raw)
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return dt.timestamp()
    raise ValueError(f"{name} must be a number or ISO-8601 string")


@dataclass(frozen=True, slots=True)
class TaskRecord:
    id: int
    content: str
    tags: frozenset[str]
    completed: bool
    captured: float  # always present; universal tie-break

    start: float | None = None
    due: float | None = None
    schedule: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "content": self.content,
            "tags": sorted(self.tags),
            "completed": self.completed,
            "captured": self.captured,
            "start": self.start,
            "due": self.due,
            "schedule": self.schedule,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> TaskRecord:
        captured = parse_timestamp(data.get("captured"), name="captured")
        if captured is None:
            raise ValueError("captured is required")
        tags = data.get("tags") or []
        if isinstance(tags, str):
            tags = [tags]
        return cls(
            id=int(data["id"]),
            content=str(data.get("content") or ""),
            tags=frozenset(str(t) for t in tags),
            completed=bool(data.get("completed", False)),
            captured=captured,
            start=parse_timestamp(data.get("start"), name="start"),
            due=parse_timestamp(data.get("due"), name="due"),
            schedule=parse_timestamp(data.get("schedule"), name="schedule"),
        )


@dataclass(frozen=True, slots=True)
class OrderRequest:
    order: OrderType = OrderType.CAPTURED
    ascending: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> OrderRequest:
        if data is None:
            return cls()
        if not isinstance(data, Mapping):
            raise InvalidRequest("order must be an object")
        ascending = data.get("ascending", False)
        if not isinstance(ascending, bool):
            raise InvalidRequest("order.ascending must be a boolean")
        return cls(order=OrderType.from_raw(data.get("order")), ascending=ascending)


@dataclass(frozen=True, slots=True)
class BrowseRequest:
    """
    One declarative browse: which tasks (availability, tags, regex) and in what order.

    query_text is carried through (de)serialization but never evaluated.
    The regex is validated lazily, when a browse is executed.
    """

    availability: Availability = Availability.INCOMPLETE
    order: OrderRequest = field(default_factory=OrderRequest)
    tags: tuple[str, ...] = ()
    query_regexp: str | None = None
    query_text: str | None = None

    @classmethod
    def build(
        cls,
        *,
        availability: Availability | str | None = None,
        order: OrderType | str | None = None,
        ascending: bool = False,
        tags: Iterable[str] | None = None,
        query_regexp: str | None = None,
        query_text: str | None = None,
    ) -> BrowseRequest:
        """Keyword-friendly constructor used by the CLI and tests."""
        return cls(
            availability=Availability.from_raw(availability),
            order=OrderRequest(order=OrderType.from_raw(order), ascending=bool(ascending)),
            tags=tuple(tags or ()),
            query_regexp=query_regexp,
            query_text=query_text,
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> BrowseRequest:
        if data is None:
            return cls()
        if not isinstance(data, Mapping):
            raise InvalidRequest("browse request must be an object")

        tags = data.get("tags")
        if tags is None:
            tags = []
        if not isinstance(tags, list) or not all(isinstance(t, str) for t in tags):
            raise InvalidRequest("tags must be a list of strings")

        query_regexp = data.get("query_regexp")
        if query_regexp is not None and not isinstance(query_regexp, str):
            raise InvalidRequest("query_regexp must be a string")
        query_text = data.get("query_text")
        if query_text is not None and not isinstance(query_text, str):
            raise InvalidRequest("query_text must be a string")

        return cls(
            availability=Availability.from_raw(data.get("availability")),
            order=OrderRequest.from_dict(data.get("order")),
            tags=tuple(tags),
            query_regexp=query_regexp,
            query_text=query_text,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "availability": self.availability.value,
            "order": {"order": self.order.order.value, "ascending": self.order.ascending},
            "tags": list(self.tags),
            "query_regexp": self.query_regexp,
            "query_text": self.query_text,
        }
