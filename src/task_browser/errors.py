# src/task_browser/errors.py

"""
Errors raised by the browse engine.

Callers only need to catch BrowseError; the subclasses say what went wrong.
An empty result is never an error.
"""

from __future__ import annotations


class BrowseError(Exception):
    """Base class for every failure of a browse call."""


class InvalidPattern(BrowseError):
    """The request's query_regexp does not compile."""

    def __init__(self, pattern: str, reason: str) -> None:
        super().__init__(f"invalid query_regexp {pattern!r}: {reason}")
        self.pattern = pattern
        self.reason = reason


class StoreFailure(BrowseError):
    """The backing store failed (connect, execute or row decode)."""


class InvalidRequest(BrowseError, ValueError):
    """A request payload could not be turned into a BrowseRequest."""
