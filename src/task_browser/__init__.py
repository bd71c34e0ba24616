"""
task_browser: browse a personal task collection under a declarative filter+sort request.

The same BrowseRequest can be answered two ways with the same result:
- TaskStore.browse / execute_browse: compiled to SQL and run against SQLite
- filter_tasks: evaluated over records already held in memory
"""

from .errors import BrowseError, InvalidPattern, InvalidRequest, StoreFailure
from .query.compiler import CompiledQuery, compile_query
from .query.memory_path import filter_tasks
from .query.store_path import execute_browse
from .tasks.task_models import Availability, BrowseRequest, OrderRequest, OrderType, TaskRecord
from .tasks.task_store import TaskStore

__all__ = [
    "Availability",
    "BrowseError",
    "BrowseRequest",
    "CompiledQuery",
    "InvalidPattern",
    "InvalidRequest",
    "OrderRequest",
    "OrderType",
    "StoreFailure",
    "TaskRecord",
    "TaskStore",
    "compile_query",
    "execute_browse",
    "filter_tasks",
]
