# src/task_browser/cli/main.py

"""
CLI entrypoint.

Initializes logging from settings, opens the task store, then runs one
subcommand:
- add: insert a task
- done: mark a task completed
- edit: change the text, tags or times of a task
- delete: remove a task
- browse: run a browse request (store path, or in-memory over a snapshot)
- export: write every stored task to a JSON snapshot

Results go to stdout as JSON; logs go to stderr and the log file.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from collections.abc import Sequence

from ..config import Settings, get_settings
from ..core.ports import TaskRepo
from ..errors import BrowseError
from ..logging_setup import setup_logging
from ..query.memory_path import filter_tasks
from ..tasks.snapshot import load_snapshot, save_snapshot
from ..tasks.task_models import Availability, BrowseRequest, OrderType, TaskRecord, parse_timestamp
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _timestamp_arg(value: str) -> float:
    try:
        return float(value)
    except ValueError:
        pass
    try:
        ts = parse_timestamp(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc
    if ts is None:
        raise argparse.ArgumentTypeError("empty timestamp")
    return ts


def build_parser(settings: Settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="task-browser",
        description="Browse a personal task collection with filters and ordering",
    )
    parser.add_argument("--db", help="Task database path", default=None)

    subparsers = parser.add_subparsers(dest="command", required=True)

    # add
    p_add = subparsers.add_parser("add", help="Add a task")
    p_add.add_argument("content", help="Task text")
    p_add.add_argument("--tag", "-t", action="append", default=[], help="Tag (repeatable)")
    p_add.add_argument("--start", type=_timestamp_arg, help="Start (epoch seconds or ISO-8601)")
    p_add.add_argument("--due", type=_timestamp_arg, help="Due (epoch seconds or ISO-8601)")
    p_add.add_argument("--schedule", type=_timestamp_arg, help="Scheduled (epoch seconds or ISO-8601)")
    p_add.add_argument("--completed", action="store_true")

    # done
    p_done = subparsers.add_parser("done", help="Mark a task completed")
    p_done.add_argument("task_id", type=int)
    p_done.add_argument("--undo", action="store_true", help="Mark it incomplete again")

    # edit
    p_edit = subparsers.add_parser("edit", help="Change fields of a task")
    p_edit.add_argument("task_id", type=int)
    p_edit.add_argument("--content", help="New task text")
    tag_group = p_edit.add_mutually_exclusive_group()
    tag_group.add_argument("--tag", "-t", action="append", default=None, help="Replacement tag (repeatable)")
    tag_group.add_argument("--clear-tags", action="store_true", help="Remove every tag")
    for name in ("start", "due", "schedule"):
        group = p_edit.add_mutually_exclusive_group()
        group.add_argument(f"--{name}", type=_timestamp_arg, help=f"New {name} (epoch seconds or ISO-8601)")
        group.add_argument(f"--clear-{name}", action="store_true", help=f"Remove the {name} time")

    # delete
    p_delete = subparsers.add_parser("delete", help="Delete a task")
    p_delete.add_argument("task_id", type=int)

    # browse
    p_browse = subparsers.add_parser("browse", help="Browse tasks")
    p_browse.add_argument(
        "--availability",
        "-a",
        choices=[a.value for a in Availability],
        default=settings.default_availability.value,
    )
    p_browse.add_argument(
        "--order", "-o", choices=[o.value for o in OrderType], default=settings.default_order.value
    )
    direction = p_browse.add_mutually_exclusive_group()
    direction.add_argument("--asc", dest="ascending", action="store_true", default=None)
    direction.add_argument("--desc", dest="ascending", action="store_false", default=None)
    p_browse.add_argument("--tag", "-t", action="append", default=[], help="Required tag (repeatable)")
    p_browse.add_argument("--regexp", "-r", help="Regex searched in task content")
    p_browse.add_argument("--request", help="Browse request as a JSON object (overrides other flags)")
    p_browse.add_argument("--snapshot", "-s", help="Browse a JSON snapshot in memory instead of the store")
    p_browse.add_argument(
        "--memory", action="store_true", help="Load the store into memory and browse there"
    )

    # export
    p_export = subparsers.add_parser("export", help="Write all tasks to a JSON snapshot")
    p_export.add_argument("path")

    return parser


def _request_from_args(args: argparse.Namespace, settings: Settings) -> BrowseRequest:
    if args.request:
        try:
            data = json.loads(args.request)
        except json.JSONDecodeError as exc:
            raise BrowseError(f"--request is not valid JSON: {exc}") from exc
        return BrowseRequest.from_dict(data)

    ascending = settings.default_ascending if args.ascending is None else args.ascending
    return BrowseRequest.build(
        availability=args.availability,
        order=args.order,
        ascending=ascending,
        tags=args.tag,
        query_regexp=args.regexp,
    )


def _print_records(records: Sequence[TaskRecord]) -> None:
    json.dump([r.to_dict() for r in records], sys.stdout, ensure_ascii=False, indent=2)
    sys.stdout.write("\n")


def _browse(args: argparse.Namespace, settings: Settings, repo: TaskRepo) -> list[TaskRecord]:
    request = _request_from_args(args, settings)
    logger.debug("Browse request %s", request.to_dict())

    if args.snapshot:
        return filter_tasks(request, load_snapshot(args.snapshot))
    if args.memory:
        return filter_tasks(request, repo.all_tasks())
    return asyncio.run(repo.browse(request))


def _edit(args: argparse.Namespace, store: TaskStore) -> bool:
    times = {}
    for name in ("start", "due", "schedule"):
        if getattr(args, f"clear_{name}"):
            times[name] = None
        elif getattr(args, name) is not None:
            times[name] = getattr(args, name)
    return store.update_task(
        args.task_id,
        content=args.content,
        tags=[] if args.clear_tags else args.tag,
        **times,
    )


def main(argv: Sequence[str] | None = None) -> int:
    settings = get_settings()

    level_name = str(settings.log_level).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    setup_logging(log_dir=settings.log_dir, console_level=console_level)

    args = build_parser(settings).parse_args(argv)
    store = TaskStore(args.db or settings.tasks_db_path)

    try:
        if args.command == "add":
            task_id = store.add_task(
                content=args.content,
                tags=args.tag,
                completed=args.completed,
                start=args.start,
                due=args.due,
                schedule=args.schedule,
            )
            print(json.dumps({"id": task_id}))
        elif args.command == "done":
            store.set_completed(args.task_id, not args.undo)
            print(json.dumps({"id": args.task_id, "completed": not args.undo}))
        elif args.command in ("edit", "delete"):
            found = _edit(args, store) if args.command == "edit" else store.delete_task(args.task_id)
            if not found:
                logger.error("%s failed: no task with id=%s", args.command, args.task_id)
                return 1
            key = "updated" if args.command == "edit" else "deleted"
            print(json.dumps({"id": args.task_id, key: True}))
        elif args.command == "browse":
            _print_records(_browse(args, settings, store))
        elif args.command == "export":
            save_snapshot(args.path, store.all_tasks())
    except BrowseError as exc:
        logger.error("%s failed: %s", args.command, exc)
        return 2
    except (ValueError, OSError) as exc:
        logger.error("%s failed: %s", args.command, exc)
        return 1
    finally:
        store.close()

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
