"""CLI entry point for taskical."""

from __future__ import annotations

import argparse
import logging
import os
import sys
import uuid
from datetime import date
from pathlib import Path

from .errors import DecodeError
from .feed import CalendarFeedClient
from .models import Task, TaskList, TaskSort, TaskStatus
from .parser import decode_file, parse_color
from .writer import encode, export_file, write_file

FEED_URL_ENV = "TASKICAL_FEED_URL"


def _sort_key(raw: str) -> TaskSort:
    try:
        return TaskSort(raw.lower())
    except ValueError:
        choices = ", ".join(s.value for s in TaskSort)
        raise argparse.ArgumentTypeError(f"unknown sort key {raw!r} (choose from {choices})")


def _status(raw: str) -> TaskStatus:
    try:
        return TaskStatus(raw.upper())
    except ValueError:
        choices = ", ".join(s.value for s in TaskStatus)
        raise argparse.ArgumentTypeError(f"unknown status {raw!r} (choose from {choices})")


def _color(raw: str) -> tuple[int, int, int]:
    color = parse_color(raw)
    if color is None:
        raise argparse.ArgumentTypeError(f"expected a #RRGGBB color, got {raw!r}")
    return color


def _task_id(raw: str) -> uuid.UUID:
    try:
        return uuid.UUID(raw)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected a task UUID, got {raw!r}")


def _percent(raw: str) -> int:
    value = int(raw)
    if not 0 <= value <= 100:
        raise argparse.ArgumentTypeError("progress must be between 0 and 100")
    return value


def _priority(raw: str) -> int:
    value = int(raw)
    if not 0 <= value <= 10:
        raise argparse.ArgumentTypeError("priority must be between 0 and 10")
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="taskical",
        description="Read, sort and edit task lists stored as iCalendar VTODO files.",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    show = sub.add_parser("show", help="Print the tasks in a calendar file")
    show.add_argument("file", type=str, help="Path to the .ics file")
    show.add_argument("--sort", type=_sort_key, default=TaskSort.NONE, help="Sort key")
    show.add_argument(
        "--hide-completed",
        action="store_true",
        help="Only list tasks that are not completed",
    )

    sort = sub.add_parser("sort", help="Write a sorted copy of a calendar file")
    sort.add_argument("file", type=str, help="Path to the .ics file")
    sort.add_argument("output", type=str, help="New file to write (must not exist)")
    sort.add_argument("--by", type=_sort_key, required=True, help="Sort key")

    add = sub.add_parser("add", help="Write a copy of a calendar file with one more task")
    add.add_argument("file", type=str, help="Path to the .ics file")
    add.add_argument("output", type=str, help="New file to write (must not exist)")
    add.add_argument("--summary", type=str, required=True)
    add.add_argument("--description", type=str, default="")
    add.add_argument("--due", type=date.fromisoformat, default=None, help="YYYY-MM-DD")
    add.add_argument("--priority", type=_priority, default=0)
    add.add_argument("--progress", type=_percent, default=0)
    add.add_argument("--status", type=_status, default=TaskStatus.IN_PROGRESS)
    add.add_argument("--completed", action="store_true")

    remove = sub.add_parser("remove", help="Write a copy of a calendar file without one task")
    remove.add_argument("file", type=str, help="Path to the .ics file")
    remove.add_argument("output", type=str, help="New file to write (must not exist)")
    remove.add_argument("--id", type=_task_id, required=True, help="UID of the task")

    done = sub.add_parser("done", help="Write a copy of a calendar file with one task completed")
    done.add_argument("file", type=str, help="Path to the .ics file")
    done.add_argument("output", type=str, help="New file to write (must not exist)")
    done.add_argument("--id", type=_task_id, required=True, help="UID of the task")

    new = sub.add_parser("new", help="Write an empty task list")
    new.add_argument("output", type=str, help="New file to write (must not exist)")
    new.add_argument("--name", type=str, default="New list")
    new.add_argument("--color", type=_color, default=(0, 0, 0), help="#RRGGBB")

    fetch = sub.add_parser("fetch", help="Download a published task calendar")
    fetch.add_argument(
        "url",
        type=str,
        nargs="?",
        default=None,
        help=f"Calendar URL (or set {FEED_URL_ENV})",
    )
    fetch.add_argument("--output", type=str, default=None, help="Save to a new file")
    fetch.add_argument("--timeout", type=float, default=30.0)

    return parser


def format_task(task: Task) -> str:
    mark = "x" if task.completed else " "
    parts = [f"[{mark}] {task.summary}", task.status.value]
    if task.due is not None:
        parts.append(f"due {task.due.isoformat()}")
    if task.priority:
        parts.append(f"priority {task.priority}")
    if task.progress:
        parts.append(f"{task.progress}%")
    parts.append(f"id {task.id}")
    return "  ".join(parts)


def print_task_list(task_list: TaskList, hide_completed: bool = False) -> None:
    tasks = task_list.pending_tasks if hide_completed else task_list.tasks
    print(f"{task_list.name} ({len(tasks)} tasks)")
    for task in tasks:
        print(f"  {format_task(task)}")


def _cmd_show(args: argparse.Namespace) -> int:
    task_list = decode_file(args.file)
    task_list.sort(args.sort)
    print_task_list(task_list, hide_completed=args.hide_completed)
    return 0


def _cmd_sort(args: argparse.Namespace) -> int:
    task_list = decode_file(args.file)
    task_list.sort(args.by)
    export_file(task_list, args.output)
    return 0


def _cmd_add(args: argparse.Namespace) -> int:
    task_list = decode_file(args.file)
    task = Task(
        summary=args.summary,
        completed=args.completed,
        description=args.description,
        progress=args.progress,
        priority=args.priority,
        status=args.status,
        due=args.due,
    )
    task_list.add(task)
    logging.debug("Added task %s", task.id)
    export_file(task_list, args.output)
    return 0


def _cmd_remove(args: argparse.Namespace) -> int:
    task_list = decode_file(args.file)
    try:
        task = task_list.remove(args.id)
    except KeyError:
        logging.error("No task with id %s in %s", args.id, args.file)
        return 1
    logging.info("Removed task '%s'", task.summary)
    export_file(task_list, args.output)
    return 0


def _cmd_done(args: argparse.Namespace) -> int:
    task_list = decode_file(args.file)
    task = task_list.by_id.get(args.id)
    if task is None:
        logging.error("No task with id %s in %s", args.id, args.file)
        return 1
    task.completed = True
    logging.info("Marked task '%s' as completed", task.summary)
    export_file(task_list, args.output)
    return 0


def _cmd_new(args: argparse.Namespace) -> int:
    export_file(TaskList(name=args.name, color=args.color), args.output)
    return 0


def _cmd_fetch(args: argparse.Namespace) -> int:
    url = args.url or os.environ.get(FEED_URL_ENV)
    if not url:
        logging.error("No feed URL provided. Pass a URL or set %s", FEED_URL_ENV)
        return 1
    with CalendarFeedClient(url, timeout=args.timeout) as client:
        task_list = client.fetch()
    if args.output:
        write_file(args.output, encode(task_list))
        logging.info("Saved '%s' to %s", task_list.name, args.output)
    else:
        print_task_list(task_list)
    return 0


COMMANDS = {
    "show": _cmd_show,
    "sort": _cmd_sort,
    "add": _cmd_add,
    "remove": _cmd_remove,
    "done": _cmd_done,
    "new": _cmd_new,
    "fetch": _cmd_fetch,
}




def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(message)s",
    )

    source = getattr(args, "file", None)
    if source is not None and not Path(source).is_file():
        logging.error("Calendar file not found: %s", source)
        return 1

    try:
        return COMMANDS[args.command](args)
    except DecodeError as exc:
        logging.error("%s", exc)
        return 1
    except FileExistsError as exc:
        logging.error("Refusing to overwrite existing file: %s", exc.filename)
        return 1


if __name__ == "__main__":
    sys.exit(main())
