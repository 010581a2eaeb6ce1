"""Decode iCalendar files into TaskList models."""

from __future__ import annotations

import logging
import re
import uuid
from datetime import datetime
from pathlib import Path

from .errors import (
    InvalidFieldError,
    InvalidFileError,
    MalformedLineError,
    UnsupportedBlockError,
)
from .lexer import Property, iter_properties
from .models import Task, TaskList, TaskStatus

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y%m%dT%H%M%S"
COLOR_PROPERTY = "X-APPLE-CALENDAR-COLOR"

RE_TIMESTAMP = re.compile(r"^[0-9]{8}T[0-9]{6}$")
RE_UINT = re.compile(r"^[0-9]+$")
RE_HEX_COLOR = re.compile(r"^#([0-9A-Fa-f]{2})([0-9A-Fa-f]{2})([0-9A-Fa-f]{2})$")

# Properties that fill in the task currently being read
TASK_PROPERTIES = frozenset(
    {
        "UID",
        "SUMMARY",
        "DUE",
        "PRIORITY",
        "PERCENT-COMPLETE",
        "STATUS",
        "DESCRIPTION",
        "CREATED",
    }
)


def decode(content: str) -> TaskList:
    """Decode calendar text into a TaskList.

    Raises:
        InvalidFileError: a malformed line, or a task property outside a
            VTODO block.
        UnsupportedBlockError: a component other than VCALENDAR or VTODO.
        InvalidFieldError: an unparseable DUE, CREATED, PRIORITY,
            PERCENT-COMPLETE or STATUS value.
    """
    task_list = TaskList()
    tasks: list[Task] = []
    current: Task | None = None

    try:
        for prop in iter_properties(content):
            name, value = prop.name, prop.value

            if name == "X-WR-CALNAME":
                task_list.name = value or ""
            elif name == COLOR_PROPERTY:
                color = parse_color(value)
                if color is None:
                    logger.debug("Ignoring unparseable calendar color %r", value)
                else:
                    task_list.color = color
            elif name == "BEGIN":
                if value == "VTODO":
                    if current is not None:
                        logger.debug("Line %d: VTODO opened before previous one closed", prop.lineno)
                        tasks.append(current)
                    current = Task()
                elif value != "VCALENDAR":
                    raise UnsupportedBlockError(value)
            elif name == "END":
                if value == "VTODO" and current is not None:
                    tasks.append(current)
                    current = None
            elif name in TASK_PROPERTIES:
                if current is None:
                    raise InvalidFileError(
                        f"line {prop.lineno}: {name} outside of a VTODO block"
                    )
                _apply_task_property(current, prop)
            else:
                logger.debug("Line %d: ignoring property %s", prop.lineno, name)
    except MalformedLineError as exc:
        raise InvalidFileError(str(exc)) from exc

    # An unterminated VTODO at end of input still counts
    if current is not None:
        tasks.append(current)

    task_list.tasks = tasks
    return task_list


def decode_file(path: str | Path) -> TaskList:
    """Decode a calendar file from disk."""
    p = Path(path)
    try:
        content = p.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise InvalidFileError(f"cannot read {p}: {exc}") from exc
    task_list = decode(content)
    logger.debug("Decoded %d tasks from %s", len(task_list.tasks), p)
    return task_list


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse ``YYYYMMDDTHHMMSS``. Returns None on any mismatch."""
    if value is None or not RE_TIMESTAMP.match(value):
        return None
    try:
        return datetime.strptime(value, TIMESTAMP_FORMAT)
    except ValueError:
        return None


def parse_color(value: str | None) -> tuple[int, int, int] | None:
    """Parse ``#RRGGBB``. Returns None if the value is not a hex triple."""
    m = RE_HEX_COLOR.match(value or "")
    if not m:
        return None
    return (int(m.group(1), 16), int(m.group(2), 16), int(m.group(3), 16))


def _parse_uint(name: str, value: str | None, maximum: int) -> int:
    if value is None or not RE_UINT.match(value):
        raise InvalidFieldError(name, value)
    number = int(value)
    if number > maximum:
        raise InvalidFieldError(name, value)
    return number


def _apply_task_property(task: Task, prop: Property) -> None:
    name, value = prop.name, prop.value

    if name == "UID":
        try:
            task.id = uuid.UUID(value or "")
        except ValueError:
            logger.debug("Line %d: keeping generated id, bad UID %r", prop.lineno, value)

    elif name == "SUMMARY":
        task.summary = value or ""

    elif name == "DESCRIPTION":
        task.description = (value or "").replace("\\n", "\n")

    elif name == "DUE":
        due = parse_timestamp(value)
        if due is None:
            raise InvalidFieldError(name, value)
        task.due = due.date()

    elif name == "CREATED":
        created = parse_timestamp(value)
        if created is None:
            raise InvalidFieldError(name, value)
        task.created = created

    elif name == "PRIORITY":
        task.priority = _parse_uint(name, value, 10)

    elif name == "PERCENT-COMPLETE":
        task.progress = _parse_uint(name, value, 100)

    elif name == "STATUS":
        try:
            status = TaskStatus(value)
        except ValueError:
            raise InvalidFieldError(name, value) from None
        task.set_status(status)
