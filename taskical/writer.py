"""Encode TaskList models as iCalendar text and write them to disk."""

from __future__ import annotations

import logging
from datetime import datetime, time
from pathlib import Path

from .models import Task, TaskList, TaskStatus
from .parser import COLOR_PROPERTY, TIMESTAMP_FORMAT

logger = logging.getLogger(__name__)

PRODID = "-//taskical//taskical//EN"


def format_timestamp(value: datetime) -> str:
    return value.strftime(TIMESTAMP_FORMAT)


def format_color(color: tuple[int, int, int]) -> str:
    r, g, b = color
    return f"#{r:02X}{g:02X}{b:02X}"


def encode(task_list: TaskList, now: datetime | None = None) -> str:
    """Render a TaskList as a VCALENDAR of VTODO components.

    ``now`` stamps LAST-MODIFIED and DTSTAMP on every task; it defaults to
    the current local time.
    """
    if now is None:
        now = datetime.now()
    stamp = format_timestamp(now)

    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        "CALSCALE:GREGORIAN",
        f"PRODID:{PRODID}",
        f"X-WR-CALNAME:{task_list.name}",
        f"{COLOR_PROPERTY}:{format_color(task_list.color)}",
        "REFRESH-INTERVAL;VALUE=DURATION:PT4H",
        "X-PUBLISHED-TTL:PT4H",
    ]
    for task in task_list.tasks:
        lines.extend(_encode_task(task, stamp))
    lines.append("END:VCALENDAR")
    return "\n".join(lines) + "\n"


def _encode_task(task: Task, stamp: str) -> list[str]:
    lines = [
        "BEGIN:VTODO",
        f"UID:{task.id}",
        f"CREATED:{format_timestamp(task.created)}",
        f"LAST-MODIFIED:{stamp}",
        f"DTSTAMP:{stamp}",
        f"SUMMARY:{task.summary}",
    ]
    if task.due is not None:
        lines.append(f"DUE:{format_timestamp(datetime.combine(task.due, time()))}")
    if task.priority:
        lines.append(f"PRIORITY:{task.priority}")
    if task.progress:
        lines.append(f"PERCENT-COMPLETE:{task.progress}")

    # The completed flag wins over the status field
    status = TaskStatus.COMPLETED if task.completed else task.status
    lines.append(f"STATUS:{status.value}")

    if task.description:
        # Bare CRs would split the line for readers using universal newlines
        text = task.description.replace("\r\n", "\n").replace("\r", "\n")
        escaped = text.replace("\n", "\\n")
        lines.append(f"DESCRIPTION:{escaped}")
    lines.append("END:VTODO")
    return lines


def write_file(path: str | Path, content: str) -> Path:
    """Write ``content`` to a new file.

    Raises:
        FileExistsError: ``path`` already exists; it is never overwritten.
        OSError: any other failure creating or writing the file.
    """
    p = Path(path)
    with p.open("x", encoding="utf-8", newline="") as f:
        f.write(content)
    return p


def export_file(task_list: TaskList, path: str | Path) -> Path:
    """Encode ``task_list`` and write it to a new file at ``path``."""
    p = write_file(path, encode(task_list))
    logger.info("Exported %d tasks from '%s' to %s", len(task_list.tasks), task_list.name, p)
    return p
