"""Tests for encoding task lists and writing calendar files."""

import uuid
from datetime import date, datetime
from pathlib import Path

import pytest

from taskical.models import Task, TaskList, TaskStatus
from taskical.parser import decode
from taskical.writer import encode, export_file, format_color, write_file

NOW = datetime(2024, 1, 15, 12, 0, 0)
TASK_ID = uuid.UUID("0b8e2f4a-9d1c-4e6b-8a3f-5c7d9e1f2a3b")
CREATED = datetime(2023, 8, 1, 9, 30, 0)


def _make_task(**kwargs):
    kwargs.setdefault("id", TASK_ID)
    kwargs.setdefault("created", CREATED)
    return Task(**kwargs)


def _task_block(output: str) -> list[str]:
    lines = output.splitlines()
    start = lines.index("BEGIN:VTODO")
    end = lines.index("END:VTODO")
    return lines[start + 1 : end]


def test_encode_header_and_footer():
    out = encode(TaskList(name="Work", color=(0x53, 0x82, 0xA3)), now=NOW)
    assert out == (
        "BEGIN:VCALENDAR\n"
        "VERSION:2.0\n"
        "CALSCALE:GREGORIAN\n"
        "PRODID:-//taskical//taskical//EN\n"
        "X-WR-CALNAME:Work\n"
        "X-APPLE-CALENDAR-COLOR:#5382A3\n"
        "REFRESH-INTERVAL;VALUE=DURATION:PT4H\n"
        "X-PUBLISHED-TTL:PT4H\n"
        "END:VCALENDAR\n"
    )


def test_color_is_zero_padded_uppercase():
    assert format_color((1, 2, 255)) == "#0102FF"


def test_encode_full_task_field_order():
    task = _make_task(
        summary="Do the dishes",
        due=date(2023, 8, 25),
        priority=3,
        progress=40,
        status=TaskStatus.NEEDS_ACTION,
        description="line one\nline two",
    )
    out = encode(TaskList(tasks=[task]), now=NOW)
    assert _task_block(out) == [
        f"UID:{TASK_ID}",
        "CREATED:20230801T093000",
        "LAST-MODIFIED:20240115T120000",
        "DTSTAMP:20240115T120000",
        "SUMMARY:Do the dishes",
        "DUE:20230825T000000",
        "PRIORITY:3",
        "PERCENT-COMPLETE:40",
        "STATUS:NEEDS-ACTION",
        "DESCRIPTION:line one\\nline two",
    ]


def test_zero_values_and_empty_description_are_omitted():
    out = encode(TaskList(tasks=[_make_task(summary="bare")]), now=NOW)
    block = _task_block(out)
    assert not any(line.startswith("PRIORITY") for line in block)
    assert not any(line.startswith("PERCENT-COMPLETE") for line in block)
    assert not any(line.startswith("DESCRIPTION") for line in block)
    assert not any(line.startswith("DUE") for line in block)

    t = decode(out).tasks[0]
    assert t.priority == 0
    assert t.progress == 0
    assert t.description == ""
    assert t.due is None


def test_completed_flag_wins_over_status():
    task = _make_task(status=TaskStatus.NEEDS_ACTION, completed=True)
    out = encode(TaskList(tasks=[task]), now=NOW)
    assert "STATUS:COMPLETED" in _task_block(out)

    decoded = decode(out).tasks[0]
    assert decoded.status is TaskStatus.COMPLETED
    assert decoded.completed is True


def test_description_escape_round_trip():
    task = _make_task(description="line one\nline two")
    out = encode(TaskList(tasks=[task]), now=NOW)
    assert "DESCRIPTION:line one\\nline two" in out.splitlines()
    assert decode(out).tasks[0].description == "line one\nline two"


def test_carriage_returns_become_newlines():
    task = _make_task(description="a\r\nb\rc\r")
    out = encode(TaskList(tasks=[task]), now=NOW)
    assert "DESCRIPTION:a\\nb\\nc\\n" in out.splitlines()
    assert "\r" not in out
    assert decode(out).tasks[0].description == "a\nb\nc\n"


def test_round_trip_preserves_fields():
    tasks = [
        _make_task(
            summary="First",
            description="a\nb\n",
            progress=47,
            priority=9,
            status=TaskStatus.NEEDS_ACTION,
            due=date(2023, 8, 20),
        ),
        Task(summary="Second", status=TaskStatus.CANCELLED, created=CREATED),
        Task(summary="Third", status=TaskStatus.COMPLETED, progress=100, priority=10),
        Task(summary="", status=TaskStatus.IN_PROGRESS),
    ]
    original = TaskList(name="My list", color=(12, 200, 7), tasks=tasks)

    decoded = decode(encode(original))

    assert decoded.name == original.name
    assert decoded.color == original.color
    assert len(decoded.tasks) == len(original.tasks)
    for got, want in zip(decoded.tasks, original.tasks):
        assert got.id == want.id
        assert got.summary == want.summary
        assert got.progress == want.progress
        assert got.priority == want.priority
        assert got.status is want.status
        assert got.completed == want.completed
        assert got.due == want.due
        assert got.description == want.description
        assert got.created == want.created


def test_encode_uses_current_time_by_default():
    out = encode(TaskList(tasks=[_make_task()]))
    stamp = next(line for line in out.splitlines() if line.startswith("DTSTAMP:"))
    assert datetime.strptime(stamp[len("DTSTAMP:"):], "%Y%m%dT%H%M%S").year >= 2024


def test_write_file_creates_new_file(tmp_path: Path):
    f = tmp_path / "out.ics"
    assert write_file(f, "BEGIN:VCALENDAR\nEND:VCALENDAR\n") == f
    assert f.read_text(encoding="utf-8") == "BEGIN:VCALENDAR\nEND:VCALENDAR\n"


def test_write_file_refuses_to_overwrite(tmp_path: Path):
    f = tmp_path / "out.ics"
    f.write_text("keep me")
    with pytest.raises(FileExistsError):
        write_file(f, "new content")
    assert f.read_text() == "keep me"


def test_write_file_missing_directory(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        write_file(tmp_path / "nope" / "out.ics", "x")


def test_export_file(tmp_path: Path):
    f = tmp_path / "export.ics"
    export_file(TaskList(name="Exported", tasks=[Task(summary="one")]), f)
    decoded = decode(f.read_text(encoding="utf-8"))
    assert decoded.name == "Exported"
    assert [t.summary for t in decoded.tasks] == ["one"]
