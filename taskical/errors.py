"""Exceptions raised while reading task calendars."""

from __future__ import annotations


class TaskicalError(Exception):
    """Base class for all taskical errors."""


class MalformedLineError(TaskicalError):
    """A calendar line that cannot be split into a name and a value."""

    def __init__(self, lineno: int, line: str) -> None:
        super().__init__(f"line {lineno}: cannot split property {line!r}")
        self.lineno = lineno
        self.line = line


class DecodeError(TaskicalError):
    """Decoding a calendar failed. No partial task list is returned."""

    message = "Could not read task list"

    def __init__(self, detail: str = "") -> None:
        super().__init__(f"{self.message}: {detail}" if detail else self.message)
        self.detail = detail


class InvalidFileError(DecodeError):
    """The source could not be opened or is not a calendar file."""

    message = "Invalid task list file"


class UnsupportedBlockError(DecodeError):
    """The calendar holds a component other than VTODO, e.g. a VEVENT."""

    message = (
        "File contained items that were not todo items. "
        "Was it exported from calendar software?"
    )

    def __init__(self, block: str | None) -> None:
        super().__init__(f"unsupported component {block!r}")
        self.block = block


class InvalidFieldError(DecodeError):
    """A task property has a value that cannot be parsed."""

    message = "File contains invalid data"

    def __init__(self, field: str, value: str | None) -> None:
        super().__init__(f"{field} has invalid value {value!r}")
        self.field = field
        self.value = value
