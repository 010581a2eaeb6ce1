"""Split iCalendar text into (name, value) property records."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator

from .errors import MalformedLineError


@dataclass
class Property:
    """One logical ``NAME[;PARAM=X]:VALUE`` line."""

    name: str
    value: str | None
    params: dict[str, str] = field(default_factory=dict)
    lineno: int = 0


def unfold(text: str) -> list[tuple[int, str]]:
    """Join continuation lines onto the line they continue.

    A physical line starting with a single space or tab continues the
    previous one; that one whitespace character is dropped. Returns
    ``(lineno, line)`` pairs numbered by the first physical line.
    """
    logical: list[tuple[int, str]] = []
    for lineno, raw in enumerate(text.split("\n"), start=1):
        line = raw.rstrip("\r")
        if line[:1] in (" ", "\t") and logical:
            start, prev = logical[-1]
            logical[-1] = (start, prev + line[1:])
        else:
            logical.append((lineno, line))
    return logical


def _split_line(line: str) -> tuple[str, str] | None:
    """Split at the first colon that is not inside a quoted parameter."""
    in_quotes = False
    for i, ch in enumerate(line):
        if ch == '"':
            in_quotes = not in_quotes
        elif ch == ":" and not in_quotes:
            return line[:i], line[i + 1 :]
    return None


def _parse_params(parts: list[str]) -> dict[str, str]:
    params: dict[str, str] = {}
    for part in parts:
        key, _, val = part.partition("=")
        params[key.strip().upper()] = val.strip('"')
    return params


def iter_properties(text: str) -> Iterator[Property]:
    """Yield a Property per non-blank logical line, in file order.

    Raises:
        MalformedLineError: when a line has no name/value separator. It is
            raised at the position of the bad line, after the properties
            before it have been yielded.
    """
    for lineno, line in unfold(text):
        if not line.strip():
            continue
        split = _split_line(line)
        if split is None:
            raise MalformedLineError(lineno, line)
        head, value = split
        name, *param_parts = head.split(";")
        name = name.strip().upper()
        if not name:
            raise MalformedLineError(lineno, line)
        yield Property(
            name=name,
            value=value if value else None,
            params=_parse_params(param_parts),
            lineno=lineno,
        )
