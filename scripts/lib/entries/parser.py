"""Entry line parser and validator."""

import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable

from .models import (
    EmptyDescription,
    EntryParseError,
    InvalidDate,
    MalformedLine,
    Record,
)
from .splitter import split_fields

DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
EXPECTED_FORMAT = "YYYY-MM-DD    Description    tag1,tag2"

# Bytes that failed UTF-8 decoding are carried as lone surrogates
# (errors='surrogateescape') so the line can be written back unchanged.
UNDECODABLE_RE = re.compile("[\udc80-\udcff]")


def parse_date(value: str) -> date:
    """Parse a strict ISO `YYYY-MM-DD` date; no rollover, no guessing."""
    value = value.strip()
    if not DATE_RE.match(value):
        raise InvalidDate(f"invalid date '{value}' (expected YYYY-MM-DD)")
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError as exc:
        raise InvalidDate(f"invalid date '{value}': {exc}") from exc


def parse_tags(field: str) -> list[str]:
    """Split a tag field on commas, dropping empty tokens."""
    return [tag.strip() for tag in field.split(",") if tag.strip()]


def parse_fields(fields: list[str]) -> Record:
    """
    Validate split fields and build a Record.

    Rules, in order:
    - No field may hold a line break (MalformedLine)
    - At least date and description are required (MalformedLine)
    - Date must be a real YYYY-MM-DD date (InvalidDate)
    - Description must be non-empty (EmptyDescription)
    - Optional third field is a comma-separated tag list
    """
    if any("\n" in f or "\r" in f for f in fields):
        raise MalformedLine("entry must fit on a single line")
    if len(fields) < 2:
        if not fields:
            raise MalformedLine("line has no usable fields")
        raise MalformedLine(f"expected at least date and description: {EXPECTED_FORMAT}")

    entry_date = parse_date(fields[0])
    description = fields[1].strip()
    if not description:
        raise EmptyDescription("description is empty")

    tags = parse_tags(fields[2]) if len(fields) > 2 else []
    return Record(date=entry_date, description=description, tags=tags)


def parse_line(line: str, origin_index: int | None = None) -> Record:
    """Parse one raw line (trailing newline allowed) into a Record."""
    line = line.rstrip("\r\n")
    try:
        if UNDECODABLE_RE.search(line):
            raise MalformedLine("line is not valid UTF-8")
        if "\n" in line or "\r" in line:
            raise MalformedLine("entry must fit on a single line")
        record = parse_fields(split_fields(line))
    except EntryParseError as exc:
        exc.line = line
        raise
    record.origin_index = origin_index
    return record


@dataclass
class LineResult:
    """Outcome of parsing one stored line."""
    index: int
    raw: str
    record: Record | None = None
    error: EntryParseError | None = None

    @property
    def ok(self) -> bool:
        return self.record is not None

    @property
    def line_number(self) -> int:
        return self.index + 1


def parse_lines(lines: Iterable[str]) -> list[LineResult]:
    """
    Parse stored lines without stopping at the first bad one.

    Blank lines produce no result. Every other line yields a LineResult
    holding either the Record (with origin_index set) or the parse error,
    so the caller decides whether to skip or abort.
    """
    results = []
    for index, raw in enumerate(lines):
        raw = raw.rstrip("\r\n")
        if not raw.strip():
            continue
        try:
            results.append(LineResult(index, raw, record=parse_line(raw, origin_index=index)))
        except EntryParseError as exc:
            results.append(LineResult(index, raw, error=exc))
    return results
