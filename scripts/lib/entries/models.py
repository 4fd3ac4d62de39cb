"""Entry record and error types."""

from dataclasses import dataclass, field
from datetime import date

COMPLETE_TAG = "complete"


class EntryParseError(ValueError):
    """Base class for lines that cannot become a Record."""

    kind = "ParseError"

    def __init__(self, message: str, line: str | None = None):
        super().__init__(message)
        self.line = line


class MalformedLine(EntryParseError):
    kind = "MalformedLine"


class InvalidDate(EntryParseError):
    kind = "InvalidDate"


class EmptyDescription(EntryParseError):
    kind = "EmptyDescription"


@dataclass
class Record:
    """A single todo entry.

    Fields:
        date: Calendar date of the entry.
        description: Non-empty, single-field text.
        tags: Tags in stored order and casing.
        origin_index: Line position in the backing file (None for entries
            not read from a file, e.g. a fresh `add` operand).
    """
    date: date
    description: str
    tags: list[str] = field(default_factory=list)
    origin_index: int | None = field(default=None, compare=False)

    @property
    def is_complete(self) -> bool:
        return has_tag(self, COMPLETE_TAG)


def has_tag(record: Record, tag: str) -> bool:
    """Case-insensitive tag membership."""
    wanted = tag.casefold()
    return any(t.casefold() == wanted for t in record.tags)


def mark_complete(record: Record) -> bool:
    """Append the complete tag unless present. Returns True if added."""
    if record.is_complete:
        return False
    record.tags.append(COMPLETE_TAG)
    return True
