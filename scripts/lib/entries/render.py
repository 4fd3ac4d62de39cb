"""Numbered, word-wrapped table rendering for entry records."""

from dataclasses import dataclass
from typing import Iterable

from .models import Record

COMPLETED_TITLE = "Completed:"


class DisplayIndexError(IndexError):
    """A display number does not exist in the listing it refers to."""


@dataclass(frozen=True)
class TableLayout:
    """Column widths; the description column wraps at description_width."""
    description_width: int = 30
    date_width: int = 10
    min_number_width: int = 3
    gap: str = "  "
    empty_tags: str = "-"


@dataclass
class Snapshot:
    """
    One numbered listing.

    rows pairs each 1-based display number with its Record; the Record's
    origin_index ties the number back to a line in the backing file.
    """
    rows: list[tuple[int, Record]]
    title: str | None = None

    def __len__(self) -> int:
        return len(self.rows)

    def resolve(self, display_number: int) -> Record:
        if display_number < 1 or display_number > len(self.rows):
            raise DisplayIndexError(
                f"Index out of range: {display_number} (there are {len(self.rows)} visible entries)"
            )
        return self.rows[display_number - 1][1]


def sort_records(records: Iterable[Record]) -> list[Record]:
    """Date ascending; ties keep input order."""
    return sorted(records, key=lambda r: r.date)


def partition_completed(records: Iterable[Record]) -> tuple[list[Record], list[Record]]:
    """Split records into (active, completed), each in input order."""
    active, completed = [], []
    for record in records:
        (completed if record.is_complete else active).append(record)
    return active, completed


def build_snapshot(records: Iterable[Record], title: str | None = None) -> Snapshot:
    ordered = sort_records(records)
    return Snapshot(rows=list(enumerate(ordered, start=1)), title=title)


def build_snapshots(records: Iterable[Record], show_all: bool = False) -> list[Snapshot]:
    """
    Build the numbered tables for a listing.

    The active table always comes first. With show_all, a second
    independently numbered table holds the completed records.
    """
    active, completed = partition_completed(records)
    snapshots = [build_snapshot(active)]
    if show_all:
        snapshots.append(build_snapshot(completed, title=COMPLETED_TITLE))
    return snapshots


def wrap_text(text: str, width: int) -> list[str]:
    """
    Greedy word wrap.

    Words are never split; a word longer than width gets a line of its own.
    """
    lines: list[str] = []
    current = ""
    for word in text.split():
        candidate = word if not current else current + " " + word
        if len(candidate) <= width:
            current = candidate
        else:
            if current:
                lines.append(current)
            current = word
    if current:
        lines.append(current)
    return lines


def _number_width(snapshot: Snapshot, layout: TableLayout) -> int:
    return max(layout.min_number_width, len(str(len(snapshot))))


def render_row(number: int, record: Record, number_width: int, layout: TableLayout) -> list[str]:
    desc_lines = wrap_text(record.description, layout.description_width) or [""]
    tags = ",".join(record.tags) if record.tags else layout.empty_tags
    gap = layout.gap

    first = (
        f"{number:>{number_width}}{gap}"
        f"{record.date.strftime('%Y-%m-%d'):<{layout.date_width}}{gap}"
        f"{desc_lines[0]:<{layout.description_width}}{gap}"
        f"{tags}"
    )
    lines = [first.rstrip()]

    indent = " " * (number_width + len(gap) + layout.date_width + len(gap))
    for cont in desc_lines[1:]:
        lines.append((indent + cont).rstrip())
    return lines


def render_table(snapshot: Snapshot, layout: TableLayout | None = None) -> str:
    """Render one snapshot; the title, if any, heads the table."""
    layout = layout or TableLayout()
    number_width = _number_width(snapshot, layout)
    lines = [snapshot.title] if snapshot.title else []
    for number, record in snapshot.rows:
        lines.extend(render_row(number, record, number_width, layout))
    return "\n".join(lines)


def render_snapshots(snapshots: Iterable[Snapshot], layout: TableLayout | None = None) -> str:
    """Render non-empty tables separated by a blank line."""
    parts = [render_table(s, layout) for s in snapshots if s.rows]
    return "\n\n".join(parts)


def render_listing(records: Iterable[Record], show_all: bool = False, layout: TableLayout | None = None) -> str:
    return render_snapshots(build_snapshots(records, show_all), layout)
