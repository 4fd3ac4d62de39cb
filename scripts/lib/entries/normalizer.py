"""Canonical entry line writer."""

from typing import Iterable

from .models import Record


def normalize(record: Record) -> str:
    """Return `date<TAB>description[<TAB>tag1,tag2]` for a Record."""
    parts = [record.date.strftime("%Y-%m-%d"), record.description]
    if record.tags:
        parts.append(",".join(record.tags))
    return "\t".join(parts)


def render_file_lines(raw_lines: list[str], records: Iterable[Record]) -> list[str]:
    """
    Rebuild the full file content after a mutation.

    Lines that hold a Record are replaced by its canonical form; lines the
    parser rejected (and blank lines) are written back verbatim.
    """
    by_index = {r.origin_index: r for r in records if r.origin_index is not None}
    output = []
    for index, raw in enumerate(raw_lines):
        record = by_index.get(index)
        output.append(normalize(record) if record is not None else raw.rstrip("\r\n"))
    return output
