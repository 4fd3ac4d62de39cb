"""Date range and tag filtering over entry records."""

from dataclasses import dataclass, field
from datetime import date
from typing import Iterable

from .models import Record, has_tag


class PreconditionUnmet(ValueError):
    """A query was given no date bound and no tag."""


@dataclass(frozen=True)
class QuerySpec:
    """
    Predicate for `query`.

    from_date/to_date are inclusive bounds. tags are combined with AND
    unless match_any is set, in which case any one tag is enough.
    """
    from_date: date | None = None
    to_date: date | None = None
    tags: tuple[str, ...] = field(default_factory=tuple)
    match_any: bool = False

    @classmethod
    def exact(cls, day: date, tags: Iterable[str] = (), match_any: bool = False) -> "QuerySpec":
        return cls(from_date=day, to_date=day, tags=_unique_tags(tags), match_any=match_any)

    @classmethod
    def build(
        cls,
        from_date: date | None = None,
        to_date: date | None = None,
        exact_date: date | None = None,
        tags: Iterable[str] = (),
        match_any: bool = False,
    ) -> "QuerySpec":
        """Build a spec; an exact date overrides from/to."""
        if exact_date is not None:
            return cls.exact(exact_date, tags, match_any)
        return cls(from_date=from_date, to_date=to_date, tags=_unique_tags(tags), match_any=match_any)

    @property
    def is_constrained(self) -> bool:
        return self.from_date is not None or self.to_date is not None or bool(self.tags)

    def require_constraints(self) -> "QuerySpec":
        if not self.is_constrained:
            raise PreconditionUnmet("Query requires at least one of --from, --to, --date or --tag")
        return self


def _unique_tags(tags: Iterable[str]) -> tuple[str, ...]:
    """Trim tags and drop empty or case-insensitive repeats, keeping order."""
    seen = set()
    unique = []
    for tag in tags:
        tag = tag.strip()
        key = tag.casefold()
        if tag and key not in seen:
            seen.add(key)
            unique.append(tag)
    return tuple(unique)


def matches_dates(record: Record, spec: QuerySpec) -> bool:
    if spec.from_date is not None and record.date < spec.from_date:
        return False
    if spec.to_date is not None and record.date > spec.to_date:
        return False
    return True


def matches_tags(record: Record, spec: QuerySpec) -> bool:
    if not spec.tags:
        return True
    hits = (has_tag(record, tag) for tag in spec.tags)
    return any(hits) if spec.match_any else all(hits)


def matches(record: Record, spec: QuerySpec) -> bool:
    return matches_dates(record, spec) and matches_tags(record, spec)


def filter_records(records: Iterable[Record], spec: QuerySpec) -> list[Record]:
    """Return the records matching spec, in their original order."""
    return [r for r in records if matches(r, spec)]
