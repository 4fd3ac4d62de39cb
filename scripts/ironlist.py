#!/usr/bin/env python3
"""
IronList CLI - date-tagged todo entries in a plain text file.

Usage:
    ironlist.py [--file PATH] [--show-all] [list]
    ironlist.py add "2025-10-18    Buy iron    tools,home"
    ironlist.py edit INDEX "2025-10-20    Buy more iron    tools" [--completed]
    ironlist.py complete INDEX [--completed]
    ironlist.py query [--from DATE] [--to DATE] [--date DATE] [--tag TAG ...] [--any]
    ironlist.py --set-default PATH | --set-default - | --show-default

INDEX is the number printed by the listing it refers to: `list` by default,
or the `query` listing when edit/complete get the same filter options.
"""

import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))
from lib.entries.models import EntryParseError, Record, mark_complete
from lib.entries.normalizer import normalize, render_file_lines
from lib.entries.parser import EXPECTED_FORMAT, parse_date, parse_line, parse_lines
from lib.entries.query import PreconditionUnmet, QuerySpec, filter_records
from lib.entries.render import (
    DisplayIndexError,
    TableLayout,
    build_snapshots,
    render_listing,
)
from utils import (
    ConfigError,
    IronListConfig,
    append_line,
    clear_saved_default,
    load_config,
    load_lines,
    log_level_from_env,
    persist_default_path,
    prompt,
    read_saved_default,
    rewrite_all,
)

logger = logging.getLogger(__name__)


def load_records(config: IronListConfig) -> tuple[list[str], list[Record]]:
    """Read and parse the data file, applying the skip/abort policy."""
    raw_lines = load_lines(config.data_file)
    records = []
    for result in parse_lines(raw_lines):
        if result.ok:
            records.append(result.record)
            continue
        detail = f"{result.raw} ({result.error.kind}: {result.error})"
        if config.strict:
            logger.error(f"Malformed line {result.line_number}: {detail}")
            sys.exit(1)
        logger.warning(f"Skipping malformed line {result.line_number}: {detail}")
    return raw_lines, records


def _layout(config: IronListConfig) -> TableLayout:
    return TableLayout(description_width=config.wrap_width)


def _spec_from_args(args) -> QuerySpec:
    return QuerySpec.build(
        from_date=getattr(args, 'from_date', None),
        to_date=getattr(args, 'to_date', None),
        exact_date=getattr(args, 'date', None),
        tags=getattr(args, 'tag', None) or [],
        match_any=getattr(args, 'any', False),
    )


def _print_listing(records: list[Record], config: IronListConfig, empty_message: str) -> None:
    output = render_listing(records, show_all=config.show_all, layout=_layout(config))
    print(output if output else empty_message)


def list_entries(args, config: IronListConfig) -> int:
    """List entries sorted by date; completed ones only with --show-all."""
    _, records = load_records(config)
    _print_listing(records, config, "No entries found.")
    return 0


def query_entries(args, config: IronListConfig) -> int:
    """List entries matching a date range and/or tags."""
    spec = _spec_from_args(args).require_constraints()
    _, records = load_records(config)
    _print_listing(filter_records(records, spec), config, "No entries found matching criteria.")
    return 0


def add_entry(args, config: IronListConfig) -> int:
    """Validate, normalize and append one entry."""
    line = normalize(parse_line(args.line))
    append_line(config.data_file, line)
    logger.debug(f"Appended: {line!r}")
    print(f"Appended normalized entry to {config.data_file}")
    return 0


def _select_target(records: list[Record], args, completed: bool = False) -> Record:
    """Resolve a display number through the listing it was printed in."""
    spec = _spec_from_args(args)
    visible = filter_records(records, spec) if spec.is_constrained else records
    active, finished = build_snapshots(visible, show_all=True)
    snapshot = finished if completed else active
    return snapshot.resolve(args.index)


def edit_entry(args, config: IronListConfig) -> int:
    """Replace an entry, addressed by its listing number."""
    replacement = parse_line(args.line)
    raw_lines, records = load_records(config)
    target = _select_target(records, args, completed=args.completed)

    replacement.origin_index = target.origin_index
    updated = [replacement if r is target else r for r in records]
    rewrite_all(config.data_file, render_file_lines(raw_lines, updated))
    print(f"Replaced entry {args.index} in {config.data_file}")
    return 0


def complete_entry(args, config: IronListConfig) -> int:
    """Tag an entry `complete`, addressed by its listing number."""
    raw_lines, records = load_records(config)
    target = _select_target(records, args, completed=args.completed)

    if not mark_complete(target):
        print(f"Entry {args.index} is already complete")
        return 0
    rewrite_all(config.data_file, render_file_lines(raw_lines, records))
    print(f"Marked entry {args.index} as complete in {config.data_file}")
    return 0


def show_default() -> int:
    saved = read_saved_default()
    if saved:
        print(f"Saved default: {saved}")
    else:
        print("No saved default")
    return 0


def set_default(raw_path: str) -> int:
    """Persist the default data file; `-` clears it."""
    if raw_path == '-':
        clear_saved_default()
        print("Cleared saved default")
        return 0

    path = Path(raw_path).expanduser().absolute()
    if not path.exists():
        logger.warning(f"Provided path does not exist: {path}")
        answer = prompt("Create the file? (y/N)").strip().lower()
        if answer != 'y':
            print("Aborted; not saving default.", file=sys.stderr)
            return 0
        path.parent.mkdir(parents=True, exist_ok=True)
        path.touch()
        print(f"Created file: {path}", file=sys.stderr)

    persist_default_path(path)
    print(f"Saved default path to config: {path}")
    return 0


def _date_arg(value: str):
    try:
        return parse_date(value)
    except EntryParseError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def _add_filter_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument('--from', dest='from_date', type=_date_arg, metavar='DATE',
                        help='Start date YYYY-MM-DD (inclusive)')
    parser.add_argument('--to', dest='to_date', type=_date_arg, metavar='DATE',
                        help='End date YYYY-MM-DD (inclusive)')
    parser.add_argument('--date', type=_date_arg, metavar='DATE',
                        help='Exact date YYYY-MM-DD (overrides --from/--to)')
    parser.add_argument('--tag', action='append', metavar='TAG',
                        help='Tag filter; can be passed multiple times')
    parser.add_argument('--any', action='store_true',
                        help='Match entries with ANY of the tags (default: ALL)')


def _add_show_all(parser: argparse.ArgumentParser) -> None:
    # SUPPRESS keeps the global --show-all value when omitted here.
    parser.add_argument('--show-all', action='store_true', default=argparse.SUPPRESS,
                        help='Also show entries tagged complete, in a second table')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='ironlist', description='IronList: date-tagged todo list')
    parser.add_argument('-f', '--file', metavar='FILE', help='Path to todo file')
    parser.add_argument('--set-default', metavar='PATH', help="Persist a default file path ('-' clears) and exit")
    parser.add_argument('--show-default', action='store_true', help='Show the saved default and exit')
    parser.add_argument('--show-all', action='store_true',
                        help='Also show entries tagged complete, in a second table')
    parser.add_argument('--strict', action='store_true', help='Abort on malformed lines instead of skipping them')
    parser.add_argument('--width', type=int, metavar='N', help='Description column width')

    subparsers = parser.add_subparsers(dest='command')

    list_parser = subparsers.add_parser('list', help='List entries (numbered, sorted by date)')
    _add_show_all(list_parser)
    list_parser.set_defaults(func=list_entries)

    add_parser = subparsers.add_parser('add', help='Append an entry')
    add_parser.add_argument('line', metavar='LINE', help=f'Entry line, e.g. "{EXPECTED_FORMAT}"')
    add_parser.set_defaults(func=add_entry)

    edit_parser = subparsers.add_parser('edit', help='Replace an entry by its listed number')
    edit_parser.add_argument('index', type=int, metavar='INDEX', help='1-based number from the listing')
    edit_parser.add_argument('line', metavar='LINE', help='Replacement line (same format as add)')
    edit_parser.add_argument('--completed', action='store_true',
                             help='INDEX refers to the Completed table')
    _add_filter_arguments(edit_parser)
    edit_parser.set_defaults(func=edit_entry)

    complete_parser = subparsers.add_parser('complete', help='Tag an entry as complete by its listed number')
    complete_parser.add_argument('index', type=int, metavar='INDEX', help='1-based number from the listing')
    complete_parser.add_argument('--completed', action='store_true',
                                 help='INDEX refers to the Completed table')
    _add_filter_arguments(complete_parser)
    complete_parser.set_defaults(func=complete_entry)

    query_parser = subparsers.add_parser('query', help='Query entries by date range and/or tags')
    _add_filter_arguments(query_parser)
    _add_show_all(query_parser)
    query_parser.set_defaults(func=query_entries)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=log_level_from_env(), format="%(levelname)s: %(message)s")

    if args.show_default:
        return show_default()
    if args.set_default is not None:
        return set_default(args.set_default)

    func = getattr(args, 'func', list_entries)
    try:
        config = load_config(args.file, show_all=args.show_all, strict=args.strict, width=args.width)
        return func(args, config)
    except EntryParseError as exc:
        logger.error(f"Provided line is malformed ({exc.kind}: {exc}); expected: {EXPECTED_FORMAT}")
    except (PreconditionUnmet, DisplayIndexError, ConfigError) as exc:
        logger.error(str(exc))
    except OSError as exc:
        logger.error(f"File access failed: {exc}")
    return 1


if __name__ == '__main__':
    raise SystemExit(main())
