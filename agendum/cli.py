"""
CLI (Command Line Interface).

This module provides terminal commands on top of the library, e.g.:

    agendum parse <file.ics> [--out events.json] [--cache raw.json] [--detailed]
    agendum renormalize <raw.json> [--out events.json]
    agendum show <file.ics> [--limit 50]

Every command accepts --tz (local, UTC, +02:00, Europe/Paris ...) to choose
the zone local times are expressed in.

Note:
- parse/renormalize print JSON (or write it with --out)
- show renders a rich table for a quick look at what the heuristics extracted
"""

from __future__ import annotations

import argparse
import json
import logging
from datetime import tzinfo
from pathlib import Path
from typing import Any, List

from rich.console import Console
from rich.table import Table
from rich import box

from agendum.api import parse_and_normalize_detailed
from agendum.derive import format_session_label, session_ordinals
from agendum.model import DetailedResult, InvalidInputError, NormalizedEvent
from agendum.normalize import normalize
from agendum.parse import parse_ics_content_with_diagnostics
from agendum.storage import load_raw_events, save_raw_events
from agendum.timeutil import resolve_tz


logger = logging.getLogger(__name__)

console = Console()


def _read_ics(path: str) -> str:
    return Path(path).read_text(encoding="utf-8")


def _emit_json(payload: Any, out: str | None) -> None:
    """
    Write JSON to `out`, or print it when no output path was given.
    """
    text = json.dumps(payload, ensure_ascii=False, indent=2)
    if not out:
        print(text)
        return
    out_path = Path(out)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(text + "\n", encoding="utf-8")
    print(f"Wrote: {out_path}")


def _cmd_parse(args: argparse.Namespace, tz: tzinfo) -> int:
    """
    Decode + normalize an .ics file.
    """
    parsed = parse_ics_content_with_diagnostics(_read_ics(args.file))

    if args.cache:
        # Keep the raw events around so they can be re-normalized later
        save_raw_events(parsed.events, args.cache)
        logger.info("Cached %d raw event(s) in %s", len(parsed.events), args.cache)

    result = DetailedResult(events=normalize(parsed.events, tz), diagnostics=parsed.diagnostics)
    diag = result.diagnostics
    if diag.parser_errors:
        logger.warning(
            "%d parsing error(s), %d event(s) skipped without UID",
            diag.parser_errors,
            diag.skipped_events_without_uid,
        )

    if args.detailed:
        _emit_json(result.to_dict(), args.out)
    else:
        _emit_json([ev.to_dict() for ev in result.events], args.out)
    return 0


def _cmd_renormalize(args: argparse.Namespace, tz: tzinfo) -> int:
    """
    Normalize cached raw events again (no .ics needed).
    """
    raw_events = load_raw_events(args.cache)
    if not raw_events:
        print(f"No cached events in: {args.cache}")
        return 0

    _emit_json([ev.to_dict() for ev in normalize(raw_events, tz)], args.out)
    return 0


def _build_table(events: List[NormalizedEvent], limit: int) -> Table:
    table = Table(box=box.SIMPLE_HEAVY, show_lines=False)
    table.add_column("Date")
    table.add_column("Time")
    table.add_column("Type")
    table.add_column("Subject")
    table.add_column("Teachers")
    table.add_column("Promos")

    labels = session_ordinals(events)
    rows = sorted(zip(events, labels), key=lambda pair: pair[0].start_iso)

    for ev, label in rows[:limit]:
        date, _, time = ev.start_iso.partition("T")
        end_time = ev.end_iso.partition("T")[2]
        table.add_row(
            date,
            f"{time[:5]}-{end_time[:5]}" if time and end_time else "",
            format_session_label(label) or ev.type_,
            ev.subject,
            ", ".join(ev.teachers),
            ", ".join(ev.promos),
        )

    return table


def _cmd_show(args: argparse.Namespace, tz: tzinfo) -> int:
    """
    Print normalized events as a table.
    """
    result = parse_and_normalize_detailed(_read_ics(args.file), tz)
    events = result.events

    if not events:
        console.print("No events found.")
        return 0

    console.print(_build_table(events, args.limit))
    if len(events) > args.limit:
        console.print(f"... and {len(events) - args.limit} more events")

    diag = result.diagnostics
    console.print(
        f"calendars={diag.calendars_parsed} | events={len(events)} | "
        f"errors={diag.parser_errors} | skipped_without_uid={diag.skipped_events_without_uid}"
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser with sub-commands.
    """
    parser = argparse.ArgumentParser(prog="agendum", description="ICS timetable normalizer")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    tz_help = "Zone for local times: local (default), UTC, +02:00, Europe/Paris ..."

    p_parse = sub.add_parser("parse", help="Parse and normalize an .ics file")
    p_parse.add_argument("file", type=str, help="Input .ics file")
    p_parse.add_argument("--tz", type=str, default="local", help=tz_help)
    p_parse.add_argument("--out", type=str, default=None, help="Output JSON file (default: stdout)")
    p_parse.add_argument("--cache", type=str, default=None, help="Also store raw events in this JSON file")
    p_parse.add_argument("--detailed", action="store_true", help="Include parser diagnostics")

    p_renorm = sub.add_parser("renormalize", help="Normalize cached raw events again")
    p_renorm.add_argument("cache", type=str, help="Raw events JSON written by 'parse --cache'")
    p_renorm.add_argument("--tz", type=str, default="local", help=tz_help)
    p_renorm.add_argument("--out", type=str, default=None, help="Output JSON file (default: stdout)")

    p_show = sub.add_parser("show", help="Show normalized events as a table")
    p_show.add_argument("file", type=str, help="Input .ics file")
    p_show.add_argument("--tz", type=str, default="local", help=tz_help)
    p_show.add_argument("--limit", type=int, default=50, help="Maximum number of rows")

    return parser


def main(argv: list[str] | None = None) -> None:
    """
    CLI entry point. Parses args, dispatches to command handlers,
    and exits via SystemExit with a return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        tz = resolve_tz(args.tz)
    except ValueError as exc:
        print(f"Error: {exc}")
        raise SystemExit(1)

    handlers = {
        "parse": _cmd_parse,
        "renormalize": _cmd_renormalize,
        "show": _cmd_show,
    }
    handler = handlers.get(args.command)
    if handler is None:
        raise SystemExit(2)

    try:
        raise SystemExit(handler(args, tz))
    except (OSError, UnicodeDecodeError) as exc:
        print(f"Error: cannot read input: {exc}")
        raise SystemExit(1)
    except InvalidInputError as exc:
        print(f"Error: invalid input: {exc}")
        raise SystemExit(1)
