"""Herdbook CLI entrypoint."""

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from herdbook.api.export import export_records
from herdbook.api.records_api import get_herd_summary, list_records
from herdbook.config.loader import clamp_page_size, get_sqlite_path, load_config, load_config_or_defaults
from herdbook.database.sqlite_client import session_context
from herdbook.ingestion.file_ingestor import ingest_all_csvs
from herdbook.query import QueryDescriptor, QueryResult, RangeFilter
from herdbook.records import BOVINE_PRESETS, RECORD_KINDS, apply_preset
from herdbook.utils.logging import get_logger

logger = get_logger(__name__)

TABLE_COLUMNS: Dict[str, List[tuple]] = {
    "bovines": [
        ("ear_tag", "Ear Tag", 10),
        ("name", "Name", 16),
        ("type", "Type", 10),
        ("breed", "Breed", 14),
        ("gender", "Sex", 7),
        ("birth_date", "Born", 11),
        ("weight", "Kg", 7),
        ("health_status", "Health", 11),
    ],
    "events": [
        ("scheduled_date", "Date", 11),
        ("title", "Title", 28),
        ("event_type", "Type", 14),
        ("status", "Status", 12),
        ("priority", "Priority", 9),
        ("bovine_tag", "Animal", 10),
    ],
    "diseases": [
        ("diagnosis_date", "Diagnosed", 11),
        ("animal_tag", "Animal", 10),
        ("disease_name", "Disease", 22),
        ("severity", "Severity", 9),
        ("status", "Status", 10),
        ("sector", "Sector", 10),
    ],
}


def _load_config(args: argparse.Namespace) -> Dict[str, Any]:
    """Explicit --config must exist; the default path falls back to built-in defaults."""
    if args.config:
        return load_config(args.config)
    return load_config_or_defaults()


def _parse_scalar(raw: str) -> Any:
    """Range bounds: numbers become numbers, anything else stays text (e.g. ISO dates)."""
    text = raw.strip()
    if text == "":
        return None
    for cast in (int, float):
        try:
            return cast(text)
        except ValueError:
            continue
    return text


def _parse_filters(pairs: Optional[Sequence[str]]) -> Dict[str, Any]:
    """FIELD=VALUE pairs into equality filters; true/false become booleans."""
    filters: Dict[str, Any] = {}
    for pair in pairs or []:
        field, sep, value = pair.partition("=")
        if not sep or not field.strip():
            raise ValueError(f"Invalid filter '{pair}': expected FIELD=VALUE")
        value = value.strip()
        if value.lower() in ("true", "false"):
            filters[field.strip()] = value.lower() == "true"
        else:
            filters[field.strip()] = value
    return filters


def _parse_ranges(pairs: Optional[Sequence[str]]) -> Dict[str, RangeFilter]:
    """FIELD=MIN:MAX pairs into range filters; either bound may be empty."""
    ranges: Dict[str, RangeFilter] = {}
    for pair in pairs or []:
        field, sep, bounds = pair.partition("=")
        minimum, colon, maximum = bounds.partition(":")
        if not sep or not colon or not field.strip():
            raise ValueError(f"Invalid range '{pair}': expected FIELD=MIN:MAX")
        ranges[field.strip()] = RangeFilter(minimum=_parse_scalar(minimum), maximum=_parse_scalar(maximum))
    return ranges


def parse_point(raw: Optional[str], kind: str) -> Optional[Tuple[float, float]]:
    """LAT,LON into a point that bovine distance_m is measured from."""
    if raw is None:
        return None
    if kind != "bovines":
        raise ValueError("--near is only available for bovines")
    try:
        latitude, longitude = (float(part) for part in raw.split(","))
    except ValueError:
        raise ValueError(f"Invalid point '{raw}': expected LAT,LON") from None
    if not (-90 <= latitude <= 90 and -180 <= longitude <= 180):
        raise ValueError(f"Invalid point '{raw}': latitude or longitude out of range")
    return latitude, longitude


def build_descriptor(args: argparse.Namespace, config: Dict[str, Any]) -> QueryDescriptor:
    """
    Query descriptor from command-line options.

    Starts from --query-file when given; explicit options override it, and a
    preset is merged last. Page size is capped by query.max_page_size.
    """
    if args.query_file:
        descriptor = QueryDescriptor.model_validate_json(args.query_file.read_text(encoding="utf-8"))
        requested_size = args.page_size if args.page_size is not None else descriptor.page_size
    else:
        descriptor = QueryDescriptor()
        requested_size = args.page_size

    changes: Dict[str, Any] = {"page_size": clamp_page_size(requested_size, config)}
    if args.search is not None:
        changes["search_term"] = args.search
    if args.filter:
        changes["equality_filters"] = {**descriptor.equality_filters, **_parse_filters(args.filter)}
    if args.range:
        changes["range_filters"] = {**descriptor.range_filters, **_parse_ranges(args.range)}
    if args.sort is not None:
        changes["sort_field"] = args.sort
    if args.desc:
        changes["sort_direction"] = "desc"
    if args.page is not None:
        changes["page"] = args.page
    descriptor = descriptor.with_changes(**changes)

    if args.preset:
        if args.kind != "bovines":
            raise ValueError("Presets are only available for bovines")
        if args.preset not in BOVINE_PRESETS:
            raise ValueError(f"Unknown preset: {args.preset} (expected one of {', '.join(BOVINE_PRESETS)})")
        descriptor = apply_preset(descriptor, args.preset)
    return descriptor


def _cell(value: Any, width: int) -> str:
    text = "-" if value is None or value == "" else str(value)
    if len(text) > width:
        text = text[: width - 1] + "~"
    return f"{text:<{width}}"


def _print_table(kind: str, result: QueryResult) -> None:
    columns = TABLE_COLUMNS[kind]
    line_width = sum(width + 1 for _, _, width in columns)
    print(" ".join(_cell(label, width) for _, label, width in columns))
    print("-" * line_width)
    for record in result.items:
        print(" ".join(_cell(record.get(field), width) for field, _, width in columns))
    print("-" * line_width)
    print(
        f"Page {result.page} of {result.total_pages} "
        f"({len(result.items)} shown, {result.total_matched} matched)"
    )


def cmd_ingest(args: argparse.Namespace) -> None:
    """Load herd records from CSV files."""
    config = _load_config(args)
    if not any((args.bovines, args.vaccinations, args.events, args.diseases)):
        print("Nothing to ingest: pass at least one of --bovines, --vaccinations, --events, --diseases")
        return

    with session_context(get_sqlite_path(config)) as session:
        counts = ingest_all_csvs(
            session,
            bovines_path=args.bovines,
            vaccinations_path=args.vaccinations,
            events_path=args.events,
            diseases_path=args.diseases,
        )
    for kind, count in counts.items():
        print(f"{kind:<14} {count:>6}")


def cmd_list(args: argparse.Namespace) -> None:
    """Query one record kind and print a page."""
    config = _load_config(args)
    descriptor = build_descriptor(args, config)
    due_soon_days = config["vaccination"]["due_soon_days"]
    near = parse_point(args.near, args.kind)

    with session_context(get_sqlite_path(config)) as session:
        result = list_records(session, args.kind, descriptor, due_soon_days=due_soon_days, near=near)

    if args.format == "json":
        print(json.dumps(result.model_dump(mode="json"), indent=2, sort_keys=True, default=str))
        return
    if not result.total_matched:
        print(f"No {args.kind} match the current search and filters.")
        return
    _print_table(args.kind, result)


def cmd_export(args: argparse.Namespace) -> None:
    """Export one page of query results."""
    config = _load_config(args)
    descriptor = build_descriptor(args, config)
    near = parse_point(args.near, args.kind)

    with session_context(get_sqlite_path(config)) as session:
        result = export_records(
            session,
            args.kind,
            descriptor,
            format=args.format,
            out=args.out,
            due_soon_days=config["vaccination"]["due_soon_days"],
            near=near,
        )
    print(result)


def cmd_stats(args: argparse.Namespace) -> None:
    """Print herd-wide statistics."""
    config = _load_config(args)
    with session_context(get_sqlite_path(config)) as session:
        summary = get_herd_summary(session, days_ahead=config["vaccination"]["due_soon_days"])

    if args.format == "json":
        print(json.dumps(summary.model_dump(mode="json"), indent=2, sort_keys=True))
        return

    print(f"\nHerd summary as of {summary.as_of.isoformat()}")
    print("=" * 48)
    print(f"Animals:            {summary.total_animals}")
    print(f"Average weight:     {summary.average_weight} kg")
    print(f"Healthy:            {summary.health.healthy} ({summary.health.health_percentage}%)")
    print(f"Sick / quarantine:  {summary.health.sick} / {summary.health.quarantine}")
    print(f"Vaccination cover:  {summary.vaccination.coverage}% ({summary.vaccination.overdue} overdue)")
    print(f"Active cases:       {summary.diseases.active_cases} ({summary.diseases.critical_cases} critical)")
    print(f"Mortality rate:     {summary.mortality_rate}%")
    print(f"Morbidity rate:     {summary.morbidity_rate}%")
    if summary.upcoming_vaccinations:
        print("\nUpcoming vaccinations:")
        for entry in summary.upcoming_vaccinations:
            print(f"  {entry.due_date.isoformat()}  {entry.ear_tag or '-':<10} {entry.vaccine_name or '-'}")
    print()


def _add_query_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("kind", choices=RECORD_KINDS, help="Record kind to query")
    parser.add_argument("--search", type=str, help="Case-insensitive text search")
    parser.add_argument(
        "--filter",
        action="append",
        metavar="FIELD=VALUE",
        help="Exact-match filter (repeatable; ALL or an empty value means no filter)",
    )
    parser.add_argument(
        "--range",
        action="append",
        metavar="FIELD=MIN:MAX",
        help="Inclusive range filter (repeatable; leave a bound empty for open)",
    )
    parser.add_argument("--sort", type=str, help="Field to sort by (stored or derived)")
    parser.add_argument("--desc", action="store_true", help="Sort descending")
    parser.add_argument("--page", type=int, help="Page number (default: 1)")
    parser.add_argument("--page-size", type=int, help="Records per page (default: from config)")
    parser.add_argument(
        "--preset",
        type=str,
        choices=sorted(BOVINE_PRESETS),
        help="Apply a saved bovine filter preset",
    )
    parser.add_argument("--query-file", type=Path, help="JSON query descriptor to start from")
    parser.add_argument(
        "--near",
        type=str,
        metavar="LAT,LON",
        help="Point for the bovine distance_m field (metres), e.g. --near 4.6,-74.1 --range distance_m=:5000",
    )


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Main CLI entrypoint."""
    parser = argparse.ArgumentParser(
        prog="herdbook",
        description="Local herd records: ingest, query and export",
    )
    parser.add_argument("--config", type=Path, help="Path to herdbook.config.yaml")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # ingest command
    ingest_parser = subparsers.add_parser("ingest", help="Load herd records from CSV files")
    ingest_parser.add_argument("--bovines", type=Path, help="Bovines CSV")
    ingest_parser.add_argument("--vaccinations", type=Path, help="Vaccinations CSV")
    ingest_parser.add_argument("--events", type=Path, help="Herd events CSV")
    ingest_parser.add_argument("--diseases", type=Path, help="Disease cases CSV")
    ingest_parser.set_defaults(func=cmd_ingest)

    # list command
    list_parser = subparsers.add_parser("list", help="Search, filter, sort and page records")
    _add_query_arguments(list_parser)
    list_parser.add_argument(
        "--format",
        type=str,
        choices=["table", "json"],
        default="table",
        help="Output format (default: table)",
    )
    list_parser.set_defaults(func=cmd_list)

    # export command
    export_parser = subparsers.add_parser("export", help="Export a page of query results")
    _add_query_arguments(export_parser)
    export_parser.add_argument(
        "--format",
        type=str,
        choices=["json", "csv"],
        default="json",
        help="Export format (default: json)",
    )
    export_parser.add_argument(
        "--out",
        type=Path,
        help="Output file path (if not provided, prints to stdout)",
    )
    export_parser.set_defaults(func=cmd_export)

    # stats command
    stats_parser = subparsers.add_parser("stats", help="Herd health, vaccination and disease summary")
    stats_parser.add_argument(
        "--format",
        type=str,
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)",
    )
    stats_parser.set_defaults(func=cmd_stats)

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return

    try:
        args.func(args)
    except FileNotFoundError as e:
        logger.error(f"{e}")
        sys.exit(1)
    except Exception as e:
        logger.error(f"Error running command '{args.command}': {e}", exc_info=True)
        raise


if __name__ == "__main__":
    main()
