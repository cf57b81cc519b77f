#!/usr/bin/env python3
"""
CLI for browsing an event snapshot.

Usage:
    # Landing view buckets
    python -m discovery.cli.browse landing events.json

    # Filtered, sorted list
    python -m discovery.cli.browse list events.json --city Brno --rating 4.2 --sort points

    # Search and remember the term
    python -m discovery.cli.browse list events.json --query yoga --remember

    # Recent searches
    python -m discovery.cli.browse history
    python -m discovery.cli.browse history --clear
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from discovery.config import configure_logging, get_settings
from discovery.models.events import EventRecord
from discovery.models.filters import RATING_THRESHOLDS, DurationPreset, SortKey
from discovery.services.categorizer import Bucket
from discovery.services.filter_session import FilterSessionState
from discovery.services.pipeline import EventDiscovery
from discovery.services.points import points_to_stars
from discovery.services.search_history import create_history_store

logger = logging.getLogger(__name__)


def event_to_dict(event: EventRecord) -> dict[str, Any]:
    """Convert EventRecord to a JSON-serializable dict."""
    data = event.model_dump(mode="json", by_alias=True)
    filled, empty = points_to_stars(event.creator_rating)
    data["stars"] = "*" * filled + "." * empty
    return data


def bucket_to_dict(bucket: Bucket) -> dict[str, Any]:
    return {
        "key": bucket.key,
        "label": bucket.label,
        "total": bucket.total,
        "preview": [event_to_dict(e) for e in bucket.preview],
    }


def load_events(path: str) -> list[dict[str, Any]]:
    """Read a JSON array of events."""
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.error("Failed to read events from %s: %s", path, e)
        sys.exit(1)

    if not isinstance(data, list):
        logger.error("Expected a JSON array of events in %s", path)
        sys.exit(1)
    return data


def build_session(args: argparse.Namespace) -> FilterSessionState:
    """Translate command line filters into an applied filter session."""
    session = FilterSessionState()
    for city in args.city or []:
        session.toggle_city(city)
    if args.rating is not None:
        session.toggle_rating(args.rating)
    if args.duration:
        session.toggle_duration_preset(args.duration)
    elif args.min is not None or args.max is not None:
        session.toggle_custom_duration()
        session.set_custom_range(
            args.min if args.min is not None else 0,
            args.max if args.max is not None else float("inf"),
        )
    session.set_sort(args.sort)
    session.accept()
    return session


def show_landing(args: argparse.Namespace) -> None:
    discovery = EventDiscovery(session=build_session(args))
    discovery.replace_snapshot(load_events(args.events))
    buckets = discovery.landing()
    print(json.dumps([bucket_to_dict(b) for b in buckets], indent=2))


def show_list(args: argparse.Namespace) -> None:
    history = create_history_store(args.history_db)
    discovery = EventDiscovery(session=build_session(args), history=history)
    discovery.replace_snapshot(load_events(args.events))

    results = discovery.filtered(args.query)
    logger.info("Found %d events", len(results))
    print(json.dumps([event_to_dict(e) for e in results], indent=2))

    if args.remember and args.query:
        discovery.submit_search(args.query)


def show_history(args: argparse.Namespace) -> None:
    history = create_history_store(args.history_db)
    if args.clear:
        history.clear()
        logger.info("Cleared search history")
        return
    for term in history.history:
        print(term)


def add_filter_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("events", help="Path to a JSON array of events")
    parser.add_argument(
        "--city",
        action="append",
        help="Only show events in this city (repeatable)",
    )
    parser.add_argument(
        "--rating",
        type=float,
        choices=RATING_THRESHOLDS,
        help="Minimum creator rating",
    )
    parser.add_argument(
        "--duration",
        choices=[p.value for p in DurationPreset],
        help="Duration preset",
    )
    parser.add_argument("--min", type=float, help="Custom minimum duration in minutes")
    parser.add_argument("--max", type=float, help="Custom maximum duration in minutes")
    parser.add_argument(
        "--sort",
        choices=[k.value for k in SortKey],
        default=get_settings().default_sort,
        help="Sort key (default: %(default)s)",
    )


def main() -> None:
    """Main CLI entrypoint."""
    load_dotenv()
    configure_logging()

    parser = argparse.ArgumentParser(
        description="Browse an event snapshot",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--history-db",
        help="SQLite file for search history (default: DISCOVERY_HISTORY_DB_PATH)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    landing = subparsers.add_parser("landing", help="Show landing-view buckets")
    add_filter_arguments(landing)

    listing = subparsers.add_parser("list", help="Show the filtered event list")
    add_filter_arguments(listing)
    listing.add_argument("-q", "--query", default="", help="Search text")
    listing.add_argument(
        "--remember",
        action="store_true",
        help="Record the query in search history",
    )

    history = subparsers.add_parser("history", help="Show recent searches")
    history.add_argument("--clear", action="store_true", help="Forget recent searches")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    if args.command == "landing":
        show_landing(args)
    elif args.command == "list":
        show_list(args)
    elif args.command == "history":
        show_history(args)


if __name__ == "__main__":
    main()
