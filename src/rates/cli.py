"""
Command-line interface for the rate pipeline.

Subcommands:
    scrape - fetch the bulletin and store today's rates
    rates  - print the best-available rates view as JSON
    parse  - parse a line or a saved page without touching storage
"""

import argparse
import json
import sys
from datetime import date
from pathlib import Path
from typing import List, Optional

from src.config.settings import MissingSettingError, load_settings
from src.logging_config import configure_logging

from .extractor import NoRatesFoundError, extract_rates, page_text
from .fetcher import FetchError
from .parser import parse_line
from .scrape import run_scrape
from .service import build_rates_view
from .storage import StorageError, open_store


def _settings(args: argparse.Namespace):
    return load_settings(Path(args.config) if args.config else None)


def cmd_scrape(args: argparse.Namespace) -> int:
    """Run one scrape."""
    try:
        today = date.fromisoformat(args.date) if args.date else None
        settings = _settings(args)
        store = open_store(settings, write=True)
        result = run_scrape(store, settings, today=today)
    except (FetchError, NoRatesFoundError, StorageError, MissingSettingError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"{result.date.isoformat()}: inserted {result.inserted} rate(s)")
    if args.verbose:
        for r in result.rates:
            print(f"  {r.vessel_type.value:<9} {r.origin_region:>12} -> {r.destination_region:<12} ${r.rate:,}")
    return 0


def cmd_rates(args: argparse.Namespace) -> int:
    """Print the rates view."""
    try:
        as_of = date.fromisoformat(args.as_of) if args.as_of else None
        settings = _settings(args)
        store = open_store(settings)
        view = build_rates_view(store, settings, as_of=as_of)
    except (StorageError, MissingSettingError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(json.dumps(view, indent=2))
    return 0


def cmd_parse(args: argparse.Namespace) -> int:
    """Parse a single line or a saved page."""
    settings = _settings(args)

    if args.file:
        try:
            body = Path(args.file).read_text(encoding="utf-8")
            records = extract_rates(page_text(body), settings.rate_bounds)
        except (OSError, NoRatesFoundError) as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
    else:
        record = parse_line(args.line, settings.rate_bounds)
        if record is None:
            print("No rate recognized", file=sys.stderr)
            return 1
        records = [record]

    print(json.dumps([r.to_row() for r in records], indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dryfreight-rates",
        description="Scrape and serve dry-bulk time-charter rates",
    )
    parser.add_argument("--config", help="Path to rates.yaml (default: config/rates.yaml)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    subparsers = parser.add_subparsers(dest="command", required=True)

    p_scrape = subparsers.add_parser("scrape", help="Fetch the bulletin and store today's rates")
    p_scrape.add_argument("--date", help="Snapshot date, YYYY-MM-DD (default: today UTC)")
    p_scrape.set_defaults(func=cmd_scrape)

    p_rates = subparsers.add_parser("rates", help="Print best-available rates as JSON")
    p_rates.add_argument("--as-of", dest="as_of", help="Reference date, YYYY-MM-DD (default: today UTC)")
    p_rates.set_defaults(func=cmd_rates)

    p_parse = subparsers.add_parser("parse", help="Parse a line or a saved page (no storage)")
    group = p_parse.add_mutually_exclusive_group(required=True)
    group.add_argument("--line", help="A single bulletin line")
    group.add_argument("--file", help="A saved bulletin page (HTML or text)")
    p_parse.set_defaults(func=cmd_parse)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging()
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
