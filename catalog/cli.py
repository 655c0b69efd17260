"""Command-line interface for the catalog pipeline."""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

__all__ = ["main", "parse_args"]

from catalog.config import CATALOG_PATH, IN_STOCK_PATH
from catalog.fetcher import FetchError
from catalog.logging_config import setup_logging
from catalog.models import CatalogFormatError
from catalog.workflows import build_workflow, fetch_workflow


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Fetch the shop catalog and build the in-stock browser data",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Fetch the full catalog to data/catalog.json and write the stock split
  python -m catalog.cli fetch

  # Stock report for a saved catalog without writing anything
  python -m catalog.cli fetch --from-file data/catalog.json --report-only

  # Build tables and the browser's items JSON from the in-stock split
  python -m catalog.cli build data/catalog-in-stock.json --output-json data/items.json

  # Same, keeping only physical goods (slow: one info request per product)
  python -m catalog.cli build --physical-only --output-json data/items.json
        """,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--no-log-file", action="store_true", help="Don't write JSONL logs")

    sub = parser.add_subparsers(dest="command", required=True)

    fetch = sub.add_parser("fetch", help="Fetch the catalog and report stock")
    fetch.add_argument(
        "output",
        nargs="?",
        type=Path,
        help=f"Where to save the fetched catalog (default: {CATALOG_PATH})",
    )
    fetch.add_argument(
        "--from-file",
        metavar="PATH",
        type=Path,
        help="Load the catalog from a file instead of the API",
    )
    fetch.add_argument(
        "--report-only",
        action="store_true",
        help="Print the stock report without writing any JSON",
    )

    build = sub.add_parser("build", help="Build rows, tables and browser artifacts")
    build.add_argument(
        "input",
        nargs="?",
        type=Path,
        default=IN_STOCK_PATH,
        help=f"Catalog file to read (default: {IN_STOCK_PATH})",
    )
    build.add_argument(
        "--physical-only",
        action="store_true",
        help="Keep only products whose variants ship no downloadable files",
    )
    build.add_argument(
        "--output-json",
        metavar="PATH",
        type=Path,
        help="Also write {items, builtAt} JSON plus talent lookup maps next to it",
    )

    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for CLI. Returns the process exit code."""
    args = parse_args(argv)
    setup_logging(
        level=logging.DEBUG if args.verbose else logging.INFO,
        log_to_file=not args.no_log_file,
    )

    try:
        if args.command == "fetch":
            fetch_workflow(
                output_path=args.output,
                from_file=args.from_file,
                report_only=args.report_only,
            )
        else:
            build_workflow(
                input_path=args.input,
                output_json=args.output_json,
                physical_only=args.physical_only,
            )
    except FileNotFoundError as e:
        print(str(e), file=sys.stderr)
        return 1
    except (CatalogFormatError, json.JSONDecodeError) as e:
        print(f"Invalid catalog file: {e}", file=sys.stderr)
        return 1
    except FetchError as e:
        print(f"Fetch failed: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
