"""
Command Line Interface

Entry point for running the API server or a single search from the command line.

Usage:
    python -m directory_aggregator serve --port 3000
    python -m directory_aggregator google "air conditioning" "Leeds, UK"
    python -m directory_aggregator refcom --postcode "LS1 4DY"
    python -m directory_aggregator fgas --city Manchester -n 25 -o fgas.json
"""

import argparse
import asyncio
import json
import logging
import sys

from .config import API_HOST, API_PORT, DEFAULT_NUMBER_OF_RECORDS, LOG_LEVEL
from .exceptions import DirectoryAggregatorError, InvalidRequest


def configure_logging(level: str = LOG_LEVEL):
    """Configure root logging once for the process."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="directory_aggregator",
        description="UK trade directory aggregator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m directory_aggregator serve
  python -m directory_aggregator google "air conditioning" "Leeds, UK"
  python -m directory_aggregator refcom --company-name "Cool Air" --postcode "M1 1AE"
  python -m directory_aggregator fgas --company-name "Cool Air" -n 5
        """
    )
    parser.add_argument(
        "--log-level",
        default=LOG_LEVEL,
        help=f"Logging level (default: {LOG_LEVEL})"
    )

    commands = parser.add_subparsers(dest="command", required=True)

    serve = commands.add_parser("serve", help="Run the HTTP API server")
    serve.add_argument("--host", default=API_HOST, help=f"Listen host (default: {API_HOST})")
    serve.add_argument("--port", type=int, default=API_PORT, help=f"Listen port (default: {API_PORT})")

    google = commands.add_parser("google", help="Search Google Places")
    google.add_argument("keyword", help="What to search for (e.g., 'air conditioning')")
    google.add_argument("location", help="Where to search (e.g., 'Leeds, UK')")

    refcom = commands.add_parser("refcom", help="Query the REFCOM registry")
    refcom.add_argument("--company-name", default="", help="Company name")
    refcom.add_argument("--postcode", default="", help="Postcode (searched with a 10 mile radius)")
    refcom.add_argument("--registration-number", default="", help="REFCOM certificate code")

    fgas = commands.add_parser("fgas", help="Scrape the FGAS company directory")
    fgas.add_argument("--company-name", default="", help="Company name")
    fgas.add_argument("--city", default="", help="City")
    fgas.add_argument(
        "-n", "--number-of-records",
        type=int,
        default=DEFAULT_NUMBER_OF_RECORDS,
        help=f"Maximum companies to return (default: {DEFAULT_NUMBER_OF_RECORDS})"
    )
    fgas.add_argument("--headed", action="store_true", help="Show the browser window")

    for sub in (google, refcom, fgas):
        sub.add_argument("-o", "--output", help="Write JSON to this file instead of stdout")

    return parser


async def run_search(args) -> object:
    """Run the client selected by args.command and return JSON-ready data."""
    from .extraction import FgasDirectoryScraper, scrape_directory, search_places, search_registry

    if args.command == "google":
        records = await search_places(args.keyword, args.location)
        return [record.to_dict() for record in records]

    if args.command == "refcom":
        result = await search_registry(
            company_name=args.company_name,
            postcode=args.postcode,
            registration_number=args.registration_number,
        )
    else:
        result = await scrape_directory(
            company_name=args.company_name,
            city=args.city,
            number_of_records=args.number_of_records,
            scraper=FgasDirectoryScraper(headless=not args.headed),
        )

    return {
        "source": result["source"],
        "normalized": [record.to_dict() for record in result["normalized"]],
    }


def write_output(data: object, output: str = None):
    payload = json.dumps(data, indent=2, ensure_ascii=False)
    if output:
        with open(output, "w", encoding="utf-8") as f:
            f.write(payload)
    else:
        print(payload)


def main(argv=None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level.upper())

    if args.command == "serve":
        from .server import run_server
        run_server(host=args.host, port=args.port)
        return 0

    try:
        data = asyncio.run(run_search(args))
        write_output(data, args.output)
        return 0

    except InvalidRequest as e:
        print(f"\nError: {e}", file=sys.stderr)
        return 2
    except DirectoryAggregatorError as e:
        print(f"\nError: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\n\nInterrupted by user.", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
