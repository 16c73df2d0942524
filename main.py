"""CLI entry point for the Careerjet search client."""

import argparse
import asyncio
import logging
import sys

from careerjet.client import CareerjetClient
from careerjet.core.config import Settings
from careerjet.core.errors import CareerjetError
from careerjet.pipeline.runner import apply_search, export_results_json, run_all_searches


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Careerjet search client - run saved job searches against the Careerjet API",
    )
    subparsers = parser.add_subparsers(dest="command")

    search_parser = subparsers.add_parser("search", help="Run saved searches")
    search_parser.add_argument(
        "--config",
        default="config/settings.yaml",
        help="Path to settings YAML file (default: config/settings.yaml)",
    )
    search_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show the requests that would be sent without calling the API",
    )
    search_parser.add_argument(
        "--export",
        choices=["json"],
        help="Export results to format (json)",
    )
    search_parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(2)

    return args


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def dry_run(settings: Settings) -> None:
    """Print each request that would be sent, without touching the network."""
    print(f"[DRY RUN] {len(settings.searches)} searches configured")

    for search in settings.searches:
        client = apply_search(CareerjetClient(settings.client), search)
        print(f"[DRY RUN] '{search.keywords or ''}' in '{search.location or ''}'")
        print(f"  GET {client.request_url()}")


async def run(settings: Settings, export_format: str | None) -> None:
    """Run every saved search against the live API."""
    results = await run_all_searches(settings)

    total_hits = sum(r.hits for r in results)
    total_jobs = sum(len(r.jobs) for r in results)
    print(f"\nSearch complete: {len(results)}/{len(settings.searches)} searches, "
          f"{total_hits} hits, {total_jobs} jobs fetched.")

    for r in results:
        print(f"  '{r.keywords}' in '{r.location}': {r.hits} hits, "
              f"{r.pages} pages, {len(r.jobs)} fetched")

    if export_format == "json" and results:
        output = export_results_json(results)
        print(f"\n{output}")


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    setup_logging(args.verbose)

    try:
        settings = Settings.from_yaml(args.config)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        if args.dry_run:
            dry_run(settings)
        else:
            asyncio.run(run(settings, args.export))
    except CareerjetError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
