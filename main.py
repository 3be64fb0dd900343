# main.py

"""Entry point for the storefeed headless catalog browser."""

import argparse
import asyncio
import logging
import sys

from storefeed.config.logging_config import setup_logging
from storefeed.config.settings import Settings

logger = logging.getLogger("storefeed.main")


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="storefeed",
        description="Browse the paginated product catalog.",
        epilog=f"Catalog API: {Settings.BASE_URL}",
    )
    parser.add_argument(
        "-c",
        "--category",
        type=int,
        default=None,
        help="Category id to filter by (default: all).",
    )
    parser.add_argument(
        "-p",
        "--pages",
        type=int,
        default=1,
        help="Number of pages to load (default: 1).",
    )
    parser.add_argument(
        "-s",
        "--search",
        default="",
        help="Case-insensitive text filter over loaded products.",
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=["json", "table"],
        default="table",
        dest="output_format",
        help="Output format (default: table).",
    )
    parser.add_argument(
        "--base-url",
        default=None,
        dest="base_url",
        help="Override the catalog API base URL.",
    )
    parser.add_argument(
        "--categories",
        action="store_true",
        default=False,
        help="List categories and exit.",
    )
    return parser


def main() -> None:
    """Route to the category listing or the feed browser."""
    log_file = setup_logging()
    logger.info("storefeed starting, log file: %s", log_file)

    args = _build_parser().parse_args()

    from storefeed.cli.runner import cli_browse, cli_categories

    try:
        if args.categories:
            exit_code = asyncio.run(cli_categories(args.base_url))
        else:
            exit_code = asyncio.run(
                cli_browse(
                    category_id=args.category,
                    pages=max(args.pages, 1),
                    search_text=args.search,
                    output_format=args.output_format,
                    base_url=args.base_url,
                )
            )
    except Exception:
        logger.critical("Fatal error during run", exc_info=True)
        raise
    finally:
        logger.info("storefeed shutting down")
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
