# main.py

"""Entry point for the price_tracker application."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from src.config.logging_config import setup_logging
from src.config.settings import Settings

logger = logging.getLogger("price_tracker.main")


def _positive_int(value: str) -> int:
    """argparse type for counts that must be at least 1."""
    try:
        number = int(value)
    except ValueError:
        number = 0
    if number < 1:
        msg = f"expected a positive integer, got '{value}'"
        raise argparse.ArgumentTypeError(msg)
    return number


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    valid_ids = ", ".join(p["id"] for p in Settings.AVAILABLE_PROVIDERS)

    parser = argparse.ArgumentParser(
        prog="price_tracker",
        description="Watch product pages and alert on price drops.",
        epilog=f"Available page providers: {valid_ids}",
    )
    parser.add_argument(
        "-w",
        "--watchlist",
        type=Path,
        default=None,
        help="Watchlist JSON file (default: data/watchlist.json).",
    )
    parser.add_argument(
        "--history",
        type=Path,
        default=None,
        help="Price history JSON file (default: data/price-history.json).",
    )
    parser.add_argument(
        "-c",
        "--concurrency",
        type=_positive_int,
        default=None,
        help=(
            "Max pages checked at once "
            f"(default: {Settings.MAX_CONCURRENT_CHECKS})."
        ),
    )
    parser.add_argument(
        "-p",
        "--provider",
        choices=[p["id"] for p in Settings.AVAILABLE_PROVIDERS],
        default=None,
        help=f"Page provider (default: {Settings.PAGE_PROVIDER}).",
    )
    parser.add_argument(
        "--headful",
        action="store_true",
        default=False,
        help="Show the browser window even when no selector is missing.",
    )
    parser.add_argument(
        "--chart",
        action="store_true",
        default=False,
        help="Render the price history chart and exit.",
    )
    parser.add_argument(
        "--no-open",
        action="store_false",
        default=True,
        dest="open_browser",
        help="Do not open the rendered chart in a browser.",
    )
    return parser


def _run_tracker(args: argparse.Namespace) -> None:
    """Run one tracking pass and exit with its status."""
    from src.cli.runner import run_tracker

    try:
        exit_code = asyncio.run(
            run_tracker(
                watchlist_path=args.watchlist,
                history_path=args.history,
                concurrency=args.concurrency,
                provider_id=args.provider,
                headful=args.headful,
            )
        )
    except Exception:
        logger.critical("Fatal error during tracker run", exc_info=True)
        raise
    finally:
        logger.info("price_tracker shutting down")
    sys.exit(exit_code)


def _run_chart(args: argparse.Namespace) -> None:
    """Render the history chart."""
    from src.cli.runner import run_chart_export

    exit_code = run_chart_export(
        history_path=args.history,
        open_browser=args.open_browser,
    )
    sys.exit(exit_code)


def main() -> None:
    """Route to chart export or a tracking pass."""
    log_file = setup_logging()
    logger.info("price_tracker starting - log file: %s", log_file)

    parser = _build_parser()
    args = parser.parse_args()

    if args.chart:
        _run_chart(args)
    else:
        _run_tracker(args)


if __name__ == "__main__":
    main()
