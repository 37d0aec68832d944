# main.py

"""Entry point for the subtrend command-line tool."""

import argparse
import logging
import sys

from subtrend.config.logging_config import setup_logging
from subtrend.config.settings import Settings

logger = logging.getLogger("subtrend.main")


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="subtrend",
        description="Subscription price trends across countries.",
        epilog=f"Data directory: {Settings.DATA_DIR}",
    )
    parser.add_argument(
        "slug",
        nargs="?",
        default=None,
        help="Service slug, e.g. youtube-premium.",
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=["json", "table"],
        default="json",
        dest="output_format",
        help="Output format (default: json).",
    )
    parser.add_argument(
        "--list",
        action="store_true",
        default=False,
        dest="list_services",
        help="List services that have price data.",
    )
    parser.add_argument(
        "--record-history",
        action="store_true",
        default=False,
        dest="record_history",
        help="Append the current prices to the service's history.",
    )
    parser.add_argument(
        "--date",
        default=None,
        dest="recorded_on",
        help="Date to record the snapshot under (default: lastUpdated).",
    )
    parser.add_argument(
        "--chart",
        action="store_true",
        default=False,
        help="Export the per-country price history as an HTML chart.",
    )
    parser.add_argument(
        "--open",
        action="store_true",
        default=False,
        dest="open_browser",
        help="Open the exported chart in a browser.",
    )
    parser.add_argument(
        "-n",
        "--limit",
        type=int,
        default=Settings.TOP_N,
        help=f"Rows per ranked list (default: {Settings.TOP_N}).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Show debug logging on stderr.",
    )
    return parser


def _command_name(args: argparse.Namespace) -> str:
    if args.list_services:
        return "list"
    if args.record_history:
        return "history"
    if args.chart:
        return "chart"
    return "trends"


def main() -> None:
    """Route to the requested CLI command."""
    parser = _build_parser()
    args = parser.parse_args()

    log_file = setup_logging(_command_name(args), verbose=args.verbose)
    logger.info("subtrend starting, log file: %s", log_file)

    from subtrend.cli import runner

    if args.list_services:
        sys.exit(runner.run_list_services())
    if args.slug is None:
        parser.error("a service slug is required")
    if args.limit < 1:
        parser.error("--limit must be at least 1")

    if args.record_history:
        exit_code = runner.run_record_history(
            args.slug, recorded_on=args.recorded_on,
        )
    elif args.chart:
        exit_code = runner.run_export_chart(
            args.slug, open_browser=args.open_browser,
        )
    else:
        exit_code = runner.run_trends(
            args.slug, args.output_format, limit=args.limit,
        )
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
