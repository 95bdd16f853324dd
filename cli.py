#!/usr/bin/env python3
"""
Trade Setup Engine - Command Line Interface

Evaluates instrument snapshots from JSON files and prints the resulting
trade setups.

Usage:
    python cli.py snapshots.json
    python cli.py snapshots.json --format json --output results.json
    python cli.py snapshots.json --at 2024-01-02T15:00:00Z

Examples:
    # Evaluate a watchlist of snapshots
    python cli.py watchlist.json

    # CSV export
    python cli.py watchlist.json --format csv -o signals.csv

    # Pin the evaluation time for reproducible output
    python cli.py watchlist.json --at 2024-01-02T15:00:00Z

    # Evaluate across four worker threads
    python cli.py watchlist.json --workers 4

    # Keep a debug log next to quiet console output
    python cli.py watchlist.json --verbose 0 --log run.log
"""

import argparse
import sys
from datetime import datetime
from typing import List, Optional

# Load environment variables FIRST before any imports that use settings
from dotenv import load_dotenv
load_dotenv()

from rich.console import Console

from tradesetup.cli.analyzer import SnapshotAnalyzer, SnapshotFileError
from tradesetup.cli.formatter import OutputFormatter, console as formatter_console
from tradesetup.config.settings import trade_setup_config
from tradesetup.utils.clock import Clock, FixedClock
from tradesetup.utils.logging import configure_cli_logging, configure_logging

console = Console()
formatter = OutputFormatter()


def worker_count(value: str) -> int:
    """argparse type for --workers: 0 evaluates inline, negatives are rejected."""
    try:
        count = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid worker count: {value!r}")
    if count < 0:
        raise argparse.ArgumentTypeError(f"worker count must be 0 or more, got {count}")
    return count


def parse_arguments(argv: Optional[List[str]] = None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Trade Setup Engine - Snapshot Evaluation CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s watchlist.json                         # Evaluate snapshots
  %(prog)s a.json b.json                          # Evaluate several files
  %(prog)s watchlist.json --format json           # JSON output
  %(prog)s watchlist.json --output report.csv --format csv
  %(prog)s watchlist.json --at 2024-01-02T15:00:00Z
  %(prog)s watchlist.json --workers 4 --log run.log

Verbosity Levels:
  %(prog)s watchlist.json --verbose=0             # Silent (errors only)
  %(prog)s watchlist.json --verbose=1             # Normal (warnings + errors)
  %(prog)s watchlist.json --verbose=2             # Detailed (info + warnings + errors)
  %(prog)s watchlist.json --verbose=3             # Debug (full verbose output)
        """,
    )

    parser.add_argument(
        "files",
        nargs="+",
        help="JSON files holding one snapshot or a list of snapshots",
    )

    parser.add_argument(
        "--format",
        choices=["table", "json", "csv"],
        default="table",
        help="Output format (default: table)",
    )

    parser.add_argument(
        "--output",
        "-o",
        type=str,
        help="Save output to file",
    )

    parser.add_argument(
        "--at",
        type=str,
        metavar="ISO_TIME",
        help="Evaluate as of this instant instead of now (naive times are UTC)",
    )

    parser.add_argument(
        "--workers",
        type=worker_count,
        default=None,
        help="Worker threads for batch evaluation, 0 for inline (default: from settings)",
    )

    parser.add_argument(
        "--log",
        type=str,
        metavar="FILE",
        help="Also write debug-level logs to this file",
    )

    parser.add_argument(
        "--verbose",
        "-v",
        nargs="?",
        const=2,
        type=int,
        choices=[0, 1, 2, 3],
        default=None,
        help="Verbosity level: 0=errors-only, 1=normal, 2=detailed, 3=debug (default: LOG_LEVEL setting)",
    )

    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored output",
    )

    return parser.parse_args(argv)


def parse_clock(value: Optional[str]) -> Optional[Clock]:
    """
    Build a fixed clock from an ISO-8601 string.

    Raises:
        ValueError: If the value is not a valid ISO-8601 timestamp
    """
    if not value:
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return FixedClock(datetime.fromisoformat(text))


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point. Returns the process exit code."""
    args = parse_arguments(argv)

    if args.verbose is None:
        verbosity_level = 1
        configure_logging(trade_setup_config.log_level, log_file=args.log)
    else:
        verbosity_level = args.verbose
        configure_cli_logging(verbosity_level, log_file=args.log)

    # Disable color if requested
    if args.no_color:
        console.no_color = True
        formatter_console.no_color = True

    try:
        clock = parse_clock(args.at)
    except ValueError:
        formatter.print_error(f"Invalid --at timestamp: {args.at}")
        return 2

    analyzer = SnapshotAnalyzer(clock=clock)

    try:
        if verbosity_level >= 2:
            formatter.print_progress(f"Evaluating snapshots from {len(args.files)} file(s)...")

        results = analyzer.analyze_files(args.files, workers=args.workers)

        if verbosity_level >= 2:
            formatter.print_success(f"Evaluated {len(results)} snapshot(s)")

        if args.format == "table":
            formatter.format_table(results)
        elif args.format == "json":
            console.print_json(formatter.format_json(results))
        elif args.format == "csv":
            console.print(formatter.format_csv(results), markup=False, highlight=False)

        # Save to file if requested
        if args.output:
            if args.format == "csv":
                content = formatter.format_csv(results)
            else:
                content = formatter.format_json(results)  # Default to JSON for table output

            with open(args.output, "w") as f:
                f.write(content)

            if verbosity_level > 0:
                formatter.print_success(f"Results saved to {args.output}")

    except SnapshotFileError as e:
        formatter.print_error(str(e))
        return 1
    except OSError as e:
        formatter.print_error(f"Error writing output: {e}")
        return 1
    except KeyboardInterrupt:
        console.print("\n[yellow]Evaluation interrupted by user[/yellow]")
        return 130

    return 0


if __name__ == "__main__":
    sys.exit(main())
