"""This module contains the main entry point for the application."""

import argparse
import logging
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Optional

from .config import (
    COOLDOWN_RANGE,
    DEFAULT_BENCH_ARG,
    DEFAULT_COOLDOWN,
    DEFAULT_IDLE_WAIT,
    DEFAULT_RUNS,
    IDLE_WAIT_RANGE,
    RUNS_RANGE,
    Config,
    default_executable,
    default_threads,
)
from .console import console_main
from .errors import BenchError, ConfigurationError
from .preferences import DEFAULT_PREFS_GLOB, find_preferences_file
from .results import ResultSet, process_and_output_results

# Configure basic logging
logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger("thread_bench")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="thread-bench",
        description=(
            "Run a CPU stress benchmark repeatedly at several thread counts "
            "and report score statistics as JSON."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Example Usage:
  # Three runs at 16, 8 and 1 threads with a two minute cooldown
  thread-bench -t 1 8 16

  # Five quick runs, JSON to a file, statistics to CSV
  thread-bench -r 5 -c 30 -t 4 --output-stats stats.csv > results.json

  # Let the machine settle for ten minutes first, then plot the results
  thread-bench -i 600 -t 2 4 8 --output-plot scores.svg
""",
    )

    parser.add_argument(
        "-r",
        "--runs",
        type=int,
        default=DEFAULT_RUNS,
        help=f"Runs per thread group ({RUNS_RANGE[0]}-{RUNS_RANGE[1]}). Default: {DEFAULT_RUNS}",
    )

    parser.add_argument(
        "-t",
        "--threads",
        type=int,
        nargs="+",
        default=None,
        help="Thread counts to benchmark. They always run highest first. Default: logical core count",
    )

    parser.add_argument(
        "-c",
        "--cooldown",
        type=int,
        default=DEFAULT_COOLDOWN,
        help=f"Seconds to wait before each run ({COOLDOWN_RANGE[0]}-{COOLDOWN_RANGE[1]}). Default: {DEFAULT_COOLDOWN}",
    )

    parser.add_argument(
        "-i",
        "--idle-wait",
        type=int,
        default=DEFAULT_IDLE_WAIT,
        help=(
            f"Seconds to let the system settle before the first run "
            f"({IDLE_WAIT_RANGE[0]}-{IDLE_WAIT_RANGE[1]}). Only used when longer than the cooldown. "
            f"Default: {DEFAULT_IDLE_WAIT}"
        ),
    )

    parser.add_argument(
        "-e",
        "--exe-path",
        type=str,
        default=None,
        help="Path to the benchmark executable. Default: next to this script",
    )

    parser.add_argument(
        "--bench-arg",
        type=str,
        default=DEFAULT_BENCH_ARG,
        help=f"Argument that puts the executable in benchmark mode. Default: {DEFAULT_BENCH_ARG}",
    )

    parser.add_argument(
        "--prefs",
        type=str,
        default=None,
        help="Path to the benchmark's preferences file. Default: searched for in the app data directory",
    )

    parser.add_argument(
        "--prefs-glob",
        type=str,
        default=DEFAULT_PREFS_GLOB,
        help=f"Glob used to find the preferences file. Default: {DEFAULT_PREFS_GLOB}",
    )

    parser.add_argument(
        "--output-stats",
        type=str,
        default=None,
        help="Output filename for the statistics in CSV format. If not provided, no CSV is generated.",
    )

    parser.add_argument(
        "--output-plot",
        type=str,
        default=None,
        help="Output filename for the plot.",
    )

    parser.add_argument(
        "--show-plot",
        action="store_true",
        help="Show the plot interactively.",
    )

    parser.add_argument(
        "--no-tui",
        action="store_true",
        help="Disable the TUI and use simple console logging instead. Implied when stdout is not a terminal.",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (e.g., -v, -vv).",
    )

    return parser


def config_from_args(args: argparse.Namespace) -> Config:
    return Config(
        runs=args.runs,
        threads=args.threads if args.threads is not None else default_threads(),
        cooldown=args.cooldown,
        idle_wait=args.idle_wait,
        executable=args.exe_path or default_executable(),
        bench_arg=args.bench_arg,
        preferences=args.prefs,
        no_tui=args.no_tui or not sys.stdout.isatty(),
        output_stats=args.output_stats,
        output_plot=args.output_plot,
        show_plot=args.show_plot,
        verbose=args.verbose,
    )


def run_session(config: Config, prefs_glob: str = DEFAULT_PREFS_GLOB) -> ResultSet:
    """Finds the preferences file and runs the session with the selected progress display."""
    preferences_path = Path(config.preferences) if config.preferences else find_preferences_file(pattern=prefs_glob)
    logger.info(f"Using preferences file {preferences_path}")

    if config.no_tui:
        return console_main(config, preferences_path, logger)

    try:
        from .tui.app import tui_main
    except ImportError as e:
        logger.error(f"The TUI is unavailable ({e}). Please try again with the --no-tui flag.")
        raise

    try:
        return tui_main(config, preferences_path)
    except BenchError:
        raise
    except Exception as e:
        logger.error(f"An unexpected TUI error occurred: {e}")
        logger.error("Please try again with the --no-tui flag.")
        raise


def main(argv: Optional[Sequence[str]] = None) -> None:
    """
    Parses arguments, runs the benchmark session and outputs the results.
    Exits with the code of the error that stopped the session, if any.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = config_from_args(args)
    except ConfigurationError as e:
        parser.error(str(e))

    # Set logging level based on verbosity flag
    match config.verbose:
        case 1:
            logger.setLevel(logging.DEBUG)
        case v if v >= 2:
            logging.getLogger().setLevel(logging.DEBUG)
            logger.setLevel(logging.NOTSET)  # Show all messages, ours and libraries'
        case _:
            logger.setLevel(logging.INFO)

    try:
        result_set = run_session(config, args.prefs_glob)
    except KeyboardInterrupt:
        logger.info("Operation cancelled by user.")
        sys.exit(130)
    except BenchError as e:
        logger.error(str(e))
        sys.exit(e.exit_code)

    process_and_output_results(config, result_set)


if __name__ == "__main__":
    main()
