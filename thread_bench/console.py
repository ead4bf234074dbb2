"""This module contains the console logging implementation."""

import logging

from .config import Config
from .orchestrator import run_thread_groups
from .preferences import PathLike
from .results import ResultSet
from .utils import RunUpdate, Status, format_duration, format_number, format_percent


def console_main(config: Config, preferences_path: PathLike, logger: logging.Logger) -> ResultSet:
    """
    Runs the benchmark session with log lines for progress.
    This is the fallback for when the TUI is disabled or stdout is not a terminal.
    """
    logger.info("TUI disabled. Using simple console logging.")
    logger.info(
        f"Running {config.total_runs} benchmark runs over {len(config.threads)} thread group(s)..."
    )
    return run_thread_groups(
        config,
        preferences_path,
        lambda update: handle_update(update, logger),
    )


def handle_update(update: RunUpdate, logger: logging.Logger) -> None:
    """
    Logs a single orchestrator update to the console.
    """
    where = f"threads={update.threads}"
    if update.run is not None:
        where += f" (run {update.run}/{update.total_runs})"

    match update.status:
        case Status.WAITING:
            logger.info(f"  [Wait] {where}: {format_duration(update.wait_seconds or 0)}")
        case Status.RUNNING:
            logger.debug(f"  [Run] {where}")
        case Status.COMPLETED:
            logger.info(f"  [Run OK] {where}: {format_number(update.score)}")
        case Status.FAILED:
            logger.error(f"  [Run FAILED] {where}: {update.error}")
        case Status.DONE:
            result = update.result
            if result is not None:
                logger.info(
                    f"  [Group done] {where}: mean {format_number(result.average)}, "
                    f"std dev {format_number(result.std_dev)} ({format_percent(result.std_dev_percent)})"
                )
