"""This module contains the core logic for running every thread group in sequence."""

import logging
import shutil
import threading
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any, Optional

from .config import Config
from .errors import ExecutableNotFoundError, RunCancelled
from .preferences import PathLike, PreferencesGuard
from .results import ResultSet, RunResult
from .runner import extract_score, run_benchmark
from .utils import RunUpdate, Status

logger = logging.getLogger(__name__)

PostUpdate = Callable[[RunUpdate], Any]
RunCommand = Callable[[str, str], str]


def check_executable(executable: str) -> None:
    if Path(executable).is_file() or shutil.which(executable):
        return
    raise ExecutableNotFoundError(f"Benchmark executable not found: {executable}")


def run_thread_groups(
    config: Config,
    preferences_path: PathLike,
    post_update: Optional[PostUpdate] = None,
    *,
    sleep: Callable[[float], Any] = time.sleep,
    run_command: RunCommand = run_benchmark,
    stop_event: Optional[threading.Event] = None,
) -> ResultSet:
    """
    Runs every thread group, highest thread count first, and returns the results.

    Higher thread counts heat the machine the most, so they go first while
    it is coolest. For each group the preferences file is patched to the
    group's thread count, then the benchmark runs ``config.runs`` times with
    a cooldown before every run. If the idle wait is longer than the
    cooldown it is done once up front and replaces the first cooldown.

    The preferences file is restored however this function exits. Any
    error aborts the whole sequence; nothing is retried.

    Args:
        config: The validated session configuration.
        preferences_path: The benchmark's preferences file.
        post_update: Called with a RunUpdate at every step, for progress display.
        sleep: Blocking wait, replaceable in tests.
        run_command: Runs the benchmark once and returns its output.
        stop_event: When set, the session stops before the next run or
            during a wait and raises RunCancelled.
    """

    def post(update: RunUpdate) -> None:
        if post_update is not None:
            post_update(update)

    def check_stop() -> None:
        if stop_event is not None and stop_event.is_set():
            raise RunCancelled("Benchmark cancelled by user")

    def wait(seconds: int) -> None:
        if seconds <= 0:
            return
        if stop_event is None:
            sleep(seconds)
        elif stop_event.wait(seconds):
            raise RunCancelled("Benchmark cancelled by user")

    check_executable(config.executable)

    thread_order = config.thread_order
    result_set = ResultSet()
    idle_waited = config.idle_wait > config.cooldown

    logger.info(
        f"Thread groups in run order: {', '.join(map(str, thread_order))} "
        f"({config.runs} runs each, {config.cooldown}s cooldown)"
    )

    with PreferencesGuard(preferences_path) as prefs:
        if idle_waited:
            logger.info(f"Waiting {config.idle_wait}s for the system to settle")
            post(RunUpdate(Status.WAITING, threads=thread_order[0], group=0, wait_seconds=config.idle_wait))
            wait(config.idle_wait)

        for group, threads in enumerate(thread_order):
            check_stop()
            prefs.set_thread_count(threads)
            scores: list[float] = [0.0] * config.runs

            for run in range(config.runs):
                first_of_session = group == 0 and run == 0
                if config.cooldown > 0 and not (first_of_session and idle_waited):
                    post(
                        RunUpdate(
                            Status.WAITING,
                            threads=threads,
                            group=group,
                            run=run + 1,
                            total_runs=config.runs,
                            wait_seconds=config.cooldown,
                        )
                    )
                    wait(config.cooldown)

                check_stop()
                post(RunUpdate(Status.RUNNING, threads=threads, group=group, run=run + 1, total_runs=config.runs))
                try:
                    output = run_command(config.executable, config.bench_arg)
                    scores[run] = extract_score(output)
                except Exception as e:
                    post(
                        RunUpdate(
                            Status.FAILED,
                            threads=threads,
                            group=group,
                            run=run + 1,
                            total_runs=config.runs,
                            error=str(e),
                        )
                    )
                    raise
                post(
                    RunUpdate(
                        Status.COMPLETED,
                        threads=threads,
                        group=group,
                        run=run + 1,
                        total_runs=config.runs,
                        score=scores[run],
                    )
                )

            result = RunResult.from_scores(threads, scores)
            result_set.add(result)
            post(RunUpdate(Status.DONE, threads=threads, group=group, total_runs=config.runs, result=result))

    return result_set
