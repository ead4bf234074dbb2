"""This module contains the logic for running the benchmark executable once and reading its score."""

import logging
import math
import re
import subprocess

from .errors import ExecutableNotFoundError, ScoreParseError

logger = logging.getLogger(__name__)

SCORE_PATTERN = re.compile(r"Values: \{([^}]*)\}")


def extract_score(raw_output: str) -> float:
    """
    Pulls the score out of the benchmark's text output.

    The benchmark prints its result as ``Values: {<score>}``. The first
    occurrence wins. A missing or non-numeric score means the output
    format changed or the run crashed, so it is fatal.
    """
    match = SCORE_PATTERN.search(raw_output)
    if match is None:
        raise ScoreParseError("No 'Values: {...}' score found in benchmark output")
    text = match.group(1).strip()
    try:
        score = float(text)
    except ValueError as e:
        raise ScoreParseError(f"Benchmark score {text!r} is not a number") from e
    if not math.isfinite(score):
        raise ScoreParseError(f"Benchmark score {text!r} is not a finite number")
    return score


def run_benchmark(executable: str, bench_arg: str) -> str:
    """
    Runs the benchmark once, blocking until it exits, and returns its
    stdout and stderr as one string. There is no timeout.
    """
    command_args = [executable, bench_arg]
    logger.debug(f"Running {command_args}")
    try:
        completed = subprocess.run(
            command_args,
            check=False,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            errors="replace",
        )
    except FileNotFoundError as e:
        raise ExecutableNotFoundError(f"Benchmark executable not found: {executable}") from e
    except OSError as e:
        raise ExecutableNotFoundError(f"Benchmark executable cannot be run: {executable} ({e})") from e

    if completed.returncode != 0:
        logger.warning(f"Benchmark exited with status {completed.returncode}")
    return completed.stdout or ""
