"This module contains utility functions."

import math
import statistics
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .results import RunResult


class Status(Enum):
    PENDING = "Pending"
    WAITING = "Waiting"
    RUNNING = "Running"
    COMPLETED = "Completed"
    FAILED = "Failed"
    DONE = "Done"


@dataclass
class RunUpdate:
    """A progress report from the orchestrator about one thread group."""

    status: Status
    threads: int
    group: int
    run: Optional[int] = None
    total_runs: Optional[int] = None
    score: Optional[float] = None
    wait_seconds: Optional[int] = None
    error: Optional[str] = None
    result: Optional["RunResult"] = None


@dataclass(frozen=True)
class ScoreStats:
    minimum: float
    maximum: float
    mean: float
    std_dev: float
    std_dev_percent: float


def aggregate(scores: Sequence[float]) -> ScoreStats:
    """
    Calculates min, max, mean and the population standard deviation of the scores.

    The deviation divides by n, not n - 1, to stay comparable with earlier
    results. ``std_dev_percent`` is relative to the mean and is NaN when
    the mean is zero.
    """
    if not scores:
        raise ValueError("aggregate() needs at least one score")
    mean = float(statistics.mean(scores))
    std_dev = statistics.pstdev(scores, mu=mean)
    std_dev_percent = 100 * std_dev / mean if mean != 0 else math.nan
    return ScoreStats(
        minimum=min(scores),
        maximum=max(scores),
        mean=mean,
        std_dev=std_dev,
        std_dev_percent=std_dev_percent,
    )


def format_number(value: Optional[float], precision: int = 2) -> str:
    if value is None or math.isnan(value):
        return "n/a"
    return f"{value:.{precision}f}"


def format_percent(value: Optional[float], precision: int = 2) -> str:
    """Relative deviation with its trailing '%' marker."""
    text = format_number(value, precision)
    return text if text == "n/a" else f"{text}%"


def format_duration(seconds: float) -> str:
    minutes, secs = divmod(int(seconds), 60)
    return f"{minutes}m{secs:02d}s" if minutes else f"{secs}s"
