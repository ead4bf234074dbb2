"""This module contains the configuration data structure for the application."""

import os
import sys
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .errors import ConfigurationError

DEFAULT_RUNS = 3
DEFAULT_COOLDOWN = 120
DEFAULT_IDLE_WAIT = 0
DEFAULT_BENCH_ARG = "-bench"
DEFAULT_EXECUTABLE_NAME = "stress.exe" if sys.platform == "win32" else "stress"

RUNS_RANGE = (1, 100)
COOLDOWN_RANGE = (0, 600)
IDLE_WAIT_RANGE = (0, 1200)
# The thread count is stored in a single byte of the preferences file.
THREADS_RANGE = (1, 255)


def default_threads() -> Sequence[int]:
    """One thread group at the logical core count."""
    return [os.cpu_count() or 1]


def default_executable() -> str:
    """The benchmark executable sitting next to the script that launched us."""
    return str(Path(sys.argv[0]).resolve().parent / DEFAULT_EXECUTABLE_NAME)


def _check_range(name: str, value: int, bounds: tuple[int, int]) -> None:
    low, high = bounds
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f"{name} must be an integer, got {value!r}")
    if not low <= value <= high:
        raise ConfigurationError(f"{name} must be between {low} and {high}, got {value}")


@dataclass(frozen=True)
class Config:
    """
    Holds the configuration for a benchmark session.
    Validated on construction and immutable afterwards.
    """

    runs: int = DEFAULT_RUNS
    threads: Sequence[int] = field(default_factory=default_threads)
    cooldown: int = DEFAULT_COOLDOWN
    idle_wait: int = DEFAULT_IDLE_WAIT
    executable: str = field(default_factory=default_executable)
    bench_arg: str = DEFAULT_BENCH_ARG
    preferences: Optional[str] = None
    no_tui: bool = False
    output_stats: Optional[str] = None
    output_plot: Optional[str] = None
    show_plot: bool = False
    verbose: int = 0

    def __post_init__(self) -> None:
        _check_range("runs", self.runs, RUNS_RANGE)
        _check_range("cooldown", self.cooldown, COOLDOWN_RANGE)
        _check_range("idle wait", self.idle_wait, IDLE_WAIT_RANGE)
        if not self.threads:
            raise ConfigurationError("at least one thread count is required")
        for count in self.threads:
            _check_range("thread count", count, THREADS_RANGE)
        if not self.executable:
            raise ConfigurationError("executable path must not be empty")
        # Stored as a tuple; the caller may keep mutating its list.
        object.__setattr__(self, "threads", tuple(self.threads))

    @property
    def thread_order(self) -> Sequence[int]:
        """Thread groups in execution order: highest thread count first."""
        return sorted(self.threads, reverse=True)

    @property
    def total_runs(self) -> int:
        return self.runs * len(self.threads)

    def to_dict(self) -> dict:
        return {
            "runs": self.runs,
            "threads": list(self.threads),
            "cooldown": self.cooldown,
            "idle_wait": self.idle_wait,
            "executable": self.executable,
        }
