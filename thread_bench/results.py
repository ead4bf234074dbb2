"""This module handles the result data structures and the processing and output of results."""

import csv
import json
import logging
import math
import sys
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from typing import Any, Optional, TextIO

from .config import Config
from .utils import aggregate, format_number, format_percent

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunResult:
    """All scores of one thread group and their statistics."""

    threads: int
    scores: tuple[float, ...]
    average: float
    minimum: float
    maximum: float
    std_dev: float
    std_dev_percent: float

    @classmethod
    def from_scores(cls, threads: int, scores: Sequence[float]) -> "RunResult":
        stats = aggregate(scores)
        return cls(
            threads=threads,
            scores=tuple(scores),
            average=stats.mean,
            minimum=stats.minimum,
            maximum=stats.maximum,
            std_dev=stats.std_dev,
            std_dev_percent=stats.std_dev_percent,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "threads": self.threads,
            "scores": list(self.scores),
            "average": self.average,
            "minimum": self.minimum,
            "maximum": self.maximum,
            "std_dev": self.std_dev,
            # NaN is not valid JSON.
            "std_dev_percent": None if math.isnan(self.std_dev_percent) else self.std_dev_percent,
        }


@dataclass
class ResultSet:
    """
    Results in execution order. Each RunResult is added once and never changed.
    Indexing by thread count returns the latest group run with that count.
    """

    results: list[RunResult] = field(default_factory=list)

    def add(self, result: RunResult) -> None:
        self.results.append(result)

    def __iter__(self) -> Iterator[RunResult]:
        return iter(self.results)

    def __len__(self) -> int:
        return len(self.results)

    def __contains__(self, threads: object) -> bool:
        return any(r.threads == threads for r in self.results)

    def __getitem__(self, threads: int) -> RunResult:
        for result in reversed(self.results):
            if result.threads == threads:
                return result
        raise KeyError(threads)

    @property
    def thread_counts(self) -> list[int]:
        return [r.threads for r in self.results]

    def to_dict(self, config: Optional[Config] = None) -> dict[str, Any]:
        document: dict[str, Any] = {}
        if config is not None:
            document["config"] = config.to_dict()
        document["results"] = [r.to_dict() for r in self.results]
        return document


def emit_json(result_set: ResultSet, config: Optional[Config] = None, stream: Optional[TextIO] = None) -> None:
    """Writes the result set to ``stream`` (stdout by default) as JSON."""
    stream = stream if stream is not None else sys.stdout
    json.dump(result_set.to_dict(config), stream, indent=2)
    stream.write("\n")
    stream.flush()


def print_statistics_table(result_set: ResultSet, stream: Optional[TextIO] = None) -> None:
    """
    Prints the final statistics table. Goes to stderr so stdout stays pure JSON.
    """
    out = stream if stream is not None else sys.stderr
    print("\n--- Final Statistics ---", file=out)
    print(
        f"{'Threads':<8} {'Runs':<5} {'Mean':<12} {'Min':<12} {'Max':<12} {'StdDev':<10} {'StdDev%':<8}",
        file=out,
    )
    print("-" * 72, file=out)
    for r in result_set:
        print(
            f"{r.threads:<8} {len(r.scores):<5} {format_number(r.average):<12} "
            f"{format_number(r.minimum):<12} {format_number(r.maximum):<12} "
            f"{format_number(r.std_dev):<10} {format_percent(r.std_dev_percent):<8}",
            file=out,
        )


def write_csv_output(csv_filename: str, result_set: ResultSet, config: Config) -> None:
    """
    Writes the calculated statistics to a CSV file.
    """
    try:
        with open(csv_filename, "w", newline="") as csvfile:
            writer = csv.writer(csvfile)
            writer.writerow([f"# Executable: {config.executable}"])
            writer.writerow([f"# Runs per group: {config.runs}"])
            writer.writerow([f"# Cooldown: {config.cooldown}s, idle wait: {config.idle_wait}s"])
            writer.writerow(["Threads", "Runs", "Mean", "Min", "Max", "StdDev", "StdDev%"])
            for r in result_set:
                writer.writerow(
                    [
                        r.threads,
                        len(r.scores),
                        r.average,
                        r.minimum,
                        r.maximum,
                        r.std_dev,
                        format_percent(r.std_dev_percent, precision=4),
                    ]
                )
        logger.info(f"Statistics saved to '{csv_filename}'")
    except OSError as e:
        logger.error(f"Error writing to CSV file: {e}")


def process_and_output_results(config: Config, result_set: ResultSet) -> None:
    """
    Prints the statistics table, emits the JSON document, then writes the
    optional CSV and plot.
    """
    print_statistics_table(result_set)
    emit_json(result_set, config)

    if config.output_stats:
        write_csv_output(config.output_stats, result_set, config)

    if config.show_plot or config.output_plot:
        try:
            from .plotter import plot_results

            plot_results(
                result_set.thread_counts,
                [r.average for r in result_set],
                [r.std_dev for r in result_set],
                config.runs,
                config.executable,
                show_plot=config.show_plot,
                output_plot=config.output_plot,
            )
        except ImportError:
            logger.error("'matplotlib' and 'numpy' libraries are required for plotting.")
            logger.error("Please install them using: pip install 'thread-bench[plot]'")
        except Exception as e:
            logger.error(f"An error occurred during plotting: {e}")
            sys.exit(1)
