"""This module contains the plotting functionality."""

import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Optional

import matplotlib.pyplot as plt
import numpy as np

logger = logging.getLogger(__name__)


def plot_results(
    threads: Sequence[int],
    means: Sequence[float],
    std_devs: Sequence[float],
    runs: int,
    executable: str,
    show_plot: bool,
    output_plot: Optional[str],
) -> None:
    """
    Generates, displays, and saves a plot of mean score per thread group.

    Args:
        threads: Thread count of each group, in execution order (x-axis).
        means: Mean score of each group (y-axis).
        std_devs: Population standard deviation of each group, drawn as error bars.
        runs: The number of runs per group.
        executable: The benchmark that was run, for the plot title.
        show_plot: Whether to display the plot interactively.
        output_plot: The path to save the plot image to.
    """
    x_axis_labels = [str(t) for t in threads]

    mean_np = np.array(means, dtype=float)
    std_np = np.array(std_devs, dtype=float)

    plt.figure(figsize=(10, 7))

    plt.errorbar(x_axis_labels, mean_np, yerr=std_np, fmt="-o", capsize=4, label="Mean Score")

    plt.title("Benchmark Score by Thread Count", fontsize=16)
    plt.suptitle(
        f"Executable: {Path(executable).name} (runs={runs}, error bars = population std dev)",
        fontsize=10,
        y=0.92,
    )
    plt.xlabel("Threads", fontsize=12)
    plt.ylabel("Score", fontsize=12)

    plt.grid(True, linestyle="--", alpha=0.6)
    plt.legend()
    plt.tight_layout(rect=(0, 0, 1, 0.95))

    if output_plot:
        plt.savefig(output_plot)
        logger.info(f"Plot saved as '{output_plot}'")

    if show_plot:
        logger.info("Displaying plot interactively...")
        plt.show()

    plt.close()
