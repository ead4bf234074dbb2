"""This module contains the TuiState class."""

from collections.abc import MutableSequence
from dataclasses import dataclass, field
from typing import Optional

from ..config import Config
from ..results import RunResult
from ..utils import RunUpdate, Status


@dataclass
class GroupStatus:
    threads: int
    status: Status
    runs_done: int
    runs_total: int
    scores: MutableSequence[float] = field(default_factory=list)
    result: Optional[RunResult] = None


class TuiState:
    """
    Manages the state of the TUI application.
    Rows follow execution order, so duplicate thread counts get their own row.
    """

    def __init__(self, config: Config):
        self.config = config
        self.group_statuses: MutableSequence[GroupStatus] = []
        self.total_runs = 0
        self.runs_completed = 0

    def setup_groups(self) -> None:
        """
        Sets up one row per thread group, in the order they will run.
        """
        for threads in self.config.thread_order:
            self.group_statuses.append(
                GroupStatus(
                    threads=threads,
                    status=Status.PENDING,
                    runs_done=0,
                    runs_total=self.config.runs,
                )
            )
        self.total_runs = self.config.total_runs

    def apply(self, update: RunUpdate) -> GroupStatus:
        """Folds an orchestrator update into the row it belongs to and returns that row."""
        group = self.group_statuses[update.group]
        group.status = update.status

        match update.status:
            case Status.COMPLETED:
                if update.score is not None:
                    group.scores.append(update.score)
                group.runs_done += 1
                self.runs_completed += 1
            case Status.DONE:
                group.result = update.result

        return group
