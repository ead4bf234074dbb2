"""This module contains the TUI application logic using Textual."""

import threading
import time
from collections.abc import MutableSequence
from typing import Optional, cast

from rich.progress_bar import ProgressBar as RichProgressBar
from textual.app import App, ComposeResult
from textual.coordinate import Coordinate
from textual.widgets import DataTable, Footer, Header, Log, ProgressBar, Static

from ..config import Config
from ..errors import RunCancelled
from ..orchestrator import run_thread_groups
from ..preferences import PathLike
from ..results import ResultSet
from ..utils import Status, format_duration, format_number, format_percent
from .messages import RunProgress, SessionFinished
from .state import TuiState


class TuiApp(App[SessionFinished]):
    """
    A Textual app to display the progress of a benchmark session.
    """

    BINDINGS = [
        ("q", "quit", "Quit"),
    ]

    def __init__(self, config: Config, preferences_path: PathLike, **kwargs) -> None:
        super().__init__(**kwargs)
        self.config = config
        self.preferences_path = preferences_path
        self.tui_state = TuiState(config)
        self.start_time = time.time()
        self.progress_bars: MutableSequence[RichProgressBar] = []
        self.stop_event = threading.Event()
        self.session_running = False

    def compose(self) -> ComposeResult:
        """Create child widgets for the app."""
        yield Header()
        yield Static(f"Executable: {self.config.executable} {self.config.bench_arg}")
        yield Static(
            f"Runs per group: {self.config.runs}, "
            f"Cooldown: {self.config.cooldown}s, Idle wait: {self.config.idle_wait}s"
        )
        yield Static(id="total_running_time")
        yield Static(id="overall_progress")
        yield ProgressBar(total=100, id="overall_progress_bar")
        yield DataTable(id="results_table")
        yield Log(id="log", auto_scroll=True)
        yield Footer()

    def on_mount(self) -> None:
        """Called when the app is mounted."""
        self.set_interval(1.0, self.update_running_time)
        self.tui_state.setup_groups()
        self.query_one(ProgressBar).total = self.tui_state.total_runs
        self.update_overall_progress()
        self.call_later(self.populate_table)

    def populate_table(self) -> None:
        """Populate the DataTable."""
        table = self.query_one(DataTable)
        table.add_columns("Threads", "Progress", "Status", "Mean", "Min", "Max", "StdDev%")
        for i, group in enumerate(self.tui_state.group_statuses):
            progress_bar = RichProgressBar(total=group.runs_total, width=20)
            self.progress_bars.append(progress_bar)
            table.add_row(
                str(group.threads),
                progress_bar,
                "pending",
                "n/a",
                "n/a",
                "n/a",
                "n/a",
                key=str(i),
            )
        self.start_session()

    def start_session(self) -> None:
        """Run the whole session in one worker thread; runs stay sequential."""
        self.session_running = True
        self.run_worker(self.run_session, thread=True, exclusive=True)

    def run_session(self) -> None:
        try:
            result_set = run_thread_groups(
                self.config,
                self.preferences_path,
                lambda update: self.post_message(RunProgress(update)),
                stop_event=self.stop_event,
            )
        except Exception as e:
            self.post_message(SessionFinished(error=e))
        else:
            self.post_message(SessionFinished(result_set=result_set))

    def action_quit(self) -> None:
        """Ask the session to stop; the app exits once preferences are restored."""
        if not self.session_running:
            self.exit()
            return
        if not self.stop_event.is_set():
            self.stop_event.set()
            self.query_one(Log).write_line(
                "Stopping after the current run, then restoring preferences..."
            )

    def on_run_progress(self, message: RunProgress) -> None:
        """Update the TUI with the latest orchestrator step."""
        update = message.update
        group = self.tui_state.apply(update)
        log = self.query_one(Log)

        match update.status:
            case Status.WAITING:
                log.write_line(
                    f"threads={update.threads}: waiting {format_duration(update.wait_seconds or 0)}"
                )
            case Status.COMPLETED:
                log.write_line(
                    f"threads={update.threads} run {update.run}/{update.total_runs}: "
                    f"{format_number(update.score)}"
                )
            case Status.FAILED:
                log.write_line(f"threads={update.threads} run {update.run} failed: {update.error}")

        self.update_overall_progress()
        self.update_table(update.group, wait_seconds=update.wait_seconds)
        if group.status == Status.FAILED:
            self.progress_bars[update.group].complete_style = "red"

    def on_session_finished(self, message: SessionFinished) -> None:
        self.session_running = False
        self.exit(message)

    def update_running_time(self) -> None:
        """Update the total running time display."""
        running_time_widget = self.query_one("#total_running_time", Static)
        elapsed_time = time.time() - self.start_time
        running_time_widget.update(f"Total Running Time: {format_duration(elapsed_time)}")

    def update_overall_progress(self) -> None:
        """Update the overall progress indicator."""
        progress_widget = self.query_one("#overall_progress", Static)
        total_runs = self.tui_state.total_runs
        completed_runs = self.tui_state.runs_completed
        progress_widget.update(f"Overall Progress: {completed_runs} / {total_runs}")
        self.query_one(ProgressBar).progress = completed_runs

    def update_table(self, group_index: int, wait_seconds: Optional[int] = None) -> None:
        """Update a row in the DataTable."""
        table = self.query_one(DataTable)
        group = self.tui_state.group_statuses[group_index]

        progress_bar = self.progress_bars[group_index]
        progress_bar.update(group.runs_done)

        status = group.status.value.lower()
        if group.status == Status.WAITING and wait_seconds:
            status = f"waiting {format_duration(wait_seconds)}"

        scores = group.scores
        if group.result is not None:
            mean_str = format_number(group.result.average)
            pct_str = format_percent(group.result.std_dev_percent)
        else:
            mean_str = format_number(sum(scores) / len(scores)) if scores else "n/a"
            pct_str = "n/a"
        min_str = format_number(min(scores)) if scores else "n/a"
        max_str = format_number(max(scores)) if scores else "n/a"

        table.update_cell_at(Coordinate(group_index, 1), progress_bar)
        table.update_cell_at(Coordinate(group_index, 2), status)
        table.update_cell_at(Coordinate(group_index, 3), mean_str)
        table.update_cell_at(Coordinate(group_index, 4), min_str)
        table.update_cell_at(Coordinate(group_index, 5), max_str)
        table.update_cell_at(Coordinate(group_index, 6), pct_str)


def tui_main(config: Config, preferences_path: PathLike) -> ResultSet:
    """
    Sets up and runs the interactive TUI using Textual.
    Errors from the session are raised again here, after the app has closed.
    """
    app = TuiApp(config, preferences_path)
    finished = app.run()
    if finished is None:
        raise RunCancelled("TUI closed before the benchmark session finished")
    if finished.error is not None:
        raise finished.error
    return cast(ResultSet, finished.result_set)
