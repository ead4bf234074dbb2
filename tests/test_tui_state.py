from thread_bench.config import Config
from thread_bench.results import RunResult
from thread_bench.tui.state import TuiState
from thread_bench.utils import RunUpdate, Status


def test_rows_follow_execution_order():
    state = TuiState(Config(runs=2, threads=[1, 8, 4], executable="stress"))
    state.setup_groups()

    assert [g.threads for g in state.group_statuses] == [8, 4, 1]
    assert all(g.status == Status.PENDING for g in state.group_statuses)
    assert state.total_runs == 6


def test_apply_updates():
    state = TuiState(Config(runs=2, threads=[2], executable="stress"))
    state.setup_groups()

    state.apply(RunUpdate(Status.WAITING, threads=2, group=0, run=1, total_runs=2, wait_seconds=30))
    state.apply(RunUpdate(Status.RUNNING, threads=2, group=0, run=1, total_runs=2))
    group = state.apply(RunUpdate(Status.COMPLETED, threads=2, group=0, run=1, total_runs=2, score=10.0))
    assert group.runs_done == 1
    assert group.scores == [10.0]
    assert state.runs_completed == 1

    result = RunResult.from_scores(2, [10.0, 20.0])
    group = state.apply(RunUpdate(Status.DONE, threads=2, group=0, total_runs=2, result=result))
    assert group.status == Status.DONE
    assert group.result is result
