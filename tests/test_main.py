import json
import subprocess
import sys
import types

import pytest

from thread_bench import preferences, runner
from thread_bench.errors import PreferencesIOError
from thread_bench.main import main


@pytest.fixture
def fake_benchmark(monkeypatch):
    outputs = []

    def fake_run(args, **kwargs):
        return subprocess.CompletedProcess(args, 0, stdout=outputs.pop(0))

    monkeypatch.setattr(runner.subprocess, "run", fake_run)
    return outputs


def base_args(executable, prefs_file):
    return ["--no-tui", "-c", "0", "-e", str(executable), "--prefs", str(prefs_file)]


def test_full_session_prints_json(executable, prefs_file, prefs_blob, fake_benchmark, capsys):
    fake_benchmark.extend(["Values: {100}", "Values: {200}", "Values: {50}", "Values: {50}"])

    main(base_args(executable, prefs_file) + ["-r", "2", "-t", "1", "4"])

    document = json.loads(capsys.readouterr().out)
    assert [r["threads"] for r in document["results"]] == [4, 1]
    assert document["results"][0]["average"] == 150
    assert document["results"][1]["std_dev"] == 0
    assert prefs_file.read_bytes() == prefs_blob


def test_writes_csv(executable, prefs_file, fake_benchmark, tmp_path, capsys):
    fake_benchmark.extend(["Values: {10}"])
    stats = tmp_path / "stats.csv"

    main(base_args(executable, prefs_file) + ["-r", "1", "-t", "2", "--output-stats", str(stats)])

    assert "Threads,Runs" in stats.read_text()


@pytest.mark.parametrize("extra", [["-r", "0"], ["-t", "300"], ["-c", "601"], ["-i", "-1"], ["-r", "x"]])
def test_bad_arguments_exit_2(executable, prefs_file, extra):
    with pytest.raises(SystemExit) as exc:
        main(base_args(executable, prefs_file) + extra)
    assert exc.value.code == 2


def test_missing_executable_exit_code(tmp_path, prefs_file, prefs_blob):
    with pytest.raises(SystemExit) as exc:
        main(base_args(tmp_path / "missing", prefs_file) + ["-t", "1"])
    assert exc.value.code == 3
    assert prefs_file.read_bytes() == prefs_blob


def test_missing_prefs_exit_code(executable, tmp_path):
    with pytest.raises(SystemExit) as exc:
        main(base_args(executable, tmp_path / "missing.prefs") + ["-t", "1"])
    assert exc.value.code == 4


def test_prefs_glob_search_failure_exit_code(executable, tmp_path, monkeypatch):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    monkeypatch.setenv("APPDATA", str(tmp_path))
    with pytest.raises(SystemExit) as exc:
        main(["--no-tui", "-c", "0", "-e", str(executable), "-t", "1"])
    assert exc.value.code == 4


def test_unparseable_score_exit_code(executable, prefs_file, prefs_blob, fake_benchmark):
    fake_benchmark.extend(["Values: {10}", "Access violation"])
    with pytest.raises(SystemExit) as exc:
        main(base_args(executable, prefs_file) + ["-r", "2", "-t", "1"])
    assert exc.value.code == 5
    assert prefs_file.read_bytes() == prefs_blob


def test_executable_that_cannot_run_exit_code(executable, prefs_file, prefs_blob):
    # The fixture file is not marked executable.
    with pytest.raises(SystemExit) as exc:
        main(base_args(executable, prefs_file) + ["-r", "1", "-t", "1"])
    assert exc.value.code == 3
    assert prefs_file.read_bytes() == prefs_blob


def test_preferences_write_failure_exit_code(executable, prefs_file, fake_benchmark, monkeypatch):
    def refuse_write(path, blob):
        raise PreferencesIOError(f"Could not write preferences file {path}: read-only")

    monkeypatch.setattr(preferences, "write_blob", refuse_write)
    fake_benchmark.extend(["Values: {10}"])

    with pytest.raises(SystemExit) as exc:
        main(base_args(executable, prefs_file) + ["-r", "1", "-t", "1"])
    assert exc.value.code == 6


def test_interrupt_exit_code_restores_prefs(executable, prefs_file, prefs_blob, monkeypatch):
    def interrupted(args, **kwargs):
        raise KeyboardInterrupt

    monkeypatch.setattr(runner.subprocess, "run", interrupted)

    with pytest.raises(SystemExit) as exc:
        main(base_args(executable, prefs_file) + ["-r", "1", "-t", "2"])
    assert exc.value.code == 130
    assert prefs_file.read_bytes() == prefs_blob


def test_plot_failure_exits_after_json(executable, prefs_file, fake_benchmark, monkeypatch, capsys):
    def broken_plot(*args, **kwargs):
        raise OSError("No such directory")

    monkeypatch.setitem(sys.modules, "thread_bench.plotter", types.SimpleNamespace(plot_results=broken_plot))
    fake_benchmark.extend(["Values: {10}"])

    with pytest.raises(SystemExit) as exc:
        main(base_args(executable, prefs_file) + ["-r", "1", "-t", "1", "--output-plot", "missing/scores.svg"])
    assert exc.value.code == 1
    assert json.loads(capsys.readouterr().out)["results"][0]["average"] == 10
