import csv
import io
import json
import math

import pytest

from thread_bench.config import Config
from thread_bench.results import ResultSet, RunResult, emit_json, print_statistics_table, write_csv_output


@pytest.fixture
def result_set():
    results = ResultSet()
    results.add(RunResult.from_scores(4, [100.0, 200.0]))
    results.add(RunResult.from_scores(1, [50.0, 50.0]))
    return results


def test_lookup_by_thread_count(result_set):
    assert result_set[4].average == 150
    assert 1 in result_set
    assert 8 not in result_set
    with pytest.raises(KeyError):
        result_set[8]


def test_run_result_is_immutable(result_set):
    with pytest.raises(AttributeError):
        result_set[4].average = 0


def test_emit_json(result_set):
    config = Config(runs=2, threads=[1, 4], cooldown=0, executable="stress")
    out = io.StringIO()
    emit_json(result_set, config, stream=out)

    document = json.loads(out.getvalue())
    assert document["config"]["threads"] == [1, 4]
    assert [r["threads"] for r in document["results"]] == [4, 1]
    assert document["results"][0]["scores"] == [100.0, 200.0]
    assert document["results"][0]["std_dev"] == 50.0
    assert document["results"][0]["std_dev_percent"] == pytest.approx(100 / 3)


def test_emit_json_zero_mean_is_null():
    results = ResultSet()
    results.add(RunResult.from_scores(2, [-1.0, 1.0]))
    assert math.isnan(results[2].std_dev_percent)

    out = io.StringIO()
    emit_json(results, stream=out)
    assert json.loads(out.getvalue())["results"][0]["std_dev_percent"] is None


def test_statistics_table(result_set):
    out = io.StringIO()
    print_statistics_table(result_set, stream=out)
    text = out.getvalue()
    assert "150.00" in text
    assert "33.33%" in text
    assert "0.00%" in text


def test_write_csv_output(result_set, tmp_path):
    path = tmp_path / "stats.csv"
    config = Config(runs=2, threads=[1, 4], cooldown=0, executable="stress")
    write_csv_output(str(path), result_set, config)

    rows = [row for row in csv.reader(path.open()) if not row[0].startswith("#")]
    assert rows[0] == ["Threads", "Runs", "Mean", "Min", "Max", "StdDev", "StdDev%"]
    assert rows[1][:3] == ["4", "2", "150.0"]
    assert rows[2][-1] == "0.0000%"
