from collections.abc import Iterable
from pathlib import Path

import pytest

from thread_bench.config import Config
from thread_bench.preferences import THREADS_ENABLED_OFFSET, THREADS_VALUE_OFFSET

ORIGINAL_ENABLED = 0
ORIGINAL_THREADS = 6


@pytest.fixture
def prefs_blob() -> bytes:
    blob = bytearray((i * 7) % 256 for i in range(0x200))
    blob[THREADS_VALUE_OFFSET] = ORIGINAL_THREADS
    blob[THREADS_ENABLED_OFFSET] = ORIGINAL_ENABLED
    return bytes(blob)


@pytest.fixture
def prefs_file(tmp_path: Path, prefs_blob: bytes) -> Path:
    path = tmp_path / "StressBench" / "user.prefs"
    path.parent.mkdir()
    path.write_bytes(prefs_blob)
    return path


@pytest.fixture
def executable(tmp_path: Path) -> Path:
    exe = tmp_path / "stress"
    exe.write_text("#!/bin/sh\n")
    return exe


@pytest.fixture
def make_config(executable: Path):
    def factory(**overrides) -> Config:
        values = dict(runs=2, threads=[4, 1], cooldown=0, idle_wait=0, executable=str(executable), no_tui=True)
        values.update(overrides)
        return Config(**values)

    return factory


class StubBenchmark:
    """Stands in for the benchmark executable, replaying canned outputs."""

    def __init__(self, outputs: Iterable[str], prefs_path: Path):
        self.outputs = list(outputs)
        self.prefs_path = prefs_path
        self.calls: list[tuple[str, str]] = []
        self.threads_seen: list[tuple[int, int]] = []

    def __call__(self, executable: str, bench_arg: str) -> str:
        self.calls.append((executable, bench_arg))
        blob = self.prefs_path.read_bytes()
        self.threads_seen.append((blob[THREADS_VALUE_OFFSET], blob[THREADS_ENABLED_OFFSET]))
        return self.outputs.pop(0)


@pytest.fixture
def stub_benchmark(prefs_file: Path):
    def factory(outputs: Iterable[str]) -> StubBenchmark:
        return StubBenchmark(outputs, prefs_file)

    return factory
