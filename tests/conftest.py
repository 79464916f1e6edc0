"""
Test Configuration and Fixtures
================================

Shared pytest fixtures for the compression benchmark harness.

External compressors are replaced by small Python programs run through
``sys.executable`` so no real gzip/xz is needed.

Usage:
    pytest tests/                    # Run all tests
    pytest tests/ -v                 # Verbose output
    pytest tests/ -k "aggregator"    # Run only aggregator tests
"""

import sys
from pathlib import Path
from typing import List

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from compbench.benchmark.models import BenchmarkRun, CompressorConfig


def _script(body: str, *args: str) -> List[str]:
    return [sys.executable, "-c", body, *args]


# =============================================================================
# Mock compressor commands
# =============================================================================

READ = "import sys; d = open(sys.argv[1], 'rb').read(); "

# Writes the first half of the input; paired with DOUBLE it round-trips
# any input made of two identical halves.
HALVE = _script(READ + "sys.stdout.buffer.write(d[:len(d) // 2])", "{input}")
DOUBLE = _script(READ + "sys.stdout.buffer.write(d + d)", "{input}")
IDENTITY = _script(READ + "sys.stdout.buffer.write(d)", "{input}")
CORRUPT = _script(READ + "sys.stdout.buffer.write(d + b'x')", "{input}")
EMPTY = _script("import sys", "{input}")
FAIL = _script("import sys; sys.stderr.write('boom'); sys.exit(3)", "{input}")
COPY_TO_OUTPUT = _script(
    "import shutil, sys; shutil.copyfile(sys.argv[1], sys.argv[2])", "{input}", "{output}"
)
# Exits 0 without touching its output file
NOOP_TO_OUTPUT = _script("import sys", "{input}", "{output}")


class FakeClock:
    """Returns the given timestamps in order."""

    def __init__(self, *ticks: float):
        self.ticks = list(ticks)

    def __call__(self) -> float:
        return self.ticks.pop(0)


class CountingClock:
    """Advances by a fixed step on every read."""

    def __init__(self, step: float = 0.5):
        self.now = 0.0
        self.step = step

    def __call__(self) -> float:
        self.now += self.step
        return self.now


@pytest.fixture
def one_mib_file(tmp_path) -> Path:
    path = tmp_path / "corpus" / "zeros.bin"
    path.parent.mkdir()
    path.write_bytes(b"\x00" * 1048576)
    return path


@pytest.fixture
def corpus_dir(tmp_path) -> Path:
    """Two files of different sizes, both made of two identical halves."""
    d = tmp_path / "corpus"
    d.mkdir(exist_ok=True)
    (d / "small.txt").write_bytes(b"ab" * 512)
    (d / "large.txt").write_bytes(b"abcd" * 4096)
    return d


@pytest.fixture
def work_dir(tmp_path) -> Path:
    return tmp_path / "work"


@pytest.fixture
def halving_compressor() -> CompressorConfig:
    return CompressorConfig(name="half", levels=[1, 9], compress=HALVE, decompress=DOUBLE)


@pytest.fixture
def failing_compressor() -> CompressorConfig:
    return CompressorConfig(name="broken", levels=[1], compress=FAIL, decompress=IDENTITY)


def make_run(
    algorithm: str = "gzip-6",
    file: str = "a.txt",
    original_size: int = 1000,
    compressed_size: int = 500,
    compression_time: float = 1.0,
    decompression_time: float = 0.5,
    verified: bool = True,
    success: bool = True,
) -> BenchmarkRun:
    return BenchmarkRun(
        file=file,
        algorithm=algorithm,
        original_size=original_size,
        compressed_size=compressed_size,
        compression_time=compression_time,
        decompression_time=decompression_time,
        verified=verified,
        success=success,
        error=None if success else "failed",
    )


@pytest.fixture
def sample_runs() -> List[BenchmarkRun]:
    return [
        make_run("gzip-1", "a.txt", 1000, 500),
        make_run("gzip-1", "b.txt", 9000, 1000),
        make_run("gzip-9", "a.txt", 1000, 400),
        make_run("gzip-9", "b.txt", 9000, 900),
        make_run("xz-6", "a.txt", 1000, 250, verified=False),
        make_run("xz-6", "b.txt", 9000, 0, success=False),
    ]


@pytest.fixture
def nested_corpus(tmp_path) -> Path:
    """Two files sharing a basename in different subdirectories."""
    d = tmp_path / "nested"
    (d / "a").mkdir(parents=True)
    (d / "b").mkdir()
    (d / "a" / "data").write_bytes(b"xy" * 64)
    (d / "b" / "data").write_bytes(b"zw" * 128)
    return d
