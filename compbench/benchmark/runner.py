import logging
import shutil
import subprocess
import time
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from .aggregator import MetricsAggregator
from .integrity import IntegrityVerifier
from .models import BenchmarkRun, BenchmarkSummary, CompressorConfig


def require_binaries(compressors: Iterable[CompressorConfig]) -> None:
    """Raise FileNotFoundError if any compressor executable is not on PATH."""
    missing = sorted({
        binary
        for c in compressors
        for binary in c.binaries
        if shutil.which(binary) is None
    })
    if missing:
        raise FileNotFoundError(f"Required binaries not found on PATH: {', '.join(missing)}")


def expand_command(template: Sequence[str], input_path: Path, output_path: Path) -> Tuple[List[str], bool]:
    """Substitute paths into an argv template.

    Returns the argv and whether the tool writes to stdout.
    """
    to_stdout = not any("{output}" in arg for arg in template)
    argv = [
        arg.replace("{input}", str(input_path)).replace("{output}", str(output_path))
        for arg in template
    ]
    return argv, to_stdout


class InvocationRunner:
    """
    Runs one compress/decompress round trip through external binaries.

    Durations come from ``clock`` read immediately around each subprocess,
    so tests may inject a deterministic clock.
    """

    def __init__(
        self,
        work_dir: Path,
        verifier: Optional[IntegrityVerifier] = None,
        clock: Callable[[], float] = time.perf_counter,
        keep_artifacts: bool = True,
        root: Optional[Path] = None,
    ):
        self.work_dir = Path(work_dir)
        self.verifier = verifier or IntegrityVerifier()
        self.clock = clock
        self.keep_artifacts = keep_artifacts
        self.root = Path(root) if root is not None else None
        self.logger = logging.getLogger(__name__)

    @property
    def compressed_dir(self) -> Path:
        return self.work_dir / "compressed"

    @property
    def decompressed_dir(self) -> Path:
        return self.work_dir / "decompressed"

    def prepare(self) -> None:
        """Create the artifact directories. Errors here are fatal."""
        self.compressed_dir.mkdir(parents=True, exist_ok=True)
        self.decompressed_dir.mkdir(parents=True, exist_ok=True)

    def display_name(self, file: Path) -> str:
        """Path relative to the corpus root, or the bare name outside it."""
        file = Path(file)
        if self.root is not None:
            try:
                return file.relative_to(self.root).as_posix()
            except ValueError:
                pass
        return file.name

    def artifact_paths(self, file: Path, label: str, extension: str) -> Tuple[Path, Path]:
        """Compressed and decompressed paths, unique per (file, label)."""
        stem = self.display_name(file).replace("/", "__")
        return (
            self.compressed_dir / f"{stem}.{label}{extension}",
            self.decompressed_dir / f"{stem}.{label}",
        )

    def _invoke(self, template: Sequence[str], input_path: Path, output_path: Path) -> Tuple[float, Optional[str]]:
        """Run one subprocess. Returns (duration, error message or None)."""
        argv, to_stdout = expand_command(template, input_path, output_path)
        self.logger.debug(f"Running: {' '.join(argv)}")

        # A tool that exits 0 without writing must not inherit a previous output
        output_path.unlink(missing_ok=True)

        try:
            if to_stdout:
                with open(output_path, "wb") as out:
                    start = self.clock()
                    result = subprocess.run(argv, stdout=out, stderr=subprocess.PIPE)
                    end = self.clock()
            else:
                start = self.clock()
                result = subprocess.run(argv, stdout=subprocess.DEVNULL, stderr=subprocess.PIPE)
                end = self.clock()
        except OSError as e:
            return 0.0, f"{argv[0]}: {e}"

        if result.returncode != 0:
            stderr = result.stderr.decode(errors="replace").strip()
            detail = f": {stderr}" if stderr else ""
            return end - start, f"{argv[0]} exited with status {result.returncode}{detail}"
        return end - start, None

    def _failed(self, file: Path, label: str, original_size: int, error: str, **kwargs) -> BenchmarkRun:
        name = self.display_name(file)
        self.logger.warning(f"{label} failed on {name}: {error}")
        return BenchmarkRun(
            file=name,
            algorithm=label,
            original_size=original_size,
            success=False,
            error=error,
            **kwargs,
        )

    def run(
        self,
        file: Path,
        label: str,
        compress_cmd: Sequence[str],
        decompress_cmd: Sequence[str],
        extension: str = "",
    ) -> BenchmarkRun:
        """Compress, decompress and verify one file with one configuration."""
        file = Path(file)
        if not file.is_file():
            raise ValueError(f"Input file not found: {file}")
        original_size = file.stat().st_size
        if original_size == 0:
            raise ValueError(f"Input file is empty: {file}")

        compressed, decompressed = self.artifact_paths(file, label, extension)
        self.logger.info(f"Testing {label} on {self.display_name(file)}...")

        try:
            return self._round_trip(file, label, original_size, compressed, decompressed,
                                    compress_cmd, decompress_cmd)
        finally:
            if not self.keep_artifacts:
                compressed.unlink(missing_ok=True)
                decompressed.unlink(missing_ok=True)

    def _round_trip(
        self,
        file: Path,
        label: str,
        original_size: int,
        compressed: Path,
        decompressed: Path,
        compress_cmd: Sequence[str],
        decompress_cmd: Sequence[str],
    ) -> BenchmarkRun:
        # 1. Compression
        comp_time, error = self._invoke(compress_cmd, file, compressed)
        if error:
            return self._failed(file, label, original_size, error, compression_time=comp_time)

        compressed_size = compressed.stat().st_size if compressed.exists() else 0
        if compressed_size == 0:
            return self._failed(file, label, original_size, "compressor produced no output",
                                compression_time=comp_time)

        # 2. Decompression
        decomp_time, error = self._invoke(decompress_cmd, compressed, decompressed)
        if error:
            return self._failed(file, label, original_size, error,
                                compressed_size=compressed_size,
                                compression_time=comp_time,
                                decompression_time=decomp_time)

        # 3. Verification
        verified = self.verifier.verify(file, decompressed, label)

        return BenchmarkRun(
            file=self.display_name(file),
            algorithm=label,
            original_size=original_size,
            compressed_size=compressed_size,
            compression_time=comp_time,
            decompression_time=decomp_time,
            verified=verified,
        )

    def check_determinism(self, file: Path, label: str, compress_cmd: Sequence[str], extension: str = "") -> bool:
        """Compress the same input twice and compare output sizes."""
        file = Path(file)
        scratch = self.work_dir / "determinism"
        scratch.mkdir(parents=True, exist_ok=True)
        name = self.display_name(file)
        stem = name.replace("/", "__")

        sizes = []
        for attempt in (1, 2):
            out = scratch / f"{stem}.{label}.{attempt}{extension}"
            _, error = self._invoke(compress_cmd, file, out)
            sizes.append(out.stat().st_size if not error and out.exists() else None)
            out.unlink(missing_ok=True)

        if None in sizes:
            self.logger.warning(f"Determinism check for {label} on {name} could not compress")
            return False
        if sizes[0] != sizes[1]:
            self.logger.warning(
                f"Non-deterministic output for {label} on {name}: {sizes[0]} != {sizes[1]} bytes"
            )
            return False
        return True


class BenchmarkRunner:
    """
    Executes the corpus x algorithm x level matrix sequentially.
    """

    def __init__(
        self,
        work_dir: Path,
        compressors: List[CompressorConfig],
        digest: str = "sha256",
        keep_artifacts: bool = True,
        check_determinism: bool = False,
        clock: Callable[[], float] = time.perf_counter,
        corpus_root: Optional[Path] = None,
    ):
        self.work_dir = Path(work_dir)
        self.compressors = compressors
        self.check_determinism = check_determinism
        self.invoker = InvocationRunner(
            self.work_dir,
            verifier=IntegrityVerifier(digest),
            clock=clock,
            keep_artifacts=keep_artifacts,
            root=corpus_root,
        )
        self.aggregator = MetricsAggregator()
        self.nondeterministic: List[Tuple[str, str]] = []
        self.logger = logging.getLogger("Benchmark")

    def __enter__(self) -> "BenchmarkRunner":
        self.invoker.prepare()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if not self.invoker.keep_artifacts:
            shutil.rmtree(self.work_dir / "determinism", ignore_errors=True)

    @property
    def runs(self) -> List[BenchmarkRun]:
        return self.aggregator.runs

    def run_file(self, file: Path) -> List[BenchmarkRun]:
        """Run every configuration against one corpus file."""
        file_runs = []
        for compressor in self.compressors:
            for label, compress, decompress, ext in compressor.configurations():
                run = self.invoker.run(file, label, compress, decompress, ext)
                self.aggregator.add_run(run)
                file_runs.append(run)

                if self.check_determinism and run.success:
                    if not self.invoker.check_determinism(file, label, compress, ext):
                        self.nondeterministic.append((self.invoker.display_name(file), label))
        return file_runs

    def run_corpus(self, files: Iterable[Path]) -> List[BenchmarkRun]:
        for file in files:
            self.run_file(file)
        return self.runs

    def aggregate_results(self, duration: float, corpus: str = "") -> BenchmarkSummary:
        """Fold the run log into a summary."""
        return BenchmarkSummary(
            timestamp=datetime.now().isoformat(),
            duration=duration,
            corpus=corpus,
            runs=self.aggregator.runs,
            summaries=self.aggregator.summarize(),
            totals=self.aggregator.totals(),
        )
