from dataclasses import dataclass, field, asdict
from typing import Dict, List, Optional, Any, Tuple

KB = 1024
MB = 1024 * 1024


def safe_ratio(numerator: float, denominator: float) -> Optional[float]:
    """Divide, returning None when the denominator is not positive."""
    if denominator <= 0:
        return None
    return numerator / denominator


@dataclass(frozen=True)
class BenchmarkRun:
    """Single (file, algorithm, level) execution."""
    file: str
    algorithm: str
    original_size: int
    compressed_size: int = 0

    # Durations (seconds)
    compression_time: float = 0.0
    decompression_time: float = 0.0

    # Status
    verified: bool = False
    success: bool = True
    error: Optional[str] = None

    @property
    def original_kb(self) -> float:
        return self.original_size / KB

    @property
    def compressed_kb(self) -> float:
        return self.compressed_size / KB

    @property
    def original_mb(self) -> float:
        return self.original_size / MB

    @property
    def ratio(self) -> Optional[float]:
        """Original over compressed size; None when nothing was written."""
        return safe_ratio(self.original_size, self.compressed_size)

    @property
    def compression_speed(self) -> Optional[float]:
        """Compression throughput in MB/s."""
        return safe_ratio(self.original_mb, self.compression_time)

    @property
    def decompression_speed(self) -> Optional[float]:
        """Decompression throughput in MB/s."""
        return safe_ratio(self.original_mb, self.decompression_time)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary, including derived metrics."""
        data = asdict(self)
        data.update(
            original_kb=self.original_kb,
            compressed_kb=self.compressed_kb,
            ratio=self.ratio,
            compression_speed=self.compression_speed,
            decompression_speed=self.decompression_speed,
        )
        return data


@dataclass
class AlgorithmSummary:
    """Aggregate over all successful runs sharing an algorithm label."""
    algorithm: str
    num_runs: int

    # Means of per-run values (None when undefined for every run)
    avg_ratio: Optional[float] = None
    avg_compression_time: Optional[float] = None
    avg_decompression_time: Optional[float] = None
    avg_compression_speed: Optional[float] = None
    avg_decompression_speed: Optional[float] = None

    # Totals
    total_original_size: int = 0
    total_compressed_size: int = 0

    @property
    def total_original_kb(self) -> float:
        return self.total_original_size / KB

    @property
    def total_compressed_kb(self) -> float:
        return self.total_compressed_size / KB

    @property
    def overall_ratio(self) -> Optional[float]:
        """Total original bytes over total compressed bytes."""
        return safe_ratio(self.total_original_size, self.total_compressed_size)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["overall_ratio"] = self.overall_ratio
        return data


@dataclass
class CompressorConfig:
    """
    An external compressor and the levels to benchmark it at.

    Command templates are argv lists; ``{level}``, ``{input}`` and
    ``{output}`` are substituted per invocation. A template without
    ``{output}`` is expected to write to stdout.
    """
    name: str
    levels: List[int]
    compress: List[str]
    decompress: List[str]
    extension: str = ""

    def __post_init__(self):
        if not self.name:
            raise ValueError("Compressor name must not be empty")
        if not self.levels:
            raise ValueError(f"Compressor '{self.name}' defines no levels")
        if not self.compress or not self.decompress:
            raise ValueError(f"Compressor '{self.name}' needs compress and decompress commands")

    @property
    def binaries(self) -> List[str]:
        """Executables this compressor needs on PATH."""
        return sorted({self.compress[0], self.decompress[0]})

    def label(self, level: int) -> str:
        return f"{self.name}-{level}"

    def configurations(self) -> List[Tuple[str, List[str], List[str], str]]:
        """Expand into (label, compress argv, decompress argv, extension) per level."""
        configs = []
        for level in self.levels:
            compress = [arg.replace("{level}", str(level)) for arg in self.compress]
            decompress = [arg.replace("{level}", str(level)) for arg in self.decompress]
            configs.append((self.label(level), compress, decompress, self.extension))
        return configs


@dataclass
class BenchmarkSummary:
    """Complete benchmark summary."""
    timestamp: str
    duration: float
    corpus: str = ""

    runs: List[BenchmarkRun] = field(default_factory=list)
    summaries: List[AlgorithmSummary] = field(default_factory=list)
    totals: List[AlgorithmSummary] = field(default_factory=list)

    @property
    def total_runs(self) -> int:
        return len(self.runs)

    @property
    def successful_runs(self) -> int:
        return sum(1 for r in self.runs if r.success)

    @property
    def failed_runs(self) -> int:
        return self.total_runs - self.successful_runs

    @property
    def unverified_runs(self) -> int:
        return sum(1 for r in self.runs if r.success and not r.verified)

    @property
    def best_config(self) -> Optional[str]:
        return self.totals[0].algorithm if self.totals else None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "timestamp": self.timestamp,
            "duration": self.duration,
            "corpus": self.corpus,
            "total_runs": self.total_runs,
            "successful_runs": self.successful_runs,
            "failed_runs": self.failed_runs,
            "unverified_runs": self.unverified_runs,
            "best_config": self.best_config,
            "summaries": [s.to_dict() for s in self.summaries],
            "totals": [t.to_dict() for t in self.totals],
            "runs": [r.to_dict() for r in self.runs],
        }
