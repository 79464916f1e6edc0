"""
Metrics Aggregation

Holds the run log of one benchmark execution and folds it into
per-algorithm averages and totals.
"""

import statistics
from collections import defaultdict
from typing import Dict, Iterable, List, Optional

from .models import AlgorithmSummary, BenchmarkRun


def mean_defined(values: Iterable[Optional[float]]) -> Optional[float]:
    """Arithmetic mean ignoring undefined (None) values."""
    defined = [v for v in values if v is not None]
    if not defined:
        return None
    return statistics.mean(defined)


def _descending(value: Optional[float], label: str):
    # Undefined values sort last, ties break on the label
    return (value is None, -(value or 0.0), label)


class MetricsAggregator:
    """Append-only run log with grouping by exact algorithm label."""

    def __init__(self, runs: Optional[Iterable[BenchmarkRun]] = None):
        self._runs: List[BenchmarkRun] = []
        for run in runs or []:
            self.add_run(run)

    @property
    def runs(self) -> List[BenchmarkRun]:
        return list(self._runs)

    def add_run(self, run: BenchmarkRun) -> None:
        self._runs.append(run)

    def successful_runs(self) -> List[BenchmarkRun]:
        return [r for r in self._runs if r.success]

    def _groups(self) -> Dict[str, List[BenchmarkRun]]:
        groups = defaultdict(list)
        for run in self.successful_runs():
            groups[run.algorithm].append(run)
        return groups

    def _fold(self, algorithm: str, runs: List[BenchmarkRun]) -> AlgorithmSummary:
        return AlgorithmSummary(
            algorithm=algorithm,
            num_runs=len(runs),
            avg_ratio=mean_defined(r.ratio for r in runs),
            avg_compression_time=mean_defined(r.compression_time for r in runs),
            avg_decompression_time=mean_defined(r.decompression_time for r in runs),
            avg_compression_speed=mean_defined(r.compression_speed for r in runs),
            avg_decompression_speed=mean_defined(r.decompression_speed for r in runs),
            total_original_size=sum(r.original_size for r in runs),
            total_compressed_size=sum(r.compressed_size for r in runs),
        )

    def _fold_all(self) -> List[AlgorithmSummary]:
        return [self._fold(algo, runs) for algo, runs in self._groups().items() if runs]

    def summarize(self) -> List[AlgorithmSummary]:
        """Per-algorithm averages, best average ratio first."""
        return sorted(self._fold_all(), key=lambda s: _descending(s.avg_ratio, s.algorithm))

    def totals(self) -> List[AlgorithmSummary]:
        """Per-algorithm totals, best overall ratio first."""
        return sorted(self._fold_all(), key=lambda s: _descending(s.overall_ratio, s.algorithm))
