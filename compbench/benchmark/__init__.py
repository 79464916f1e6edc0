"""
Benchmark Package

Runs external compressors over a corpus, aggregates the measurements
and renders CSV and HTML reports.
"""

from .models import BenchmarkRun, AlgorithmSummary, BenchmarkSummary, CompressorConfig
from .corpus import CorpusProvider
from .integrity import IntegrityVerifier
from .aggregator import MetricsAggregator
from .runner import BenchmarkRunner, InvocationRunner, require_binaries
from .reporting import ReportGenerator, render

__all__ = [
    "BenchmarkRun",
    "AlgorithmSummary",
    "BenchmarkSummary",
    "CompressorConfig",
    "CorpusProvider",
    "IntegrityVerifier",
    "MetricsAggregator",
    "BenchmarkRunner",
    "InvocationRunner",
    "require_binaries",
    "ReportGenerator",
    "render",
]
