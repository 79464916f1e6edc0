"""
Compression Benchmark Harness

Runs external compression utilities over a reference corpus and reports
ratio, timing and throughput per algorithm and level.
"""

__version__ = "1.0.0"
