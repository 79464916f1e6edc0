#!/usr/bin/env python3
"""
Compression Benchmark Suite

Runs gzip, bzip2, xz and zstd at several levels over every file of a
reference corpus (Silesia by default).  For each (file x algorithm x level)
combination the pipeline runs:  compress → decompress → verify, collecting
ratio, timing and throughput, then writes a CSV dataset and an HTML
dashboard.

Usage:
    python bin/benchmark.py --fetch
    python bin/benchmark.py --corpus-dir data/silesia --algorithms gzip,zstd
    python bin/benchmark.py --config benchmarks/suite.yaml --static-charts
    python bin/benchmark.py --check-determinism --verbose
"""
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import argparse
import logging
import time
from typing import List

from compbench.benchmark import (
    BenchmarkRun,
    BenchmarkRunner,
    CorpusProvider,
    ReportGenerator,
    require_binaries,
)
from compbench.benchmark.reporting import fmt
from compbench.config import Settings, default_compressors, load_suite, select_compressors
from compbench.visualization import ChartGenerator, DashboardConfig


# =============================================================================
# Terminal output helpers
# =============================================================================

class Colors:
    CYAN = "\033[96m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    RED = "\033[91m"
    GRAY = "\033[90m"
    BLUE = "\033[94m"
    BOLD = "\033[1m"
    RESET = "\033[0m"


def _c(text: str, color: str) -> str:
    return f"{color}{text}{Colors.RESET}"


def print_header(title: str) -> None:
    line = "=" * 60
    print(f"\n{_c(line, Colors.CYAN)}")
    print(f"{_c(f' {title}', Colors.CYAN + Colors.BOLD)}")
    print(_c(line, Colors.CYAN))


def print_step(msg: str) -> None:
    print(f"  {_c('→', Colors.BLUE)} {msg}")


def print_success(msg: str) -> None:
    print(f"  {_c('✓', Colors.GREEN)} {msg}")


def print_error(msg: str) -> None:
    print(f"  {_c('✗', Colors.RED)} {msg}", file=sys.stderr)


# =============================================================================
# Progress display
# =============================================================================

def _print_file_result(idx: int, total: int, name: str, runs: List[BenchmarkRun]) -> None:
    """Print a one-line progress update after a corpus file completes."""
    ok = sum(1 for r in runs if r.success and r.verified)
    n = len(runs)
    status = _c("ok", Colors.GREEN) if ok == n else _c(f"{ok}/{n}", Colors.YELLOW)
    print_step(f"[{idx}/{total}] {name:20s}  configs={n}  result={status}")


def _print_summary_table(summary) -> None:
    """Print the totals table to the terminal."""
    if not summary.totals:
        return

    print_header("Benchmark Results")

    hdr = (
        f"  {'Algorithm':<10} {'Runs':>5} {'Avg Ratio':>10} {'Overall':>9} "
        f"{'Comp MB/s':>10} {'Decomp MB/s':>12}"
    )
    print(f"\n{_c(hdr, Colors.BOLD)}")
    print(f"  {'─' * 61}")

    averages = {s.algorithm: s for s in summary.summaries}
    for t in summary.totals:
        s = averages[t.algorithm]
        print(
            f"  {t.algorithm:<10} {t.num_runs:>5} {fmt(s.avg_ratio):>10} {fmt(t.overall_ratio):>9} "
            f"{fmt(s.avg_compression_speed):>10} {fmt(s.avg_decompression_speed):>12}"
        )

    overall = (
        f"\n  Overall: {summary.total_runs} runs, "
        f"{summary.successful_runs} succeeded, {summary.failed_runs} failed, "
        f"{summary.unverified_runs} unverified; best={summary.best_config}"
    )
    color = Colors.GREEN if not summary.failed_runs and not summary.unverified_runs else Colors.YELLOW
    print(_c(overall, Colors.BOLD + color))


# =============================================================================
# CLI
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    settings = Settings.from_env()
    parser = argparse.ArgumentParser(
        description="Compression Benchmark Suite",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
examples:
  %(prog)s --fetch                                  Download Silesia and run all 12 configs
  %(prog)s --algorithms gzip,zstd                   Only gzip and zstd levels
  %(prog)s --config benchmarks/suite.yaml           Compressors from YAML config
  %(prog)s --check-determinism --static-charts      Extra checks and PNG charts
""",
    )

    # --- Corpus ---
    corpus = parser.add_argument_group("Corpus")
    corpus.add_argument(
        "--corpus-dir", type=Path, default=settings.corpus_dir, metavar="DIR",
        help=f"Directory of files to benchmark (default: {settings.corpus_dir})",
    )
    corpus.add_argument(
        "--corpus-url", default=settings.corpus_url,
        help="Zip archive to download when the corpus directory is empty",
    )
    corpus.add_argument(
        "--fetch", action="store_true",
        help="Download and extract the corpus if it is not present",
    )

    # --- Compressors ---
    comp = parser.add_argument_group("Compressors")
    comp.add_argument(
        "--config", type=Path, metavar="FILE",
        help="YAML file defining the compressor suite",
    )
    comp.add_argument(
        "--algorithms",
        help="Comma-separated compressors to run (default: all in suite)",
    )
    comp.add_argument(
        "--digest", default=settings.digest,
        help=f"hashlib algorithm for round-trip verification (default: {settings.digest})",
    )
    comp.add_argument(
        "--check-determinism", action="store_true",
        help="Compress every input twice and warn if output sizes differ",
    )

    # --- Output ---
    out = parser.add_argument_group("Output")
    out.add_argument(
        "--work-dir", type=Path, default=settings.work_dir, metavar="DIR",
        help=f"Directory for compressed/decompressed artifacts (default: {settings.work_dir})",
    )
    out.add_argument(
        "--output", "-o", type=Path, default=settings.output_dir, metavar="DIR",
        help=f"Output directory for reports (default: {settings.output_dir})",
    )
    out.add_argument(
        "--clean-artifacts", action="store_true",
        help="Delete compressed and decompressed files after each run",
    )
    out.add_argument(
        "--static-charts", action="store_true",
        help="Also write PNG charts with matplotlib",
    )
    out.add_argument(
        "--theme", choices=["light", "dark"], default="light",
        help="HTML report theme (default: light)",
    )

    # --- Runtime ---
    runtime = parser.add_argument_group("Runtime")
    runtime.add_argument("--verbose", "-v", action="store_true",
                         help="Verbose output with debug logging")

    return parser


# =============================================================================
# Main
# =============================================================================

def main(argv: List[str] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    # --- Logging ---
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    # --- Setup (any failure here is fatal) ---
    try:
        compressors = load_suite(args.config) if args.config else default_compressors()
        names = [n.strip() for n in args.algorithms.split(",")] if args.algorithms else None
        compressors = select_compressors(compressors, names)
        require_binaries(compressors)

        provider = CorpusProvider(args.corpus_dir, url=args.corpus_url)
        if args.fetch:
            print_step(f"Fetching corpus into {args.corpus_dir}...")
            provider.fetch()
        files = provider.files()

        args.output.mkdir(parents=True, exist_ok=True)
    except (OSError, RuntimeError, ValueError) as e:
        print_error(str(e))
        return 1

    n_configs = sum(len(c.levels) for c in compressors)

    print_header("Compression Benchmark Suite")
    print(f"  Corpus    : {args.corpus_dir} ({len(files)} files)")
    print(f"  Tools     : {', '.join(c.name for c in compressors)} ({n_configs} configurations)")
    print(f"  Total runs: {len(files) * n_configs} (files × configurations)")
    print(f"  Output    : {args.output}")

    # --- Run ---
    t0 = time.time()

    try:
        with BenchmarkRunner(
            work_dir=args.work_dir,
            compressors=compressors,
            digest=args.digest,
            keep_artifacts=not args.clean_artifacts,
            check_determinism=args.check_determinism,
            corpus_root=args.corpus_dir,
        ) as runner:
            for i, file in enumerate(files, 1):
                runs = runner.run_file(file)
                _print_file_result(i, len(files), runner.invoker.display_name(file), runs)

            duration = time.time() - t0
            summary = runner.aggregate_results(duration, corpus=str(args.corpus_dir))
    except OSError as e:
        print_error(f"Benchmark aborted: {e}")
        return 1

    # --- Reports ---
    reporter = ReportGenerator(
        args.output,
        DashboardConfig(theme=args.theme, corpus_name=args.corpus_dir.name),
    )
    csv_path, html_path = reporter.save_reports(summary)
    json_path = reporter.save_json(summary)
    md_path = reporter.generate_markdown(summary)
    outputs = [csv_path, html_path, json_path, md_path]

    if args.static_charts:
        outputs.extend(c.path for c in ChartGenerator(args.output).generate_all(summary.summaries))

    # --- Terminal summary ---
    _print_summary_table(summary)

    if runner.nondeterministic:
        print(_c(f"\n  Non-deterministic output for {len(runner.nondeterministic)} run(s):", Colors.YELLOW))
        for name, label in runner.nondeterministic:
            print(f"    {name} / {label}")

    print(f"\n  Reports saved to:")
    for path in outputs:
        print_success(str(path))
    print(f"\n  Completed in {_c(f'{duration:.1f}s', Colors.BOLD)}\n")

    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print(f"\n{_c('Benchmark interrupted by user.', Colors.YELLOW)}")
        sys.exit(130)
