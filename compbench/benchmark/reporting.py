import csv
import io
import json
import re
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from .models import AlgorithmSummary, BenchmarkRun, BenchmarkSummary
from ..visualization.dashboard import DashboardGenerator, DashboardConfig

RUN_HEADER = [
    "File",
    "Algorithm",
    "Original Size (KB)",
    "Compressed Size (KB)",
    "Compression Ratio",
    "Compression Time (s)",
    "Decompression Time (s)",
    "Compression Speed (MB/s)",
    "Decompression Speed (MB/s)",
    "Verified",
]

AVERAGE_TITLE = "Average metrics by algorithm:"
AVERAGE_HEADER = [
    "Algorithm",
    "Avg Compression Ratio",
    "Avg Compression Time (s)",
    "Avg Decompression Time (s)",
    "Avg Compression Speed (MB/s)",
    "Avg Decompression Speed (MB/s)",
]

TOTALS_TITLE = "Total sizes by algorithm:"
TOTALS_HEADER = [
    "Algorithm",
    "Total Original Size (KB)",
    "Total Compressed Size (KB)",
    "Overall Compression Ratio",
]

CSV_FILENAME = "compression_results.csv"
HTML_FILENAME = "report.html"
JSON_FILENAME = "benchmark_results.json"
MARKDOWN_FILENAME = "benchmark_report.md"

_SECTION_LABEL = re.compile(r"^Avg")


def fmt(value: Optional[float], digits: int = 2) -> str:
    """Format a metric, rendering undefined values as N/A."""
    if value is None:
        return "N/A"
    return f"{value:.{digits}f}"


def run_row(run: BenchmarkRun) -> List[str]:
    return [
        run.file,
        run.algorithm,
        fmt(run.original_kb),
        fmt(run.compressed_kb),
        fmt(run.ratio),
        fmt(run.compression_time, 3),
        fmt(run.decompression_time, 3),
        fmt(run.compression_speed),
        fmt(run.decompression_speed),
        "true" if run.verified else "false",
    ]


def average_row(s: AlgorithmSummary) -> List[str]:
    return [
        s.algorithm,
        fmt(s.avg_ratio),
        fmt(s.avg_compression_time),
        fmt(s.avg_decompression_time),
        fmt(s.avg_compression_speed),
        fmt(s.avg_decompression_speed),
    ]


def totals_row(s: AlgorithmSummary) -> List[str]:
    return [
        s.algorithm,
        fmt(s.total_original_kb),
        fmt(s.total_compressed_kb),
        fmt(s.overall_ratio),
    ]


def render_csv(
    runs: Sequence[BenchmarkRun],
    summaries: Sequence[AlgorithmSummary],
    totals: Sequence[AlgorithmSummary],
) -> str:
    """Three tables in one stream: successful runs, averages, totals."""
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")

    writer.writerow(RUN_HEADER)
    writer.writerows(run_row(r) for r in runs if r.success)

    writer.writerow([])
    writer.writerow([AVERAGE_TITLE])
    writer.writerow(AVERAGE_HEADER)
    writer.writerows(average_row(s) for s in summaries)

    writer.writerow([])
    writer.writerow([TOTALS_TITLE])
    writer.writerow(TOTALS_HEADER)
    writer.writerows(totals_row(s) for s in totals)

    return buf.getvalue()


def parse_results_csv(text: str) -> List[Dict[str, str]]:
    """Read back the per-run table of a results CSV.

    Blank lines, section titles, repeated headers and ``Avg*`` labels
    delimit sections and are never returned as data.
    """
    rows = []
    for row in csv.reader(io.StringIO(text)):
        if not row or not any(row):
            # The run table ends at the first blank line
            if rows:
                break
            continue
        if len(row) < 9 or row[1] == "Algorithm" or _SECTION_LABEL.match(row[1]):
            continue
        rows.append(dict(zip(RUN_HEADER, row)))
    return rows


def render(
    runs: Sequence[BenchmarkRun],
    summaries: Sequence[AlgorithmSummary],
    totals: Sequence[AlgorithmSummary],
    config: Optional[DashboardConfig] = None,
) -> Tuple[str, str]:
    """Render the CSV dataset and the HTML dashboard from the same rows."""
    csv_text = render_csv(runs, summaries, totals)
    html_text = DashboardGenerator(config).generate(runs, summaries, totals)
    return csv_text, html_text


class ReportGenerator:
    """Generates reports from benchmark results."""

    def __init__(self, output_dir: Path, config: Optional[DashboardConfig] = None):
        self.output_dir = Path(output_dir)
        self.config = config

    def save_reports(self, summary: BenchmarkSummary) -> Tuple[Path, Path]:
        """Write the CSV dataset and the HTML dashboard."""
        csv_text, html_text = render(summary.runs, summary.summaries, summary.totals, self.config)

        csv_path = self.output_dir / CSV_FILENAME
        csv_path.write_text(csv_text)

        html_path = self.output_dir / HTML_FILENAME
        html_path.write_text(html_text, encoding="utf-8")

        return csv_path, html_path

    def save_json(self, summary: BenchmarkSummary) -> Path:
        """Save detailed results to JSON."""
        output_path = self.output_dir / JSON_FILENAME

        with open(output_path, "w") as f:
            json.dump(summary.to_dict(), f, indent=2)

        return output_path

    def generate_markdown(self, summary: BenchmarkSummary) -> Path:
        """Generate a Markdown summary report."""
        output_path = self.output_dir / MARKDOWN_FILENAME

        lines = [
            "# Compression Benchmark Report",
            f"\n**Timestamp:** {summary.timestamp}",
            f"**Duration:** {summary.duration:.1f}s",
            f"**Corpus:** {summary.corpus or 'n/a'}",
            f"**Runs:** {summary.total_runs} ({summary.successful_runs} succeeded, "
            f"{summary.failed_runs} failed, {summary.unverified_runs} unverified)",
            "",
            "## Average Metrics by Algorithm",
            "",
            "| Algorithm | Runs | Ratio | Comp Time (s) | Decomp Time (s) | Comp Speed (MB/s) | Decomp Speed (MB/s) |",
            "|-----------|------|-------|---------------|-----------------|-------------------|---------------------|",
        ]

        for s in summary.summaries:
            lines.append(
                f"| {s.algorithm} | {s.num_runs} | {fmt(s.avg_ratio)} | "
                f"{fmt(s.avg_compression_time)} | {fmt(s.avg_decompression_time)} | "
                f"{fmt(s.avg_compression_speed)} | {fmt(s.avg_decompression_speed)} |"
            )

        lines.extend([
            "",
            "## Total Sizes by Algorithm",
            "",
            "| Algorithm | Original (KB) | Compressed (KB) | Overall Ratio |",
            "|-----------|---------------|-----------------|---------------|",
        ])

        for t in summary.totals:
            lines.append(
                f"| {t.algorithm} | {fmt(t.total_original_kb)} | "
                f"{fmt(t.total_compressed_kb)} | {fmt(t.overall_ratio)} |"
            )

        problems = [r for r in summary.runs if not r.success or not r.verified]
        if problems:
            lines.extend([
                "",
                "## Failed or Unverified Runs",
                "",
                "| File | Algorithm | Status |",
                "|------|-----------|--------|",
            ])
            for r in problems:
                status = f"failed: {r.error}" if not r.success else "round trip mismatch"
                lines.append(f"| {r.file} | {r.algorithm} | {status} |")

        with open(output_path, "w") as f:
            f.write("\n".join(lines))

        return output_path
