import csv
import io
import json

import pytest

from compbench.benchmark.aggregator import MetricsAggregator
from compbench.benchmark.models import BenchmarkSummary
from compbench.benchmark.reporting import (
    AVERAGE_HEADER,
    AVERAGE_TITLE,
    RUN_HEADER,
    TOTALS_HEADER,
    TOTALS_TITLE,
    ReportGenerator,
    fmt,
    parse_results_csv,
    render,
    render_csv,
)

from conftest import make_run


@pytest.fixture
def summary(sample_runs):
    agg = MetricsAggregator(sample_runs)
    return BenchmarkSummary(
        timestamp="2026-01-01T12:00:00",
        duration=3.0,
        corpus="silesia",
        runs=agg.runs,
        summaries=agg.summarize(),
        totals=agg.totals(),
    )


class TestFormatting:
    def test_fmt(self):
        assert fmt(2.0) == "2.00"
        assert fmt(0.12345, 3) == "0.123"
        assert fmt(None) == "N/A"


class TestRenderCsv:
    def test_three_tables(self, summary):
        text = render_csv(summary.runs, summary.summaries, summary.totals)
        rows = list(csv.reader(io.StringIO(text)))

        assert rows[0] == RUN_HEADER
        # five successful runs, the failed one is left out
        assert len(rows[1:6]) == 5
        assert rows[6] == []
        assert rows[7] == [AVERAGE_TITLE]
        assert rows[8] == AVERAGE_HEADER
        assert [r[0] for r in rows[9:12]] == ["gzip-9", "gzip-1", "xz-6"]
        assert rows[12] == []
        assert rows[13] == [TOTALS_TITLE]
        assert rows[14] == TOTALS_HEADER
        assert [r[0] for r in rows[15:18]] == ["gzip-9", "gzip-1", "xz-6"]
        assert len(rows) == 18

    def test_run_row_values(self):
        run = make_run("gzip-6", "a.txt", 1048576, 524288, 1.0, 0.5, verified=False)
        text = render_csv([run], [], [])
        row = list(csv.reader(io.StringIO(text)))[1]
        assert row == ["a.txt", "gzip-6", "1024.00", "512.00", "2.00", "1.000", "0.500", "1.00", "2.00", "false"]

    def test_totals_row_uses_overall_ratio(self):
        runs = [make_run("gzip-6", "a", 1000, 100), make_run("gzip-6", "b", 9000, 9000)]
        agg = MetricsAggregator(runs)
        text = render_csv(runs, agg.summarize(), agg.totals())
        rows = list(csv.reader(io.StringIO(text)))
        assert rows[-1][0] == "gzip-6"
        assert rows[-1][3] == "1.10"
        averages = rows[rows.index(AVERAGE_HEADER) + 1]
        assert averages[1] == "5.50"


class TestParseResultsCsv:
    def test_reads_only_run_rows(self, summary):
        text = render_csv(summary.runs, summary.summaries, summary.totals)
        rows = parse_results_csv(text)
        assert len(rows) == 5
        assert {r["Algorithm"] for r in rows} == {"gzip-1", "gzip-9", "xz-6"}
        assert rows[0]["File"] == "a.txt"

    def test_skips_avg_labels_and_repeated_headers(self):
        text = "\n".join([
            ",".join(RUN_HEADER),
            "a,gzip-1,1,1,1,1,1,1,1,true",
            ",".join(RUN_HEADER),
            "b,Avg Compression Ratio,1,1,1,1,1,1,1,true",
            "c,gzip-9,1,1,1,1,1,1,1,true",
        ])
        rows = parse_results_csv(text)
        assert [r["File"] for r in rows] == ["a", "c"]


class TestRender:
    def test_returns_csv_and_html(self, summary):
        csv_text, html_text = render(summary.runs, summary.summaries, summary.totals)
        assert csv_text.startswith("File,Algorithm")
        assert html_text.startswith("<!DOCTYPE html>")
        assert "resultsTable" in html_text


class TestReportGenerator:
    def test_save_reports(self, tmp_path, summary):
        generator = ReportGenerator(tmp_path)
        csv_path, html_path = generator.save_reports(summary)

        assert csv_path.name == "compression_results.csv"
        assert html_path.name == "report.html"
        assert len(parse_results_csv(csv_path.read_text())) == 5
        assert "summaryTable" in html_path.read_text()

    def test_save_json(self, tmp_path, summary):
        path = ReportGenerator(tmp_path).save_json(summary)
        data = json.loads(path.read_text())

        assert path.name == "benchmark_results.json"
        assert data["total_runs"] == 6
        assert data["failed_runs"] == 1
        assert data["best_config"] == "gzip-9"
        assert len(data["runs"]) == 6
        assert data["totals"][0]["overall_ratio"] == pytest.approx(10000 / 1300)

    def test_generate_markdown(self, tmp_path, summary):
        path = ReportGenerator(tmp_path).generate_markdown(summary)
        content = path.read_text()

        assert path.name == "benchmark_report.md"
        assert "| gzip-9 |" in content
        assert "7.69" in content
        assert "Failed or Unverified Runs" in content
        assert "round trip mismatch" in content
