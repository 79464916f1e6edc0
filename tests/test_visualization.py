"""
Unit Tests for compbench/visualization module

Tests for:
    - Dashboard HTML generation
    - Agreement between table-derived and server-side averages
    - Static chart generation with matplotlib
"""

from collections import defaultdict
from html.parser import HTMLParser

import pytest

from compbench.benchmark.aggregator import MetricsAggregator
from compbench.visualization.charts import ChartGenerator, family_color
from compbench.visualization.dashboard import CHART_JS_URL, DashboardConfig, DashboardGenerator

from conftest import make_run


class TableCollector(HTMLParser):
    """Collects the cells of every table by id as (text, data-value) pairs."""

    def __init__(self):
        super().__init__()
        self.tables = defaultdict(list)
        self._table = None
        self._row = None
        self._cell = None

    def handle_starttag(self, tag, attrs):
        attrs = dict(attrs)
        if tag == "table":
            self._table = attrs.get("id")
        elif tag == "tr" and self._table:
            self._row = []
        elif tag == "td" and self._row is not None:
            self._cell = ["", attrs.get("data-value")]

    def handle_endtag(self, tag):
        if tag == "td" and self._cell is not None:
            self._row.append(tuple(self._cell))
            self._cell = None
        elif tag == "tr" and self._row is not None:
            if self._row:
                self.tables[self._table].append(self._row)
            self._row = None
        elif tag == "table":
            self._table = None

    def handle_data(self, data):
        if self._cell is not None:
            self._cell[0] += data


def collect(html_text):
    parser = TableCollector()
    parser.feed(html_text)
    return parser.tables


@pytest.fixture
def uneven_runs():
    return [
        make_run("gzip-1", "a.txt", 1000, 300, 0.013, 0.007),
        make_run("gzip-1", "b.txt", 7777, 3001, 0.21, 0.033),
        make_run("gzip-1", "c.txt", 123456, 40000, 1.7, 0.0),
        make_run("xz-9", "a.txt", 1000, 250, 0.3, 0.01, verified=False),
        make_run("xz-9", "b.txt", 7777, 2000, 2.9, 0.07),
        make_run("zstd-19", "a.txt", 1000, 0, success=False),
    ]


class TestDashboardGenerator:
    def test_page_structure(self, uneven_runs):
        agg = MetricsAggregator(uneven_runs)
        html_text = DashboardGenerator().generate(agg.runs, agg.summarize(), agg.totals())

        assert html_text.startswith("<!DOCTYPE html>")
        assert CHART_JS_URL in html_text
        for element in ("resultsTable", "summaryTable", "totalsTable", "tableSearch",
                        "ratioChart", "timeChart", "speedChart", "crossCheck"):
            assert f'id="{element}"' in html_text
        assert "toUpperCase" in html_text

    def test_only_successful_runs_tabulated(self, uneven_runs):
        agg = MetricsAggregator(uneven_runs)
        tables = collect(DashboardGenerator().generate(agg.runs, agg.summarize(), agg.totals()))

        assert len(tables["resultsTable"]) == 5
        assert all(row[1][0] != "zstd-19" for row in tables["resultsTable"])
        assert [row[0][0] for row in tables["summaryTable"]] == [s.algorithm for s in agg.summarize()]

    def test_undefined_values_render_as_na(self, uneven_runs):
        agg = MetricsAggregator(uneven_runs)
        tables = collect(DashboardGenerator().generate(agg.runs, agg.summarize(), agg.totals()))

        c_row = next(row for row in tables["resultsTable"] if row[0][0] == "c.txt")
        # decompression time 0 => speed undefined
        assert c_row[8] == ("N/A", "")

    def test_table_derived_averages_match_summary(self, uneven_runs):
        """Re-aggregating the embedded raw values reproduces the summary table."""
        agg = MetricsAggregator(uneven_runs)
        tables = collect(DashboardGenerator().generate(agg.runs, agg.summarize(), agg.totals()))

        groups = defaultdict(lambda: defaultdict(list))
        for row in tables["resultsTable"]:
            for field, (_, raw) in enumerate(row[4:9]):
                if raw:
                    groups[row[1][0]][field].append(float(raw))

        for row in tables["summaryTable"]:
            algorithm = row[0][0]
            for field, (_, raw) in enumerate(row[2:7]):
                values = groups[algorithm][field]
                if not raw:
                    assert not values
                    continue
                assert sum(values) / len(values) == pytest.approx(float(raw), rel=1e-12)

    def test_escapes_names(self):
        runs = [make_run("gzip-1", "<script>.txt", 1000, 500)]
        agg = MetricsAggregator(runs)
        html_text = DashboardGenerator().generate(agg.runs, agg.summarize(), agg.totals())
        assert "&lt;script&gt;.txt" in html_text

    def test_unverified_note(self, uneven_runs):
        agg = MetricsAggregator(uneven_runs)
        html_text = DashboardGenerator().generate(agg.runs, agg.summarize(), agg.totals())
        assert "1 run(s) failed round-trip verification" in html_text

    def test_themes(self):
        dark = DashboardGenerator(DashboardConfig(theme="dark")).generate([], [], [])
        assert "#1a1a2e" in dark
        with pytest.raises(ValueError):
            DashboardConfig(theme="neon")


class TestChartGenerator:
    def test_generate_all(self, tmp_path, uneven_runs):
        summaries = MetricsAggregator(uneven_runs).summarize()
        charts = ChartGenerator(tmp_path).generate_all(summaries)

        assert [c.path.name for c in charts] == ["ratio_chart.png", "speed_chart.png"]
        for chart in charts:
            assert chart.path.read_bytes().startswith(b"\x89PNG")

    def test_no_data(self, tmp_path):
        assert ChartGenerator(tmp_path).generate_all([]) == []

    def test_family_color(self):
        assert family_color("gzip-9") == "#4bc0c0"
        assert family_color("lz4-1") == "#808080"
