"""
Dashboard Generator

Self-contained HTML dashboard with Chart.js for compression benchmark
results.

Features:
- Per-run results table with search and column sorting
- Average metrics and total size tables
- Ratio, time and throughput charts

The charts do not read the server-side summary. They re-aggregate the raw
values embedded in the results table and compare their averages with the
summary table, flagging any disagreement on the page.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from html import escape
from typing import TYPE_CHECKING, List, Optional, Sequence

if TYPE_CHECKING:
    from ..benchmark.models import AlgorithmSummary, BenchmarkRun

CHART_JS_URL = "https://cdn.jsdelivr.net/npm/chart.js"

# Chart colors per compressor family
FAMILY_COLORS = {
    "gzip": "rgba(75, 192, 192, 1)",
    "bzip2": "rgba(255, 99, 132, 1)",
    "xz": "rgba(54, 162, 235, 1)",
    "zstd": "rgba(255, 159, 64, 1)",
}

THEMES = {
    "light": {"bg": "#f9f9f9", "card_bg": "#ffffff", "text": "#333333", "muted": "#f2f2f2", "border": "#dddddd"},
    "dark": {"bg": "#1a1a2e", "card_bg": "#16213e", "text": "#ecf0f1", "muted": "#0f3460", "border": "#2c3e50"},
}


# =============================================================================
# Configuration
# =============================================================================

@dataclass
class DashboardConfig:
    """Dashboard configuration"""
    title: str = "Compression Benchmark Results"
    theme: str = "light"  # light or dark
    corpus_name: str = "the Silesia corpus"
    chart_height: str = "400px"

    def __post_init__(self):
        if self.theme not in THEMES:
            raise ValueError(f"Unknown theme '{self.theme}', expected one of {sorted(THEMES)}")


def _cell(value: Optional[float], digits: int = 2) -> str:
    """Table cell carrying the unrounded value for client-side aggregation."""
    if value is None:
        return '<td data-value="">N/A</td>'
    return f'<td data-value="{value!r}">{value:.{digits}f}</td>'


# =============================================================================
# Dashboard Generator
# =============================================================================

class DashboardGenerator:
    """Generates the benchmark dashboard HTML."""

    def __init__(self, config: Optional[DashboardConfig] = None):
        self.config = config or DashboardConfig()

    def generate(
        self,
        runs: Sequence[BenchmarkRun],
        summaries: Sequence[AlgorithmSummary],
        totals: Sequence[AlgorithmSummary],
    ) -> str:
        """
        Generate complete dashboard HTML.

        Args:
            runs: Run log; only successful runs are tabulated
            summaries: Per-algorithm averages
            totals: Per-algorithm totals

        Returns:
            Complete HTML page
        """
        successful = [r for r in runs if r.success]
        sections = [
            self._generate_tabs(),
            self._generate_chart_section(),
            self._generate_details_section(successful),
            self._generate_summary_section(summaries),
            self._generate_totals_section(totals),
        ]
        return self._generate_html(sections, successful)

    def _generate_tabs(self) -> str:
        return """
        <div class="tabs">
            <div class="tab active" data-tab="chartTab">Charts</div>
            <div class="tab" data-tab="detailsTab">Detailed Results</div>
            <div class="tab" data-tab="summaryTab">Summary</div>
            <div class="tab" data-tab="totalsTab">Totals</div>
        </div>"""

    def _generate_chart_section(self) -> str:
        return """
        <div id="chartTab" class="tab-content active">
            <h2>Performance Charts</h2>
            <div id="crossCheck" class="summary" style="display: none;"></div>
            <div class="chart-container"><canvas id="ratioChart"></canvas></div>
            <div class="chart-container"><canvas id="timeChart"></canvas></div>
            <div class="chart-container"><canvas id="speedChart"></canvas></div>
        </div>"""

    def _generate_details_section(self, runs: List[BenchmarkRun]) -> str:
        """Per-run table; numeric cells carry raw values in data-value."""
        rows = []
        for r in runs:
            verified = "yes" if r.verified else '<span class="unverified">no</span>'
            rows.append(
                "<tr>"
                f"<td>{escape(r.file)}</td>"
                f"<td>{escape(r.algorithm)}</td>"
                f"{_cell(r.original_kb)}"
                f"{_cell(r.compressed_kb)}"
                f"{_cell(r.ratio)}"
                f"{_cell(r.compression_time, 3)}"
                f"{_cell(r.decompression_time, 3)}"
                f"{_cell(r.compression_speed)}"
                f"{_cell(r.decompression_speed)}"
                f"<td>{verified}</td>"
                "</tr>"
            )

        return f"""
        <div id="detailsTab" class="tab-content">
            <h2>Detailed Results</h2>
            <input type="text" id="tableSearch" placeholder="Search files or algorithms...">
            <table id="resultsTable" class="sortable">
                <thead>
                    <tr>
                        <th>File</th>
                        <th>Algorithm</th>
                        <th>Original Size (KB)</th>
                        <th>Compressed Size (KB)</th>
                        <th>Compression Ratio</th>
                        <th>Compression Time (s)</th>
                        <th>Decompression Time (s)</th>
                        <th>Compression Speed (MB/s)</th>
                        <th>Decompression Speed (MB/s)</th>
                        <th>Verified</th>
                    </tr>
                </thead>
                <tbody>
                    {"".join(rows)}
                </tbody>
            </table>
        </div>"""

    def _generate_summary_section(self, summaries: Sequence[AlgorithmSummary]) -> str:
        rows = "".join(
            f'<tr data-algorithm="{escape(s.algorithm)}">'
            f"<td>{escape(s.algorithm)}</td>"
            f"<td>{s.num_runs}</td>"
            f"{_cell(s.avg_ratio)}"
            f"{_cell(s.avg_compression_time)}"
            f"{_cell(s.avg_decompression_time)}"
            f"{_cell(s.avg_compression_speed)}"
            f"{_cell(s.avg_decompression_speed)}"
            "</tr>"
            for s in summaries
        )
        return f"""
        <div id="summaryTab" class="tab-content">
            <h2>Average Metrics by Algorithm</h2>
            <table id="summaryTable" class="sortable">
                <thead>
                    <tr>
                        <th>Algorithm</th>
                        <th>Runs</th>
                        <th>Avg Compression Ratio</th>
                        <th>Avg Compression Time (s)</th>
                        <th>Avg Decompression Time (s)</th>
                        <th>Avg Compression Speed (MB/s)</th>
                        <th>Avg Decompression Speed (MB/s)</th>
                    </tr>
                </thead>
                <tbody>
                    {rows}
                </tbody>
            </table>
        </div>"""

    def _generate_totals_section(self, totals: Sequence[AlgorithmSummary]) -> str:
        rows = "".join(
            "<tr>"
            f"<td>{escape(t.algorithm)}</td>"
            f"{_cell(t.total_original_kb)}"
            f"{_cell(t.total_compressed_kb)}"
            f"{_cell(t.overall_ratio)}"
            "</tr>"
            for t in totals
        )
        return f"""
        <div id="totalsTab" class="tab-content">
            <h2>Total Sizes by Algorithm</h2>
            <table id="totalsTable" class="sortable">
                <thead>
                    <tr>
                        <th>Algorithm</th>
                        <th>Total Original Size (KB)</th>
                        <th>Total Compressed Size (KB)</th>
                        <th>Overall Compression Ratio</th>
                    </tr>
                </thead>
                <tbody>
                    {rows}
                </tbody>
            </table>
        </div>"""

    def _generate_script(self) -> str:
        """Client-side behaviour: tabs, filtering, sorting, aggregation and charts."""
        return f"""
    <script>
        document.getElementById('currentDate').textContent = new Date().toLocaleString();

        // Tabs
        document.querySelectorAll('.tab').forEach(tab => {{
            tab.addEventListener('click', () => {{
                document.querySelectorAll('.tab, .tab-content').forEach(el => el.classList.remove('active'));
                tab.classList.add('active');
                document.getElementById(tab.dataset.tab).classList.add('active');
            }});
        }});

        // Case-insensitive substring filter on the file and algorithm columns
        function filterTable() {{
            const filter = document.getElementById('tableSearch').value.toUpperCase();
            document.querySelectorAll('#resultsTable tbody tr').forEach(row => {{
                const cells = row.getElementsByTagName('td');
                let visible = false;
                for (let j = 0; j < 2 && j < cells.length; j++) {{
                    if (cells[j].textContent.toUpperCase().indexOf(filter) > -1) {{
                        visible = true;
                        break;
                    }}
                }}
                row.style.display = visible ? '' : 'none';
            }});
        }}
        document.getElementById('tableSearch').addEventListener('keyup', filterTable);

        // Column sorting; numeric cells sort by data-value, N/A last
        function cellKey(cell) {{
            if (cell.dataset.value !== undefined) {{
                return cell.dataset.value === '' ? null : parseFloat(cell.dataset.value);
            }}
            return cell.textContent.toLowerCase();
        }}
        document.querySelectorAll('table.sortable').forEach(table => {{
            table.querySelectorAll('th').forEach((th, idx) => {{
                th.addEventListener('click', () => {{
                    const asc = th.dataset.order !== 'asc';
                    table.querySelectorAll('th').forEach(h => delete h.dataset.order);
                    th.dataset.order = asc ? 'asc' : 'desc';
                    const tbody = table.querySelector('tbody');
                    const rows = Array.from(tbody.querySelectorAll('tr'));
                    rows.sort((a, b) => {{
                        const ka = cellKey(a.children[idx]);
                        const kb = cellKey(b.children[idx]);
                        if (ka === kb) return 0;
                        if (ka === null) return 1;
                        if (kb === null) return -1;
                        return (ka < kb ? -1 : 1) * (asc ? 1 : -1);
                    }});
                    rows.forEach(r => tbody.appendChild(r));
                }});
            }});
        }});

        // Re-aggregate per-algorithm averages from the raw run rows
        const FIELDS = ['ratio', 'compTime', 'decompTime', 'compSpeed', 'decompSpeed'];

        function rawValue(cell) {{
            if (!cell || cell.dataset.value === undefined || cell.dataset.value === '') return null;
            return parseFloat(cell.dataset.value);
        }}

        function extractDataFromTable() {{
            const groups = {{}};
            document.querySelectorAll('#resultsTable tbody tr').forEach(row => {{
                const cells = row.querySelectorAll('td');
                if (cells.length < 9) return;
                const algorithm = cells[1].textContent;
                if (!groups[algorithm]) {{
                    groups[algorithm] = {{}};
                    FIELDS.forEach(f => groups[algorithm][f] = {{sum: 0, count: 0}});
                }}
                FIELDS.forEach((f, i) => {{
                    const v = rawValue(cells[4 + i]);
                    if (v !== null) {{
                        groups[algorithm][f].sum += v;
                        groups[algorithm][f].count++;
                    }}
                }});
            }});
            return Object.keys(groups).map(algorithm => {{
                const item = {{algorithm: algorithm}};
                FIELDS.forEach(f => {{
                    const g = groups[algorithm][f];
                    item[f] = g.count ? g.sum / g.count : null;
                }});
                return item;
            }});
        }}

        // Compare against the server-side summary table
        function crossCheck(avgData) {{
            const mismatches = [];
            const serverRows = {{}};
            document.querySelectorAll('#summaryTable tbody tr').forEach(row => {{
                serverRows[row.dataset.algorithm] = row.querySelectorAll('td');
            }});
            avgData.forEach(item => {{
                const cells = serverRows[item.algorithm];
                if (!cells) {{
                    mismatches.push(item.algorithm + ': missing from summary');
                    return;
                }}
                FIELDS.forEach((f, i) => {{
                    const server = rawValue(cells[2 + i]);
                    const client = item[f];
                    const same = (server === null && client === null) ||
                        (server !== null && client !== null &&
                         Math.abs(server - client) <= 1e-9 * Math.max(1, Math.abs(server)));
                    if (!same) mismatches.push(item.algorithm + ' ' + f + ': ' + client + ' vs ' + server);
                }});
            }});
            if (Object.keys(serverRows).length !== avgData.length) {{
                mismatches.push('summary has ' + Object.keys(serverRows).length +
                                ' algorithms, table has ' + avgData.length);
            }}
            if (mismatches.length) {{
                const box = document.getElementById('crossCheck');
                box.style.display = '';
                box.classList.add('warning');
                box.textContent = 'Chart aggregates disagree with the summary table: ' + mismatches.join('; ');
            }}
        }}

        const avgData = extractDataFromTable();
        crossCheck(avgData);

        if (avgData.length === 0) {{
            const box = document.getElementById('crossCheck');
            box.style.display = '';
            box.textContent = 'No data available for charts';
        }} else {{
            // Order by compressor family, then numeric level
            const algorithms = avgData.map(d => d.algorithm).sort((a, b) => {{
                const [aMethod, aLevel] = a.split('-');
                const [bMethod, bLevel] = b.split('-');
                if (aMethod === bMethod) return parseInt(aLevel) - parseInt(bLevel);
                return aMethod.localeCompare(bMethod);
            }});
            const byAlgo = Object.fromEntries(avgData.map(d => [d.algorithm, d]));

            const colorMap = {FAMILY_COLORS};
            const getColor = (algorithm, alpha) => {{
                const base = colorMap[algorithm.split('-')[0]] || 'rgba(128, 128, 128, 1)';
                return base.replace(/[0-9.]+\\)$/, alpha + ')');
            }};

            function barChart(id, datasets, axisTitle) {{
                new Chart(document.getElementById(id).getContext('2d'), {{
                    type: 'bar',
                    data: {{
                        labels: algorithms,
                        datasets: datasets.map(([label, field, alpha]) => ({{
                            label: label,
                            data: algorithms.map(a => byAlgo[a][field]),
                            backgroundColor: algorithms.map(a => getColor(a, alpha))
                        }}))
                    }},
                    options: {{
                        indexAxis: 'y',
                        maintainAspectRatio: false,
                        scales: {{ x: {{ beginAtZero: true, title: {{ display: true, text: axisTitle }} }} }}
                    }}
                }});
            }}

            barChart('ratioChart',
                     [['Compression Ratio (higher is better)', 'ratio', 0.7]],
                     'Ratio (original/compressed)');
            barChart('timeChart',
                     [['Compression Time (s)', 'compTime', 0.7], ['Decompression Time (s)', 'decompTime', 0.3]],
                     'Time (seconds, lower is better)');
            barChart('speedChart',
                     [['Compression Speed (MB/s)', 'compSpeed', 0.7], ['Decompression Speed (MB/s)', 'decompSpeed', 0.3]],
                     'Speed (MB/s, higher is better)');
        }}
    </script>"""

    def _generate_html(self, sections: List[str], runs: List[BenchmarkRun]) -> str:
        """Generate complete HTML document"""
        theme = THEMES[self.config.theme]
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        sections_html = "\n".join(sections)
        n_files = len({r.file for r in runs})
        n_algos = len({r.algorithm for r in runs})
        n_unverified = sum(1 for r in runs if not r.verified)
        unverified_note = (
            f'<p class="unverified">{n_unverified} run(s) failed round-trip verification.</p>'
            if n_unverified else ""
        )

        return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{escape(self.config.title)}</title>
    <script src="{CHART_JS_URL}"></script>
    <style>
        body {{
            font-family: Arial, sans-serif;
            background-color: {theme['bg']};
            color: {theme['text']};
            max-width: 1200px;
            margin: 0 auto;
            padding: 20px;
        }}

        .container {{
            background-color: {theme['card_bg']};
            border-radius: 8px;
            box-shadow: 0 2px 10px rgba(0,0,0,0.1);
            padding: 20px;
        }}

        table {{
            border-collapse: collapse;
            width: 100%;
            margin-bottom: 20px;
        }}

        th, td {{
            padding: 10px 12px;
            text-align: left;
            border-bottom: 1px solid {theme['border']};
        }}

        th {{
            background-color: {theme['muted']};
            position: sticky;
            top: 0;
            cursor: pointer;
        }}

        th[data-order="asc"]::after {{ content: " \\25B2"; }}
        th[data-order="desc"]::after {{ content: " \\25BC"; }}

        tr:hover {{ background-color: {theme['muted']}; }}

        .chart-container {{
            height: {self.config.chart_height};
            margin-bottom: 30px;
            padding: 15px;
        }}

        .tabs {{
            display: flex;
            border-bottom: 1px solid {theme['border']};
            margin-bottom: 20px;
        }}

        .tab {{
            padding: 10px 20px;
            cursor: pointer;
            margin-right: 5px;
        }}

        .tab.active {{
            border-bottom: 2px solid #4caf50;
            font-weight: bold;
        }}

        .tab-content {{ display: none; }}
        .tab-content.active {{ display: block; }}

        #tableSearch {{
            padding: 10px;
            margin-bottom: 15px;
            width: 300px;
        }}

        .summary {{
            padding: 15px;
            border-left: 4px solid #4caf50;
            margin-bottom: 20px;
        }}

        .summary.warning {{ border-left-color: #e74c3c; }}
        .unverified {{ color: #e74c3c; font-weight: bold; }}
    </style>
</head>
<body>
    <div class="container">
        <h1>{escape(self.config.title)}</h1>
        <p>Report generated: {timestamp} &bull; Opened: <span id="currentDate"></span></p>

        <div class="summary">
            <p><strong>Benchmark Summary:</strong> {len(runs)} successful runs over {n_files} files
            and {n_algos} compressor configurations on {escape(self.config.corpus_name)}.</p>
            {unverified_note}
        </div>

        {sections_html}
    </div>
    {self._generate_script()}
</body>
</html>"""
