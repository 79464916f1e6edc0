"""
Static Charts

Publication-ready PNG charts of per-algorithm averages, rendered with
matplotlib for use outside the browser dashboard.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional, Sequence

import matplotlib
matplotlib.use('Agg')  # Non-interactive backend
import matplotlib.pyplot as plt
import numpy as np

if TYPE_CHECKING:
    from ..benchmark.models import AlgorithmSummary

# Same palette as the dashboard
COLORS = {
    "gzip": "#4bc0c0",
    "bzip2": "#ff6384",
    "xz": "#36a2eb",
    "zstd": "#ff9f40",
    "other": "#808080",
}


def family_color(algorithm: str) -> str:
    return COLORS.get(algorithm.split("-")[0], COLORS["other"])


@dataclass
class ChartOutput:
    title: str
    path: Path
    description: str = ""


class ChartGenerator:
    def __init__(self, output_dir: Path):
        self.output_dir = Path(output_dir)
        self.logger = logging.getLogger(__name__)
        plt.style.use('ggplot')
        plt.rc('font', size=10)
        plt.rc('axes', titlesize=12)

    def _save(self, fig, name: str) -> Path:
        path = self.output_dir / name
        fig.savefig(path, format='png', bbox_inches='tight', dpi=100)
        plt.close(fig)
        return path

    def plot_ratios(self, summaries: Sequence[AlgorithmSummary]) -> Optional[ChartOutput]:
        """Horizontal bars of average and overall ratio per configuration."""
        rows = [s for s in summaries if s.avg_ratio is not None]
        if not rows:
            return None

        labels = [s.algorithm for s in rows]
        y = np.arange(len(labels))
        height = 0.4

        fig, ax = plt.subplots(figsize=(8, max(3, 0.4 * len(labels))))
        ax.barh(y - height / 2, [s.avg_ratio for s in rows], height,
                color=[family_color(l) for l in labels], label="Average ratio")
        ax.barh(y + height / 2, [s.overall_ratio or 0.0 for s in rows], height,
                color=[family_color(l) for l in labels], alpha=0.5, label="Overall ratio")

        ax.set_yticks(y)
        ax.set_yticklabels(labels)
        ax.invert_yaxis()
        ax.set_xlabel("Ratio (original/compressed)")
        ax.set_title("Compression Ratio by Algorithm")
        ax.legend()

        path = self._save(fig, "ratio_chart.png")
        return ChartOutput("Compression Ratio", path, "Average and overall ratio, higher is better.")

    def plot_speeds(self, summaries: Sequence[AlgorithmSummary]) -> Optional[ChartOutput]:
        """Grouped bars of average compression and decompression throughput."""
        rows = [s for s in summaries if s.avg_compression_speed is not None]
        if not rows:
            return None

        labels = [s.algorithm for s in rows]
        x = np.arange(len(labels))
        width = 0.4

        fig, ax = plt.subplots(figsize=(max(6, 0.6 * len(labels)), 5))
        ax.bar(x - width / 2, [s.avg_compression_speed for s in rows], width, label="Compression")
        ax.bar(x + width / 2, [s.avg_decompression_speed or 0.0 for s in rows], width, label="Decompression")

        ax.set_xticks(x)
        ax.set_xticklabels(labels, rotation=30, ha='right')
        ax.set_ylabel("MB/s")
        ax.set_title("Throughput by Algorithm")
        ax.legend()

        path = self._save(fig, "speed_chart.png")
        return ChartOutput("Throughput", path, "Average compression and decompression speed.")

    def generate_all(self, summaries: Sequence[AlgorithmSummary]) -> List[ChartOutput]:
        charts = [self.plot_ratios(summaries), self.plot_speeds(summaries)]
        return [c for c in charts if c is not None]
