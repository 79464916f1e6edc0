"""
Visualization Package

HTML dashboard and static charts for benchmark results.
"""

from .dashboard import DashboardGenerator, DashboardConfig
from .charts import ChartGenerator, ChartOutput

__all__ = [
    "DashboardGenerator",
    "DashboardConfig",
    "ChartGenerator",
    "ChartOutput",
]
