"""
Configuration Package

Environment settings and compressor suite definitions.
"""

from .settings import Settings
from .suite import default_compressors, load_suite, select_compressors

__all__ = [
    "Settings",
    "default_compressors",
    "load_suite",
    "select_compressors",
]
