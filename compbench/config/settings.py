"""
Application Settings

Environment configuration for the benchmark harness.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from compbench.benchmark.corpus import SILESIA_URL


@dataclass
class Settings:
    """Application settings from environment."""

    corpus_dir: Path = Path("data/silesia")
    corpus_url: Optional[str] = SILESIA_URL
    work_dir: Path = Path("data")
    output_dir: Path = Path("results")
    digest: str = "sha256"

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from environment variables."""
        return cls(
            corpus_dir=Path(os.getenv("COMPBENCH_CORPUS_DIR", "data/silesia")),
            corpus_url=os.getenv("COMPBENCH_CORPUS_URL", SILESIA_URL) or None,
            work_dir=Path(os.getenv("COMPBENCH_WORK_DIR", "data")),
            output_dir=Path(os.getenv("COMPBENCH_OUTPUT_DIR", "results")),
            digest=os.getenv("COMPBENCH_DIGEST", "sha256"),
        )
