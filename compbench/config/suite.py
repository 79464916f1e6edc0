"""
Compressor Suite Configuration

The reference gzip/bzip2/xz/zstd matrix and loading of custom suites
from YAML.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from compbench.benchmark.models import CompressorConfig


def _stream_tool(name: str, levels: List[int], extension: str) -> CompressorConfig:
    return CompressorConfig(
        name=name,
        levels=levels,
        compress=[name, "-c", "-{level}", "{input}"],
        decompress=[name, "-d", "-c", "{input}"],
        extension=extension,
    )


def default_compressors() -> List[CompressorConfig]:
    """gzip, bzip2, xz and zstd at three levels each."""
    return [
        _stream_tool("gzip", [1, 6, 9], ".gz"),
        _stream_tool("bzip2", [1, 5, 9], ".bz2"),
        _stream_tool("xz", [1, 6, 9], ".xz"),
        _stream_tool("zstd", [1, 10, 19], ".zst"),
    ]


def _parse_compressor(item: Dict[str, Any]) -> CompressorConfig:
    if not isinstance(item, dict):
        raise ValueError(f"Compressor entry must be a mapping, got {item!r}")

    name = item.get("name")
    levels = item.get("levels")
    if not isinstance(levels, list) or not all(isinstance(l, int) for l in levels):
        raise ValueError(f"Compressor '{name}': levels must be a list of integers")

    compress = item.get("compress")
    decompress = item.get("decompress")
    # Without explicit commands assume the usual "<tool> -c -<level>" shape
    if compress is None and decompress is None and name:
        return _stream_tool(name, levels, item.get("extension", ""))

    for key, value in (("compress", compress), ("decompress", decompress)):
        if not isinstance(value, list) or not all(isinstance(a, str) for a in value):
            raise ValueError(f"Compressor '{name}': {key} must be a list of strings")

    return CompressorConfig(
        name=name or "",
        levels=levels,
        compress=compress,
        decompress=decompress,
        extension=item.get("extension", ""),
    )


def load_suite(path: Path) -> List[CompressorConfig]:
    """Load compressor definitions from a YAML file."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path) as f:
        data = yaml.safe_load(f) or {}

    entries = data.get("compressors") if isinstance(data, dict) else None
    if not entries:
        raise ValueError(f"{path} defines no compressors")

    return [_parse_compressor(item) for item in entries]


def select_compressors(
    compressors: Sequence[CompressorConfig],
    names: Optional[Sequence[str]] = None,
) -> List[CompressorConfig]:
    """Keep only the named compressors, in suite order."""
    if not names:
        return list(compressors)

    known = {c.name for c in compressors}
    unknown = [n for n in names if n not in known]
    if unknown:
        raise ValueError(f"Unknown compressor(s): {', '.join(unknown)} (available: {', '.join(sorted(known))})")
    return [c for c in compressors if c.name in names]
