"""
Round-trip integrity checks.

Compares content digests of an original file and its decompressed copy.
"""

import hashlib
import logging
from pathlib import Path
from typing import Optional

CHUNK_SIZE = 1024 * 1024


def file_digest(path: Path, algorithm: str = "sha256") -> str:
    """Hex digest of a file, read in chunks."""
    h = hashlib.new(algorithm)
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(CHUNK_SIZE), b""):
            h.update(chunk)
    return h.hexdigest()


class IntegrityVerifier:
    """Verifies that decompression reproduced the original bytes."""

    def __init__(self, algorithm: str = "sha256"):
        # Fail early on an unknown digest name
        hashlib.new(algorithm)
        self.algorithm = algorithm
        self.logger = logging.getLogger(__name__)

    def verify(self, original: Path, decompressed: Path, label: Optional[str] = None) -> bool:
        """Return True when both files have the same digest.

        A mismatch is reported as a warning and never raises.
        """
        tag = f" with {label}" if label else ""
        if not decompressed.is_file():
            self.logger.warning(
                f"Decompression verification failed for {original.name}{tag}: "
                f"{decompressed} was not produced"
            )
            return False

        expected = file_digest(original, self.algorithm)
        actual = file_digest(decompressed, self.algorithm)
        if expected != actual:
            self.logger.warning(
                f"Decompression verification failed for {original.name}{tag}: "
                f"{self.algorithm} {actual} != {expected}"
            )
            return False
        return True
