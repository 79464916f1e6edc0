"""
Corpus Provider

Fetches the reference corpus once and lists the files to benchmark.
"""

import logging
import shutil
import urllib.request
import zipfile
from pathlib import Path
from typing import List, Optional

SILESIA_URL = "http://sun.aei.polsl.pl/~sdeor/corpus/silesia.zip"


class CorpusProvider:
    """A directory of regular files, optionally populated from a zip archive."""

    def __init__(self, directory: Path, url: Optional[str] = None):
        self.directory = Path(directory)
        self.url = url
        self.logger = logging.getLogger(__name__)

    def is_populated(self) -> bool:
        return self.directory.is_dir() and any(self.directory.iterdir())

    def fetch(self) -> Path:
        """Download and extract the archive unless the directory already has content."""
        if self.is_populated():
            self.logger.info(f"Corpus already present in {self.directory}")
            return self.directory
        if not self.url:
            raise FileNotFoundError(f"Corpus directory {self.directory} is empty and no URL was given")

        self.directory.mkdir(parents=True, exist_ok=True)
        archive = self.directory / "corpus.zip"

        self.logger.info(f"Downloading corpus from {self.url}")
        try:
            with urllib.request.urlopen(self.url) as response, open(archive, "wb") as out:
                shutil.copyfileobj(response, out)
        except OSError as e:
            archive.unlink(missing_ok=True)
            raise RuntimeError(f"Corpus download failed: {e}") from e

        try:
            with zipfile.ZipFile(archive) as zf:
                zf.extractall(self.directory)
        except zipfile.BadZipFile as e:
            raise RuntimeError(f"Corpus archive is not a zip file: {e}") from e
        finally:
            archive.unlink(missing_ok=True)

        return self.directory

    def files(self) -> List[Path]:
        """Every non-empty regular file below the corpus directory, sorted."""
        if not self.directory.is_dir():
            raise FileNotFoundError(f"Corpus directory not found: {self.directory}")

        found = sorted(
            p for p in self.directory.rglob("*")
            if p.is_file() and p.stat().st_size > 0
        )
        if not found:
            raise RuntimeError(f"Corpus directory {self.directory} contains no non-empty files")
        return found
