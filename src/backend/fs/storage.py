"""
Storage primitives used by the scrape pipeline.

The pipeline only talks to `StorageAdapter`; `LocalStorage` is the concrete
implementation backed by the local filesystem. Scrape output layout:

    <output_root>/<scrape_dir>/index.html
    <output_root>/<scrape_dir>/media/
    <output_root>/<scrape_dir>/manifest.json
    ...
"""

from __future__ import annotations

import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import NamedTuple


MEDIA_DIR_NAME = "media"


class ScrapePaths(NamedTuple):
    """Paths for one scrape's output."""
    root: Path        # <output_root>/<scrape_dir>/
    media: Path       # <output_root>/<scrape_dir>/media/


def get_scrape_paths(output_root: Path, dir_name: str) -> ScrapePaths:
    root = Path(output_root) / dir_name
    return ScrapePaths(root=root, media=root / MEDIA_DIR_NAME)


class StorageAdapter(ABC):
    """
    Narrow storage interface consumed by the pipeline and the dedup index.

    All paths are absolute `Path` objects; implementations must not rely on
    the process working directory.
    """

    @abstractmethod
    def ensure_dir(self, path: Path) -> None:
        """Create a directory (and parents) if it does not exist."""

    @abstractmethod
    def read_text(self, path: Path) -> str:
        """Read a UTF-8 text file. Raises OSError if it cannot be read."""

    @abstractmethod
    def write_text(self, path: Path, text: str) -> None:
        """Write a UTF-8 text file, replacing any existing content."""

    @abstractmethod
    def write_bytes(self, path: Path, data: bytes) -> None:
        """Write a binary file, replacing any existing content."""

    @abstractmethod
    def delete(self, path: Path) -> None:
        """Remove a file. Raises OSError on failure."""

    @abstractmethod
    def list_dirs(self, path: Path) -> list[Path]:
        """List the directories directly under `path` (empty if missing)."""


class LocalStorage(StorageAdapter):
    """Filesystem-backed storage with temp-file + replace writes."""

    def ensure_dir(self, path: Path) -> None:
        Path(path).mkdir(parents=True, exist_ok=True)

    def read_text(self, path: Path) -> str:
        return Path(path).read_text(encoding="utf-8")

    def write_text(self, path: Path, text: str) -> None:
        self._atomic_write_bytes(Path(path), text.encode("utf-8"))

    def write_bytes(self, path: Path, data: bytes) -> None:
        self._atomic_write_bytes(Path(path), data)

    def delete(self, path: Path) -> None:
        Path(path).unlink()

    def list_dirs(self, path: Path) -> list[Path]:
        root = Path(path)
        if not root.is_dir():
            return []
        return sorted(p for p in root.iterdir() if p.is_dir())

    def _atomic_write_bytes(self, final_path: Path, content: bytes) -> None:
        final_path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path_str = tempfile.mkstemp(
            dir=str(final_path.parent),
            prefix=f".{final_path.name}.",
            suffix=".tmp",
        )
        tmp_path = Path(tmp_path_str)
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, final_path)
        finally:
            try:
                tmp_path.unlink()
            except FileNotFoundError:
                pass
