"""
Content-hash based deduplication across scrapes.

Implements "first wins" deduplication over an output root:
- At the start of a scrape, every sibling scrape directory's manifest.json
  is read and each stored file is registered under its SHA-256
- Files stored during the current scrape are registered immediately, so
  later candidates with the same content resolve to the first copy
- Directories without a readable manifest are skipped silently
- The directory being written is left out

The index is a point-in-time snapshot; it never writes manifests back.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from ..fs.hashing import is_valid_hash
from ..fs.storage import StorageAdapter


MANIFEST_FILENAME = "manifest.json"

logger = logging.getLogger(__name__)


def _iter_manifest_files(manifest: Any) -> list[dict[str, Any]]:
    if not isinstance(manifest, dict):
        return []
    files = manifest.get("files")
    if not isinstance(files, list):
        return []
    return [f for f in files if isinstance(f, dict)]


@dataclass
class DedupIndex:
    """
    In-memory mapping from content hash to the absolute path of a stored file.

    Usage:
        index = DedupIndex.build(output_root, storage)

        existing = index.get_existing_file(content_hash)
        if existing is None:
            index.register(content_hash, new_file_path)
    """

    # Hash -> absolute path of the first stored file with this hash
    _hash_to_file: dict[str, Path] = field(default_factory=dict)

    @classmethod
    def build(
        cls,
        output_root: Path,
        storage: StorageAdapter,
        *,
        exclude: Optional[Path] = None,
    ) -> "DedupIndex":
        index = cls()
        index.load_from_output_root(output_root, storage, exclude=exclude)
        return index

    def __len__(self) -> int:
        return len(self._hash_to_file)

    @property
    def known_hashes(self) -> frozenset[str]:
        """Get the set of all known content hashes."""
        return frozenset(self._hash_to_file.keys())

    def is_known(self, content_hash: str) -> bool:
        return content_hash.lower() in self._hash_to_file

    def register(self, content_hash: str, file_path: Path) -> None:
        """
        Register a content hash. The first registered path for a hash wins.

        Args:
            content_hash: The SHA-256 hash of the content.
            file_path: Absolute path to the file with this content.
        """
        normalized_hash = content_hash.lower()
        if normalized_hash not in self._hash_to_file:
            self._hash_to_file[normalized_hash] = Path(file_path)

    def get_existing_file(self, content_hash: str) -> Optional[Path]:
        """
        Get the path to an existing file with the given hash.

        Returns:
            Absolute path to the existing file, or None if not found.
        """
        return self._hash_to_file.get(content_hash.lower())

    def load_manifest(self, scrape_dir: Path, manifest: Any) -> int:
        """
        Register every stored file listed in one parsed manifest.

        Args:
            scrape_dir: Absolute path of the scrape directory owning the manifest.
            manifest: Parsed manifest.json content.

        Returns:
            Number of entries registered (including already-known hashes).
        """
        loaded = 0
        for entry in _iter_manifest_files(manifest):
            sha = entry.get("sha256")
            rel_path = entry.get("path")
            if not is_valid_hash(sha) or not rel_path or not isinstance(rel_path, str):
                continue
            absolute = Path(os.path.normpath(Path(scrape_dir) / rel_path))
            self.register(sha, absolute)
            loaded += 1
        return loaded

    def load_from_output_root(
        self,
        output_root: Path,
        storage: StorageAdapter,
        *,
        exclude: Optional[Path] = None,
    ) -> int:
        """
        Scan every directory directly under output_root for a manifest.

        Args:
            exclude: Scrape directory to leave out, typically the one being
                rewritten. Its old manifest is replaced at the end of the run.

        Returns:
            Number of manifest entries loaded.
        """
        loaded = 0
        excluded = Path(os.path.normpath(exclude)) if exclude is not None else None
        for scrape_dir in storage.list_dirs(Path(output_root)):
            if excluded is not None and Path(os.path.normpath(scrape_dir)) == excluded:
                continue
            manifest_path = scrape_dir / MANIFEST_FILENAME
            try:
                manifest = json.loads(storage.read_text(manifest_path))
            except (OSError, ValueError) as exc:
                # In-progress, foreign or corrupted output.
                logger.debug("Skipping %s for dedup: %s", scrape_dir, exc)
                continue
            loaded += self.load_manifest(scrape_dir, manifest)
        return loaded
