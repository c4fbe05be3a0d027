"""
Per-candidate media download with size gating and deduplication.

Each candidate goes through, in order:
- ignore-by-extension check
- best-effort HEAD size preflight and size gate
- category download policy
- full download, post-download size gate
- write to media/<index>-<name>, hash, dedupe against the index ("first wins")

Every branch yields a manifest entry except FAILED, which the caller drops.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from src.shared.media_policy import category_of, exceeds_limit, extension_of, should_download

from ..fs.hashing import compute_bytes_hash
from ..fs.naming import generate_media_filename
from ..fs.storage import MEDIA_DIR_NAME, ScrapePaths, StorageAdapter
from ..net.http import Fetcher
from ..pipeline.models import ManifestEntry, OversizedEntry
from ..settings.models import ScrapeConfig
from .dedup import DedupIndex


logger = logging.getLogger(__name__)


class CandidateStatus(str, Enum):
    """Terminal state of a single candidate."""
    IGNORED = "ignored"
    OVERSIZED = "oversized"
    SKIPPED = "skipped"
    DEDUPLICATED = "deduplicated"
    STORED = "stored"
    FAILED = "failed"


@dataclass(frozen=True)
class CandidateResult:
    """Result of processing one candidate."""
    status: CandidateStatus
    url: str

    # Set for every status except FAILED
    entry: Optional[ManifestEntry] = None

    # Set on OVERSIZED
    oversized: Optional[OversizedEntry] = None

    # Relative path recorded for the scrape summary (STORED / DEDUPLICATED)
    recorded_path: Optional[str] = None

    # Set on failure
    error: Optional[str] = None


def relative_to_scrape(path: Path, scrape_root: Path) -> str:
    """Relative, '/'-separated path of `path` as seen from a scrape directory."""
    return Path(os.path.relpath(path, scrape_root)).as_posix()


def _same_path(a: Path, b: Path) -> bool:
    return os.path.normpath(a) == os.path.normpath(b)


class MediaDownloader:
    """
    Applies the download policy to candidates of one scrape.

    Usage:
        downloader = MediaDownloader(storage=storage, fetcher=fetcher, config=config, paths=paths)
        dedup = DedupIndex.build(output_root, storage)

        for index, url in enumerate(candidate_urls, start=1):
            result = downloader.download(url, index, dedup)
            if result.status != CandidateStatus.FAILED:
                manifest.files.append(result.entry)
    """

    def __init__(
        self,
        *,
        storage: StorageAdapter,
        fetcher: Fetcher,
        config: ScrapeConfig,
        paths: ScrapePaths,
    ) -> None:
        self._storage = storage
        self._fetcher = fetcher
        self._config = config
        self._paths = paths
        self._limit = config.limit_bytes

    def download(self, url: str, sequence_index: int, dedup: DedupIndex) -> CandidateResult:
        """
        Process one candidate. Never raises; failures come back as FAILED.

        Args:
            url: Absolute media URL.
            sequence_index: 1-based discovery position, used in the filename.
            dedup: Index to consult and update ("first wins").
        """
        try:
            return self._download_impl(url, sequence_index, dedup)
        except Exception as e:
            return CandidateResult(status=CandidateStatus.FAILED, url=url, error=str(e) or repr(e))

    def _download_impl(self, url: str, sequence_index: int, dedup: DedupIndex) -> CandidateResult:
        extension = extension_of(url)
        category = category_of(extension)

        if extension in self._config.ignore_file_extensions:
            return CandidateResult(
                status=CandidateStatus.IGNORED,
                url=url,
                entry=ManifestEntry(url=url),
            )

        head_size = self._fetcher.head_content_length(url)
        if exceeds_limit(head_size, self._limit):
            return self._oversized(url, head_size, mime=None)

        if not should_download(category, extension, self._config.download_media):
            return CandidateResult(
                status=CandidateStatus.SKIPPED,
                url=url,
                entry=ManifestEntry(url=url, size=head_size, inferred_type=category),
            )

        response = self._fetcher.get(url)
        mime = response.content_type
        if exceeds_limit(response.size, self._limit):
            return self._oversized(url, response.size, mime=mime)

        filename = generate_media_filename(sequence_index, url)
        media_path = self._paths.media / filename
        self._storage.write_bytes(media_path, response.body)

        content_hash = compute_bytes_hash(response.body)

        # An index entry for the path just written is the same copy, not a duplicate.
        existing = dedup.get_existing_file(content_hash)
        if existing is not None and not _same_path(existing, media_path):
            self._discard(media_path)
            existing_rel = relative_to_scrape(existing, self._paths.root)
            return CandidateResult(
                status=CandidateStatus.DEDUPLICATED,
                url=url,
                entry=ManifestEntry(
                    url=url,
                    path=existing_rel,
                    mime=mime,
                    sha256=content_hash,
                    size=response.size,
                    downloaded=True,
                ),
                recorded_path=existing_rel,
            )

        dedup.register(content_hash, media_path)
        own_rel = f"{MEDIA_DIR_NAME}/{filename}"
        return CandidateResult(
            status=CandidateStatus.STORED,
            url=url,
            entry=ManifestEntry(
                url=url,
                path=own_rel,
                mime=mime,
                sha256=content_hash,
                size=response.size,
                downloaded=True,
            ),
            recorded_path=own_rel,
        )

    def _oversized(self, url: str, size: int, *, mime: Optional[str]) -> CandidateResult:
        return CandidateResult(
            status=CandidateStatus.OVERSIZED,
            url=url,
            entry=ManifestEntry(url=url, mime=mime, size=size),
            oversized=OversizedEntry(url=url, size=size),
        )

    def _discard(self, path: Path) -> None:
        try:
            self._storage.delete(path)
        except OSError as exc:
            # The manifest already points at the surviving copy.
            logger.debug("Failed to remove duplicate %s: %s", path, exc)
