from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional, Union
from urllib.parse import urljoin

from src.backend.downloader.dedup import MANIFEST_FILENAME, DedupIndex
from src.backend.downloader.downloader import CandidateStatus, MediaDownloader
from src.backend.fs.naming import generate_output_dir_name
from src.backend.fs.storage import LocalStorage, ScrapePaths, StorageAdapter, get_scrape_paths
from src.backend.net.http import Fetcher, FetchError, UrllibFetcher
from src.backend.pipeline.models import (
    Manifest,
    ManifestEntry,
    OversizedEntry,
    ScrapeRequest,
    ScrapeResult,
    utc_now_iso,
)
from src.backend.scraper.media_extractor import extract_media_urls
from src.backend.settings.models import ScrapeConfig


DEFAULT_OUTPUT_DIR_NAME = "output"
DEFAULT_ROOT_CONTENT_TYPE = "text/html"

INDEX_FILENAME = "index.html"
METADATA_FILENAME = "metadata.json"
OVERSIZED_FILENAME = "oversized_content.json"
SUMMARY_FILENAME = "summary.scrape"

logger = logging.getLogger(__name__)


class ScrapeError(RuntimeError):
    pass


class ScrapeFetchError(ScrapeError):
    """The root document could not be fetched; nothing but a summary was written."""

    def __init__(self, message: str, *, url: str, output_directory: Path) -> None:
        super().__init__(message)
        self.url = url
        self.output_directory = output_directory


@dataclass
class _CandidateFold:
    """
    State carried left to right over the ordered candidate list.

    Only `_fold_candidate` mutates it, one candidate at a time.
    """
    dedup: DedupIndex
    index: int = 0
    entries: list[ManifestEntry] = field(default_factory=list)
    oversized: list[OversizedEntry] = field(default_factory=list)
    recorded_paths: list[str] = field(default_factory=list)


def _fold_candidate(
    fold: _CandidateFold,
    reference: str,
    *,
    base_url: str,
    downloader: MediaDownloader,
) -> _CandidateFold:
    fold.index += 1

    try:
        url = urljoin(base_url, reference)
    except ValueError as exc:
        logger.warning("media fetch error %s: invalid URL (%s)", reference, exc)
        return fold

    result = downloader.download(url, fold.index, fold.dedup)
    if result.status == CandidateStatus.FAILED or result.entry is None:
        logger.warning("media fetch error %s: %s", url, result.error)
        return fold

    logger.debug("candidate %d %s -> %s", fold.index, url, result.status.value)
    fold.entries.append(result.entry)
    if result.oversized is not None:
        fold.oversized.append(result.oversized)
    if result.recorded_path is not None:
        fold.recorded_paths.append(result.recorded_path)
    return fold


def _dump_json(payload: Any) -> str:
    return json.dumps(payload, ensure_ascii=False, indent=2)


def _format_summary(url: str, elapsed_s: float, files: list[str], *, error: Optional[str] = None) -> str:
    lines = [
        f"Source: {url}",
        f"Runtime: {elapsed_s:.3f}s",
    ]
    if error is not None:
        lines.append(f"Error: {error}")
    lines.append("Files:")
    lines.extend(f" - {f}" for f in files)
    return "\n".join(lines) + "\n"


def _write_error_summary(
    storage: StorageAdapter,
    paths: ScrapePaths,
    url: str,
    elapsed_s: float,
    error: str,
) -> None:
    try:
        storage.ensure_dir(paths.root)
        storage.write_text(paths.root / SUMMARY_FILENAME, _format_summary(url, elapsed_s, [], error=error))
    except OSError as exc:
        logger.warning("Failed to write error summary to %s: %s", paths.root, exc)


def run_scrape(
    request: ScrapeRequest,
    *,
    storage: Optional[StorageAdapter] = None,
    fetcher: Optional[Fetcher] = None,
) -> ScrapeResult:
    """
    Single-page pipeline: fetch -> discover -> classify -> gate -> dedupe -> persist.

    Note:
    - Candidates are processed sequentially in discovery order.
    - Per-candidate failures are logged and dropped from the manifest.
    - Only a root document failure is fatal (ScrapeFetchError).
    """
    storage = storage or LocalStorage()
    fetcher = fetcher or UrllibFetcher()
    config = request.config
    started = time.monotonic()

    output_root = Path(request.output_root).resolve()
    dir_name = generate_output_dir_name(
        request.url,
        folder_naming=config.folder_naming,
        name=request.name,
    )
    paths = get_scrape_paths(output_root, dir_name)
    storage.ensure_dir(paths.root)

    logger.info("Scraping %s into %s", request.url, paths.root)

    try:
        response = fetcher.get(request.url)
    except FetchError as exc:
        elapsed = time.monotonic() - started
        _write_error_summary(storage, paths, request.url, elapsed, str(exc))
        raise ScrapeFetchError(
            f"failed to fetch {request.url}: {exc}",
            url=request.url,
            output_directory=paths.root,
        ) from exc

    html = response.text()
    content_type = response.content_type or DEFAULT_ROOT_CONTENT_TYPE

    files_written: list[str] = []
    storage.write_text(paths.root / INDEX_FILENAME, html)
    files_written.append(INDEX_FILENAME)

    storage.ensure_dir(paths.media)
    manifest = Manifest(source=request.url, fetched_at=utc_now_iso())

    # Snapshot of other scrapes, taken once; this directory's old manifest is stale.
    dedup = DedupIndex.build(output_root, storage, exclude=paths.root)
    logger.debug("Dedup index loaded with %d hashes", len(dedup))

    downloader = MediaDownloader(storage=storage, fetcher=fetcher, config=config, paths=paths)
    fold = _CandidateFold(dedup=dedup)
    for reference in extract_media_urls(html):
        fold = _fold_candidate(fold, reference, base_url=request.url, downloader=downloader)

    manifest.files.extend(fold.entries)
    files_written.extend(fold.recorded_paths)

    metadata = {"source": request.url, "fetchedAt": utc_now_iso(), "contentType": content_type}
    storage.write_text(paths.root / METADATA_FILENAME, _dump_json(metadata))
    files_written.append(METADATA_FILENAME)

    storage.write_text(paths.root / MANIFEST_FILENAME, _dump_json(manifest.to_dict()))
    files_written.append(MANIFEST_FILENAME)

    if fold.oversized:
        storage.write_text(
            paths.root / OVERSIZED_FILENAME,
            _dump_json([entry.to_dict() for entry in fold.oversized]),
        )
        files_written.append(OVERSIZED_FILENAME)

    elapsed = time.monotonic() - started
    storage.write_text(paths.root / SUMMARY_FILENAME, _format_summary(request.url, elapsed, files_written))

    logger.info(
        "Scrape of %s finished in %.2fs: %d candidates, %d entries, %d oversized",
        request.url,
        elapsed,
        fold.index,
        len(manifest.files),
        len(fold.oversized),
    )
    return ScrapeResult(output_directory=paths.root, files_written=files_written, manifest=manifest)


def scrape(
    url: str,
    name: Optional[str] = None,
    output_root: Optional[Union[str, Path]] = None,
    config: Optional[Union[ScrapeConfig, Mapping[str, Any]]] = None,
    *,
    storage: Optional[StorageAdapter] = None,
    fetcher: Optional[Fetcher] = None,
) -> ScrapeResult:
    """
    Convenience entry point.

    Args:
        url: Page to scrape.
        name: Output directory name (only used with folderNaming "name").
        output_root: Root for all scrape outputs, default ./output.
        config: ScrapeConfig, or a raw dict validated with ScrapeConfig.from_persist_dict.
    """
    if config is None:
        scrape_config = ScrapeConfig()
    elif isinstance(config, ScrapeConfig):
        scrape_config = config
    else:
        scrape_config = ScrapeConfig.from_persist_dict(dict(config))

    root = Path(output_root) if output_root is not None else Path.cwd() / DEFAULT_OUTPUT_DIR_NAME
    request = ScrapeRequest(url=url, name=name, output_root=root, config=scrape_config)
    return run_scrape(request, storage=storage, fetcher=fetcher)
