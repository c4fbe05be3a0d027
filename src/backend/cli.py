"""
Command line entry point for single-page scrapes.

Example:
  python -m src.backend.cli --url https://example.com/ --download-media images,documents

Config is read from ./config.json (fallback ./config.example.json) unless
--config is given. Without --download-media, only text-like and extensionless
assets are downloaded; every other candidate is cataloged in the manifest.

Exit codes: 0 success, 1 usage error, 2 scrape failure.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from src.backend.pipeline.scrape_runner import DEFAULT_OUTPUT_DIR_NAME, ScrapeError, run_scrape
from src.backend.pipeline.models import ScrapeRequest
from src.backend.settings.models import FOLDER_NAMING_CHOICES, ScrapeConfig
from src.backend.settings.store import ConfigStore


DEFAULT_CONFIG_FILENAME = "config.json"
EXAMPLE_CONFIG_FILENAME = "config.example.json"

EXIT_OK = 0
EXIT_USAGE = 1
EXIT_FAILED = 2


def _parse_download_media(raw: Optional[str]) -> Optional[list[str]]:
    if raw is None:
        return None
    if raw.strip().lower() == "none":
        return []
    return [part.strip() for part in raw.split(",") if part.strip()]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="page-media-scraper",
        description="Fetch one page, catalog its media and download what the policy allows.",
    )
    parser.add_argument("--url", "-u", help="The URL to scrape")
    parser.add_argument(
        "--name",
        "-n",
        help="Output folder name (used when folderNaming is 'name'; default scrape-<ts>)",
    )
    parser.add_argument(
        "--output",
        "-o",
        help=f"Output root directory (default ./{DEFAULT_OUTPUT_DIR_NAME})",
    )
    parser.add_argument(
        "--config",
        "-c",
        help=f"Config JSON file (default ./{DEFAULT_CONFIG_FILENAME}, fallback ./{EXAMPLE_CONFIG_FILENAME})",
    )
    parser.add_argument(
        "--download-media",
        metavar="CSV|none",
        help="Override downloadMedia (comma-separated categories or 'none')",
    )
    parser.add_argument(
        "--max-download-bytes",
        type=int,
        metavar="N",
        help="Override maxDownloadBytes (per-file limit in bytes)",
    )
    parser.add_argument(
        "--folder-naming",
        choices=FOLDER_NAMING_CHOICES,
        help="Override folderNaming",
    )
    parser.add_argument(
        "--ignore-ext",
        action="append",
        metavar="EXT",
        help="Extension to ignore (repeatable, added to ignoreFileExtensions)",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    return parser


def load_config(args: argparse.Namespace, *, cwd: Path) -> ScrapeConfig:
    if args.config:
        store = ConfigStore(path=Path(args.config))
    else:
        store = ConfigStore(path=cwd / DEFAULT_CONFIG_FILENAME, fallback_path=cwd / EXAMPLE_CONFIG_FILENAME)

    return store.load().with_overrides(
        folder_naming=args.folder_naming,
        download_media=_parse_download_media(args.download_media),
        max_download_bytes=args.max_download_bytes,
        ignore_file_extensions=args.ignore_ext,
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if not args.url:
        print("Missing required --url. Run --help for usage.", file=sys.stderr)
        return EXIT_USAGE

    cwd = Path.cwd()
    try:
        config = load_config(args, cwd=cwd)
    except ValueError as exc:
        print(f"Invalid config: {exc}", file=sys.stderr)
        return EXIT_USAGE

    output_root = Path(args.output) if args.output else cwd / DEFAULT_OUTPUT_DIR_NAME
    request = ScrapeRequest(url=args.url, name=args.name, output_root=output_root, config=config)

    print(f"[cli] starting scrape for {args.url}")
    try:
        result = run_scrape(request)
    except (ScrapeError, OSError) as exc:
        print(f"Scrape failed: {exc}", file=sys.stderr)
        return EXIT_FAILED

    print(f"Scrape complete. Output: {result.output_directory}")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
