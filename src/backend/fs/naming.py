"""
Naming conventions for scrape output.

Directory name (slug-timestamp mode): <slug>-<epochMillis>
    slug = host + path of the source URL, reduced to [A-Za-z0-9-_.]
Media filename: <sequenceIndex>-<sanitizedOriginalFilename>
"""

from __future__ import annotations

import re
import time
from typing import Optional
from urllib.parse import urlparse


# Characters allowed in a slug; everything else becomes '-'
_SLUG_UNSAFE = re.compile(r"[^a-zA-Z0-9\-_.]")
_DASH_RUN = re.compile(r"-+")

# Characters not allowed in media filenames on common filesystems
_FILENAME_UNSAFE = re.compile(r'[\\/:*?"<>|]')

FOLDER_NAMING_SLUG_TIMESTAMP = "slug-timestamp"
FOLDER_NAMING_NAME = "name"


def current_time_millis() -> int:
    return int(time.time() * 1000)


def slugify_url(url: str) -> str:
    """
    Build a filesystem-safe slug from a URL's host and path.

    Examples:
        https://example.com/path/to/page/ -> example.com-path-to-page
    """
    try:
        parsed = urlparse(url)
        host = parsed.hostname or ""
    except ValueError:
        return _SLUG_UNSAFE.sub("-", url)

    if not parsed.scheme or not host:
        return _SLUG_UNSAFE.sub("-", url)

    path = parsed.path.rstrip("/")
    joined = "-".join(part for part in (host, path) if part)
    slug = _SLUG_UNSAFE.sub("-", joined)
    slug = _DASH_RUN.sub("-", slug).strip("-")
    return slug or host


def generate_output_dir_name(
    url: str,
    *,
    folder_naming: str,
    name: Optional[str] = None,
    now_millis: Optional[int] = None,
) -> str:
    """
    Resolve the directory name (relative to the output root) for one scrape.

    In slug-timestamp mode the caller-supplied name is ignored.
    """
    millis = current_time_millis() if now_millis is None else now_millis
    if folder_naming == FOLDER_NAMING_SLUG_TIMESTAMP:
        return f"{slugify_url(url)}-{millis}"
    return name or f"scrape-{millis}"


def sanitize_filename(filename: str) -> str:
    return _FILENAME_UNSAFE.sub("-", filename)


def generate_media_filename(sequence_index: int, url: str) -> str:
    """
    Generate the on-disk name for a downloaded media file.

    Args:
        sequence_index: 1-based position of the candidate in discovery order.
        url: Absolute URL of the media file.

    Returns:
        Filename of the form <index>-<sanitized last path segment>, falling
        back to <index>-file-<index> when the URL path has no last segment.
    """
    last_segment = urlparse(url).path.split("/")[-1]
    original = last_segment or f"file-{sequence_index}"
    return f"{sequence_index}-{sanitize_filename(original)}"
