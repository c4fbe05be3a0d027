"""
Classification and download policy for discovered media (pure logic).

Rules:
- Text-like assets (stylesheets, scripts, sub-documents) are always fetched
- Extensionless references are assumed page-like and always fetched
- Everything else is fetched only if its category is configured
- A known size above the effective limit always wins over the category rule
"""

from __future__ import annotations

from typing import AbstractSet, Optional
from urllib.parse import urlparse

from .models import EXTENSION_CATEGORIES, MediaCategory


def extension_of(url: str) -> str:
    """
    Lowercased text after the last '.' of the URL's path component.

    Returns "" for unparsable or non-absolute URLs and for paths without '.'.
    """
    try:
        parsed = urlparse(url)
    except ValueError:
        return ""
    if not parsed.scheme or not parsed.netloc:
        return ""

    path = parsed.path
    if "." not in path:
        return ""
    return path.rsplit(".", 1)[-1].lower()


def category_of(extension: str) -> MediaCategory:
    return EXTENSION_CATEGORIES.get((extension or "").lower(), MediaCategory.OTHER)


def should_download(
    category: MediaCategory,
    extension: str,
    configured_categories: AbstractSet[MediaCategory],
) -> bool:
    if category == MediaCategory.TEXT:
        return True
    if category == MediaCategory.OTHER and extension == "":
        return True
    return category in configured_categories


def effective_limit(max_download_bytes: int, oversized_threshold_bytes: int) -> int:
    """Per-file byte limit: max_download_bytes when positive, else the threshold."""
    return max_download_bytes if max_download_bytes > 0 else oversized_threshold_bytes


def exceeds_limit(size: Optional[int], limit: int) -> bool:
    """
    Single size gate shared by the HEAD preflight and the post-download check.

    Unknown sizes never exceed the limit.
    """
    return size is not None and size > limit
