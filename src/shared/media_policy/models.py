"""
Media categories and the fixed extension table (pure logic layer).
"""

from __future__ import annotations

from enum import Enum
from typing import Mapping


class MediaCategory(str, Enum):
    IMAGES = "images"
    VIDEO = "video"
    AUDIO = "audio"
    FONTS = "fonts"
    DOCUMENTS = "documents"
    TEXT = "text"
    OTHER = "other"


_CATEGORY_EXTENSIONS: dict[MediaCategory, tuple[str, ...]] = {
    MediaCategory.IMAGES: ("jpg", "jpeg", "png", "gif", "webp", "svg", "bmp", "tiff", "ico"),
    MediaCategory.VIDEO: ("mp4", "webm", "mov", "mkv", "ogg", "ogv"),
    MediaCategory.AUDIO: ("mp3", "wav", "m4a", "aac", "flac"),
    MediaCategory.FONTS: ("woff", "woff2", "ttf", "otf", "eot"),
    MediaCategory.DOCUMENTS: ("pdf", "doc", "docx", "xls", "xlsx", "ppt", "pptx"),
    MediaCategory.TEXT: ("css", "js", "map", "json", "xml", "txt", "html", "htm"),
}

EXTENSION_CATEGORIES: Mapping[str, MediaCategory] = {
    ext: category
    for category, extensions in _CATEGORY_EXTENSIONS.items()
    for ext in extensions
}


def parse_category(value: object) -> MediaCategory:
    """
    Parse a category name (case-insensitive).

    Raises:
        ValueError: If value is not a known category name.
    """
    raw = str(value).strip().lower()
    try:
        return MediaCategory(raw)
    except ValueError:
        raise ValueError(f"unknown media category: {value!r}") from None
