from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Iterable, Optional

from src.backend.fs.naming import FOLDER_NAMING_NAME, FOLDER_NAMING_SLUG_TIMESTAMP
from src.shared.media_policy import MediaCategory, effective_limit, parse_category


DEFAULT_FOLDER_NAMING = FOLDER_NAMING_SLUG_TIMESTAMP
DEFAULT_MAX_DOWNLOAD_BYTES = 5242880  # 5 MiB
DEFAULT_OVERSIZED_THRESHOLD_BYTES = 26214400  # 25 MiB

FOLDER_NAMING_CHOICES = (FOLDER_NAMING_SLUG_TIMESTAMP, FOLDER_NAMING_NAME)

logger = logging.getLogger(__name__)


def _pick(data: dict[str, Any], camel: str, snake: str) -> Any:
    return data.get(camel, data.get(snake))


def _as_list(raw: Any) -> list[Any]:
    if raw is None:
        return []
    if isinstance(raw, (list, tuple, set, frozenset)):
        return list(raw)
    return [raw]


def _parse_categories(raw: Any) -> frozenset[MediaCategory]:
    categories: set[MediaCategory] = set()
    for value in _as_list(raw):
        try:
            categories.add(parse_category(value))
        except ValueError:
            logger.warning("Ignoring unknown downloadMedia category: %r", value)
    return frozenset(categories)


def _parse_extensions(raw: Any) -> frozenset[str]:
    extensions = set()
    for value in _as_list(raw):
        ext = str(value).strip().lower().lstrip(".")
        if ext:
            extensions.add(ext)
    return frozenset(extensions)


def _parse_int(raw: Any, default: int) -> int:
    if raw is None or isinstance(raw, bool):
        return default
    try:
        return int(raw)
    except (TypeError, ValueError):
        logger.warning("Invalid byte limit %r, using default %d", raw, default)
        return default


def _parse_folder_naming(raw: Any) -> str:
    if raw is None or raw == "":
        return DEFAULT_FOLDER_NAMING
    value = str(raw).strip()
    if value not in FOLDER_NAMING_CHOICES:
        raise ValueError(
            f"folderNaming must be one of {', '.join(FOLDER_NAMING_CHOICES)}, got {raw!r}"
        )
    return value


@dataclass(frozen=True)
class ScrapeConfig:
    """
    Validated scrape configuration.

    max_download_bytes == 0 means "no per-file cap of its own": the effective
    limit then falls back to oversized_threshold_bytes.
    """
    folder_naming: str = DEFAULT_FOLDER_NAMING
    download_media: frozenset[MediaCategory] = field(default_factory=frozenset)
    max_download_bytes: int = DEFAULT_MAX_DOWNLOAD_BYTES
    oversized_threshold_bytes: int = DEFAULT_OVERSIZED_THRESHOLD_BYTES
    ignore_file_extensions: frozenset[str] = field(default_factory=frozenset)

    @property
    def limit_bytes(self) -> int:
        return effective_limit(self.max_download_bytes, self.oversized_threshold_bytes)

    def to_persist_dict(self) -> dict[str, Any]:
        return {
            "folderNaming": self.folder_naming,
            "downloadMedia": sorted(c.value for c in self.download_media),
            "maxDownloadBytes": self.max_download_bytes,
            "oversizedThresholdBytes": self.oversized_threshold_bytes,
            "ignoreFileExtensions": sorted(self.ignore_file_extensions),
        }

    @classmethod
    def from_persist_dict(cls, data: dict[str, Any]) -> "ScrapeConfig":
        """
        Build a config from a JSON-like dict (camelCase or snake_case keys).

        Unknown keys are ignored and missing keys fall back to defaults.
        Non-numeric limits fall back to defaults, a non-positive
        maxDownloadBytes is normalized to 0 and a non-positive
        oversizedThresholdBytes falls back to its default.

        Raises:
            ValueError: If folderNaming is not a known mode.
        """
        max_download = _parse_int(
            _pick(data, "maxDownloadBytes", "max_download_bytes"), DEFAULT_MAX_DOWNLOAD_BYTES
        )
        threshold = _parse_int(
            _pick(data, "oversizedThresholdBytes", "oversized_threshold_bytes"),
            DEFAULT_OVERSIZED_THRESHOLD_BYTES,
        )

        return cls(
            folder_naming=_parse_folder_naming(_pick(data, "folderNaming", "folder_naming")),
            download_media=_parse_categories(_pick(data, "downloadMedia", "download_media")),
            max_download_bytes=max(max_download, 0),
            oversized_threshold_bytes=threshold if threshold > 0 else DEFAULT_OVERSIZED_THRESHOLD_BYTES,
            ignore_file_extensions=_parse_extensions(
                _pick(data, "ignoreFileExtensions", "ignore_file_extensions")
            ),
        )

    def with_overrides(
        self,
        *,
        folder_naming: Optional[str] = None,
        download_media: Optional[Iterable[str]] = None,
        max_download_bytes: Optional[int] = None,
        ignore_file_extensions: Optional[Iterable[str]] = None,
    ) -> "ScrapeConfig":
        """Return a copy with command-line overrides applied."""
        changes: dict[str, Any] = {}
        if folder_naming is not None:
            changes["folder_naming"] = _parse_folder_naming(folder_naming)
        if download_media is not None:
            changes["download_media"] = _parse_categories(list(download_media))
        if max_download_bytes is not None:
            changes["max_download_bytes"] = max(int(max_download_bytes), 0)
        if ignore_file_extensions is not None:
            changes["ignore_file_extensions"] = self.ignore_file_extensions | _parse_extensions(
                list(ignore_file_extensions)
            )
        return replace(self, **changes)
