from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from src.backend.settings.models import ScrapeConfig
from src.shared.media_policy import MediaCategory


def utc_now_iso() -> str:
    return format_iso_datetime_z(datetime.now(timezone.utc))


def format_iso_datetime_z(dt: datetime) -> str:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class ScrapeRequest:
    url: str
    output_root: Path
    config: ScrapeConfig = field(default_factory=ScrapeConfig)
    name: Optional[str] = None


@dataclass(frozen=True)
class ManifestEntry:
    """
    Disposition of one discovered media candidate.

    path is None when no file was materialized (ignored, oversized, skipped).
    A path that leaves the scrape directory points at a deduplicated copy
    stored by an earlier scrape.
    """
    url: str
    path: Optional[str] = None
    mime: Optional[str] = None
    sha256: Optional[str] = None
    size: Optional[int] = None
    downloaded: bool = False
    inferred_type: Optional[MediaCategory] = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "path": self.path,
            "url": self.url,
            "mime": self.mime,
            "sha256": self.sha256,
            "size": self.size,
            "downloaded": self.downloaded,
        }
        if self.inferred_type is not None:
            data["inferredType"] = self.inferred_type.value
        return data


@dataclass(frozen=True)
class OversizedEntry:
    url: str
    size: int

    def to_dict(self) -> dict[str, Any]:
        return {"url": self.url, "size": self.size}


@dataclass
class Manifest:
    source: str
    fetched_at: str
    files: list[ManifestEntry] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source,
            "fetchedAt": self.fetched_at,
            "files": [entry.to_dict() for entry in self.files],
        }


@dataclass(frozen=True)
class ScrapeResult:
    output_directory: Path
    files_written: list[str]
    manifest: Manifest
