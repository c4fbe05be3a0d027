"""
Media downloader with deduplication support.

Provides:
- Content-hash based deduplication across scrapes (dedup.py)
- Per-candidate download policy, naming and storage (downloader.py)
"""

from .dedup import DedupIndex, MANIFEST_FILENAME
from .downloader import CandidateResult, CandidateStatus, MediaDownloader

__all__ = [
    "DedupIndex",
    "MANIFEST_FILENAME",
    "CandidateResult",
    "CandidateStatus",
    "MediaDownloader",
]
