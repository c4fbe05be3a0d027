"""
File system utilities for scrape output.

Provides:
- Storage adapter interface and local implementation (storage.py)
- Directory and media file naming conventions (naming.py)
- Content hashing for deduplication (hashing.py)
"""

from .storage import LocalStorage, ScrapePaths, StorageAdapter, get_scrape_paths
from .naming import generate_media_filename, generate_output_dir_name, slugify_url
from .hashing import compute_bytes_hash, is_valid_hash

__all__ = [
    "LocalStorage",
    "ScrapePaths",
    "StorageAdapter",
    "get_scrape_paths",
    "generate_media_filename",
    "generate_output_dir_name",
    "slugify_url",
    "compute_bytes_hash",
    "is_valid_hash",
]
