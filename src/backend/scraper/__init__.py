"""
Media discovery in fetched HTML documents.
"""

from .media_extractor import extract_media_urls

__all__ = ["extract_media_urls"]
