"""
Network utilities: the urllib-based HTTP transport used by the scraper.
"""

from .http import (
    DEFAULT_TIMEOUT_S,
    DEFAULT_USER_AGENT,
    FetchError,
    Fetcher,
    HttpResponse,
    UrllibFetcher,
)

__all__ = [
    "DEFAULT_TIMEOUT_S",
    "DEFAULT_USER_AGENT",
    "FetchError",
    "Fetcher",
    "HttpResponse",
    "UrllibFetcher",
]
