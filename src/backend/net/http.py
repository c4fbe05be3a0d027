"""
Minimal HTTP transport for the scrape pipeline (urllib based).

No retries. An HTTP error status is returned like any other response; a
transport failure surfaces as FetchError and the caller decides
whether it is fatal (root document) or absorbed (single media candidate).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Protocol
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen


DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)

DEFAULT_TIMEOUT_S = 30.0

logger = logging.getLogger(__name__)


class FetchError(RuntimeError):
    """
    Raised when a URL cannot be fetched.

    Attributes:
        url: The requested URL.
        status_code: HTTP status code, if the server answered.
    """

    def __init__(self, message: str, *, url: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


@dataclass(frozen=True)
class HttpResponse:
    url: str
    body: bytes
    content_type: str = ""
    status: int = 200

    @property
    def size(self) -> int:
        return len(self.body)

    def text(self) -> str:
        charset = _charset_from_content_type(self.content_type) or "utf-8"
        try:
            return self.body.decode(charset, errors="replace")
        except LookupError:
            return self.body.decode("utf-8", errors="replace")


class Fetcher(Protocol):
    """What the pipeline needs from an HTTP client."""

    def get(self, url: str) -> HttpResponse: ...

    def head_content_length(self, url: str) -> Optional[int]: ...


def _charset_from_content_type(content_type: str) -> Optional[str]:
    for part in content_type.split(";")[1:]:
        key, _, value = part.strip().partition("=")
        if key.lower() == "charset" and value:
            return value.strip().strip('"')
    return None


def _parse_content_length(raw: Optional[str]) -> Optional[int]:
    if raw is None:
        return None
    try:
        value = int(raw.strip())
    except (TypeError, ValueError):
        return None
    return value if value >= 0 else None


class UrllibFetcher:
    def __init__(
        self,
        *,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        self._timeout_s = timeout_s
        self._headers = {
            "User-Agent": user_agent,
            "Accept": "*/*",
        }

    def get(self, url: str) -> HttpResponse:
        try:
            req = Request(url, headers=self._headers)
            with urlopen(req, timeout=self._timeout_s) as resp:
                body = resp.read()
                return HttpResponse(
                    url=url,
                    body=body,
                    content_type=resp.headers.get("Content-Type", "") or "",
                    status=int(getattr(resp, "status", 200) or 200),
                )
        except HTTPError as exc:
            return self._error_response(url, exc)
        except (URLError, OSError, ValueError) as exc:
            raise FetchError(f"request failed for {url}: {exc}", url=url) from exc

    def head_content_length(self, url: str) -> Optional[int]:
        """Best-effort size preflight; any failure yields None."""
        try:
            req = Request(url, headers=self._headers, method="HEAD")
            with urlopen(req, timeout=self._timeout_s) as resp:
                return _parse_content_length(resp.headers.get("Content-Length"))
        except (HTTPError, URLError, OSError, ValueError) as exc:
            logger.debug("HEAD preflight failed for %s: %s", url, exc)
            return None

    @staticmethod
    def _error_response(url: str, exc: HTTPError) -> HttpResponse:
        # An error status still carries a document; only an unreadable body fails.
        status = int(getattr(exc, "code", 0) or 0)
        try:
            body = exc.read() if exc.fp is not None else b""
        except OSError as read_exc:
            raise FetchError(f"HTTP {status} for {url}: {read_exc}", url=url, status_code=status) from exc
        headers = exc.headers
        content_type = (headers.get("Content-Type", "") if headers is not None else "") or ""
        logger.debug("HTTP %d for %s, keeping %d byte body", status, url, len(body))
        return HttpResponse(url=url, body=body, content_type=content_type, status=status)
