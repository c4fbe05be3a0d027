from __future__ import annotations

import re
from typing import Iterable


# <img|audio|video|source ... src=...>; greedy, so the last src= in a tag wins
_SRC_PATTERN = re.compile(
    r"""<(?:img|audio|video|source)[^>]+src=["']?([^"' >]+)""",
    re.IGNORECASE,
)

# <link ... href=...>, always considered (stylesheets, preloads, icons)
_LINK_PATTERN = re.compile(
    r"""<link[^>]+href=["']?([^"' >]+)[^>]*>""",
    re.IGNORECASE,
)

# <a ... href=...> (also <area>), only kept when it points at a downloadable document
_ANCHOR_PATTERN = re.compile(
    r"""<a[^>]+href=["']?([^"' >]+)[^>]*>""",
    re.IGNORECASE,
)

_DOCUMENT_HREF = re.compile(r"\.(?:pdf|docx?|xlsx?|zip|tar|gz)$", re.IGNORECASE)


def _iter_matches(pattern: re.Pattern[str], html: str) -> Iterable[str]:
    for match in pattern.finditer(html):
        value = match.group(1)
        if value:
            yield value


def extract_media_urls(html: str) -> list[str]:
    """
    Find media references in an HTML document.

    Matching is pattern based and permissive: tag nesting and malformed markup
    are not validated, and a run of unclosed tags is read as one tag. Results
    keep first-discovery order (src attributes, then link hrefs, then
    qualifying anchor hrefs) with duplicates removed.
    """
    urls: list[str] = []
    urls.extend(_iter_matches(_SRC_PATTERN, html))
    urls.extend(_iter_matches(_LINK_PATTERN, html))
    urls.extend(
        href for href in _iter_matches(_ANCHOR_PATTERN, html) if _DOCUMENT_HREF.search(href)
    )
    return list(dict.fromkeys(urls))
