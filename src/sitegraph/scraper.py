"""
HTML parsing and outbound link extraction.
"""
from __future__ import annotations

import logging
from typing import Iterator, Optional, Union
from urllib.parse import urlparse

from bs4 import BeautifulSoup, ParserRejectedMarkup, SoupStrainer

from sitegraph.models import PageLink
from sitegraph.urls import is_crawlable_href, is_in_scope, resolve

logger = logging.getLogger(__name__)

HTML_CONTENT_TYPE = "text/html"

# SoupStrainer to parse only <a> tags (faster link extraction)
LINK_STRAINER = SoupStrainer("a", href=True)


def is_html(content_type: Optional[str]) -> bool:
    """Check if a Content-Type header denotes an HTML document."""
    return HTML_CONTENT_TYPE in (content_type or "").lower()


def parse_document(body: Union[bytes, str]) -> Optional[BeautifulSoup]:
    """Parse a response body, returning None if the markup is rejected."""
    try:
        return BeautifulSoup(body, "lxml", parse_only=LINK_STRAINER)
    except (ParserRejectedMarkup, UnicodeDecodeError) as exc:
        logger.warning("Could not parse HTML document: %s", exc)
        return None


def scrape_links(document: BeautifulSoup, root_origin: str) -> Iterator[PageLink]:
    """
    Yield the in-domain outbound links of a document, in document order.

    Anchors without href, non-web hrefs and links to other hosts are skipped.
    """
    root_host = urlparse(root_origin).hostname or ""

    for anchor in document.find_all("a"):
        href = anchor.get("href")
        if not href:
            continue
        href = href.strip()
        if not is_crawlable_href(href) or not is_in_scope(href, root_host):
            continue

        text = anchor.get_text(separator=" ", strip=True)
        yield PageLink(url=resolve(root_origin, href), text=" ".join(text.split()))
