"""
In-memory page graph with forward-reference reconciliation.
"""
from __future__ import annotations

from collections import defaultdict
from typing import Dict, List, Optional

from sitegraph.models import Page, PageLink


class PageGraph:
    """
    Page cache plus reverse indices of links and redirects by target URL.

    A URL mapped to None is a placeholder: its fetch was dispatched but has
    not completed. Links and redirects discovered before their target
    completes are recorded by target URL and patched by reconcile().

    Not thread-safe; callers serialize access with their own lock.
    """

    def __init__(self) -> None:
        self.pages: Dict[str, Optional[Page]] = {}
        self.referring_links: Dict[str, List[PageLink]] = defaultdict(list)
        self.redirecting_pages: Dict[str, List[Page]] = defaultdict(list)

    def __contains__(self, url: str) -> bool:
        return url in self.pages

    def __len__(self) -> int:
        return len(self.pages)

    def mark_in_flight(self, url: str) -> None:
        self.pages[url] = None

    def get(self, url: str) -> Optional[Page]:
        """Return the completed page for url, or None if unknown or in flight."""
        return self.pages.get(url)

    def store(self, page: Page) -> None:
        """Replace the placeholder for a page whose fetch completed."""
        self.pages[page.url] = page

    def add_referring_link(self, link: PageLink) -> None:
        self.referring_links[link.url].append(link)

    def add_redirecting_page(self, target_url: str, page: Page) -> None:
        self.redirecting_pages[target_url].append(page)

    def reconcile(self, page: Page) -> None:
        """Point every known link and redirect targeting page's URL at page."""
        for link in self.referring_links.get(page.url, ()):
            link.page = page
        for redirecting in self.redirecting_pages.get(page.url, ()):
            redirecting.redirects_to = page

    def clear(self) -> None:
        self.pages.clear()
        self.referring_links.clear()
        self.redirecting_pages.clear()
