"""
Page graph data structures.
"""
from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Iterator, List, Optional, Set


@dataclass(slots=True, eq=False)
class Page:
    """A crawled (or queued) page, identified by its absolute URL.

    ``links`` stays ``None`` until the fetch for the page completes.
    Pages compare by identity since the graph may contain cycles.
    """
    url: str
    links: Optional[List[PageLink]] = field(default=None, repr=False)
    redirects_to: Optional[Page] = field(default=None, repr=False)


@dataclass(slots=True, eq=False)
class PageLink:
    """One outbound anchor found on a page."""
    url: str
    text: str
    page: Optional[Page] = field(default=None, repr=False)


def iter_pages(root: Page) -> Iterator[Page]:
    """
    Breadth-first traversal of the page graph starting at root.

    Follows resolved links and redirects; each URL is yielded once.
    """
    visited: Set[str] = set()
    queue: Deque[Page] = deque([root])

    while queue:
        page = queue.popleft()
        if page.url in visited:
            continue
        visited.add(page.url)
        yield page

        for link in page.links or ():
            if link.page is not None and link.page.url not in visited:
                queue.append(link.page)

        if page.redirects_to is not None and page.redirects_to.url not in visited:
            queue.append(page.redirects_to)
