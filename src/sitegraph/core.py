"""
Crawl engine: bounded-concurrency fetch scheduler and response handling.
"""
from __future__ import annotations

import logging
import os
import threading
from collections import defaultdict, deque
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Deque, Dict, List, Optional, Protocol, Set
from urllib.parse import urlparse

import requests

from sitegraph.config import CrawlerConfig
from sitegraph.graph import PageGraph
from sitegraph.models import Page, PageLink
from sitegraph.scraper import is_html, parse_document, scrape_links
from sitegraph.transport import HttpTransport
from sitegraph.urls import WEB_SCHEMES, is_crawlable_href, is_in_scope, lowercase_origin, origin_of, resolve

logger = logging.getLogger(__name__)


class Transport(Protocol):
    """What the crawler needs from an HTTP client."""

    def fetch(self, url, headers, timeout) -> Future: ...

    def close(self) -> None: ...


@dataclass(slots=True)
class CrawlStats:
    """Statistics collected during crawl for summary output."""
    pages_crawled: int = 0
    redirects_followed: int = 0
    links_discovered: int = 0
    error_counts: Dict[str, int] = field(default_factory=lambda: defaultdict(int))

    def record_error(self, category: str) -> None:
        self.error_counts[category] += 1

    def record_status(self, status_code: int) -> None:
        """Record an HTTP error status, ignoring successful responses."""
        if status_code >= 400:
            self.error_counts[str(status_code)] += 1


class Crawler:
    """
    Same-domain crawler returning a fully linked page graph.

    One controller (the thread calling crawl()) decides what to dispatch;
    response handlers run on a worker pool. All shared crawl state is
    guarded by a single lock, wrapped in a condition the handlers notify
    whenever the queue or the number of pending requests might have changed.
    """

    def __init__(
        self,
        config: Optional[CrawlerConfig] = None,
        transport: Optional[Transport] = None,
    ) -> None:
        self.config = config or CrawlerConfig()
        self._transport: Transport = transport or HttpTransport(self.config.max_concurrent_requests)
        self._state_changed = threading.Condition(threading.Lock())

        # Crawl state, guarded by _state_changed
        self._queue: Deque[Page] = deque()
        self._queued: Set[str] = set()
        self._pending_requests = 0
        self._graph = PageGraph()
        self._running = False
        self._shutdown = False
        self.stats = CrawlStats()

        # Fixed for the duration of a crawl
        self._root_origin = ""
        self._root_host = ""

    def __enter__(self) -> Crawler:
        return self

    def __exit__(self, *exc_info) -> None:
        self.shutdown()

    def crawl(self, root_url: str) -> Page:
        """
        Crawl all pages reachable from root_url on the same host.

        Args:
            root_url: Absolute http(s) URL to start from.

        Returns:
            The root Page; every other page is reachable through its links
            and redirects.

        Raises:
            ValueError: If root_url is not an absolute http(s) URL.
            RuntimeError: If the crawler was shut down or is already crawling.
        """
        with self._state_changed:
            if self._shutdown:
                raise RuntimeError("Crawler has been shut down.")
            if self._running:
                raise RuntimeError("A crawl is already running on this crawler.")
            root_url = _validate_root_url(root_url)

            self._running = True
            self._root_origin = origin_of(root_url)
            self._root_host = urlparse(root_url).hostname or ""
            self._queue.clear()
            self._queued.clear()
            self._pending_requests = 0
            self._graph.clear()
            self.stats = CrawlStats()
            self._enqueue(Page(root_url))

        logger.info(
            "Starting crawl of %s (max_concurrent_requests=%d, request_timeout=%dms, user_agent=%s)",
            root_url,
            self.config.max_concurrent_requests,
            self.config.request_timeout_ms,
            self.config.user_agent,
        )

        # Handlers run here, independently of the request concurrency bound
        workers = ThreadPoolExecutor(
            max_workers=os.cpu_count() or 1,
            thread_name_prefix="sitegraph-worker",
        )
        try:
            return self._run(root_url, workers)
        finally:
            workers.shutdown(wait=True)
            with self._state_changed:
                self._running = False

    def shutdown(self) -> None:
        """Close the transport. The crawler cannot be reused afterwards."""
        with self._state_changed:
            if self._shutdown:
                return
            self._shutdown = True
        self._transport.close()

    def _run(self, root_url: str, workers: ThreadPoolExecutor) -> Page:
        """Controller loop: dispatch queued pages until no work remains."""
        while True:
            with self._state_changed:
                self._state_changed.wait_for(self._can_proceed)
                if self._is_done():
                    return self._finish(root_url)

                page = self._queue.popleft()
                self._queued.discard(page.url)
                self._graph.mark_in_flight(page.url)
                self._pending_requests += 1

            logger.debug("Fetching %s", page.url)
            future = self._transport.fetch(
                page.url,
                headers=self.config.headers,
                timeout=self.config.request_timeout_s,
            )
            future.add_done_callback(
                lambda done, page=page: workers.submit(self._handle_response, page, done)
            )

    def _can_proceed(self) -> bool:
        if self._queue:
            return self._pending_requests < self.config.max_concurrent_requests
        return self._pending_requests == 0

    def _is_done(self) -> bool:
        return not self._queue and self._pending_requests == 0

    def _finish(self, root_url: str) -> Page:
        """Hand back the root page and drop the indices. Caller holds the lock."""
        self.stats.pages_crawled = len(self._graph)
        logger.info("Crawling completed. Crawled %d pages.", len(self._graph))
        root_page = self._graph.get(root_url)
        self._graph.clear()
        return root_page

    def _enqueue(self, page: Page) -> None:
        self._queue.append(page)
        self._queued.add(page.url)

    def _is_known(self, url: str) -> bool:
        return url in self._graph or url in self._queued

    def _handle_response(self, page: Page, future: Future) -> None:
        """
        Process a completed fetch on a worker thread.

        Transport, parse and unexpected errors degrade the page to one
        without links; the pending count is decremented in every case.
        """
        response: Optional[requests.Response] = None
        links: List[PageLink] = []
        error: Optional[str] = None

        try:
            response = future.result()
            if not response.is_redirect:
                links = self._extract_links(response)
        except requests.Timeout as exc:
            logger.warning("Request to %s timed out: %s", page.url, exc)
            error = "timeout"
        except requests.RequestException as exc:
            logger.warning("Could not get response from URL %s: %s", page.url, exc)
            error = "connection_error"
        except Exception:
            logger.exception("Unexpected error processing response from %s", page.url)
            error = "handler_error"

        page.links = links

        with self._state_changed:
            self._graph.store(page)
            try:
                if error:
                    self.stats.record_error(error)
                if response is not None:
                    self.stats.record_status(response.status_code)
                    if response.is_redirect:
                        self._follow_redirect(page, response.headers["Location"])

                for link in links:
                    self._track_link(link)
            except Exception:
                logger.exception("Unexpected error updating page graph for %s", page.url)
                self.stats.record_error("handler_error")
            finally:
                # Links already pointing here are patched even if tracking failed
                self._graph.reconcile(page)
                self._pending_requests -= 1
                self._state_changed.notify()

    def _extract_links(self, response: requests.Response) -> List[PageLink]:
        if not is_html(response.headers.get("Content-Type")):
            return []

        document = parse_document(response.content)
        if document is None:
            with self._state_changed:
                self.stats.record_error("parse_error")
            return []

        return list(scrape_links(document, self._root_origin))

    def _follow_redirect(self, page: Page, location: str) -> None:
        """Register page as redirecting to location. Caller holds the lock."""
        location = location.strip()
        if not is_crawlable_href(location):
            logger.info("Not following redirect from %s to %s (not a web URL)", page.url, location)
            return
        if not is_in_scope(location, self._root_host):
            logger.info("Not following redirect from %s to %s (outside root domain)", page.url, location)
            return

        target_url = resolve(self._root_origin, location)
        self.stats.redirects_followed += 1

        if not self._is_known(target_url):
            self._enqueue(Page(target_url))
        else:
            target = self._graph.get(target_url)
            if target is not None:
                page.redirects_to = target

        self._graph.add_redirecting_page(target_url, page)

    def _track_link(self, link: PageLink) -> None:
        """Enqueue or resolve a freshly scraped link. Caller holds the lock."""
        if not self._is_known(link.url):
            self._enqueue(Page(link.url))
            self.stats.links_discovered += 1
        else:
            target = self._graph.get(link.url)
            if target is not None:
                link.page = target

        self._graph.add_referring_link(link)


def create_crawler(config: Optional[CrawlerConfig] = None) -> Crawler:
    """Create a Crawler backed by an HTTP transport sized from config."""
    config = config or CrawlerConfig()
    return Crawler(config, HttpTransport(config.max_concurrent_requests))


def _validate_root_url(root_url: str) -> str:
    """Return root_url stripped with a lowercased origin, or raise ValueError if it cannot be crawled."""
    if not isinstance(root_url, str) or not root_url.strip():
        raise ValueError(f"Invalid URL: {root_url!r}")

    root_url = root_url.strip()
    try:
        parsed = urlparse(root_url)
        host = parsed.hostname
    except ValueError:
        raise ValueError(f"Invalid URL: {root_url}") from None

    if parsed.scheme.lower() not in WEB_SCHEMES or not host:
        raise ValueError(f"Invalid URL: {root_url}")
    return lowercase_origin(root_url)
