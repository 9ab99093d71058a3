"""
Non-blocking HTTP transport built on a requests session.
"""
from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Mapping, Optional

import requests
from requests.adapters import HTTPAdapter

logger = logging.getLogger(__name__)


class HttpTransport:
    """
    Runs GET requests on a private thread pool and returns futures.

    Redirects are never followed here; the crawler handles them itself.
    Connection errors and timeouts surface as requests.RequestException
    from Future.result().
    """

    def __init__(self, max_connections: int) -> None:
        self._session = requests.Session()
        adapter = HTTPAdapter(pool_connections=max_connections, pool_maxsize=max_connections)
        self._session.mount("http://", adapter)
        self._session.mount("https://", adapter)
        self._executor = ThreadPoolExecutor(
            max_workers=max_connections,
            thread_name_prefix="sitegraph-http",
        )
        self._closed = False

    def fetch(
        self,
        url: str,
        headers: Mapping[str, str],
        timeout: Optional[float],
    ) -> Future[requests.Response]:
        """Submit a GET request for url without waiting for it."""
        return self._executor.submit(
            self._session.get,
            url,
            headers=dict(headers),
            timeout=timeout,
            allow_redirects=False,
        )

    def close(self) -> None:
        """Release the session and I/O threads. Safe to call twice."""
        if self._closed:
            return
        self._closed = True
        self._executor.shutdown(wait=True)
        self._session.close()
        logger.debug("HTTP transport closed")
