from __future__ import annotations

import threading
from concurrent.futures import Future
from typing import Dict, List, Optional, Tuple, Union

import requests
from requests.structures import CaseInsensitiveDict

Outcome = Union[requests.Response, BaseException]


def html_response(url: str, body: str, status: int = 200, content_type: str = "text/html; charset=utf-8") -> requests.Response:
    """Build a real requests.Response carrying an HTML body."""
    response = requests.Response()
    response.url = url
    response.status_code = status
    response.headers = CaseInsensitiveDict({"Content-Type": content_type})
    response._content = body.encode("utf-8")
    response.encoding = "utf-8"
    return response


def redirect_response(url: str, location: str, status: int = 301) -> requests.Response:
    response = requests.Response()
    response.url = url
    response.status_code = status
    response.headers = CaseInsensitiveDict({"Location": location, "Content-Type": "text/html"})
    response._content = b"<html><body><a href='/never-scraped'>moved</a></body></html>"
    return response


def page_html(*anchors: Tuple[str, str]) -> str:
    """Render a minimal document with one anchor per (href, text) pair."""
    body = "".join(f'<a href="{href}">{text}</a>' for href, text in anchors)
    return f"<html><head></head><body>{body}</body></html>"


class FakeTransport:
    """
    In-memory transport resolving fetches from a URL -> outcome table.

    URLs listed in delays complete on a timer thread after that many
    seconds; the rest complete before fetch() returns. Unknown URLs fail
    with a ConnectionError.
    """

    def __init__(self, responses: Dict[str, Outcome], delays: Optional[Dict[str, float]] = None) -> None:
        self.responses = responses
        self.delays = delays or {}
        self.requests: List[Tuple[str, Dict[str, str], Optional[float]]] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.close_calls = 0
        self._lock = threading.Lock()

    @property
    def fetched_urls(self) -> List[str]:
        return [url for url, _headers, _timeout in self.requests]

    def fetch(self, url, headers, timeout) -> Future:
        with self._lock:
            self.requests.append((url, dict(headers), timeout))
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)

        future: Future = Future()
        delay = self.delays.get(url)
        if delay is None:
            self._complete(url, future)
        else:
            threading.Timer(delay, self._complete, args=(url, future)).start()
        return future

    def close(self) -> None:
        self.close_calls += 1

    def _complete(self, url: str, future: Future) -> None:
        with self._lock:
            self.in_flight -= 1

        outcome = self.responses.get(url)
        if outcome is None:
            outcome = requests.ConnectionError(f"No route to {url}")

        if isinstance(outcome, BaseException):
            future.set_exception(outcome)
        else:
            future.set_result(outcome)
