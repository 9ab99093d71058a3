from __future__ import annotations

import pytest

from sitegraph import Crawler, CrawlerConfig
from tests.helpers import FakeTransport


@pytest.fixture()
def make_crawler():
    """Return a factory building a Crawler over a FakeTransport."""
    crawlers = []

    def factory(responses, delays=None, **config_overrides):
        transport = FakeTransport(responses, delays)
        config = CrawlerConfig(**{"max_concurrent_requests": 4, "request_timeout_ms": 1000, **config_overrides})
        crawler = Crawler(config, transport)
        crawlers.append(crawler)
        return crawler, transport

    yield factory

    for crawler in crawlers:
        crawler.shutdown()
