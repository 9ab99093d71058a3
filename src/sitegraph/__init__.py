"""
Same-domain web crawler that builds a fully linked graph of visited pages.
Follows links and redirects within the root host with a bounded number of
concurrent requests.
"""
from sitegraph.config import CrawlerConfig
from sitegraph.core import Crawler, CrawlStats, create_crawler
from sitegraph.models import Page, PageLink, iter_pages

__version__ = "1.0.0"
__all__ = [
    "Crawler",
    "CrawlerConfig",
    "CrawlStats",
    "Page",
    "PageLink",
    "create_crawler",
    "iter_pages",
]
