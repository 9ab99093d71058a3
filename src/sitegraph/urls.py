"""
URL resolution and domain scoping relative to the crawl root.
"""
from __future__ import annotations

import logging
from urllib.parse import urljoin, urlparse, urlunparse

logger = logging.getLogger(__name__)

# Schemes that can be fetched; anything else (mailto:, javascript:, tel:...) is skipped
WEB_SCHEMES: frozenset[str] = frozenset(("http", "https"))


def lowercase_origin(url: str) -> str:
    """Lowercase the scheme and host of a URL, leaving path and query alone."""
    parsed = urlparse(url)
    return urlunparse(parsed._replace(scheme=parsed.scheme.lower(), netloc=parsed.netloc.lower()))


def origin_of(url: str) -> str:
    """Return scheme://netloc of an absolute URL, lowercased."""
    parsed = urlparse(url)
    return f"{parsed.scheme.lower()}://{parsed.netloc.lower()}"


def resolve(root_origin: str, path: str) -> str:
    """
    Combine the root origin with a path found on a page.

    - Paths already prefixed with the origin are returned unchanged
    - Paths carrying their own host (https://host/x, //host/x) stay absolute,
      with scheme and host lowercased
    - Otherwise exactly one "/" separates origin and path
    """
    if path.startswith(root_origin):
        return path

    if urlparse(path).netloc:
        # urljoin only supplies a scheme for protocol-relative URLs
        return lowercase_origin(urljoin(root_origin, path))

    origin_slash = root_origin.endswith("/")
    path_slash = path.startswith("/")
    if origin_slash and path_slash:
        return root_origin + path[1:]
    if not origin_slash and not path_slash:
        return f"{root_origin}/{path}"
    return root_origin + path


def is_in_scope(url: str, root_host: str) -> bool:
    """Check if URL is relative or points at the root host."""
    try:
        host = urlparse(url).hostname
    except ValueError:
        logger.warning("Ignored invalid link with URL %s", url)
        return False

    if not host:
        return True
    return host == root_host.lower()


def is_crawlable_href(href: str) -> bool:
    """Reject empty, fragment-only and non-web hrefs."""
    href = href.strip()
    if not href or href.startswith("#"):
        return False

    try:
        scheme = urlparse(href).scheme.lower()
    except ValueError:
        logger.warning("Ignored invalid link with URL %s", href)
        return False

    return not scheme or scheme in WEB_SCHEMES
