"""
Command-line interface for the crawler.
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import urlparse

from sitegraph.config import DEFAULT_USER_AGENT, CrawlerConfig
from sitegraph.core import CrawlStats, create_crawler
from sitegraph.models import Page, iter_pages


def format_summary(stats: CrawlStats) -> str:
    """Render crawl statistics as the block shown with --verbose."""
    rule = "=" * 50
    lines = [
        rule,
        "CRAWL SUMMARY",
        rule,
        "",
        f"Pages in graph:         {stats.pages_crawled}",
        f"Redirects followed:     {stats.redirects_followed}",
        f"Links discovered:       {stats.links_discovered}",
        "",
    ]

    if not stats.error_counts:
        lines.append("No errors encountered.")
    else:
        lines.append("Errors by type:")
        for category, count in sorted(stats.error_counts.items()):
            # Numeric categories are HTTP status codes
            label = f"HTTP {category}" if category.isdigit() else category.replace("_", " ").capitalize()
            lines.append(f"  {label}: {count}")

    return "\n".join(lines) + "\n\n"


def render_text(root: Page) -> str:
    """List every reachable page with its links and redirect, breadth-first."""
    lines: List[str] = []
    for page in iter_pages(root):
        lines.append(f"Page {page.url}")
        if page.redirects_to is None:
            lines.append(f"\t{len(page.links or [])} outbound links")
        for link in page.links or []:
            lines.append(f"\t\t{link.text} -> {link.url}")
        if page.redirects_to is not None:
            lines.append(f"\t[redirect] -> {page.redirects_to.url}")
    return "\n".join(lines)


def page_records(root: Page) -> List[Dict[str, Any]]:
    """Flatten the page graph into JSON-serializable records."""
    return [
        {
            "url": page.url,
            "redirects_to": page.redirects_to.url if page.redirects_to else None,
            "links": [
                {"url": link.url, "text": link.text, "resolved": link.page is not None}
                for link in page.links or []
            ],
        }
        for page in iter_pages(root)
    ]


def render_json(root: Page, pretty: bool = False) -> str:
    return json.dumps(page_records(root), ensure_ascii=False, indent=2 if pretty else None)


def default_output_path(root_url: str, now: Optional[datetime] = None) -> Path:
    """Return crawls/{host}_{timestamp}.json, with dots and port colons as underscores."""
    netloc = urlparse(root_url).netloc or "unknown"
    stem = netloc.replace(".", "_").replace(":", "_")
    stamp = (now or datetime.now()).strftime("%Y%m%d_%H%M%S")
    return Path("crawls") / f"{stem}_{stamp}.json"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sitegraph",
        description="Crawl every page on the same domain as a root URL and print the page graph.",
    )
    parser.add_argument("root_url", help="Root URL (e.g. https://example.com)")
    parser.add_argument(
        "--max-concurrent-requests", type=int, default=40,
        help="Maximum number of requests in flight (default: 40)",
    )
    parser.add_argument(
        "--timeout-ms", type=int, default=15000,
        help="Per-request timeout in milliseconds, 0 to disable (default: 15000)",
    )
    parser.add_argument("--user-agent", default=DEFAULT_USER_AGENT, help="User-Agent header")
    parser.add_argument("--format", choices=("text", "json"), default="text", help="Output format (default: text)")
    parser.add_argument(
        "--out",
        help="Output file path, or '-' for stdout (default: stdout for text, auto-generated in crawls/ for json)",
    )
    parser.add_argument("--pretty", action="store_true", help="Pretty-print JSON")
    parser.add_argument("--verbose", action="store_true", help="Show progress logging and summary")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point for the crawler CLI."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = CrawlerConfig(
            max_concurrent_requests=args.max_concurrent_requests,
            request_timeout_ms=args.timeout_ms,
            user_agent=args.user_agent,
        )
        with create_crawler(config) as crawler:
            root = crawler.crawl(args.root_url)
            stats = crawler.stats
    except ValueError as exc:
        sys.stderr.write(f"error: {exc}\n")
        return 2

    if args.verbose:
        sys.stderr.write(format_summary(stats))

    if args.format == "json":
        output = render_json(root, pretty=args.pretty)
    else:
        output = render_text(root)

    out = args.out
    if out is None:
        out = "-" if args.format == "text" else None

    if out == "-":
        print(output)
    else:
        output_path = Path(out) if out else default_output_path(args.root_url)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(output, encoding="utf-8")
        if args.verbose:
            sys.stderr.write(f"Results written to: {output_path}\n")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
