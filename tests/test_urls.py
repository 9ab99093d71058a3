from __future__ import annotations

import pytest

from sitegraph.urls import is_crawlable_href, is_in_scope, origin_of, resolve


class TestResolve:
    def test_host_relative_path(self) -> None:
        assert resolve("https://x.com", "/a") == "https://x.com/a"

    def test_inserts_separator(self) -> None:
        assert resolve("https://x.com", "a/b") == "https://x.com/a/b"

    def test_collapses_double_slash(self) -> None:
        assert resolve("https://x.com/", "/a") == "https://x.com/a"

    def test_origin_with_trailing_slash_and_bare_path(self) -> None:
        assert resolve("https://x.com/", "a") == "https://x.com/a"

    def test_already_absolute_is_unchanged(self) -> None:
        assert resolve("https://x.com", "https://x.com/a?q=1") == "https://x.com/a?q=1"

    def test_absolute_with_other_scheme_is_kept(self) -> None:
        assert resolve("https://x.com", "http://x.com/a") == "http://x.com/a"

    def test_protocol_relative_gets_root_scheme(self) -> None:
        assert resolve("https://x.com", "//x.com/a") == "https://x.com/a"

    def test_absolute_host_and_scheme_are_lowercased(self) -> None:
        assert resolve("https://x.com", "HTTPS://X.com/Docs/A") == "https://x.com/Docs/A"


class TestIsInScope:
    @pytest.mark.parametrize("url", ["/a", "a/b", "?page=2", "https://x.com/a", "https://X.com/a"])
    def test_in_scope(self, url: str) -> None:
        assert is_in_scope(url, "x.com") is True

    @pytest.mark.parametrize("url", ["https://other.com", "https://sub.x.com/a", "//other.com/a"])
    def test_out_of_scope(self, url: str) -> None:
        assert is_in_scope(url, "x.com") is False

    def test_malformed_url_is_out_of_scope_and_logged(self, caplog) -> None:
        with caplog.at_level("WARNING", logger="sitegraph.urls"):
            assert is_in_scope("http://[::1/broken", "x.com") is False
        assert "Ignored invalid link" in caplog.text


def test_origin_of_drops_path_query_and_fragment() -> None:
    assert origin_of("https://x.com:8443/docs/page?q=1#top") == "https://x.com:8443"


@pytest.mark.parametrize(
    ("href", "expected"),
    [
        ("/a", True),
        ("https://x.com/a", True),
        ("page.html", True),
        ("", False),
        ("   ", False),
        ("#top", False),
        ("mailto:me@x.com", False),
        ("javascript:void(0)", False),
        ("tel:+4712345678", False),
    ],
)
def test_is_crawlable_href(href: str, expected: bool) -> None:
    assert is_crawlable_href(href) is expected


def test_origin_of_lowercases_scheme_and_host() -> None:
    assert origin_of("HTTPS://Docs.X.com/Guide") == "https://docs.x.com"
