# tests/test_fetch_client.py
from __future__ import annotations

import httpx
import pytest
import respx
from httpx import Response

from team_extractor.crawl.browser import StaticPageDriver
from team_extractor.exceptions import NavigationFailure, TransportError
from team_extractor.fetch import client
from team_extractor.fetch.client import BoundedFetcher, FetchResult

HTML = "<html><body><a href='/team'>Team</a><p>Hello</p></body></html>"


@pytest.fixture
def fetcher():
    with BoundedFetcher() as f:
        yield f


@respx.mock
def test_get_returns_body_and_metadata(fetcher):
    respx.get("https://example.com/").mock(
        return_value=Response(200, text=HTML, headers={"Content-Type": "text/html; charset=utf-8"})
    )
    res = fetcher.get("https://example.com/")

    assert res.status == 200
    assert res.effective_url == "https://example.com/"
    assert res.content_type.startswith("text/html")
    assert "Hello" in res.text
    assert fetcher.fetch("https://example.com/") == HTML.encode()


@respx.mock
def test_redirects_are_followed(fetcher):
    respx.get("https://example.com/old").mock(
        return_value=Response(301, headers={"Location": "https://example.com/new"})
    )
    respx.get("https://example.com/new").mock(return_value=Response(200, text="ok"))

    res = fetcher.get("https://example.com/old")
    assert res.url == "https://example.com/old"
    assert res.effective_url == "https://example.com/new"


@respx.mock
def test_non_2xx_raises(fetcher):
    respx.get("https://example.com/missing").mock(return_value=Response(404, text="nope"))
    with pytest.raises(TransportError, match="HTTP 404"):
        fetcher.get("https://example.com/missing")


@respx.mock
def test_body_over_cap_raises(fetcher):
    respx.get("https://example.com/big").mock(return_value=Response(200, content=b"x" * 100))
    with pytest.raises(TransportError):
        fetcher.get("https://example.com/big", max_bytes=10)


@respx.mock
def test_timeouts_become_transport_errors(fetcher):
    respx.get("https://example.com/slow").mock(side_effect=httpx.ConnectTimeout("boom"))
    with pytest.raises(TransportError, match="Timeout"):
        fetcher.get("https://example.com/slow", timeout=1.0)


@respx.mock
def test_malformed_url_becomes_transport_error(fetcher):
    with pytest.raises(TransportError, match="Invalid URL"):
        fetcher.get("https://example.com:abc/sitemap.xml")


@respx.mock
def test_slow_body_hits_wall_clock_deadline(fetcher, monkeypatch):
    ticks = []

    def clock():
        ticks.append(1)
        return 0.0 if len(ticks) == 1 else 30.0

    monkeypatch.setattr(client, "_clock", clock)
    respx.get("https://example.com/drip").mock(
        return_value=Response(200, content=b"x" * 200_000)
    )
    with pytest.raises(TransportError, match="deadline"):
        fetcher.get("https://example.com/drip", timeout=10.0)


@respx.mock
def test_declared_charset_is_used(fetcher):
    body = "<p>José Müller</p>".encode("latin-1")
    respx.get("https://example.com/").mock(
        return_value=Response(
            200, content=body, headers={"Content-Type": "text/html; charset=iso-8859-1"}
        )
    )
    res = fetcher.get("https://example.com/")
    assert res.encoding == "iso-8859-1"
    assert "José Müller" in res.text


def test_unknown_charset_falls_back_to_utf8():
    res = FetchResult(200, "u", "u", "text/html", "Zoë".encode(), encoding="x-no-such-codec")
    assert res.text == "Zoë"


class TestStaticPageDriver:
    @respx.mock
    def test_open_snapshot_and_anchors(self, fetcher):
        respx.get("https://example.com/").mock(
            return_value=Response(200, text=HTML, headers={"Content-Type": "text/html"})
        )
        driver = StaticPageDriver(fetcher)
        page = driver.open("https://example.com/")

        assert page.final_url == "https://example.com/"
        anchors = driver.collect_anchors(page)
        assert [(a.href, a.text) for a in anchors] == [("https://example.com/team", "Team")]
        assert driver.snapshot(page).text.endswith("Hello")
        assert driver.click_if_visible(page, None) is False
        driver.close(page)

    @respx.mock
    def test_non_html_is_a_navigation_failure(self, fetcher):
        respx.get("https://example.com/doc.pdf").mock(
            return_value=Response(200, content=b"%PDF", headers={"Content-Type": "application/pdf"})
        )
        with pytest.raises(NavigationFailure, match="Not an HTML document"):
            StaticPageDriver(fetcher).open("https://example.com/doc.pdf")

    @respx.mock
    def test_transport_errors_become_navigation_failures(self, fetcher):
        respx.get("https://example.com/").mock(return_value=Response(500))
        with pytest.raises(NavigationFailure, match="HTTP 500"):
            StaticPageDriver(fetcher).open("https://example.com/")

    @respx.mock
    def test_meta_charset_without_http_charset(self, fetcher):
        html = (
            '<html><head><meta charset="windows-1252"></head>'
            "<body><p>Zoë Brontë</p></body></html>"
        )
        respx.get("https://example.com/").mock(
            return_value=Response(
                200, content=html.encode("cp1252"), headers={"Content-Type": "text/html"}
            )
        )
        driver = StaticPageDriver(fetcher)
        page = driver.open("https://example.com/")
        assert "Zoë Brontë" in driver.snapshot(page).text
