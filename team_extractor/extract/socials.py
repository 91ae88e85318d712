# team_extractor/extract/socials.py
from __future__ import annotations

from collections.abc import Iterable
from urllib.parse import urldefrag, urlsplit

from team_extractor.crawl.urls import strip_www


def _host_path(href: str) -> tuple[str, str]:
    try:
        parts = urlsplit(href.strip())
        return strip_www(parts.hostname), (parts.path or "").lower()
    except ValueError:
        return "", ""


def _host_is(host: str, domain: str) -> bool:
    return host == domain or host.endswith(f".{domain}")


def social_kind(href: str | None) -> str | None:
    """Person field name ("linkedin_url", ...) a link belongs in, or None."""
    if not href:
        return None
    host, path = _host_path(href)
    if not host:
        return None
    if _host_is(host, "linkedin.com"):
        return "linkedin_url"
    if _host_is(host, "twitter.com") or _host_is(host, "x.com"):
        if path.startswith(("/share", "/intent")):
            return None
        return "twitter_url"
    if _host_is(host, "github.com"):
        return "github_url"
    if _host_is(host, "bsky.app"):
        return "bluesky_url"
    return None


def classify_social_links(hrefs: Iterable[str | None]) -> dict[str, str | None]:
    """
    Bucket links into linkedin/twitter/github/bluesky; first match per bucket wins,
    except that a LinkedIn personal profile (/in/) replaces a company/other link.
    """
    out: dict[str, str | None] = {
        "linkedin_url": None,
        "twitter_url": None,
        "github_url": None,
        "bluesky_url": None,
    }
    for href in hrefs or ():
        kind = social_kind(href)
        if kind is None:
            continue
        h = href.strip()
        if kind == "linkedin_url":
            current = out["linkedin_url"]
            if current is None or ("/in/" not in current.lower() and "/in/" in h.lower()):
                out["linkedin_url"] = h
            continue
        if out[kind] is None:
            out[kind] = h
    return out


def _same_page(a: str, b: str) -> bool:
    return urldefrag(a)[0].rstrip("/") == urldefrag(b)[0].rstrip("/")


def pick_profile_url(hrefs: Iterable[str | None], page_url: str) -> str | None:
    """First same-origin, non-root, non-current-page http(s) link that is not social/mailto."""
    try:
        page = urlsplit(page_url)
    except ValueError:
        return None
    page_origin = (page.scheme.lower(), page.netloc.lower())

    for href in hrefs or ():
        h = (href or "").strip()
        if not h or social_kind(h):
            continue
        try:
            parts = urlsplit(h)
        except ValueError:
            continue
        if parts.scheme.lower() not in ("http", "https"):
            continue
        if (parts.scheme.lower(), parts.netloc.lower()) != page_origin:
            continue
        if parts.path in ("", "/"):
            continue
        if _same_page(h, page_url):
            continue
        return h
    return None


__all__ = ["social_kind", "classify_social_links", "pick_profile_url"]
