# team_extractor/fetch/sitemap.py
"""
Sitemap-based discovery of team-related URLs.

Flow for one company:
  1) GET <origin>/robots.txt (small cap) and collect its Sitemap: directives
  2) no directives → seed with /sitemap.xml and /sitemap_index.xml
  3) FIFO over sitemap URLs, bounded by a total fetch budget
  4) a top-level sitemap index contributes child sitemaps (one level only,
     media sitemaps skipped); leaf sitemaps contribute their <loc> values
     that look team-related and are on the same site

Individual fetch/decode failures are logged at DEBUG and skipped. The
discovery as a whole never raises.
"""

from __future__ import annotations

import html
import logging
import os
import re
import zlib
from collections import deque
from typing import Protocol
from urllib.parse import urljoin, urlsplit

from team_extractor.crawl.urls import is_same_site, strip_www
from team_extractor.exceptions import ParseError, TransportError

log = logging.getLogger(__name__)

# --------------------------------------------------------------------------------------
# Configuration (env-overridable)
# --------------------------------------------------------------------------------------

MAX_ROBOTS_BYTES = int(os.getenv("SITEMAP_MAX_ROBOTS_BYTES", "200000"))
MAX_SITEMAP_BYTES = int(os.getenv("SITEMAP_MAX_BYTES", "2000000"))
MAX_SITEMAP_DECOMPRESSED_BYTES = int(os.getenv("SITEMAP_MAX_DECOMPRESSED_BYTES", "8000000"))
SITEMAP_TIMEOUT_SECONDS = float(os.getenv("SITEMAP_TIMEOUT_SECONDS", "15"))

MAX_LOCS_PER_DOCUMENT = 50_000
DEFAULT_MAX_SITEMAPS_TO_FETCH = 2

_ROBOTS_SITEMAP_RE = re.compile(r"^sitemap:\s*(\S+)\s*$", re.IGNORECASE)
_LOC_RE = re.compile(r"<loc>\s*([\s\S]*?)\s*</loc>", re.IGNORECASE)
_SITEMAP_INDEX_RE = re.compile(r"<sitemapindex[\s>]", re.IGNORECASE)
_TEAM_URL_RE = re.compile(
    r"(team|leadership|executive|management|people|about|who-we-are|company|partners|staff)"
)
_MEDIA_SITEMAP_RE = re.compile(r"(image|video|news)\.xml(\.gz)?$")

_GZIP_MAGIC = b"\x1f\x8b"


class Fetcher(Protocol):
    def fetch(self, url: str, *, timeout: float | None = ..., max_bytes: int | None = ...) -> bytes:
        ...


# --------------------------------------------------------------------------------------
# Pure helpers
# --------------------------------------------------------------------------------------


def extract_sitemap_urls_from_robots_txt(robots_txt: str | None, base_origin: str) -> list[str]:
    out: list[str] = []
    seen: set[str] = set()
    for line in (robots_txt or "").splitlines():
        m = _ROBOTS_SITEMAP_RE.match(line.strip())
        if not m:
            continue
        try:
            absolute = urljoin(base_origin, m.group(1))
        except ValueError:
            continue
        if absolute in seen:
            continue
        seen.add(absolute)
        out.append(absolute)
    return out


def extract_loc_urls_from_sitemap_xml(
    xml: str | None, limit: int = MAX_LOCS_PER_DOCUMENT
) -> list[str]:
    out: list[str] = []
    for m in _LOC_RE.finditer(xml or ""):
        if len(out) >= limit:
            break
        loc = m.group(1).strip()
        if loc.startswith("<![CDATA["):
            loc = loc[len("<![CDATA[") :]
        if loc.endswith("]]>"):
            loc = loc[: -len("]]>")]
        out.append(html.unescape(loc.strip()))
    return out


def is_sitemap_index(xml: str | None) -> bool:
    return bool(_SITEMAP_INDEX_RE.search(xml or ""))


def looks_like_team_related_url(url: str | None) -> bool:
    return bool(_TEAM_URL_RE.search((url or "").lower()))


def is_media_sitemap(url: str) -> bool:
    return bool(_MEDIA_SITEMAP_RE.search(url.lower()))


def is_fetchable_url(url: str) -> bool:
    """http(s) with a host and, when present, a numeric port."""
    try:
        parts = urlsplit(url)
        port = parts.port
    except ValueError:
        return False
    if parts.scheme.lower() not in ("http", "https") or not parts.hostname:
        return False
    return port is None or port > 0


def _gunzip_capped(data: bytes, max_bytes: int) -> bytes:
    d = zlib.decompressobj(16 + zlib.MAX_WBITS)
    try:
        out = d.decompress(data, max_bytes + 1)
    except zlib.error as exc:
        raise ParseError(f"Invalid gzip data: {exc}") from exc
    if len(out) > max_bytes or d.unconsumed_tail:
        raise TransportError(f"Decompressed response too large (> {max_bytes} bytes)")
    return out


def decode_sitemap_body(url: str, body: bytes, max_decompressed_bytes: int) -> str:
    """UTF-8 text of a fetched sitemap/robots body, gunzipping when it is gzip."""
    if url.lower().endswith(".gz") or body[:2] == _GZIP_MAGIC:
        body = _gunzip_capped(body, max_decompressed_bytes)
    return body.decode("utf-8", errors="replace")


def _fetch_text(
    fetcher: Fetcher, url: str, *, timeout: float, max_bytes: int, max_decompressed_bytes: int
) -> str:
    body = fetcher.fetch(url, timeout=timeout, max_bytes=max_bytes)
    return decode_sitemap_body(url, body, max_decompressed_bytes)


# --------------------------------------------------------------------------------------
# Discovery
# --------------------------------------------------------------------------------------


def discover_team_urls_from_sitemaps(
    fetcher: Fetcher,
    company_url: str,
    company_domain: str | None = None,
    max_sitemaps_to_fetch: int = DEFAULT_MAX_SITEMAPS_TO_FETCH,
    *,
    max_robots_bytes: int = MAX_ROBOTS_BYTES,
    max_sitemap_bytes: int = MAX_SITEMAP_BYTES,
    max_sitemap_decompressed_bytes: int = MAX_SITEMAP_DECOMPRESSED_BYTES,
    timeout: float = SITEMAP_TIMEOUT_SECONDS,
) -> list[str]:
    parts = urlsplit(company_url)
    origin = f"{parts.scheme}://{parts.netloc}"
    root_domain = strip_www(company_domain or parts.hostname)
    budget = max(0, int(max_sitemaps_to_fetch))

    out: list[str] = []
    seen: set[str] = set()

    robots_txt = ""
    try:
        robots_txt = _fetch_text(
            fetcher,
            f"{origin}/robots.txt",
            timeout=timeout,
            max_bytes=max_robots_bytes,
            max_decompressed_bytes=max_robots_bytes,
        )
    except (TransportError, ParseError) as exc:
        log.debug("robots.txt unavailable for %s: %s", origin, exc)

    seeds = extract_sitemap_urls_from_robots_txt(robots_txt, origin) or [
        f"{origin}/sitemap.xml",
        f"{origin}/sitemap_index.xml",
    ]

    queue: deque[tuple[str, int]] = deque((s, 0) for s in seeds[:budget])
    fetched = 0

    while queue:
        url, depth = queue.popleft()
        fetched += 1
        try:
            xml = _fetch_text(
                fetcher,
                url,
                timeout=timeout,
                max_bytes=max_sitemap_bytes,
                max_decompressed_bytes=max_sitemap_decompressed_bytes,
            )
        except (TransportError, ParseError) as exc:
            log.debug("Sitemap skipped %s: %s", url, exc)
            continue

        locs = extract_loc_urls_from_sitemap_xml(xml)

        if is_sitemap_index(xml):
            if depth > 0:
                continue
            for loc in locs:
                if fetched + len(queue) >= budget:
                    break
                if not loc or not is_fetchable_url(loc) or is_media_sitemap(loc):
                    continue
                queue.append((loc, depth + 1))
            continue

        for loc in locs:
            s = loc.strip()
            if not s or s in seen:
                continue
            if not is_fetchable_url(s) or not looks_like_team_related_url(s):
                continue
            if not is_same_site(s, root_domain):
                continue
            seen.add(s)
            out.append(s)

    log.debug("Sitemap discovery for %s: %d fetches, %d urls", origin, fetched, len(out))
    return out


__all__ = [
    "extract_sitemap_urls_from_robots_txt",
    "extract_loc_urls_from_sitemap_xml",
    "is_sitemap_index",
    "looks_like_team_related_url",
    "is_media_sitemap",
    "is_fetchable_url",
    "decode_sitemap_body",
    "discover_team_urls_from_sitemaps",
    "MAX_LOCS_PER_DOCUMENT",
]
