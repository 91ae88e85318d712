# team_extractor/crawl/browser.py
"""
Page automation capability.

The crawler only talks to a PageDriver: open a URL, collect its anchors,
serialize it into a PageSnapshot, and click things best-effort. All person
and contact heuristics run over the snapshot in-process, so a driver never
has to execute extraction logic inside a page.

StaticPageDriver is the reference driver: it fetches HTML over httpx and
builds the snapshot with BeautifulSoup. It renders no JavaScript and cannot
click, so navigation expansion is a no-op for it.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Protocol

from bs4 import UnicodeDammit

from team_extractor.exceptions import ExtractorError, NavigationFailure, TransportError
from team_extractor.extract.dom import PageSnapshot, snapshot_from_html
from team_extractor.fetch.client import BoundedFetcher
from team_extractor.models import Anchor

log = logging.getLogger(__name__)

NAVIGATION_TIMEOUT_SECONDS = float(os.getenv("NAVIGATION_TIMEOUT_SECONDS", "60"))
MAX_PAGE_BYTES = int(os.getenv("MAX_PAGE_BYTES", str(5_000_000)))

_HTML_CONTENT_TYPES = ("text/html", "application/xhtml+xml", "text/plain")


@dataclass(frozen=True)
class MenuLocator:
    kind: str  # "role" (accessible button name pattern) | "css"
    value: str


# Role-based first, then CSS hamburger selectors.
MENU_LOCATORS: tuple[MenuLocator, ...] = (
    MenuLocator("role", "open menu"),
    MenuLocator("role", "menu"),
    MenuLocator("role", "navigation"),
    MenuLocator("role", "more"),
    MenuLocator("css", 'header button[aria-label*="menu" i]'),
    MenuLocator("css", 'header [role="button"][aria-label*="menu" i]'),
    MenuLocator("css", 'header button:has-text("Menu")'),
    MenuLocator("css", 'button[aria-label*="open menu" i]'),
    MenuLocator("css", 'button[aria-label*="menu" i]'),
    MenuLocator("css", '[role="button"][aria-label*="menu" i]'),
    MenuLocator("css", 'button:has-text("Menu")'),
    MenuLocator("css", 'button:has-text("Navigation")'),
    MenuLocator("css", 'button[aria-expanded="false"]'),
)


@dataclass
class LoadedPage:
    url: str  # requested
    final_url: str  # after redirects
    html: str
    status: int | None = None
    _snapshot: PageSnapshot | None = field(default=None, repr=False)


class PageDriver(Protocol):
    def open(self, url: str) -> LoadedPage:
        """Load a page; raise NavigationFailure when it cannot be loaded."""
        ...

    def collect_anchors(self, page: LoadedPage) -> list[Anchor]: ...

    def snapshot(self, page: LoadedPage) -> PageSnapshot: ...

    def click_if_visible(self, page: LoadedPage, locator: MenuLocator) -> bool:
        """Click the first visible match; False when nothing was clicked. Never raises."""
        ...

    def close(self, page: LoadedPage) -> None: ...


def decode_html(body: bytes) -> str:
    """Decode an HTML body with no declared HTTP charset (BOM, <meta charset>, then guesses)."""
    dammit = UnicodeDammit(body, is_html=True)
    if dammit.unicode_markup is None:
        return body.decode("utf-8", errors="replace")
    return dammit.unicode_markup


def try_expand_navigation(driver: PageDriver, page: LoadedPage) -> bool:
    """Best-effort attempt to open a hamburger/menu so hidden links render."""
    for locator in MENU_LOCATORS:
        try:
            if driver.click_if_visible(page, locator):
                log.debug("Expanded navigation on %s via %s", page.final_url, locator.value)
                return True
        except ExtractorError as exc:
            log.debug("Menu click failed on %s (%s): %s", page.final_url, locator.value, exc)
    return False


class StaticPageDriver:
    """PageDriver over plain HTTP fetches; no rendering, no clicking."""

    def __init__(
        self,
        fetcher: BoundedFetcher,
        *,
        timeout: float = NAVIGATION_TIMEOUT_SECONDS,
        max_bytes: int = MAX_PAGE_BYTES,
    ) -> None:
        self.fetcher = fetcher
        self.timeout = timeout
        self.max_bytes = max_bytes

    def open(self, url: str) -> LoadedPage:
        try:
            res = self.fetcher.get(url, timeout=self.timeout, max_bytes=self.max_bytes)
        except TransportError as exc:
            raise NavigationFailure(str(exc)) from exc

        ctype = (res.content_type or "").split(";", 1)[0].strip().lower()
        if ctype and ctype not in _HTML_CONTENT_TYPES:
            raise NavigationFailure(f"Not an HTML document ({ctype}) at {url}")

        html = res.text if res.encoding else decode_html(res.body)
        return LoadedPage(url=url, final_url=res.effective_url, html=html, status=res.status)

    def snapshot(self, page: LoadedPage) -> PageSnapshot:
        if page._snapshot is None:
            page._snapshot = snapshot_from_html(page.html, page.final_url)
        return page._snapshot

    def collect_anchors(self, page: LoadedPage) -> list[Anchor]:
        return list(self.snapshot(page).anchors)

    def click_if_visible(self, page: LoadedPage, locator: MenuLocator) -> bool:
        return False

    def close(self, page: LoadedPage) -> None:
        page._snapshot = None


__all__ = [
    "MenuLocator",
    "MENU_LOCATORS",
    "LoadedPage",
    "PageDriver",
    "try_expand_navigation",
    "decode_html",
    "StaticPageDriver",
]
