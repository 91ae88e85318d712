# team_extractor/extract/dom.py
"""
Serialized page snapshot.

A PageSnapshot is the only thing the person/contact heuristics ever look at:
a pre-order list of elements (tag, class attribute, block-aware inner text,
parent/children indices, resolved href) plus the page HTML, visible text,
raw JSON-LD blocks and collected anchors. All heuristics are pure functions
over this structure, so they run the same whether the snapshot came from a
real browser or from BeautifulSoup over fetched HTML.

Subtree membership is an index range: element i's descendants are exactly
elements[i + 1 : elements[i].end].
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from urllib.parse import urljoin

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import PageElement, PreformattedString

from team_extractor.models import Anchor
from team_extractor.utils import clean_text

log = logging.getLogger(__name__)

# Never part of the element list or the visible text
SKIP_TAGS: frozenset[str] = frozenset(
    {"script", "style", "template", "svg", "noscript", "head", "iframe", "object", "canvas"}
)

# Elements rendered on their own line(s) by innerText
BLOCK_TAGS: frozenset[str] = frozenset(
    {
        "address", "article", "aside", "blockquote", "body", "dd", "details", "dialog",
        "div", "dl", "dt", "fieldset", "figcaption", "figure", "footer", "form",
        "h1", "h2", "h3", "h4", "h5", "h6", "header", "hr", "li", "main", "nav",
        "ol", "p", "pre", "section", "summary", "table", "tr", "ul", "caption",
    }
)  # fmt: skip

_SPACES_RE = re.compile(r"\s+")
_JSON_LD_TYPE = "application/ld+json"


@dataclass(frozen=True)
class ElementSnapshot:
    index: int
    tag: str
    classes: str  # raw class attribute ("" when absent)
    text: str  # inner text; lines separated by "\n", each line whitespace-collapsed
    parent: int | None
    children: tuple[int, ...]
    end: int  # exclusive end of this element's subtree in PageSnapshot.elements
    href: str | None = None  # absolute href for <a href>

    def has_class(self, fragment: str) -> bool:
        """CSS [class*=fragment] semantics."""
        return fragment in self.classes

    @property
    def clean_text(self) -> str:
        return clean_text(self.text)


@dataclass
class PageSnapshot:
    url: str
    html: str
    text: str
    elements: list[ElementSnapshot] = field(default_factory=list)
    json_ld: list[str] = field(default_factory=list)
    anchors: list[Anchor] = field(default_factory=list)

    def descendants(self, el: ElementSnapshot) -> list[ElementSnapshot]:
        return self.elements[el.index + 1 : el.end]

    def ancestors(self, el: ElementSnapshot) -> Iterator[ElementSnapshot]:
        idx = el.parent
        while idx is not None:
            node = self.elements[idx]
            yield node
            idx = node.parent

    def contains(self, outer: ElementSnapshot, inner: ElementSnapshot) -> bool:
        """True if inner is outer or lies inside outer's subtree."""
        return outer.index <= inner.index < outer.end

    def links(self, el: ElementSnapshot) -> list[str]:
        """Resolved hrefs of the element and its descendants, document order."""
        return [e.href for e in self.elements[el.index : el.end] if e.href]

    def select_by_tags(self, tags: frozenset[str] | set[str]) -> list[ElementSnapshot]:
        return [e for e in self.elements if e.tag in tags]

    def mailto_hrefs(self) -> list[str]:
        return [a.href for a in self.anchors if a.href.lower().startswith("mailto:")]


# ---------------------------------------------------------------------------
# Building
# ---------------------------------------------------------------------------


def _inner_text(raw: str) -> str:
    lines = (clean_text(line) for line in raw.split("\n"))
    return "\n".join(line for line in lines if line)


def _resolve_href(base_url: str, href: str) -> str:
    try:
        return urljoin(base_url, href.strip())
    except ValueError:
        return href.strip()


@dataclass
class _Frame:
    node: Tag
    index: int
    parent: int | None
    it: Iterator[PageElement]
    pieces: list[str] = field(default_factory=list)
    children: list[int] = field(default_factory=list)


class _Builder:
    """Pre-order serializer over the soup; iterative, page nesting depth is unbounded."""

    def __init__(self, url: str) -> None:
        self.url = url
        self.slots: list[ElementSnapshot | None] = []

    def _enter(self, node: Tag, parent: int | None) -> _Frame:
        idx = len(self.slots)
        self.slots.append(None)
        return _Frame(node=node, index=idx, parent=parent, it=iter(node.children))

    def _leave(self, frame: _Frame) -> str:
        node = frame.node
        raw = "".join(frame.pieces)
        tag = (node.name or "").lower()
        if tag in BLOCK_TAGS:
            raw = f"\n{raw}\n"

        href = None
        if tag == "a" and node.get("href"):
            href = _resolve_href(self.url, str(node.get("href")))

        cls = node.get("class")
        classes = " ".join(cls) if isinstance(cls, list) else str(cls or "")

        self.slots[frame.index] = ElementSnapshot(
            index=frame.index,
            tag=tag,
            classes=classes,
            text=_inner_text(raw),
            parent=frame.parent,
            children=tuple(frame.children),
            end=len(self.slots),
            href=href,
        )
        return raw

    def walk(self, root: Tag) -> str:
        stack = [self._enter(root, None)]
        raw = ""
        while stack:
            frame = stack[-1]
            child = next(frame.it, None)
            if child is None:
                stack.pop()
                raw = self._leave(frame)
                if stack:
                    stack[-1].pieces.append(raw)
                continue

            if isinstance(child, PreformattedString):  # comments, CDATA, doctype, PIs
                continue
            if isinstance(child, NavigableString):
                frame.pieces.append(_SPACES_RE.sub(" ", str(child)))
                continue
            if not isinstance(child, Tag):
                continue
            name = (child.name or "").lower()
            if name in SKIP_TAGS:
                continue
            if name == "br":
                frame.pieces.append("\n")
                continue
            frame.children.append(len(self.slots))
            stack.append(self._enter(child, frame.index))
        return raw


def _anchor_text(tag: Tag, inner: str) -> str:
    parts = [inner, tag.get("aria-label"), tag.get("title")]
    return " ".join(c for c in (clean_text(p) for p in parts) if c)


def snapshot_from_html(html: str, url: str) -> PageSnapshot:
    """Parse HTML with BeautifulSoup and serialize it into a PageSnapshot."""
    soup = BeautifulSoup(html or "", "html.parser")

    json_ld = [
        s.get_text()
        for s in soup.find_all("script")
        if (s.get("type") or "").strip().lower() == _JSON_LD_TYPE and s.get_text().strip()
    ]

    root = soup.body or soup
    builder = _Builder(url)
    raw = builder.walk(root) if isinstance(root, Tag) else ""
    elements = [e for e in builder.slots if e is not None]

    anchors: list[Anchor] = []
    for a in root.find_all("a", href=True) if isinstance(root, Tag) else ():
        href = _resolve_href(url, str(a.get("href")))
        if not href:
            continue
        anchors.append(Anchor(href=href, text=_anchor_text(a, a.get_text(" "))))

    log.debug("Snapshot %s: %d elements, %d anchors", url, len(elements), len(anchors))
    return PageSnapshot(
        url=url,
        html=html or "",
        text=_inner_text(raw),
        elements=elements,
        json_ld=json_ld,
        anchors=anchors,
    )


__all__ = [
    "ElementSnapshot",
    "PageSnapshot",
    "snapshot_from_html",
    "SKIP_TAGS",
    "BLOCK_TAGS",
]
