# team_extractor/extract/people_cards.py
"""
DOM card strategy.

Team pages usually render each person as a small repeated block ("card")
whose class attribute mentions member/person/profile/bio. For every element
matching one of the card selectors (most specific first):

  - skip elements already visited and blocks whose text is bio-length
  - split the inner text into lines (first few only); need at least two
  - name: first heading-like descendant that looks like a name, else the
    first line that does
  - title: first title/role/position/job-class descendant that looks like
    a role, else the first later line that does
  - email: first mailto: link in the card
  - socials + profile URL: from the card's outgoing links

Usage:
    from team_extractor.extract.dom import snapshot_from_html
    from team_extractor.extract.people_cards import extract_people_from_cards

    people = extract_people_from_cards(snapshot_from_html(html, url))
"""

from __future__ import annotations

import logging
from collections.abc import Iterator

from team_extractor.models import Person

from .dom import ElementSnapshot, PageSnapshot
from .emails import parse_mailto
from .heuristics import (
    CARD_HEADING_TAGS,
    CARD_ROLE_CLASS_FRAGMENTS,
    DEFAULT_TABLES,
    MAX_CARD_LINES,
    MAX_CARD_TEXT_CHARS,
    MAX_CARDS,
    HeuristicTables,
    looks_like_card_name,
    looks_like_title,
)
from .merge import dedupe_people
from .socials import classify_social_links, pick_profile_url

log = logging.getLogger(__name__)

SOURCE_TAG = "cards"


def _matches(snapshot: PageSnapshot, el: ElementSnapshot, outer: str | None, inner: str) -> bool:
    if not el.has_class(inner):
        return False
    if outer is None:
        return True
    return any(a.has_class(outer) for a in snapshot.ancestors(el))


def _card_elements(snapshot: PageSnapshot, tables: HeuristicTables) -> Iterator[ElementSnapshot]:
    seen: set[int] = set()
    for outer, inner in tables.card_selectors:
        for el in snapshot.elements:
            if el.index in seen or not _matches(snapshot, el, outer, inner):
                continue
            seen.add(el.index)
            yield el


def _card_name(
    snapshot: PageSnapshot, card: ElementSnapshot, lines: list[str], tables: HeuristicTables
) -> str | None:
    heading = next((d for d in snapshot.descendants(card) if d.tag in CARD_HEADING_TAGS), None)
    if heading is not None and looks_like_card_name(heading.clean_text, tables.name_blocklist):
        return heading.clean_text
    return next((ln for ln in lines if looks_like_card_name(ln, tables.name_blocklist)), None)


def _card_title(
    snapshot: PageSnapshot,
    card: ElementSnapshot,
    lines: list[str],
    name: str,
    tables: HeuristicTables,
) -> str | None:
    role_el = next(
        (
            d
            for d in snapshot.descendants(card)
            if any(d.has_class(f) for f in CARD_ROLE_CLASS_FRAGMENTS)
        ),
        None,
    )
    if role_el is not None and looks_like_title(
        role_el.clean_text, tables.role_hints, blocklist=tables.name_blocklist
    ):
        return role_el.clean_text

    start = lines.index(name) + 1 if name in lines else 0
    for line in lines[start:]:
        if looks_like_title(line, tables.role_hints, blocklist=tables.name_blocklist):
            return line
    return None


def _card_email(snapshot: PageSnapshot, card: ElementSnapshot) -> str | None:
    for href in snapshot.links(card):
        if href.lower().startswith("mailto:"):
            return parse_mailto(href)
    return None


def extract_people_from_cards(
    snapshot: PageSnapshot, tables: HeuristicTables = DEFAULT_TABLES
) -> list[Person]:
    out: list[Person] = []
    for card in _card_elements(snapshot, tables):
        if len(out) >= MAX_CARDS:
            break

        full = card.clean_text
        if not full or len(full) > MAX_CARD_TEXT_CHARS:
            continue

        lines = card.text.split("\n")[:MAX_CARD_LINES]
        if len(lines) < 2:
            continue

        name = _card_name(snapshot, card, lines, tables)
        if not name:
            continue

        links = snapshot.links(card)
        out.append(
            Person(
                name=name,
                title=_card_title(snapshot, card, lines, name, tables),
                email=_card_email(snapshot, card),
                profile_url=pick_profile_url(links, snapshot.url),
                source=SOURCE_TAG,
                **classify_social_links(links),
            )
        )

    log.debug("Card strategy found %d people on %s", len(out), snapshot.url)
    return dedupe_people(out)


__all__ = ["extract_people_from_cards", "SOURCE_TAG"]
