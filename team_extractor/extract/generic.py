# team_extractor/extract/generic.py
"""
Generic title-proximity strategy.

For pages without card-like markup: find small leaf-like elements whose
text reads like a job title, then search outward (up to three ancestor
levels) for a nearby leaf whose text passes the strict name rule. The
container where the name was found also supplies a mailto: address and
social links. Precision over recall.
"""

from __future__ import annotations

import logging

from team_extractor.models import Person

from .dom import ElementSnapshot, PageSnapshot
from .emails import parse_mailto
from .heuristics import (
    DEFAULT_TABLES,
    GENERIC_MAX_ANCESTOR_LEVELS,
    GENERIC_TITLE_TAGS,
    HeuristicTables,
    looks_like_strict_name,
    looks_like_title,
)
from .merge import dedupe_people
from .socials import classify_social_links

log = logging.getLogger(__name__)

SOURCE_TAG = "generic"
GENERIC_TITLE_MAX_CHARS = 80


def _title_candidates(
    snapshot: PageSnapshot, tables: HeuristicTables
) -> list[tuple[ElementSnapshot, str]]:
    out: list[tuple[ElementSnapshot, str]] = []
    for el in snapshot.select_by_tags(GENERIC_TITLE_TAGS):
        if len(el.children) > 1:
            continue
        if len(el.children) == 1 and snapshot.elements[el.children[0]].text == el.text:
            continue
        text = el.clean_text
        if looks_like_title(
            text,
            tables.generic_role_hints,
            max_len=GENERIC_TITLE_MAX_CHARS,
            blocklist=tables.name_blocklist,
        ):
            out.append((el, text))
    return out


def _name_in(
    snapshot: PageSnapshot,
    container: ElementSnapshot,
    title_el: ElementSnapshot,
    title_text: str,
    tables: HeuristicTables,
) -> str | None:
    for node in snapshot.descendants(container):
        if node.tag not in GENERIC_TITLE_TAGS or node.children:
            continue
        if snapshot.contains(node, title_el) or snapshot.contains(title_el, node):
            continue
        text = node.clean_text
        if text != title_text and looks_like_strict_name(text, tables.name_blocklist):
            return text
    return None


def extract_people_from_generic_patterns(
    snapshot: PageSnapshot, tables: HeuristicTables = DEFAULT_TABLES
) -> list[Person]:
    out: list[Person] = []
    for title_el, title_text in _title_candidates(snapshot, tables):
        container = snapshot.elements[title_el.parent] if title_el.parent is not None else None
        depth = 0
        name = None
        while container is not None and depth < GENERIC_MAX_ANCESTOR_LEVELS:
            name = _name_in(snapshot, container, title_el, title_text, tables)
            if name:
                break
            container = (
                snapshot.elements[container.parent] if container.parent is not None else None
            )
            depth += 1

        if not name or container is None:
            continue

        links = snapshot.links(container)
        email = next((parse_mailto(h) for h in links if h.lower().startswith("mailto:")), None)
        out.append(
            Person(
                name=name,
                title=title_text,
                email=email,
                source=SOURCE_TAG,
                **classify_social_links(links),
            )
        )

    log.debug("Generic strategy found %d people on %s", len(out), snapshot.url)
    return dedupe_people(out)


__all__ = ["extract_people_from_generic_patterns", "SOURCE_TAG"]
