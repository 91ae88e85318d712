# team_extractor/extract/merge.py
"""
Fusing person records.

dedupe_people:
    normalize name/title/email, drop empty names, first record per
    identity key (name|title|email) wins. Idempotent.

merge_people_by_name_title:
    cross-strategy combine keyed by name|title only. Missing email and
    link fields are filled from later records with the same key and the
    source tags are unioned ("jsonld,cards"). Titles are compared exactly
    (lower-cased), so "CEO" and "Chief Executive Officer" stay separate.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

from team_extractor.models import LINK_FIELDS, Person
from team_extractor.utils import clean_text

from .emails import clean_email

if TYPE_CHECKING:
    from .dom import PageSnapshot
    from .heuristics import HeuristicTables


def _split_tags(source: str | None) -> list[str]:
    return [t.strip() for t in (source or "").split(",") if t.strip()]


def _union_tags(a: str | None, b: str | None) -> str | None:
    tags = _split_tags(a)
    for t in _split_tags(b):
        if t not in tags:
            tags.append(t)
    return ",".join(tags) or None


def normalize_person(p: Person) -> Person | None:
    name = clean_text(p.name)
    if not name:
        return None
    return p.copy(
        name=name,
        title=clean_text(p.title) or None,
        email=clean_email(p.email),
    )


def dedupe_people(people: Iterable[Person]) -> list[Person]:
    seen: set[str] = set()
    out: list[Person] = []
    for raw in people or ():
        p = normalize_person(raw)
        if p is None:
            continue
        key = p.identity_key()
        if key in seen:
            continue
        seen.add(key)
        out.append(p)
    return out


def merge_people_by_name_title(people: Iterable[Person]) -> list[Person]:
    by_key: dict[str, Person] = {}
    for raw in people or ():
        p = normalize_person(raw)
        if p is None:
            continue
        key = p.name_title_key()
        existing = by_key.get(key)
        if existing is None:
            by_key[key] = p
            continue

        changes: dict[str, str | None] = {}
        if not existing.email and p.email:
            changes["email"] = p.email
        for f in LINK_FIELDS:
            if not getattr(existing, f) and getattr(p, f):
                changes[f] = getattr(p, f)
        tags = _union_tags(existing.source, p.source)
        if tags != existing.source:
            changes["source"] = tags
        if changes:
            by_key[key] = existing.copy(**changes)
    return list(by_key.values())


def extract_people(snapshot: PageSnapshot, tables: HeuristicTables | None = None) -> list[Person]:
    """Run the structured-data, card and generic strategies and combine their output."""
    from .generic import extract_people_from_generic_patterns
    from .heuristics import DEFAULT_TABLES
    from .jsonld import extract_people_from_json_ld
    from .people_cards import extract_people_from_cards

    t = tables or DEFAULT_TABLES
    combined = [
        *extract_people_from_json_ld(snapshot.json_ld),
        *extract_people_from_cards(snapshot, t),
        *extract_people_from_generic_patterns(snapshot, t),
    ]
    return merge_people_by_name_title(dedupe_people(combined))


__all__ = [
    "normalize_person",
    "dedupe_people",
    "merge_people_by_name_title",
    "extract_people",
]
