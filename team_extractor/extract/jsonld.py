# team_extractor/extract/jsonld.py
"""
Structured-data strategy: walk every JSON-LD block for Person-typed nodes.

The walk visits nested objects and arrays at any depth (including @graph),
so a Person nested under Organization.employee or Organization.founder is
found the same way as a top-level one. Blocks that are not valid JSON are
skipped.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from typing import Any

from team_extractor.models import Person
from team_extractor.utils import clean_text

from .emails import clean_email
from .merge import dedupe_people
from .socials import classify_social_links, social_kind

log = logging.getLogger(__name__)

SOURCE_TAG = "jsonld"


def _as_list(value: Any) -> list[Any]:
    if value is None:
        return []
    return value if isinstance(value, list) else [value]


def is_person_type(type_value: Any) -> bool:
    return any(isinstance(t, str) and "person" in t.lower() for t in _as_list(type_value))


def _person_name(node: dict[str, Any]) -> str | None:
    name = node.get("name")
    if isinstance(name, str) and name.strip():
        return clean_text(name)
    given = node.get("givenName") if isinstance(node.get("givenName"), str) else ""
    family = node.get("familyName") if isinstance(node.get("familyName"), str) else ""
    full = clean_text(f"{given} {family}")
    return full or None


def _url_values(node: dict[str, Any]) -> list[str]:
    out: list[str] = []
    for key in ("url", "sameAs"):
        for v in _as_list(node.get(key)):
            if isinstance(v, str) and v.strip():
                out.append(v.strip())
    return out


def _person_from_node(node: dict[str, Any]) -> Person | None:
    name = _person_name(node)
    if not name:
        return None

    raw_title = node.get("jobTitle")
    title = (clean_text(raw_title) or None) if isinstance(raw_title, str) else None
    raw_email = node.get("email")
    email = clean_email(raw_email) if isinstance(raw_email, str) else None

    urls = _url_values(node)
    socials = classify_social_links(urls)
    profile = next(
        (u for u in urls if not social_kind(u) and u.lower().startswith(("http://", "https://"))),
        None,
    )
    return Person(
        name=name, title=title, email=email, profile_url=profile, source=SOURCE_TAG, **socials
    )


def _walk(root: Any, out: list[Person]) -> None:
    """Depth-first, document order."""
    stack: list[Any] = [root]
    while stack:
        node = stack.pop()
        if isinstance(node, list):
            stack.extend(reversed(node))
            continue
        if not isinstance(node, dict):
            continue

        if is_person_type(node.get("@type")):
            person = _person_from_node(node)
            if person is not None:
                out.append(person)

        stack.extend(reversed(list(node.values())))


def extract_people_from_json_ld(blocks: Iterable[str | None]) -> list[Person]:
    people: list[Person] = []
    for raw in blocks or ():
        if not raw or not raw.strip():
            continue
        try:
            parsed = json.loads(raw)
        except (ValueError, RecursionError) as exc:
            log.debug("Skipping invalid JSON-LD block: %s", exc)
            continue
        _walk(parsed, people)
    return dedupe_people(people)


__all__ = ["extract_people_from_json_ld", "is_person_type", "SOURCE_TAG"]
