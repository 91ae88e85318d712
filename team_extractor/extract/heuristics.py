# team_extractor/extract/heuristics.py
"""
Static vocabulary tables and shape predicates for the DOM person heuristics.

The tables are configuration data; the card and generic extractors receive
them through HeuristicTables so callers (and tests) can swap vocabularies
without touching extraction code.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from team_extractor.utils import clean_text

ROLE_HINTS: tuple[str, ...] = (
    "ceo",
    "chief",
    "founder",
    "co-founder",
    "cofounder",
    "cto",
    "cfo",
    "coo",
    "vp",
    "vice president",
    "director",
    "head",
    "manager",
    "partner",
    "principal",
    "president",
    "owner",
    "lead",
    "marketing",
    "sales",
    "engineering",
    "product",
    "operations",
    "finance",
    "hr",
    "people",
)

GENERIC_ROLE_HINTS: tuple[str, ...] = (*ROLE_HINTS, "advisor", "chairman", "board", "member")

NAME_BLOCKLIST: tuple[str, ...] = ("privacy", "terms", "cookie", "legal", "careers", "jobs")

# Words that make a line a section label rather than a name
NAME_SECTION_WORDS: tuple[str, ...] = ("team", "leadership")

# (outer class fragment, inner class fragment); inner alone when outer is None.
# Most specific first.
CARD_SELECTORS: tuple[tuple[str | None, str], ...] = (
    ("team", "member"),
    ("team", "person"),
    ("team", "profile"),
    ("team", "card"),
    ("leadership", "member"),
    ("leadership", "person"),
    (None, "member"),
    (None, "person"),
    (None, "profile"),
    (None, "bio"),
)

CARD_HEADING_TAGS: frozenset[str] = frozenset({"h1", "h2", "h3", "h4", "h5", "strong", "b"})
CARD_ROLE_CLASS_FRAGMENTS: tuple[str, ...] = ("title", "role", "position", "job")

# Leaf-like elements that may carry a job title (h1/h2 are section headers)
GENERIC_TITLE_TAGS: frozenset[str] = frozenset(
    {"div", "span", "p", "h3", "h4", "h5", "h6", "li", "td", "b", "strong", "em", "i", "small"}
)

MAX_CARD_TEXT_CHARS = 800
MAX_CARD_LINES = 12
MAX_CARDS = 200
GENERIC_MAX_ANCESTOR_LEVELS = 3

_DIGIT_RE = re.compile(r"\d")


@dataclass(frozen=True)
class HeuristicTables:
    role_hints: tuple[str, ...] = ROLE_HINTS
    generic_role_hints: tuple[str, ...] = GENERIC_ROLE_HINTS
    name_blocklist: tuple[str, ...] = NAME_BLOCKLIST
    card_selectors: tuple[tuple[str | None, str], ...] = CARD_SELECTORS


DEFAULT_TABLES = HeuristicTables()


# ---------------------------------------------------------------------------
# Shape predicates
# ---------------------------------------------------------------------------


def _name_prefilter(v: str, blocklist: tuple[str, ...]) -> bool:
    if "@" in v or _DIGIT_RE.search(v):
        return False
    lower = v.lower()
    if any(b in lower for b in blocklist):
        return False
    return not any(w in lower for w in NAME_SECTION_WORDS)


def _is_capitalized_token(token: str) -> bool:
    return token[:1].isupper()


def looks_like_card_name(s: str | None, blocklist: tuple[str, ...] = NAME_BLOCKLIST) -> bool:
    """2-5 tokens, at least one capitalized, 3-80 chars, no digits or '@'."""
    v = clean_text(s)
    if len(v) < 3 or len(v) > 80:
        return False
    if not _name_prefilter(v, blocklist):
        return False
    parts = v.split(" ")
    if len(parts) < 2 or len(parts) > 5:
        return False
    return any(_is_capitalized_token(p) for p in parts)


def looks_like_strict_name(s: str | None, blocklist: tuple[str, ...] = NAME_BLOCKLIST) -> bool:
    """Stricter rule for the generic heuristic: 2-4 tokens, every one capitalized, 3-50 chars."""
    v = clean_text(s)
    if len(v) < 3 or len(v) > 50:
        return False
    if not _name_prefilter(v, blocklist):
        return False
    parts = v.split(" ")
    if len(parts) < 2 or len(parts) > 4:
        return False
    return all(_is_capitalized_token(p) for p in parts)


def looks_like_title(
    s: str | None,
    role_hints: tuple[str, ...] = ROLE_HINTS,
    *,
    max_len: int = 120,
    blocklist: tuple[str, ...] = NAME_BLOCKLIST,
) -> bool:
    v = clean_text(s)
    if len(v) < 2 or len(v) > max_len:
        return False
    if "@" in v:
        return False
    lower = v.lower()
    if any(b in lower for b in blocklist):
        return False
    return any(h in lower for h in role_hints)


__all__ = [
    "ROLE_HINTS",
    "GENERIC_ROLE_HINTS",
    "NAME_BLOCKLIST",
    "CARD_SELECTORS",
    "CARD_HEADING_TAGS",
    "CARD_ROLE_CLASS_FRAGMENTS",
    "GENERIC_TITLE_TAGS",
    "MAX_CARD_TEXT_CHARS",
    "MAX_CARD_LINES",
    "MAX_CARDS",
    "GENERIC_MAX_ANCESTOR_LEVELS",
    "HeuristicTables",
    "DEFAULT_TABLES",
    "looks_like_card_name",
    "looks_like_strict_name",
    "looks_like_title",
]
