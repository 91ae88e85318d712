# team_extractor/crawl/navigation.py
"""
Candidate ranking for team / about / leadership pages.

Anchors collected from a page are scored against weighted phrase tables
(matched as substrings of the normalized anchor text and of the normalized
absolute URL), nudged by same-site and URL-simplicity bonuses, thresholded
at > 0, and returned best-first.

The phrase tables are plain data (RankingTables) handed to the ranker, so the
crawl layer can rank "team" and "about" flavours with the same code.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from urllib.parse import urldefrag, urljoin, urlsplit

from team_extractor.models import Anchor, Candidate
from team_extractor.utils import clamp, clean_text

from .urls import is_same_site, strip_www

log = logging.getLogger(__name__)

DEFAULT_MAX_CANDIDATES = 3
MAX_CANDIDATES_LIMIT = 10

# Schemes we never rank
_SKIP_PREFIXES: tuple[str, ...] = ("mailto:", "tel:", "javascript:")


@dataclass(frozen=True)
class PhraseWeight:
    pattern: str
    weight: int


@dataclass(frozen=True)
class RankingTables:
    positive: tuple[PhraseWeight, ...]
    negative: tuple[PhraseWeight, ...]
    same_site_bonus: int = 5
    off_site_penalty: int = -20
    no_query_bonus: int = 2
    short_path_bonus: int = 1
    short_path_max_segments: int = 2


# ---------------------------------------------------------------------------
# Phrase tables
# ---------------------------------------------------------------------------

NEGATIVE_PHRASES: tuple[PhraseWeight, ...] = (
    PhraseWeight("privacy", -40),
    PhraseWeight("terms", -40),
    PhraseWeight("cookie", -40),
    PhraseWeight("legal", -20),
    PhraseWeight("sitemap", -20),
    PhraseWeight("jobs", -20),
    PhraseWeight("careers", -20),
    PhraseWeight("press", -10),
    PhraseWeight("news", -10),
    PhraseWeight("blog", -10),
    PhraseWeight("login", -30),
    PhraseWeight("sign in", -30),
    PhraseWeight("signup", -30),
    PhraseWeight("register", -30),
)

TEAM_TABLES = RankingTables(
    positive=(
        PhraseWeight("meet the team", 30),
        PhraseWeight("our team", 28),
        PhraseWeight("team", 22),
        PhraseWeight("leadership team", 28),
        PhraseWeight("leadership", 22),
        PhraseWeight("executive team", 24),
        PhraseWeight("executives", 18),
        PhraseWeight("management", 18),
        PhraseWeight("people", 14),
        PhraseWeight("partners", 12),
        PhraseWeight("staff", 16),
        PhraseWeight("founders", 18),
        PhraseWeight("about us", 14),
        PhraseWeight("about", 10),
        PhraseWeight("who we are", 12),
    ),
    negative=NEGATIVE_PHRASES,
)

ABOUT_TABLES = RankingTables(
    positive=(
        PhraseWeight("about us", 20),
        PhraseWeight("about", 16),
        PhraseWeight("who we are", 18),
        PhraseWeight("who-we-are", 18),
        PhraseWeight("our story", 14),
        PhraseWeight("our-story", 14),
        PhraseWeight("company", 12),
        PhraseWeight("mission", 8),
        PhraseWeight("values", 6),
        PhraseWeight("culture", 6),
    ),
    negative=NEGATIVE_PHRASES,
)

FALLBACK_TEAM_PATHS: tuple[str, ...] = (
    "/team",
    "/our-team",
    "/meet-the-team",
    "/leadership",
    "/leadership-team",
    "/executive-team",
    "/management",
    "/people",
    "/about",
    "/about-us",
    "/who-we-are",
    "/company",
    "/company/team",
    "/about/team",
    "/about-us/team",
)

TEAM_SIGNAL_RE = re.compile(
    r"(team|leadership|executive|management|people|staff"
    r"|founder|founders|partner|partners|board|directors)",
    re.IGNORECASE,
)
ABOUT_SIGNAL_RE = re.compile(
    r"(about|company|who\s+we\s+are|who-we-are|our\s+story|our-story|mission|values|culture)",
    re.IGNORECASE,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _normalize(s: str | None) -> str:
    return clean_text(s).lower()


def _score_phrases(s: str, tables: RankingTables) -> int:
    score = 0
    for pw in tables.positive:
        if pw.pattern in s:
            score += pw.weight
    for pw in tables.negative:
        if pw.pattern in s:
            score += pw.weight
    return score


def _is_skippable_href(href: str | None) -> bool:
    h = (href or "").strip().lower()
    if not h or h.startswith("#"):
        return True
    return h.startswith(_SKIP_PREFIXES)


def _resolve(href: str, base_url: str) -> str | None:
    try:
        url, _frag = urldefrag(urljoin(base_url, href.strip()))
        parts = urlsplit(url)
    except ValueError:
        return None
    if parts.scheme.lower() not in ("http", "https") or not parts.netloc:
        return None
    return url


def clamp_max_candidates(value: object, default: int = DEFAULT_MAX_CANDIDATES) -> int:
    try:
        n = int(value) if value is not None else default
    except (TypeError, ValueError):
        n = default
    return clamp(n or default, 1, MAX_CANDIDATES_LIMIT)


def score_candidate_url(url: str, text: str, root_domain: str, tables: RankingTables) -> int:
    score = _score_phrases(_normalize(text), tables)
    score += _score_phrases(_normalize(url), tables)

    if is_same_site(url, root_domain):
        score += tables.same_site_bonus
    else:
        score += tables.off_site_penalty

    parts = urlsplit(url)
    if not parts.query:
        score += tables.no_query_bonus
    segments = [p for p in parts.path.split("/") if p]
    if len(segments) <= tables.short_path_max_segments:
        score += tables.short_path_bonus
    return score


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def rank_candidates(
    anchors: Iterable[Anchor],
    base_url: str,
    max_candidates: object = DEFAULT_MAX_CANDIDATES,
    tables: RankingTables = TEAM_TABLES,
) -> list[Candidate]:
    """Score anchors against `tables` and return the best (score > 0) candidates first."""
    root_domain = strip_www(urlsplit(base_url).hostname)

    scored: list[Candidate] = []
    for a in anchors or ():
        if _is_skippable_href(a.href):
            continue
        url = _resolve(a.href, base_url)
        if url is None:
            continue
        text = clean_text(a.text)
        score = score_candidate_url(url, text, root_domain, tables)
        if score <= 0:
            continue
        scored.append(Candidate(url=url, score=score, text=text))

    # Score desc, then shorter URL; sort is stable for equal keys.
    scored.sort(key=lambda c: (-c.score, len(c.url)))

    limit = clamp_max_candidates(max_candidates)
    seen: set[str] = set()
    out: list[Candidate] = []
    for c in scored:
        if c.url in seen:
            continue
        seen.add(c.url)
        out.append(c)
        if len(out) >= limit:
            break
    return out


def rank_team_page_candidates(
    anchors: Iterable[Anchor], base_url: str, max_candidates: object = DEFAULT_MAX_CANDIDATES
) -> list[Candidate]:
    return rank_candidates(anchors, base_url, max_candidates, TEAM_TABLES)


def rank_about_page_candidates(
    anchors: Iterable[Anchor], base_url: str, max_candidates: object = DEFAULT_MAX_CANDIDATES
) -> list[Candidate]:
    return rank_candidates(anchors, base_url, max_candidates, ABOUT_TABLES)


def fallback_team_paths() -> list[str]:
    return list(FALLBACK_TEAM_PATHS)


def build_fallback_candidates(
    base_url: str,
    max_candidates: object = DEFAULT_MAX_CANDIDATES,
    paths: Sequence[str] = FALLBACK_TEAM_PATHS,
) -> list[Candidate]:
    """Conventional path guesses resolved against the site origin (low confidence, score 1)."""
    parts = urlsplit(base_url)
    origin = f"{parts.scheme}://{parts.netloc}"
    limit = clamp_max_candidates(max_candidates)
    return [
        Candidate(url=urljoin(origin, p), score=1, text=f"fallback:{p}") for p in paths[:limit]
    ]


def is_team_signal(candidate: Candidate) -> bool:
    return bool(TEAM_SIGNAL_RE.search(f"{candidate.text} {candidate.url}"))


def is_about_signal(candidate: Candidate) -> bool:
    return bool(ABOUT_SIGNAL_RE.search(f"{candidate.text} {candidate.url}"))


def merge_anchors(a: Iterable[Anchor], b: Iterable[Anchor]) -> list[Anchor]:
    """Union of two anchor lists, first occurrence of each href wins."""
    out: list[Anchor] = []
    seen: set[str] = set()
    for item in [*(a or ()), *(b or ())]:
        href = (item.href or "").strip()
        if not href or href in seen:
            continue
        seen.add(href)
        out.append(Anchor(href=href, text=clean_text(item.text)))
    return out


__all__ = [
    "PhraseWeight",
    "RankingTables",
    "TEAM_TABLES",
    "ABOUT_TABLES",
    "NEGATIVE_PHRASES",
    "FALLBACK_TEAM_PATHS",
    "DEFAULT_MAX_CANDIDATES",
    "clamp_max_candidates",
    "score_candidate_url",
    "rank_candidates",
    "rank_team_page_candidates",
    "rank_about_page_candidates",
    "fallback_team_paths",
    "build_fallback_candidates",
    "is_team_signal",
    "is_about_signal",
    "merge_anchors",
]
