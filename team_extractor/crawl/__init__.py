# team_extractor/crawl/__init__.py
"""
Crawl layer: start URL handling, link ranking, visit states, the frontier.

The browser driver and the runner import the extract and fetch packages, so
they are not re-exported here; import them from .browser and .runner.
"""

from __future__ import annotations

from .frontier import RequestQueue, run_frontier
from .navigation import (
    build_fallback_candidates,
    is_about_signal,
    is_team_signal,
    rank_about_page_candidates,
    rank_team_page_candidates,
)
from .registry import EmissionRegistry
from .states import DiscoverVisit, HomeVisit, Label, TeamVisit
from .urls import company_identity, homepage_variants, normalize_start

__all__ = [
    "RequestQueue",
    "run_frontier",
    "rank_team_page_candidates",
    "rank_about_page_candidates",
    "build_fallback_candidates",
    "is_team_signal",
    "is_about_signal",
    "EmissionRegistry",
    "Label",
    "HomeVisit",
    "DiscoverVisit",
    "TeamVisit",
    "normalize_start",
    "homepage_variants",
    "company_identity",
]
