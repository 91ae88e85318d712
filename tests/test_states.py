# tests/test_states.py
from __future__ import annotations

import pytest

from team_extractor.crawl.states import (
    TRANSITIONS,
    DiscoverVisit,
    HomeVisit,
    InvalidTransition,
    Label,
    TeamVisit,
    ensure_transition,
    is_terminal,
    unique_key,
    visit_domain,
)


def _team(url: str = "https://example.com/team") -> TeamVisit:
    return TeamVisit(
        url=url,
        company_domain="example.com",
        company_url="https://example.com/",
        discovered_from="https://example.com/",
        discovery_score=42,
    )


def test_labels_are_fixed_per_type():
    home = HomeVisit(url="https://example.com/", start_url="https://www.example.com/")
    disc = DiscoverVisit(
        url="https://example.com/about",
        company_domain="example.com",
        company_url="https://example.com/",
        discovered_from="https://example.com/",
        discovery_score=10,
    )
    assert (home.label, disc.label, _team().label) == (Label.HOME, Label.DISCOVER, Label.TEAM)
    assert visit_domain(home) == "example.com"
    assert visit_domain(disc) == "example.com"


@pytest.mark.parametrize(
    "src,dst",
    [
        (Label.HOME, Label.HOME),
        (Label.HOME, Label.DISCOVER),
        (Label.HOME, Label.TEAM),
        (Label.DISCOVER, Label.TEAM),
    ],
)
def test_allowed_transitions(src, dst):
    ensure_transition(src, dst)


@pytest.mark.parametrize(
    "src,dst",
    [
        (Label.DISCOVER, Label.DISCOVER),
        (Label.DISCOVER, Label.HOME),
        (Label.TEAM, Label.TEAM),
        (Label.TEAM, Label.DISCOVER),
    ],
)
def test_forbidden_transitions(src, dst):
    with pytest.raises(InvalidTransition):
        ensure_transition(src, dst)


def test_only_team_is_terminal():
    assert [label for label in TRANSITIONS if is_terminal(label)] == [Label.TEAM]


def test_unique_key():
    assert unique_key(_team()) == "example.com::TEAM::https://example.com/team"
