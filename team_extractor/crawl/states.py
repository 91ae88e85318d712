# team_extractor/crawl/states.py
"""
Per-company visit states and the allowed transitions between them.

    HOME     → HOME (next homepage variant), DISCOVER, TEAM
    DISCOVER → TEAM
    TEAM     → (terminal)

Each state has its own request type, so the handler dispatches on type and
every enqueue goes through ensure_transition().
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .urls import company_identity


class Label(str, Enum):
    HOME = "HOME"
    DISCOVER = "DISCOVER"
    TEAM = "TEAM"


@dataclass(frozen=True)
class HomeVisit:
    url: str
    start_url: str
    variants: tuple[str, ...] = ()
    variant_index: int = 0
    label: Label = field(default=Label.HOME, init=False)

    @property
    def domain_hint(self) -> str:
        return company_identity(self.start_url)[1]


@dataclass(frozen=True)
class DiscoverVisit:
    url: str
    company_domain: str
    company_url: str
    discovered_from: str
    discovery_score: int
    discovery_text: str = ""
    label: Label = field(default=Label.DISCOVER, init=False)


@dataclass(frozen=True)
class TeamVisit:
    url: str
    company_domain: str
    company_url: str
    discovered_from: str
    discovery_score: int
    discovery_text: str = ""
    label: Label = field(default=Label.TEAM, init=False)


Visit = HomeVisit | DiscoverVisit | TeamVisit

TRANSITIONS: dict[Label, frozenset[Label]] = {
    Label.HOME: frozenset({Label.HOME, Label.DISCOVER, Label.TEAM}),
    Label.DISCOVER: frozenset({Label.TEAM}),
    Label.TEAM: frozenset(),
}


class InvalidTransition(ValueError):
    pass


def is_terminal(label: Label) -> bool:
    return not TRANSITIONS[label]


def ensure_transition(src: Label, dst: Label) -> None:
    if dst not in TRANSITIONS[src]:
        raise InvalidTransition(f"{src.value} may not enqueue {dst.value}")


def visit_domain(visit: Visit) -> str:
    if isinstance(visit, HomeVisit):
        return visit.domain_hint
    return visit.company_domain


def unique_key(visit: Visit) -> str:
    """Frontier admission key: domain::LABEL::url."""
    return f"{visit_domain(visit)}::{visit.label.value}::{visit.url}"


__all__ = [
    "Label",
    "HomeVisit",
    "DiscoverVisit",
    "TeamVisit",
    "Visit",
    "TRANSITIONS",
    "InvalidTransition",
    "is_terminal",
    "ensure_transition",
    "visit_domain",
    "unique_key",
]
