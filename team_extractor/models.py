# team_extractor/models.py
"""
Record types shared by the ranking, extraction and crawl layers.

  - Anchor: one (href, text) link collected from a rendered page
  - Candidate: a ranked prospective team/about page (never persisted)
  - Person: one extracted person; name always present and trimmed
  - OutputRecord: one emission to the output sink
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any

SOCIAL_FIELDS: tuple[str, ...] = ("linkedin_url", "twitter_url", "github_url", "bluesky_url")
LINK_FIELDS: tuple[str, ...] = ("profile_url", *SOCIAL_FIELDS)


@dataclass(frozen=True)
class Anchor:
    href: str
    text: str = ""


@dataclass(frozen=True)
class Candidate:
    url: str  # absolute, fragment stripped
    score: int
    text: str = ""


@dataclass
class Person:
    """
    One person extracted from a page.

    Fields:
      - name: display name (trimmed, non-empty)
      - title: job title / role text when found
      - email: lower-cased, strictly validated address when found
      - profile_url: same-site bio/profile page
      - linkedin_url / twitter_url / github_url / bluesky_url: classified social links
      - source: strategy tag ("jsonld", "cards", "generic", "llm") or a comma-joined set
    """

    name: str
    title: str | None = None
    email: str | None = None
    profile_url: str | None = None
    linkedin_url: str | None = None
    twitter_url: str | None = None
    github_url: str | None = None
    bluesky_url: str | None = None
    source: str | None = None

    def identity_key(self) -> str:
        return f"{self.name.lower()}|{(self.title or '').lower()}|{self.email or ''}"

    def name_title_key(self) -> str:
        return f"{self.name.strip().lower()}|{(self.title or '').strip().lower()}"

    def copy(self, **changes: Any) -> Person:
        return replace(self, **changes)


@dataclass
class OutputRecord:
    company_domain: str | None
    company_url: str | None
    source_url: str | None
    extracted_at: str
    notes: str = ""
    name: str | None = None
    title: str | None = None
    email: str | None = None
    profile_url: str | None = None
    linkedin_url: str | None = None
    twitter_url: str | None = None
    github_url: str | None = None
    bluesky_url: str | None = None
    emails_on_page: list[str] = field(default_factory=list)

    @classmethod
    def for_person(cls, person: Person, **kwargs: Any) -> OutputRecord:
        return cls(
            name=person.name,
            title=person.title,
            email=person.email,
            profile_url=person.profile_url,
            linkedin_url=person.linkedin_url,
            twitter_url=person.twitter_url,
            github_url=person.github_url,
            bluesky_url=person.bluesky_url,
            **kwargs,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "companyDomain": self.company_domain,
            "companyUrl": self.company_url,
            "sourceUrl": self.source_url,
            "name": self.name,
            "title": self.title,
            "email": self.email,
            "profileUrl": self.profile_url,
            "linkedinUrl": self.linkedin_url,
            "twitterUrl": self.twitter_url,
            "githubUrl": self.github_url,
            "blueskyUrl": self.bluesky_url,
            "emailsOnPage": list(self.emails_on_page),
            "extractedAt": self.extracted_at,
            "notes": self.notes,
        }


__all__ = [
    "Anchor",
    "Candidate",
    "Person",
    "OutputRecord",
    "SOCIAL_FIELDS",
    "LINK_FIELDS",
]
