# team_extractor/extract/__init__.py
from __future__ import annotations

from .dom import PageSnapshot, snapshot_from_html
from .emails import harvest_emails
from .merge import dedupe_people, extract_people, merge_people_by_name_title

"""
In-page extraction over a PageSnapshot.

Public API:
- snapshot_from_html(html, url) -> PageSnapshot
- extract_people(snapshot) -> list[Person]   (JSON-LD + cards + generic, merged)
- harvest_emails(snapshot) -> list[str]
- dedupe_people / merge_people_by_name_title

The LLM fallback lives in .ai_people and is only used by the crawler.
"""

__all__ = [
    "PageSnapshot",
    "snapshot_from_html",
    "extract_people",
    "harvest_emails",
    "dedupe_people",
    "merge_people_by_name_title",
]
