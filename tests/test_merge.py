# tests/test_merge.py
from __future__ import annotations

import json

from team_extractor.extract.dom import snapshot_from_html
from team_extractor.extract.merge import (
    dedupe_people,
    extract_people,
    merge_people_by_name_title,
    normalize_person,
)
from team_extractor.models import Person


def _keys(people):
    return sorted(p.identity_key() for p in people)


def test_combine_fills_missing_email_and_unions_sources():
    merged = merge_people_by_name_title(
        [
            Person(name="A", title="CEO", email=None, source="jsonld"),
            Person(name="A", title="CEO", email="a@x.com", source="cards"),
        ]
    )
    assert len(merged) == 1
    assert merged[0].email == "a@x.com"
    assert set(merged[0].source.split(",")) == {"jsonld", "cards"}


def test_combine_keeps_first_values_and_fills_links():
    merged = merge_people_by_name_title(
        [
            Person(name="A", title="CEO", email="first@x.com", source="cards"),
            Person(
                name="a ",
                title="ceo",
                email="second@x.com",
                github_url="https://github.com/a",
                source="cards",
            ),
        ]
    )
    assert len(merged) == 1
    assert merged[0].email == "first@x.com"
    assert merged[0].github_url == "https://github.com/a"
    assert merged[0].source == "cards"


def test_different_title_wording_is_not_merged():
    merged = merge_people_by_name_title(
        [
            Person(name="Jane Doe", title="CEO"),
            Person(name="Jane Doe", title="Chief Executive Officer"),
        ]
    )
    assert len(merged) == 2


def test_merge_is_idempotent():
    people = [
        Person(name="Jane Doe", title="CEO", source="jsonld"),
        Person(name="Jane Doe", title="CEO", email="jane@example.com", source="generic"),
        Person(name="John Smith", title=None, source="cards"),
        Person(name="John Smith", title="CTO", source="cards"),
    ]
    once = merge_people_by_name_title(dedupe_people(people))
    twice = merge_people_by_name_title(dedupe_people(once))
    assert once == twice
    assert _keys(once) == _keys(twice)


def test_dedupe_normalizes_and_drops_empty_names():
    people = dedupe_people(
        [
            Person(name="  Jane   Doe ", title=" CEO ", email="JANE@EXAMPLE.COM"),
            Person(name="Jane Doe", title="CEO", email="jane@example.com"),
            Person(name="   ", title="CTO"),
            Person(name="Bob Roe", email="not-an-email"),
        ]
    )
    assert [(p.name, p.title, p.email) for p in people] == [
        ("Jane Doe", "CEO", "jane@example.com"),
        ("Bob Roe", None, None),
    ]
    assert normalize_person(Person(name="")) is None


def test_extract_people_combines_strategies(team_page_html):
    ld = json.dumps({"@type": "Person", "name": "Jane Doe", "jobTitle": "Chief Executive Officer"})
    html = team_page_html.replace(
        "<head>", f'<head><script type="application/ld+json">{ld}</script>'
    )
    people = extract_people(snapshot_from_html(html, "https://example.com/team"))

    by_name = {p.name: p for p in people}
    assert set(by_name) == {"Jane Doe", "John Smith"}
    jane = by_name["Jane Doe"]
    assert jane.email == "jane@example.com"
    assert jane.linkedin_url == "https://www.linkedin.com/in/janedoe"
    assert {"jsonld", "cards"} <= set(jane.source.split(","))
