# tests/test_jsonld.py
from __future__ import annotations

import json

from team_extractor.extract.dom import snapshot_from_html
from team_extractor.extract.jsonld import extract_people_from_json_ld, is_person_type


def _block(obj) -> str:
    return json.dumps(obj)


def test_person_nested_under_graph_and_organization():
    block = _block(
        {
            "@context": "https://schema.org",
            "@graph": [
                {
                    "@type": "Organization",
                    "name": "Example Inc",
                    "employee": [
                        {
                            "@type": "Person",
                            "name": " Jane   Doe ",
                            "jobTitle": "CEO",
                            "email": "Jane@Example.com",
                            "sameAs": [
                                "https://www.linkedin.com/in/janedoe",
                                "https://example.com/people/jane",
                            ],
                        }
                    ],
                }
            ],
        }
    )
    people = extract_people_from_json_ld([block])

    assert len(people) == 1
    p = people[0]
    assert p.name == "Jane Doe"
    assert p.title == "CEO"
    assert p.email == "jane@example.com"
    assert p.linkedin_url == "https://www.linkedin.com/in/janedoe"
    assert p.profile_url == "https://example.com/people/jane"
    assert p.source == "jsonld"


def test_given_and_family_name():
    block = _block({"@type": ["Thing", "Person"], "givenName": "Ada", "familyName": "Lovelace"})
    people = extract_people_from_json_ld([block])
    assert [(p.name, p.title, p.email) for p in people] == [("Ada Lovelace", None, None)]


def test_invalid_blocks_are_skipped():
    good = _block({"@type": "Person", "name": "Grace Hopper", "email": "not-an-email"})
    people = extract_people_from_json_ld(["{not json", None, "  ", good])
    assert [p.name for p in people] == ["Grace Hopper"]
    assert people[0].email is None


def test_duplicates_collapse():
    node = {"@type": "Person", "name": "Alan Turing", "jobTitle": "Founder"}
    people = extract_people_from_json_ld([_block(node), _block([node, node])])
    assert len(people) == 1


def test_is_person_type():
    assert is_person_type("Person") is True
    assert is_person_type(["schema:Person"]) is True
    assert is_person_type("Organization") is False
    assert is_person_type(None) is False


def test_blocks_come_from_the_snapshot():
    html = (
        "<html><head>"
        '<script type="application/ld+json">'
        + _block({"@type": "Person", "name": "Katherine Johnson", "jobTitle": "Director"})
        + "</script></head><body><p>Hi</p></body></html>"
    )
    snap = snapshot_from_html(html, "https://example.com/")
    people = extract_people_from_json_ld(snap.json_ld)
    assert [(p.name, p.title) for p in people] == [("Katherine Johnson", "Director")]
    # script content never leaks into visible text
    assert "Katherine" not in snap.text


def test_deeply_nested_blocks():
    too_deep = "[" * 5000 + "]" * 5000
    node = {"@type": "Person", "name": "Ada Lovelace"}
    for _ in range(200):
        node = {"@graph": [node]}
    people = extract_people_from_json_ld([too_deep, _block(node)])
    assert [p.name for p in people] == ["Ada Lovelace"]
