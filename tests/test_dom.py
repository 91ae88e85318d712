# tests/test_dom.py
from __future__ import annotations

from team_extractor.extract.dom import snapshot_from_html

URL = "https://example.com/"


def test_elements_are_preorder_with_subtree_ranges():
    html = '<div class="a"><p>One</p><p>Two <a href="/x">link</a></p></div>'
    snap = snapshot_from_html(html, URL)

    tags = [e.tag for e in snap.elements]
    assert tags[1:] == ["div", "p", "p", "a"]
    div, p1, p2, a = snap.elements[1:]
    assert div.end == 5
    assert div.children == (p1.index, p2.index)
    assert p1.end == p1.index + 1
    assert a.parent == p2.index
    assert a.href == "https://example.com/x"
    assert div.text == "One\nTwo link"
    assert snap.text == "One\nTwo link"
    assert snap.contains(div, a)
    assert [e.index for e in snap.ancestors(a)][:2] == [p2.index, div.index]


def test_scripts_and_comments_are_not_text():
    html = "<div><script>var x = 1;</script><!-- note --><span>Visible</span></div>"
    snap = snapshot_from_html(html, URL)
    assert snap.text == "Visible"
    assert "script" not in {e.tag for e in snap.elements}


def test_deeply_nested_markup():
    depth = 1500
    html = "<div>" * depth + "Jane Doe" + "</div>" * depth
    snap = snapshot_from_html(html, URL)

    divs = [e for e in snap.elements if e.tag == "div"]
    assert len(divs) == depth
    assert divs[0].end == len(snap.elements)
    assert divs[-1].parent == divs[-2].index
    assert divs[-1].text == "Jane Doe"
    assert snap.text == "Jane Doe"
