# tests/test_emails.py
"""
Page-level contact harvesting: mailto, plain text, Cloudflare protection,
and "(at)/(dot)" obfuscation.
"""

from __future__ import annotations

import re

import pytest

from team_extractor.extract.dom import snapshot_from_html
from team_extractor.extract.emails import (
    MAX_PAGE_EMAILS,
    clean_email,
    decode_cloudflare_email,
    extract_cloudflare_emails_from_html,
    extract_emails_from_mailto_hrefs,
    extract_emails_from_strings,
    extract_obfuscated_emails_from_text,
    harvest_emails,
    parse_mailto,
)

STRICT = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
CF_HEX = "126677616652776a737f627e773c717d7f"


def test_plain_strings_sorted_and_lowercased():
    got = extract_emails_from_strings(["mailto:Sales@Example.com contact support@example.com"])
    assert got == ["sales@example.com", "support@example.com"]


def test_trailing_punctuation_and_assets():
    got = extract_emails_from_strings(["Write to ops@example.com. Logo: logo@2x.png", None, ""])
    assert got == ["ops@example.com"]


class TestMailto:
    def test_query_stripped_and_decoded(self):
        assert parse_mailto("mailto:Jane%40Example.com?subject=Hi") == "jane@example.com"

    def test_not_mailto(self):
        assert parse_mailto("https://example.com") is None
        assert parse_mailto(None) is None

    def test_invalid_address_rejected(self):
        assert extract_emails_from_mailto_hrefs(["mailto:nobody", "MAILTO:b@example.org"]) == [
            "b@example.org"
        ]


class TestCloudflare:
    def test_decode(self):
        assert decode_cloudflare_email(CF_HEX) == "test@example.com"

    def test_attribute_and_link_forms(self):
        html = (
            f'<span class="__cf_email__" data-cfemail="{CF_HEX}">[email&#160;protected]</span>'
            f'<a href="/cdn-cgi/l/email-protection#{CF_HEX}">mail</a>'
        )
        assert extract_cloudflare_emails_from_html(html) == ["test@example.com"]

    @pytest.mark.parametrize("bad", ["", "12", "123", "zz66", "1266"])
    def test_garbage_is_ignored(self, bad):
        assert decode_cloudflare_email(bad) is None


def test_obfuscated_forms():
    text = "jane (at) example (dot) com or bob[at]example[dot]co[dot]uk"
    assert extract_obfuscated_emails_from_text(text) == ["bob@example.co.uk", "jane@example.com"]


def test_obfuscated_requires_a_dot_separator():
    assert extract_obfuscated_emails_from_text("meet us at the office") == []


def test_harvest_unions_all_sources():
    html = (
        "<html><body>"
        '<a href="mailto:Info@Example.com?subject=Hi">Email us</a>'
        f'<span class="__cf_email__" data-cfemail="{CF_HEX}">[email&#160;protected]</span>'
        "<p>jane (at) example (dot) com</p>"
        '<img src="/img/logo@2x.png">'
        "</body></html>"
    )
    got = harvest_emails(snapshot_from_html(html, "https://example.com/contact"))
    assert got == ["info@example.com", "jane@example.com", "test@example.com"]
    assert all(STRICT.match(e) and e == e.lower() for e in got)


def test_harvest_is_capped():
    text = " ".join(f"person{i:02d}@example.com" for i in range(MAX_PAGE_EMAILS + 10))
    got = harvest_emails(snapshot_from_html(f"<p>{text}</p>", "https://example.com/"))
    assert len(got) == MAX_PAGE_EMAILS
    assert got[0] == "person00@example.com"
    assert got == sorted(got)


def test_clean_email():
    assert clean_email("  MAILTO:Someone@Example.COM; ") == "someone@example.com"
    assert clean_email("someone@localhost") is None
