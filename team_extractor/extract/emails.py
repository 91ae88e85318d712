# team_extractor/extract/emails.py
"""
Page-level contact harvesting.

Four independent sources are unioned into one sorted, capped email set:
  - mailto: hrefs (scheme and query stripped, URL-decoded)
  - plain regex scan over HTML and visible text
  - Cloudflare email protection (data-cfemail / /cdn-cgi/l/email-protection#...)
  - natural-language obfuscation ("jane (at) example (dot) com")

Every accepted address is lower-cased and passes the strict syntax check.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from typing import TYPE_CHECKING
from urllib.parse import unquote

if TYPE_CHECKING:
    from .dom import PageSnapshot

log = logging.getLogger(__name__)

MAX_PAGE_EMAILS = 50

# --- Regexes -----------------------------------------------------------------

EMAIL_RE = re.compile(r"[A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,}", re.IGNORECASE)
STRICT_EMAIL_RE = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")

_TRAILING_PUNCT_RE = re.compile(r"[),.;:]+$")

_CFEMAIL_ATTR_RE = re.compile(r"data-cfemail\s*=\s*[\"']?([0-9a-fA-F]+)")
_CF_PROTECTION_RE = re.compile(r"/cdn-cgi/l/email-protection#([0-9a-fA-F]+)")

# Separators: bracketed "(at)" / "[dot]" / "{at}" with optional spaces, or bare words
# bounded by whitespace.
_AT_SEP = r"(?:\s*[\(\[\{]\s*at\s*[\)\]\}]\s*|\s+at\s+)"
_DOT_SEP = r"(?:\s*[\(\[\{]\s*dot\s*[\)\]\}]\s*|\s+dot\s+)"
_OBFUSCATED_RE = re.compile(
    rf"[a-z0-9._%+-]+{_AT_SEP}[a-z0-9-]+(?:{_DOT_SEP}[a-z0-9-]+)+",
    re.IGNORECASE,
)
_AT_SEP_RE = re.compile(_AT_SEP, re.IGNORECASE)
_DOT_SEP_RE = re.compile(_DOT_SEP, re.IGNORECASE)

# Retina/asset file names look like addresses: logo@2x.png
_ASSET_SUFFIXES: frozenset[str] = frozenset(
    {"png", "jpg", "jpeg", "gif", "svg", "webp", "css", "js", "ico", "avif", "bmp"}
)


# --- Normalization -----------------------------------------------------------


def normalize_email(raw: str | None) -> str | None:
    if not raw:
        return None
    s = str(raw).strip()
    if s.lower().startswith("mailto:"):
        s = s[len("mailto:") :]
    s = _TRAILING_PUNCT_RE.sub("", s.strip()).lower()
    return s or None


def is_valid_email(email: str | None) -> bool:
    if not email or not STRICT_EMAIL_RE.match(email):
        return False
    tld = email.rsplit(".", 1)[-1].lower()
    return tld not in _ASSET_SUFFIXES


def clean_email(raw: str | None) -> str | None:
    """normalize_email + strict validation; None when not acceptable."""
    e = normalize_email(raw)
    return e if is_valid_email(e) else None


def _sorted_valid(found: Iterable[str | None]) -> list[str]:
    return sorted({e for e in found if e and is_valid_email(e)})


# --- Strategies --------------------------------------------------------------


def extract_emails_from_strings(strings: Iterable[str | None]) -> list[str]:
    found: set[str | None] = set()
    for s in strings or ():
        if not s:
            continue
        for m in EMAIL_RE.finditer(str(s)):
            found.add(normalize_email(m.group(0)))
    return _sorted_valid(found)


def parse_mailto(href: str | None) -> str | None:
    h = (href or "").strip()
    if not h.lower().startswith("mailto:"):
        return None
    part = h[len("mailto:") :].split("?", 1)[0]
    return clean_email(unquote(part))


def extract_emails_from_mailto_hrefs(hrefs: Iterable[str | None]) -> list[str]:
    return _sorted_valid(parse_mailto(h) for h in hrefs or ())


def decode_cloudflare_email(encoded: str) -> str | None:
    """XOR-decode a Cloudflare-protected hex string; first byte is the key."""
    if len(encoded) < 4 or len(encoded) % 2:
        return None
    try:
        data = bytes.fromhex(encoded)
    except ValueError:
        return None
    key = data[0]
    decoded = "".join(chr(b ^ key) for b in data[1:])
    return clean_email(decoded)


def extract_cloudflare_emails_from_html(html: str | None) -> list[str]:
    s = html or ""
    found = [decode_cloudflare_email(m.group(1)) for m in _CFEMAIL_ATTR_RE.finditer(s)]
    found += [decode_cloudflare_email(m.group(1)) for m in _CF_PROTECTION_RE.finditer(s)]
    return _sorted_valid(found)


def _rewrite_obfuscated(match: str) -> str:
    s = _AT_SEP_RE.sub("@", match, count=1)
    s = _DOT_SEP_RE.sub(".", s)
    return re.sub(r"\s+", "", s)


def extract_obfuscated_emails_from_text(text: str | None) -> list[str]:
    rewritten = [_rewrite_obfuscated(m.group(0)) for m in _OBFUSCATED_RE.finditer(text or "")]
    return extract_emails_from_strings(rewritten)


# --- Harvest -----------------------------------------------------------------


def harvest_emails(snapshot: PageSnapshot) -> list[str]:
    """Union of all four strategies over one page; sorted, capped at MAX_PAGE_EMAILS."""
    found: set[str] = set()
    found.update(extract_emails_from_mailto_hrefs(snapshot.mailto_hrefs()))
    found.update(extract_emails_from_strings([snapshot.html, snapshot.text]))
    found.update(extract_cloudflare_emails_from_html(snapshot.html))
    found.update(extract_obfuscated_emails_from_text(snapshot.text))
    emails = sorted(found)[:MAX_PAGE_EMAILS]
    log.debug("Harvested %d emails from %s", len(emails), snapshot.url)
    return emails


__all__ = [
    "EMAIL_RE",
    "STRICT_EMAIL_RE",
    "MAX_PAGE_EMAILS",
    "normalize_email",
    "is_valid_email",
    "clean_email",
    "parse_mailto",
    "extract_emails_from_strings",
    "extract_emails_from_mailto_hrefs",
    "decode_cloudflare_email",
    "extract_cloudflare_emails_from_html",
    "extract_obfuscated_emails_from_text",
    "harvest_emails",
]
