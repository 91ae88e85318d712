# team_extractor/crawl/urls.py
from __future__ import annotations

import re
from collections.abc import Mapping
from urllib.parse import urlsplit, urlunsplit

_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)
_HOST_RE = re.compile(r"^[a-z0-9.-]+$")


def strip_www(hostname: str | None) -> str:
    s = (hostname or "").strip().lower()
    return s[4:] if s.startswith("www.") else s


def normalize_start(value: object) -> str | None:
    """
    Turn a user-supplied start value into an absolute URL.

    Accepts a bare host ("example.com"), a full URL, or a mapping with a
    "url" key. Prepends https:// when no http(s) scheme is present, strips
    the fragment, keeps the query. Returns None for anything unparseable.
    """
    raw: str | None = None
    if isinstance(value, str):
        raw = value
    elif isinstance(value, Mapping) and isinstance(value.get("url"), str):
        raw = value["url"]
    if not raw:
        return None

    trimmed = raw.strip()
    if not trimmed:
        return None
    with_proto = trimmed if _SCHEME_RE.match(trimmed) else f"https://{trimmed}"

    try:
        parts = urlsplit(with_proto)
        host = (parts.hostname or "").lower()
        port = parts.port
    except ValueError:
        return None
    try:
        host = host.encode("idna").decode("ascii")
    except UnicodeError:
        return None
    if not host or not _HOST_RE.match(host) or "." not in host.strip("."):
        return None

    netloc = host if port is None else f"{host}:{port}"
    if parts.username or parts.password:
        netloc = f"{parts.netloc.rsplit('@', 1)[0]}@{netloc}"
    return urlunsplit((parts.scheme.lower(), netloc, parts.path or "/", parts.query, ""))


def origin_of(url: str) -> str:
    parts = urlsplit(url)
    return f"{parts.scheme}://{parts.netloc}"


def company_identity(url: str) -> tuple[str, str]:
    """(company_url, company_domain) for a loaded page: origin root and www-less host."""
    parts = urlsplit(url)
    return f"{parts.scheme}://{parts.netloc}/", strip_www(parts.hostname)


def _toggle_www(netloc: str) -> str:
    low = netloc.lower()
    return netloc[4:] if low.startswith("www.") else f"www.{netloc}"


def _toggle_scheme(scheme: str) -> str:
    return "http" if scheme.lower() == "https" else "https"


def homepage_variants(url: str) -> list[str]:
    """
    Alternate homepage forms to retry when the first one fails to load.

    Order: exact input, origin root, root with www toggled, root with scheme
    toggled, both toggled. Deduplicated by exact string.
    """
    try:
        parts = urlsplit(url)
    except ValueError:
        return [url]
    if not parts.scheme or not parts.netloc:
        return [url]

    scheme, netloc = parts.scheme.lower(), parts.netloc
    ordered = [
        url,
        f"{scheme}://{netloc}/",
        f"{scheme}://{_toggle_www(netloc)}/",
        f"{_toggle_scheme(scheme)}://{netloc}/",
        f"{_toggle_scheme(scheme)}://{_toggle_www(netloc)}/",
    ]

    out: list[str] = []
    for v in ordered:
        if v not in out:
            out.append(v)
    return out


def is_same_site(url: str, root_domain: str) -> bool:
    """True iff the URL's host is root_domain or a subdomain of it (www ignored on both)."""
    try:
        host = strip_www(urlsplit(url).hostname)
    except ValueError:
        return False
    root = strip_www(root_domain)
    if not host or not root:
        return False
    return host == root or host.endswith(f".{root}")


__all__ = [
    "strip_www",
    "normalize_start",
    "origin_of",
    "company_identity",
    "homepage_variants",
    "is_same_site",
]
