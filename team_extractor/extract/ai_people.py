# team_extractor/extract/ai_people.py
"""
LLM fallback for team pages where the structural strategies found nobody.

Given a page's HTML and visible text, build a size-bounded prompt asking for
a strict JSON array of people, call a text-generation backend, tolerantly
parse what comes back, and null out any email the model returned that was
not already harvested from the page (the model may name people, but it is
never trusted to invent contact addresses).
"""

from __future__ import annotations

import json
import logging
import os
import re
from collections.abc import Iterable, Sequence
from typing import Any, Protocol

import openai
from bs4 import BeautifulSoup, Comment
from openai import OpenAI

from team_extractor.exceptions import LlmError
from team_extractor.models import Person
from team_extractor.utils import clean_text

from .emails import clean_email

log = logging.getLogger(__name__)

SOURCE_TAG = "llm"

OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
OPENAI_API_BASE = os.getenv("OPENAI_API_BASE") or None
LLM_TIMEOUT_SECONDS = float(os.getenv("LLM_TIMEOUT_SECONDS", "60"))
LLM_MAX_TOKENS = 800
DEFAULT_MAX_CHARS = 40_000

HTML_SHARE = 0.7
TEXT_SHARE = 0.3

_DROP_TAGS = ["script", "style", "noscript", "svg", "template", "iframe"]
_FENCE_RE = re.compile(r"```[a-zA-Z]*\n?")

_SYSTEM_PROMPT = (
    "You extract structured data from web pages. "
    "Return only valid JSON, no commentary, no markdown."
)

_USER_TASK = """\
Task: Extract a JSON array of people listed on this page.
Each array item must be an object with keys:
- name (string, required)
- title (string, optional)
- email (string, optional; only if explicitly present on the page)
- linkedinUrl (string, optional; only if explicitly present on the page)
- twitterUrl (string, optional; only if explicitly present on the page)
- githubUrl (string, optional; only if explicitly present on the page)
- blueskyUrl (string, optional; only if explicitly present on the page)
- profileUrl (string, optional; only if explicitly present on the page)

Only include real individual people. Do NOT include non-human entries such as
"Support", "Sales Team" or departments, and do NOT include testimonials,
customers, clients or quoted reviewers.

Return [] if no people are listed."""

# LLM JSON key -> Person field
_LINK_KEYS: dict[str, str] = {
    "linkedinUrl": "linkedin_url",
    "twitterUrl": "twitter_url",
    "githubUrl": "github_url",
    "blueskyUrl": "bluesky_url",
    "profileUrl": "profile_url",
}


class TextGenerator(Protocol):
    def complete(self, messages: list[dict[str, str]], model: str, timeout: float) -> str:
        """Return the model's text; raise LlmError on failure or timeout."""
        ...


# ---------------------------------------------------------------------------
# Prompt building
# ---------------------------------------------------------------------------


def clean_html_for_llm(html: str | None) -> str:
    """Main (or body) subtree without scripts/styles/svg/comments; only href attributes kept."""
    soup = BeautifulSoup(html or "", "html.parser")
    root = soup.find("main") or soup.body or soup

    for tag in root.find_all(_DROP_TAGS):
        if not tag.decomposed:
            tag.decompose()
    for comment in root.find_all(string=lambda s: isinstance(s, Comment)):
        comment.extract()
    for tag in root.find_all(True):
        href = tag.attrs.get("href")
        tag.attrs = {"href": href} if href else {}
    if root is not soup:
        root.attrs = {}

    return clean_text(str(root))


def _truncate(s: str | None, max_chars: int) -> str:
    s = s or ""
    return s[:max_chars] if max_chars and len(s) > max_chars else s


def build_llm_messages(
    url: str, html: str | None, text: str | None, max_chars: int = DEFAULT_MAX_CHARS
) -> list[dict[str, str]]:
    prompt_html = _truncate(clean_html_for_llm(html), int(max_chars * HTML_SHARE))
    prompt_text = _truncate(text, int(max_chars * TEXT_SHARE))
    user_content = "\n".join(
        [
            f"URL: {url}",
            "",
            _USER_TASK,
            "",
            "HTML:",
            prompt_html,
            "",
            "VISIBLE_TEXT:",
            prompt_text,
        ]
    )
    return [
        {"role": "system", "content": _SYSTEM_PROMPT},
        {"role": "user", "content": user_content},
    ]


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def _try_json(s: str) -> Any:
    try:
        return json.loads(s)
    except ValueError:
        return None


def _slice_json(s: str, open_ch: str, close_ch: str) -> Any:
    start, end = s.find(open_ch), s.rfind(close_ch)
    if start == -1 or end <= start:
        return None
    return _try_json(s[start : end + 1])


def _opt_str(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    return clean_text(value) or None


def parse_people_from_llm_output(raw: str | None) -> list[Person]:
    text = (raw or "").strip()
    if not text:
        return []

    cleaned = _FENCE_RE.sub("", text).replace("```", "").strip()
    parsed = _try_json(cleaned)
    if parsed is None:
        parsed = _slice_json(cleaned, "[", "]")
    if parsed is None:
        parsed = _slice_json(cleaned, "{", "}")

    if isinstance(parsed, list):
        items = parsed
    elif isinstance(parsed, dict) and isinstance(parsed.get("people"), list):
        items = parsed["people"]
    else:
        log.debug("LLM output was not a people array; ignoring")
        return []

    out: list[Person] = []
    seen: set[str] = set()
    for item in items:
        if not isinstance(item, dict):
            continue
        name = _opt_str(item.get("name"))
        if not name:
            continue
        email = item.get("email")
        person = Person(
            name=name,
            title=_opt_str(item.get("title")),
            email=clean_email(email) if isinstance(email, str) else None,
            source=SOURCE_TAG,
            **{field: _opt_str(item.get(key)) for key, field in _LINK_KEYS.items()},
        )
        key = person.identity_key()
        if key in seen:
            continue
        seen.add(key)
        out.append(person)
    return out


def guard_llm_emails(people: Iterable[Person], page_emails: Iterable[str]) -> list[Person]:
    """Null any email the page did not actually contain."""
    allowed = {e.lower() for e in page_emails or () if e}
    out: list[Person] = []
    for p in people:
        if p.email and p.email.lower() not in allowed:
            log.debug("Dropping unverified LLM email for %s", p.name)
            p = p.copy(email=None)
        out.append(p)
    return out


# ---------------------------------------------------------------------------
# Backend
# ---------------------------------------------------------------------------


class OpenAITextGenerator:
    """Chat-completions backend; one attempt per call, no automatic retries."""

    def __init__(self, api_key: str, *, base_url: str | None = OPENAI_API_BASE) -> None:
        if not (api_key or "").strip():
            raise LlmError("Missing OpenAI API key")
        self._client = OpenAI(api_key=api_key.strip(), base_url=base_url, max_retries=0)

    def complete(self, messages: list[dict[str, str]], model: str, timeout: float) -> str:
        try:
            completion = self._client.chat.completions.create(
                model=model,
                messages=messages,
                temperature=0,
                max_tokens=LLM_MAX_TOKENS,
                timeout=timeout,
            )
        except openai.APIStatusError as exc:
            raise LlmError(f"OpenAI HTTP {exc.status_code}: {str(exc)[:200]}") from exc
        except openai.OpenAIError as exc:
            raise LlmError(f"OpenAI request failed: {type(exc).__name__}: {exc}") from exc
        if not completion.choices:
            return ""
        return completion.choices[0].message.content or ""


def extract_people_with_llm(
    generator: TextGenerator,
    *,
    url: str,
    html: str | None,
    text: str | None,
    page_emails: Sequence[str],
    model: str = OPENAI_MODEL,
    max_chars: int = DEFAULT_MAX_CHARS,
    timeout: float = LLM_TIMEOUT_SECONDS,
) -> list[Person]:
    """Prompt → generate → parse → guard. LlmError from the backend propagates."""
    messages = build_llm_messages(url, html, text, max_chars)
    raw = generator.complete(messages, model, timeout)
    people = guard_llm_emails(parse_people_from_llm_output(raw), page_emails)
    log.info("LLM fallback returned %d people for %s", len(people), url)
    return people


__all__ = [
    "TextGenerator",
    "OpenAITextGenerator",
    "clean_html_for_llm",
    "build_llm_messages",
    "parse_people_from_llm_output",
    "guard_llm_emails",
    "extract_people_with_llm",
    "SOURCE_TAG",
]
