# tests/test_ai_people.py
from __future__ import annotations

import json

import pytest

from team_extractor.exceptions import LlmError
from team_extractor.extract.ai_people import (
    OpenAITextGenerator,
    build_llm_messages,
    clean_html_for_llm,
    extract_people_with_llm,
    guard_llm_emails,
    parse_people_from_llm_output,
)
from team_extractor.models import Person


class FakeGenerator:
    def __init__(self, reply: str = "[]", error: Exception | None = None):
        self.reply = reply
        self.error = error
        self.calls: list[tuple[list[dict[str, str]], str, float]] = []

    def complete(self, messages, model, timeout):
        self.calls.append((messages, model, timeout))
        if self.error is not None:
            raise self.error
        return self.reply


class TestParse:
    def test_fenced_array(self):
        person = {"name": "Jane Doe", "title": "CEO", "linkedinUrl": "https://linkedin.com/in/jd"}
        raw = "```json\n" + json.dumps([person]) + "\n```"
        people = parse_people_from_llm_output(raw)
        assert [(p.name, p.title, p.linkedin_url, p.source) for p in people] == [
            ("Jane Doe", "CEO", "https://linkedin.com/in/jd", "llm")
        ]

    def test_people_object(self):
        raw = json.dumps({"people": [{"name": "Ada Lovelace"}, {"title": "No name"}]})
        assert [p.name for p in parse_people_from_llm_output(raw)] == ["Ada Lovelace"]

    def test_array_inside_prose(self):
        raw = (
            "Sure! Here they are: "
            '[{"name": "Alan Turing", "email": "ALAN@example.com"}] Hope that helps.'
        )
        people = parse_people_from_llm_output(raw)
        assert [(p.name, p.email) for p in people] == [("Alan Turing", "alan@example.com")]

    @pytest.mark.parametrize("raw", ["", None, "no json here", '{"team": []}', "[1, 2, 3]"])
    def test_unusable_output(self, raw):
        assert parse_people_from_llm_output(raw) == []

    def test_duplicates_dropped(self):
        raw = json.dumps([{"name": "Ada Lovelace"}, {"name": "Ada Lovelace"}])
        assert len(parse_people_from_llm_output(raw)) == 1


def test_guard_nulls_emails_not_on_page():
    people = [
        Person(name="Jane Doe", email="jane@example.com"),
        Person(name="Ghost Writer", email="ghost@example.com"),
        Person(name="No Mail"),
    ]
    guarded = guard_llm_emails(people, ["JANE@example.com"])
    assert [p.email for p in guarded] == ["jane@example.com", None, None]


def test_clean_html_keeps_main_and_only_hrefs():
    html = (
        "<html><body><header>Nav</header>"
        '<main class="content" id="m"><script>var a = 1;</script>'
        '<a href="/team" class="btn">Team</a><!-- hidden --><svg><path d="M0"/></svg>'
        "</main></body></html>"
    )
    cleaned = clean_html_for_llm(html)
    assert cleaned == '<main><a href="/team">Team</a></main>'


def test_prompt_contains_url_and_is_budgeted():
    html = "<html><body><main>" + "<p>word</p>" * 5000 + "</main></body></html>"
    messages = build_llm_messages("https://example.com/team", html, "text " * 5000, max_chars=5000)
    assert messages[0]["role"] == "system"
    user = messages[1]["content"]
    assert user.startswith("URL: https://example.com/team")
    html_part = user.split("HTML:\n", 1)[1].split("\n\nVISIBLE_TEXT:", 1)[0]
    text_part = user.split("VISIBLE_TEXT:\n", 1)[1]
    assert 3400 < len(html_part) <= 3500
    assert 1400 < len(text_part) <= 1500


def test_extract_with_llm_guards_hallucinated_emails():
    reply = json.dumps(
        [
            {"name": "Jane Doe", "title": "CEO", "email": "jane@example.com"},
            {"name": "Ghost Writer", "title": "CTO", "email": "ghost@example.com"},
        ]
    )
    gen = FakeGenerator(reply)
    people = extract_people_with_llm(
        gen,
        url="https://example.com/team",
        html="<main><p>Jane Doe</p></main>",
        text="Jane Doe",
        page_emails=["jane@example.com"],
        model="test-model",
        max_chars=10_000,
        timeout=5.0,
    )

    assert [(p.name, p.email) for p in people] == [
        ("Jane Doe", "jane@example.com"),
        ("Ghost Writer", None),
    ]
    _, model, timeout = gen.calls[0]
    assert (model, timeout) == ("test-model", 5.0)


def test_generator_errors_propagate():
    gen = FakeGenerator(error=LlmError("timeout"))
    with pytest.raises(LlmError):
        extract_people_with_llm(
            gen, url="https://example.com/", html="", text="", page_emails=[]
        )


def test_openai_backend_requires_key():
    with pytest.raises(LlmError):
        OpenAITextGenerator("   ")
