# tests/test_registry.py
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

from team_extractor.crawl.registry import EmissionRegistry


def test_claims_succeed_once_per_key():
    reg = EmissionRegistry()
    assert reg.claim_person("example.com", "jane doe|ceo|") is True
    assert reg.claim_person("example.com", "jane doe|ceo|") is False
    # same person at another company is a different key
    assert reg.claim_person("other.com", "jane doe|ceo|") is True

    assert reg.claim_email("example.com", "Info@Example.com") is True
    assert reg.claim_email("example.com", "info@example.com") is False

    assert reg.stats() == {"satisfied": 0, "persons": 2, "emails": 1}


def test_satisfied_is_sticky():
    reg = EmissionRegistry()
    assert reg.is_satisfied("example.com") is False
    reg.mark_satisfied("example.com")
    reg.mark_satisfied("example.com")
    assert reg.is_satisfied("example.com") is True
    assert reg.is_satisfied("other.com") is False


def test_concurrent_claims_admit_exactly_one():
    reg = EmissionRegistry()

    def claim(_):
        return reg.claim_email("example.com", "a@example.com")

    with ThreadPoolExecutor(max_workers=16) as pool:
        results = list(pool.map(claim, range(64)))
    assert results.count(True) == 1
