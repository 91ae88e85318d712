# team_extractor/crawl/registry.py
from __future__ import annotations

import threading


class EmissionRegistry:
    """
    Process-lifetime dedup state shared by concurrently running visits.

      - satisfied: company domains that already produced a confident result
      - persons:   "domain|name|title|email" keys already emitted
      - emails:    "domain|email" keys already emitted

    claim_* is an atomic check-and-insert: it returns True exactly once per key.
    Entries are never removed.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._satisfied: set[str] = set()
        self._persons: set[str] = set()
        self._emails: set[str] = set()

    def mark_satisfied(self, domain: str) -> None:
        with self._lock:
            self._satisfied.add(domain)

    def is_satisfied(self, domain: str) -> bool:
        with self._lock:
            return domain in self._satisfied

    def _claim(self, bucket: set[str], key: str) -> bool:
        with self._lock:
            if key in bucket:
                return False
            bucket.add(key)
            return True

    def claim_person(self, domain: str, identity_key: str) -> bool:
        return self._claim(self._persons, f"{domain}|{identity_key}")

    def claim_email(self, domain: str, email: str) -> bool:
        return self._claim(self._emails, f"{domain}|{email.lower()}")

    def stats(self) -> dict[str, int]:
        with self._lock:
            return {
                "satisfied": len(self._satisfied),
                "persons": len(self._persons),
                "emails": len(self._emails),
            }


__all__ = ["EmissionRegistry"]
