# tests/test_frontier.py
from __future__ import annotations

import threading
import time

from team_extractor.crawl.frontier import RequestQueue, run_frontier
from team_extractor.crawl.states import TeamVisit


def _team(path: str) -> TeamVisit:
    return TeamVisit(
        url=f"https://example.com/{path}",
        company_domain="example.com",
        company_url="https://example.com/",
        discovered_from="https://example.com/",
        discovery_score=1,
    )


def test_queue_dedupes_and_supports_forefront():
    q = RequestQueue()
    assert q.add(_team("a")) is True
    assert q.add(_team("b")) is True
    assert q.add(_team("a")) is False
    assert q.add(_team("c"), forefront=True) is True

    assert len(q) == 3
    assert [q.pop().url for _ in range(3)] == [
        "https://example.com/c",
        "https://example.com/a",
        "https://example.com/b",
    ]
    assert q.pop() is None
    # admission is remembered after the visit has been popped
    assert q.add(_team("a")) is False
    assert q.admitted == 3


def test_handlers_can_enqueue_more_work():
    q = RequestQueue()
    q.add(_team("root"))
    seen: list[str] = []
    lock = threading.Lock()

    def handle(visit):
        with lock:
            seen.append(visit.url)
        if visit.url.endswith("/root"):
            for i in range(3):
                q.add(_team(f"child-{i}"))

    assert run_frontier(q, handle, max_concurrency=2) == 4
    assert sorted(seen) == sorted(
        ["https://example.com/root"] + [f"https://example.com/child-{i}" for i in range(3)]
    )


def test_concurrency_is_bounded():
    q = RequestQueue()
    for i in range(12):
        q.add(_team(str(i)))

    lock = threading.Lock()
    state = {"cur": 0, "max": 0}

    def handle(visit):
        with lock:
            state["cur"] += 1
            state["max"] = max(state["max"], state["cur"])
        time.sleep(0.02)
        with lock:
            state["cur"] -= 1

    assert run_frontier(q, handle, max_concurrency=3) == 12
    assert 1 <= state["max"] <= 3


def test_handler_exceptions_do_not_stop_the_frontier():
    q = RequestQueue()
    q.add(_team("boom"))
    q.add(_team("ok"))
    handled: list[str] = []

    def handle(visit):
        if visit.url.endswith("boom"):
            raise RuntimeError("handler bug")
        handled.append(visit.url)

    assert run_frontier(q, handle, max_concurrency=1) == 2
    assert handled == ["https://example.com/ok"]
