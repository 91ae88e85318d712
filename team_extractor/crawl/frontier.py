# team_extractor/crawl/frontier.py
from __future__ import annotations

import concurrent.futures
import logging
import threading
from collections import deque
from collections.abc import Callable

from .states import Visit, unique_key

log = logging.getLogger(__name__)


class RequestQueue:
    """
    In-memory crawl frontier.

    Admission is deduplicated by unique_key(visit) for the life of the queue,
    so re-enqueueing an identical request is a no-op. forefront=True puts the
    visit at the head (used for homepage variant retries).
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._items: deque[Visit] = deque()
        self._keys: set[str] = set()

    def add(self, visit: Visit, *, forefront: bool = False) -> bool:
        key = unique_key(visit)
        with self._lock:
            if key in self._keys:
                return False
            self._keys.add(key)
            if forefront:
                self._items.appendleft(visit)
            else:
                self._items.append(visit)
            return True

    def pop(self) -> Visit | None:
        with self._lock:
            return self._items.popleft() if self._items else None

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    @property
    def admitted(self) -> int:
        with self._lock:
            return len(self._keys)


def run_frontier(
    queue: RequestQueue,
    handle: Callable[[Visit], None],
    max_concurrency: int = 5,
) -> int:
    """
    Drain the queue with at most max_concurrency visits in flight.

    Handlers may enqueue more visits while running; the loop ends when the
    queue is empty and nothing is in flight. Returns the number of visits handled.
    """
    workers = max(1, int(max_concurrency))
    handled = 0
    in_flight: set[concurrent.futures.Future] = set()

    with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as executor:
        while True:
            while len(in_flight) < workers:
                visit = queue.pop()
                if visit is None:
                    break
                in_flight.add(executor.submit(handle, visit))

            if not in_flight:
                break

            done, in_flight = concurrent.futures.wait(
                in_flight, return_when=concurrent.futures.FIRST_COMPLETED
            )
            for future in done:
                handled += 1
                exc = future.exception()
                if exc is not None:
                    log.error("Visit handler raised: %r", exc)

    log.info("Frontier drained: %d visits handled, %d admitted", handled, queue.admitted)
    return handled


__all__ = ["RequestQueue", "run_frontier"]
